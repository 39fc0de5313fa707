"""Tests for role parsing and presentation helpers."""

import pytest

from eventhub.auth.errors import InvalidRoleError
from eventhub.auth.roles import Role, parse_role, role_badge_color, role_display_name


class TestParseRole:
    def test_parses_wire_values(self):
        assert parse_role("user") is Role.USER
        assert parse_role("host") is Role.HOST
        assert parse_role("admin") is Role.ADMIN

    def test_passes_through_enum(self):
        assert parse_role(Role.ADMIN) is Role.ADMIN

    def test_unknown_role(self):
        with pytest.raises(InvalidRoleError) as exc_info:
            parse_role("moderator")
        assert exc_info.value.role == "moderator"

    def test_invalid_role_is_value_error(self):
        with pytest.raises(ValueError):
            parse_role("HOST")


class TestPresentation:
    def test_display_names(self):
        assert role_display_name(Role.USER) == "User"
        assert role_display_name(Role.HOST) == "Event Host"
        assert role_display_name("admin") == "Administrator"

    def test_badge_colors(self):
        assert role_badge_color(Role.USER) == "blue"
        assert role_badge_color(Role.HOST) == "purple"
        assert role_badge_color(Role.ADMIN) == "red"

    def test_display_name_unknown_role(self):
        with pytest.raises(InvalidRoleError):
            role_display_name("guest")
