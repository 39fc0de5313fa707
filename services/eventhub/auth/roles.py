"""Marketplace roles.

Roles exist as code, not database rows. The set is closed: every identity
the backend returns is exactly one of ``user``, ``host`` or ``admin``.
"""

from enum import StrEnum

from eventhub.auth.errors import InvalidRoleError


class Role(StrEnum):
    USER = "user"
    HOST = "host"
    ADMIN = "admin"


ROLE_DISPLAY_NAMES: dict[Role, str] = {
    Role.USER: "User",
    Role.HOST: "Event Host",
    Role.ADMIN: "Administrator",
}

ROLE_BADGE_COLORS: dict[Role, str] = {
    Role.USER: "blue",
    Role.HOST: "purple",
    Role.ADMIN: "red",
}

# Roles a visitor may pick for themselves at registration
SELF_ASSIGNABLE_ROLES: frozenset[Role] = frozenset({Role.USER, Role.HOST})


def parse_role(value: Role | str) -> Role:
    """Coerce a wire value to a Role, raising InvalidRoleError if unknown."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        raise InvalidRoleError(value) from None


def role_display_name(role: Role | str) -> str:
    """Human-readable label for a role."""
    return ROLE_DISPLAY_NAMES[parse_role(role)]


def role_badge_color(role: Role | str) -> str:
    """Badge color name used when rendering a role."""
    return ROLE_BADGE_COLORS[parse_role(role)]
