"""Capability matrix and authorization queries.

Each role maps to the complete set of capability flags. The matrix is
compiled-in policy: there is no update path, and every mapping handed out
is a read-only view.

Roles are deliberately not hierarchical. ``admin`` is not "host plus more":
admins moderate and manage the marketplace but do not run events of their
own, so they are denied the host tier except ``viewOwnEventParticipants``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from eventhub.auth.roles import Role, parse_role

if TYPE_CHECKING:
    from eventhub.auth.identity import Identity


class Capability(StrEnum):
    """Named permission flags. Values match the web client's permission keys."""

    # Base tier
    VIEW_EVENTS = "viewEvents"
    JOIN_EVENTS = "joinEvents"
    LEAVE_EVENTS = "leaveEvents"
    VIEW_OWN_PROFILE = "viewOwnProfile"
    EDIT_OWN_PROFILE = "editOwnProfile"
    VIEW_OWN_BOOKINGS = "viewOwnBookings"

    # Host tier
    CREATE_EVENTS = "createEvents"
    EDIT_OWN_EVENTS = "editOwnEvents"
    DELETE_OWN_EVENTS = "deleteOwnEvents"
    VIEW_OWN_EVENT_PARTICIPANTS = "viewOwnEventParticipants"
    MANAGE_OWN_EVENT_BOOKINGS = "manageOwnEventBookings"
    RECEIVE_PAYMENTS = "receivePayments"
    VIEW_OWN_EARNINGS = "viewOwnEarnings"

    # Admin tier
    MANAGE_USERS = "manageUsers"
    MANAGE_EVENTS = "manageEvents"
    MANAGE_HOSTS = "manageHosts"
    MODERATE_CONTENT = "moderateContent"
    VIEW_ANALYTICS = "viewAnalytics"
    APPROVE_HOSTS = "approveHosts"
    VIEW_SYSTEM_STATS = "viewSystemStats"


BASE_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.VIEW_EVENTS,
        Capability.JOIN_EVENTS,
        Capability.LEAVE_EVENTS,
        Capability.VIEW_OWN_PROFILE,
        Capability.EDIT_OWN_PROFILE,
        Capability.VIEW_OWN_BOOKINGS,
    }
)

HOST_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.CREATE_EVENTS,
        Capability.EDIT_OWN_EVENTS,
        Capability.DELETE_OWN_EVENTS,
        Capability.VIEW_OWN_EVENT_PARTICIPANTS,
        Capability.MANAGE_OWN_EVENT_BOOKINGS,
        Capability.RECEIVE_PAYMENTS,
        Capability.VIEW_OWN_EARNINGS,
    }
)

ADMIN_CAPABILITIES: frozenset[Capability] = frozenset(
    {
        Capability.MANAGE_USERS,
        Capability.MANAGE_EVENTS,
        Capability.MANAGE_HOSTS,
        Capability.MODERATE_CONTENT,
        Capability.VIEW_ANALYTICS,
        Capability.APPROVE_HOSTS,
        Capability.VIEW_SYSTEM_STATS,
    }
)

# Granted flags per role; everything else is False
_GRANTS: dict[Role, frozenset[Capability]] = {
    Role.USER: BASE_CAPABILITIES,
    Role.HOST: BASE_CAPABILITIES | HOST_CAPABILITIES,
    # Admins observe events but do not create, sell or get paid for them.
    Role.ADMIN: BASE_CAPABILITIES
    | ADMIN_CAPABILITIES
    | {Capability.VIEW_OWN_EVENT_PARTICIPANTS},
}


def _build_matrix() -> Mapping[Role, Mapping[Capability, bool]]:
    matrix = {
        role: MappingProxyType({cap: cap in _GRANTS[role] for cap in Capability})
        for role in Role
    }
    return MappingProxyType(matrix)


CAPABILITY_MATRIX: Mapping[Role, Mapping[Capability, bool]] = _build_matrix()


def capabilities_for(role: Role | str) -> Mapping[Capability, bool]:
    """Return the complete, read-only capability flags for a role.

    Raises InvalidRoleError for anything outside the role enumeration.
    """
    return CAPABILITY_MATRIX[parse_role(role)]


def granted_capabilities(role: Role | str) -> frozenset[Capability]:
    """Return only the capabilities a role holds."""
    return frozenset(cap for cap, allowed in capabilities_for(role).items() if allowed)


def has_capability(identity: Identity | None, capability: Capability | str) -> bool:
    """Check whether an identity holds a capability.

    An absent identity holds nothing. An unknown capability name raises
    ValueError; a well-formed one never raises.
    """
    capability = Capability(capability)
    if identity is None:
        return False
    return capabilities_for(identity.role).get(capability, False)


def is_role(identity: Identity | None, role: Role | str) -> bool:
    """Strict role equality; an absent identity matches no role."""
    if identity is None:
        return False
    return identity.role == role


def has_any_role(identity: Identity | None, roles: Iterable[Role | str]) -> bool:
    """True when the identity's role is one of ``roles``."""
    return any(is_role(identity, role) for role in roles)


def is_admin(identity: Identity | None) -> bool:
    return is_role(identity, Role.ADMIN)


def is_host(identity: Identity | None) -> bool:
    return is_role(identity, Role.HOST)


def is_user(identity: Identity | None) -> bool:
    return is_role(identity, Role.USER)
