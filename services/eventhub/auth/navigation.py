"""Capability-gated navigation menu.

Every signed-in identity sees the same three base entries; everything else
is shown only when the identity holds the gating capability.
"""

from dataclasses import dataclass

from eventhub.auth.capabilities import Capability, has_capability
from eventhub.auth.identity import Identity


@dataclass(frozen=True)
class NavItem:
    href: str
    label: str
    badge: str | None = None


BASE_ITEMS: tuple[NavItem, ...] = (
    NavItem("/events", "Events"),
    NavItem("/dashboard", "Dashboard"),
    NavItem("/profile", "Profile"),
)

# Order matters: this is the rendering order
GATED_ITEMS: tuple[tuple[Capability, NavItem], ...] = (
    (Capability.VIEW_OWN_BOOKINGS, NavItem("/my-bookings", "My Bookings")),
    (Capability.CREATE_EVENTS, NavItem("/events/create", "Create Event")),
    (Capability.VIEW_OWN_EARNINGS, NavItem("/earnings", "Earnings")),
    (Capability.VIEW_ANALYTICS, NavItem("/dashboard/admin/analytics", "Analytics")),
    (Capability.MANAGE_USERS, NavItem("/dashboard/admin/users", "Manage Users", "Admin")),
    (Capability.MANAGE_EVENTS, NavItem("/dashboard/admin/events", "Manage Events", "Admin")),
    (Capability.MANAGE_HOSTS, NavItem("/dashboard/admin/hosts", "Manage Hosts", "Admin")),
)


def build_navigation(identity: Identity | None) -> list[NavItem]:
    if identity is None:
        return []
    items = list(BASE_ITEMS)
    items.extend(item for capability, item in GATED_ITEMS if has_capability(identity, capability))
    return items
