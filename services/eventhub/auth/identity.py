"""Authenticated principal as returned by the marketplace Auth API.

The backend speaks camelCase with a Mongo-style ``_id``; this module is the
only place that knows the wire shape.
"""

from dataclasses import dataclass
from typing import Any

from eventhub.auth.errors import IncompleteIdentityError
from eventhub.auth.roles import Role, parse_role

REQUIRED_FIELDS = ("_id", "email")

# wire name -> attribute name for optional profile fields
_OPTIONAL_FIELDS: dict[str, str] = {
    "profileImage": "profile_image",
    "bio": "bio",
    "averageRating": "average_rating",
    "totalReviews": "total_reviews",
    "isVerified": "is_verified",
    "isApproved": "is_approved",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


@dataclass(frozen=True)
class Identity:
    """The currently authenticated actor.

    Capability checks only ever read ``role``.
    """

    id: str
    full_name: str
    email: str
    role: Role
    profile_image: str | None = None
    bio: str | None = None
    average_rating: float | None = None
    total_reviews: int | None = None
    is_verified: bool | None = None
    is_approved: bool | None = None  # hosts only
    created_at: str | None = None  # ISO 8601
    updated_at: str | None = None  # ISO 8601

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Identity":
        """Build an Identity from an Auth API user object.

        Raises IncompleteIdentityError when ``_id`` or ``email`` is missing or
        empty, and InvalidRoleError for an unknown role. A missing role is
        read as ``user``, the backend's default.
        """
        missing = [name for name in REQUIRED_FIELDS if not payload.get(name)]
        if missing:
            raise IncompleteIdentityError(missing)

        optional = {
            attr: payload[wire] for wire, attr in _OPTIONAL_FIELDS.items() if wire in payload
        }
        return cls(
            id=str(payload["_id"]),
            full_name=payload.get("fullName") or "",
            email=payload["email"],
            role=parse_role(payload.get("role") or Role.USER),
            **optional,
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the Auth API wire shape, omitting unset fields."""
        data: dict[str, Any] = {
            "_id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role.value,
        }
        for wire, attr in _OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                data[wire] = value
        return data
