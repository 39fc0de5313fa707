"""Authentication router.

Consumers:
    Web UI:
        POST /api/auth/login       exchange email + password for a token
        POST /api/auth/register    create an account and sign it in
        POST /api/auth/logout      clear the current token
        GET  /api/auth/me          current identity and its capabilities
        GET  /api/auth/navigation  capability-gated menu
        POST /api/auth/password-strength  strength meter for the registration form
    Admin:
        GET  /api/auth/roles       full capability matrix
        DELETE /api/auth/users/{user_id}/sessions  revoke every token of a user
"""

from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from eventhub.api.dependencies import (
    get_current_identity,
    get_session_principal,
    get_store,
    require_capability,
)
from eventhub.auth.capabilities import CAPABILITY_MATRIX, Capability, granted_capabilities
from eventhub.auth.credential_store import CredentialStore
from eventhub.auth.errors import (
    AuthApiError,
    FormValidationError,
    IncompleteIdentityError,
    InvalidRoleError,
)
from eventhub.auth.identity import Identity
from eventhub.auth.navigation import build_navigation
from eventhub.auth.roles import role_badge_color, role_display_name
from eventhub.auth.session import SessionPrincipal
from eventhub.auth.validation import LoginData, RegistrationData, password_strength
from eventhub.logging_config import get_logger

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


# --- Pydantic models ---


class IdentityResponse(BaseModel):
    user: dict[str, Any]
    role_display_name: str
    role_badge_color: str
    capabilities: list[str]


class AuthResponse(IdentityResponse):
    token: str


class NavItemResponse(BaseModel):
    href: str
    label: str
    badge: str | None = None


class RoleMatrixEntry(BaseModel):
    role: str
    display_name: str
    capabilities: dict[str, bool]


class PasswordStrengthRequest(BaseModel):
    password: str = ""


class PasswordStrengthResponse(BaseModel):
    score: int
    label: str
    color: str


class RevokeSessionsResponse(BaseModel):
    user_id: str
    revoked: int


def _identity_response(identity: Identity) -> dict[str, Any]:
    return {
        "user": identity.to_payload(),
        "role_display_name": role_display_name(identity.role),
        "role_badge_color": role_badge_color(identity.role),
        "capabilities": sorted(cap.value for cap in granted_capabilities(identity.role)),
    }


def _raise_for_auth_failure(exc: Exception) -> NoReturn:
    """Translate a failed login/registration into an HTTP error."""
    if isinstance(exc, FormValidationError):
        raise HTTPException(
            status_code=422,
            detail={"errors": exc.errors},
        ) from exc
    if isinstance(exc, AuthApiError):
        code = exc.status_code
        if code is None or code >= 500:
            code = status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail=exc.message) from exc
    if isinstance(exc, (IncompleteIdentityError, InvalidRoleError)):
        logger.error("Auth API returned an unusable user", error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Authentication service returned an invalid user",
        ) from exc
    raise exc


# --- Endpoints ---


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginData,
    principal: SessionPrincipal = Depends(get_session_principal),
) -> dict[str, Any]:
    try:
        identity = await principal.login(body.email, body.password)
    except (AuthApiError, FormValidationError, IncompleteIdentityError, InvalidRoleError) as e:
        _raise_for_auth_failure(e)
    return {**_identity_response(identity), "token": principal.token}


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegistrationData,
    principal: SessionPrincipal = Depends(get_session_principal),
) -> dict[str, Any]:
    try:
        identity = await principal.register(body)
    except (AuthApiError, FormValidationError, IncompleteIdentityError, InvalidRoleError) as e:
        _raise_for_auth_failure(e)
    return {**_identity_response(identity), "token": principal.token}


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(principal: SessionPrincipal = Depends(get_session_principal)) -> Response:
    """Clear the caller's token. Succeeds even when no session exists."""
    await principal.logout()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=IdentityResponse)
async def me(identity: Identity = Depends(get_current_identity)) -> dict[str, Any]:
    return _identity_response(identity)


@router.get("/navigation", response_model=list[NavItemResponse])
async def navigation(
    principal: SessionPrincipal = Depends(get_session_principal),
) -> list[dict[str, Any]]:
    return [
        {"href": item.href, "label": item.label, "badge": item.badge}
        for item in build_navigation(principal.identity)
    ]


@router.get("/roles", response_model=list[RoleMatrixEntry])
async def roles(
    _: Identity = Depends(require_capability(Capability.VIEW_SYSTEM_STATS)),
) -> list[dict[str, Any]]:
    """Full role -> capability matrix, for the admin system page."""
    return [
        {
            "role": role.value,
            "display_name": role_display_name(role),
            "capabilities": {cap.value: allowed for cap, allowed in caps.items()},
        }
        for role, caps in CAPABILITY_MATRIX.items()
    ]


@router.post("/password-strength", response_model=PasswordStrengthResponse)
async def check_password_strength(body: PasswordStrengthRequest) -> dict[str, Any]:
    strength = password_strength(body.password)
    return {"score": strength.score, "label": strength.label, "color": strength.color}


@router.delete("/users/{user_id}/sessions", response_model=RevokeSessionsResponse)
async def revoke_user_sessions(
    user_id: str,
    admin: Identity = Depends(require_capability(Capability.MANAGE_USERS)),
    store: CredentialStore = Depends(get_store),
) -> dict[str, Any]:
    """Sign a user out everywhere, e.g. after banning the account."""
    revoked = await store.clear_all_for_user(user_id)
    logger.info("Revoked user sessions", user_id=user_id, revoked=revoked, admin_id=admin.id)
    return {"user_id": user_id, "revoked": revoked}
