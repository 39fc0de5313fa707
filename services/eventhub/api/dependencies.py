"""FastAPI dependencies for authentication and authorization.

The bearer token is the Auth API access token handed out at login. It is
resolved against the credential store into a request-scoped
SessionPrincipal; guards then branch on the principal's identity.

Guards:
- get_current_identity: 401 unless the session is authenticated
- require_role(*roles): 403 unless the identity holds one of the roles
- require_capability(capability): 403 unless the role grants the capability
"""

from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from eventhub.auth.api_client import AuthApiClient
from eventhub.auth.capabilities import Capability, has_any_role, has_capability
from eventhub.auth.credential_store import CredentialStore, get_credential_store
from eventhub.auth.identity import Identity
from eventhub.auth.roles import Role
from eventhub.auth.session import SessionPrincipal
from eventhub.logging_config import get_logger

logger = get_logger(__name__)
security = HTTPBearer(auto_error=False)


def get_store() -> CredentialStore:
    return get_credential_store()


def get_auth_api_client() -> AuthApiClient:
    return AuthApiClient()


async def get_session_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    store: CredentialStore = Depends(get_store),
    api_client: AuthApiClient = Depends(get_auth_api_client),
) -> SessionPrincipal:
    """Resolve the (optional) bearer token into a SessionPrincipal."""
    principal = SessionPrincipal(store, api_client)
    await principal.resolve(credentials.credentials if credentials else None)
    return principal


async def get_current_identity(
    principal: SessionPrincipal = Depends(get_session_principal),
) -> Identity:
    """Require an authenticated identity."""
    if principal.identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal.identity


def require_role(*roles: Role) -> Callable[..., Awaitable[Identity]]:
    """Build a dependency that admits only the given roles."""
    allowed = ", ".join(sorted(role.value for role in roles))

    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not has_any_role(identity, roles):
            logger.debug("Role check failed", user_id=identity.id, role=identity.role.value)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {allowed}",
            )
        return identity

    return dependency


def require_capability(capability: Capability) -> Callable[..., Awaitable[Identity]]:
    """Build a dependency that admits only identities holding ``capability``."""

    async def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if not has_capability(identity, capability):
            logger.debug(
                "Capability check failed",
                user_id=identity.id,
                role=identity.role.value,
                capability=capability.value,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing capability: {capability.value}",
            )
        return identity

    return dependency


require_admin = require_role(Role.ADMIN)
# Host-facing pages are also open to admins
require_host_or_admin = require_role(Role.HOST, Role.ADMIN)
