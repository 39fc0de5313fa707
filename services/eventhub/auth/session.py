"""Session principal lifecycle.

A SessionPrincipal is an explicit, request-scoped object holding the
current identity (or its absence). It is passed to whatever needs to make
an authorization decision; there is no process-wide "current user".

States::

    UNRESOLVED --resolve()--> AUTHENTICATED | UNAUTHENTICATED
    UNAUTHENTICATED --login()/register()--> AUTHENTICATED
    AUTHENTICATED --logout()--> UNAUTHENTICATED

A stored identity missing ``_id`` or ``email`` is never trusted: it is
discarded and the principal becomes UNAUTHENTICATED. Login and
registration failures leave the principal UNAUTHENTICATED and propagate.
"""

from collections.abc import Awaitable, Callable
from enum import Enum

from eventhub.auth.api_client import AuthApiClient, AuthResult
from eventhub.auth.capabilities import Capability, has_capability, is_role
from eventhub.auth.credential_store import CredentialStore
from eventhub.auth.errors import FormValidationError, IncompleteIdentityError, InvalidRoleError
from eventhub.auth.identity import Identity
from eventhub.auth.roles import Role
from eventhub.auth.validation import (
    LoginData,
    RegistrationData,
    validate_login_form,
    validate_register_form,
)
from eventhub.logging_config import get_logger

logger = get_logger(__name__)


class SessionState(Enum):
    UNRESOLVED = "unresolved"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class SessionPrincipal:
    """Holds the identity for one session and drives its transitions."""

    def __init__(self, store: CredentialStore, api_client: AuthApiClient | None = None) -> None:
        self._store = store
        self._api_client = api_client or AuthApiClient()
        self._state = SessionState.UNRESOLVED
        self._identity: Identity | None = None
        self._token: str | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    async def resolve(self, token: str | None) -> Identity | None:
        """Recover the identity persisted for ``token``.

        Incomplete or unreadable records are cleared from the store.
        """
        self._set_unauthenticated()
        if not token:
            return None

        payload = await self._store.load(token)
        if payload is None:
            return None

        try:
            identity = Identity.from_payload(payload)
        except (IncompleteIdentityError, InvalidRoleError) as e:
            logger.warning("Discarding invalid stored identity", reason=str(e))
            await self._store.clear(token)
            return None

        self._set_authenticated(identity, token)
        return identity

    async def login(self, email: str, password: str) -> Identity:
        """Exchange credentials with the Auth API and persist the result.

        Raises FormValidationError, AuthApiError or IncompleteIdentityError;
        on any failure the principal is left without an identity.
        """
        data = LoginData(email=email, password=password)
        errors = validate_login_form(data)
        if errors:
            self._set_unauthenticated()
            raise FormValidationError(errors)

        return await self._authenticate("login", lambda: self._api_client.login(email, password))

    async def register(self, data: RegistrationData) -> Identity:
        """Create an account through the Auth API and sign it in."""
        errors = validate_register_form(data)
        if errors:
            self._set_unauthenticated()
            raise FormValidationError(errors)

        return await self._authenticate("register", lambda: self._api_client.register(data))

    async def logout(self) -> None:
        """Clear persisted and in-memory credentials. Local only; always completes.

        A store failure is logged; the principal still ends up UNAUTHENTICATED.
        """
        token = self._token
        user_id = self._identity.id if self._identity else None
        if not token:
            self._set_unauthenticated()
            return

        try:
            await self._store.clear(token)
        except Exception as e:
            logger.warning("Failed to clear stored credential", user_id=user_id, error=str(e))
        finally:
            self._set_unauthenticated()
        logger.info("Logged out", user_id=user_id)

    def has_capability(self, capability: Capability | str) -> bool:
        return has_capability(self._identity, capability)

    def is_role(self, role: Role | str) -> bool:
        return is_role(self._identity, role)

    async def _authenticate(
        self, action: str, exchange: Callable[[], Awaitable[AuthResult]]
    ) -> Identity:
        # No identity is held while the exchange is in flight
        if self._token:
            await self.logout()
        self._set_unauthenticated()
        try:
            result = await exchange()
        except Exception:
            logger.info("Authentication failed", action=action)
            raise

        await self._store.save(result.token, result.identity)
        self._set_authenticated(result.identity, result.token)
        logger.info(
            "Authentication successful",
            action=action,
            user_id=result.identity.id,
            role=result.identity.role.value,
        )
        return result.identity

    def _set_authenticated(self, identity: Identity, token: str) -> None:
        self._identity = identity
        self._token = token
        self._state = SessionState.AUTHENTICATED

    def _set_unauthenticated(self) -> None:
        self._identity = None
        self._token = None
        self._state = SessionState.UNAUTHENTICATED
