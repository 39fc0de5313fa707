"""Client for the marketplace backend's auth endpoints.

The backend owns users and passwords; this service only exchanges
credentials for an identity + access token pair. Responses are wrapped in
``{"data": {"user": {...}, "accessToken": "..."}}``.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from eventhub.auth.errors import AuthApiError
from eventhub.auth.identity import Identity
from eventhub.auth.validation import RegistrationData
from eventhub.config import settings
from eventhub.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_ERROR_MESSAGE = "An unexpected error occurred. Please try again."

_STATUS_MESSAGES: dict[int, str] = {
    401: "Invalid credentials. Please check your email and password.",
    409: "An account with this email already exists.",
    429: "Too many attempts. Please try again later.",
}


@dataclass(frozen=True)
class AuthResult:
    identity: Identity
    token: str


def error_message_for(response: httpx.Response) -> str:
    """Pick the most specific user-displayable message for a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return _STATUS_MESSAGES.get(response.status_code, DEFAULT_ERROR_MESSAGE)


class AuthApiClient:
    """Thin async wrapper over POST /auth/login and POST /auth/register.

    Failures are raised as AuthApiError and never retried here.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.auth_api.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.auth_api.timeout_seconds
        self._transport = transport

    async def login(self, email: str, password: str) -> AuthResult:
        return await self._exchange("/auth/login", {"email": email, "password": password})

    async def register(self, data: RegistrationData) -> AuthResult:
        return await self._exchange("/auth/register", data.to_payload())

    async def _exchange(self, path: str, body: dict[str, Any]) -> AuthResult:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(url, json=body)
        except httpx.HTTPError as e:
            logger.warning("Auth API unreachable", path=path, error=str(e))
            raise AuthApiError(str(e) or DEFAULT_ERROR_MESSAGE) from e

        if resp.is_error:
            message = error_message_for(resp)
            logger.info("Auth API rejected request", path=path, status=resp.status_code)
            raise AuthApiError(message, status_code=resp.status_code)

        return self._parse(resp)

    @staticmethod
    def _parse(resp: httpx.Response) -> AuthResult:
        try:
            data = resp.json().get("data") or {}
        except (ValueError, AttributeError):
            raise AuthApiError(DEFAULT_ERROR_MESSAGE, status_code=resp.status_code) from None

        user = data.get("user")
        token = data.get("accessToken")
        if not isinstance(user, dict) or not token:
            raise AuthApiError(
                "Auth API response did not include a user and access token",
                status_code=resp.status_code,
            )
        # IncompleteIdentityError / InvalidRoleError propagate to the session
        return AuthResult(identity=Identity.from_payload(user), token=token)
