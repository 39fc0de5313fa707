"""Tests for the session principal lifecycle."""

from unittest.mock import AsyncMock

import pytest

from eventhub.auth.api_client import AuthApiClient, AuthResult
from eventhub.auth.capabilities import Capability
from eventhub.auth.credential_store import MemoryCredentialStore
from eventhub.auth.errors import AuthApiError, FormValidationError, IncompleteIdentityError
from eventhub.auth.identity import Identity
from eventhub.auth.roles import Role
from eventhub.auth.session import SessionPrincipal, SessionState
from eventhub.auth.validation import RegistrationData


def _identity(role: Role, user_id: str = "u-1") -> Identity:
    return Identity(id=user_id, full_name="Pat Doe", email="pat@example.com", role=role)


def _api(result: AuthResult | None = None, error: Exception | None = None) -> AsyncMock:
    api = AsyncMock(spec=AuthApiClient)
    if error is not None:
        api.login.side_effect = error
        api.register.side_effect = error
    else:
        api.login.return_value = result
        api.register.return_value = result
    return api


@pytest.fixture
def store():
    return MemoryCredentialStore()


class TestResolve:
    async def test_starts_unresolved(self, store):
        principal = SessionPrincipal(store, _api())
        assert principal.state is SessionState.UNRESOLVED
        assert principal.identity is None

    async def test_no_token(self, store):
        principal = SessionPrincipal(store, _api())

        assert await principal.resolve(None) is None
        assert principal.state is SessionState.UNAUTHENTICATED

    async def test_unknown_token(self, store):
        principal = SessionPrincipal(store, _api())

        assert await principal.resolve("missing") is None
        assert principal.state is SessionState.UNAUTHENTICATED

    async def test_stored_identity(self, store):
        await store.save("tok", _identity(Role.HOST))
        principal = SessionPrincipal(store, _api())

        identity = await principal.resolve("tok")

        assert identity == _identity(Role.HOST)
        assert principal.state is SessionState.AUTHENTICATED
        assert principal.token == "tok"

    @pytest.mark.parametrize("drop", ["_id", "email"])
    async def test_incomplete_identity_is_discarded(self, store, drop):
        await store.save("tok", _identity(Role.ADMIN))
        store._records["tok"].pop(drop)
        principal = SessionPrincipal(store, _api())

        assert await principal.resolve("tok") is None
        assert principal.state is SessionState.UNAUTHENTICATED
        assert principal.has_capability(Capability.VIEW_EVENTS) is False
        assert await store.load("tok") is None

    async def test_unknown_role_is_discarded(self, store):
        await store.save("tok", _identity(Role.USER))
        store._records["tok"]["role"] = "superuser"
        principal = SessionPrincipal(store, _api())

        assert await principal.resolve("tok") is None
        assert await store.load("tok") is None


class TestLogin:
    async def test_login_as_host(self, store):
        host = _identity(Role.HOST)
        api = _api(AuthResult(identity=host, token="tok-h"))
        principal = SessionPrincipal(store, api)

        identity = await principal.login("pat@example.com", "Secret123")

        assert identity == host
        assert principal.state is SessionState.AUTHENTICATED
        assert principal.has_capability(Capability.CREATE_EVENTS) is True
        assert principal.has_capability(Capability.MANAGE_USERS) is False
        assert await store.load("tok-h") == host.to_payload()
        api.login.assert_awaited_once_with("pat@example.com", "Secret123")

    async def test_login_as_admin(self, store):
        api = _api(AuthResult(identity=_identity(Role.ADMIN), token="tok-a"))
        principal = SessionPrincipal(store, api)

        await principal.login("pat@example.com", "Secret123")

        assert principal.has_capability(Capability.RECEIVE_PAYMENTS) is False
        assert principal.has_capability(Capability.APPROVE_HOSTS) is True
        assert principal.is_role(Role.ADMIN) is True

    async def test_api_failure_propagates_and_leaves_unauthenticated(self, store):
        api = _api(error=AuthApiError("Invalid credentials", status_code=401))
        principal = SessionPrincipal(store, api)

        with pytest.raises(AuthApiError):
            await principal.login("pat@example.com", "wrong")

        assert principal.state is SessionState.UNAUTHENTICATED
        assert principal.identity is None
        assert principal.token is None
        assert store._records == {}

    async def test_incomplete_identity_from_api(self, store):
        api = _api(error=IncompleteIdentityError(["_id"]))
        principal = SessionPrincipal(store, api)

        with pytest.raises(IncompleteIdentityError):
            await principal.login("pat@example.com", "Secret123")

        assert principal.identity is None

    async def test_invalid_form_never_calls_api(self, store):
        api = _api()
        principal = SessionPrincipal(store, api)

        with pytest.raises(FormValidationError) as exc_info:
            await principal.login("not-an-email", "")

        assert set(exc_info.value.errors) == {"email", "password"}
        api.login.assert_not_called()
        assert principal.state is SessionState.UNAUTHENTICATED

    async def test_failed_relogin_drops_previous_identity(self, store):
        api = _api(AuthResult(identity=_identity(Role.HOST), token="first"))
        principal = SessionPrincipal(store, api)
        await principal.login("pat@example.com", "Secret123")

        api.login.side_effect = AuthApiError("Too many attempts", status_code=429)
        with pytest.raises(AuthApiError):
            await principal.login("pat@example.com", "Secret123")

        assert principal.identity is None
        assert await store.load("first") is None

    async def test_store_failure_leaves_unauthenticated(self):
        store = AsyncMock()
        store.save.side_effect = ConnectionError("redis down")
        api = _api(AuthResult(identity=_identity(Role.USER), token="tok"))
        principal = SessionPrincipal(store, api)

        with pytest.raises(ConnectionError):
            await principal.login("pat@example.com", "Secret123")

        assert principal.state is SessionState.UNAUTHENTICATED


class TestRegister:
    async def test_register_signs_in(self, store):
        host = _identity(Role.HOST)
        api = _api(AuthResult(identity=host, token="tok-r"))
        principal = SessionPrincipal(store, api)
        data = RegistrationData(
            full_name="Pat Doe",
            email="pat@example.com",
            password="Secret123",
            confirm_password="Secret123",
            location="Lisbon",
            role="host",
        )

        identity = await principal.register(data)

        assert identity == host
        assert principal.is_authenticated
        api.register.assert_awaited_once_with(data)

    async def test_invalid_registration(self, store):
        api = _api()
        principal = SessionPrincipal(store, api)

        with pytest.raises(FormValidationError):
            await principal.register(RegistrationData(email="pat@example.com", role="admin"))

        api.register.assert_not_called()

    async def test_conflict_propagates(self, store):
        api = _api(error=AuthApiError("An account with this email already exists.", 409))
        principal = SessionPrincipal(store, api)
        data = RegistrationData(
            full_name="Pat Doe",
            email="pat@example.com",
            password="Secret123",
            confirm_password="Secret123",
            location="Lisbon",
        )

        with pytest.raises(AuthApiError) as exc_info:
            await principal.register(data)

        assert exc_info.value.status_code == 409
        assert principal.identity is None


class TestLogout:
    async def test_logout_clears_everything(self, store):
        api = _api(AuthResult(identity=_identity(Role.USER), token="tok-u"))
        principal = SessionPrincipal(store, api)
        await principal.login("pat@example.com", "Secret123")
        assert principal.has_capability(Capability.VIEW_EVENTS) is True

        await principal.logout()

        assert principal.state is SessionState.UNAUTHENTICATED
        assert principal.identity is None
        assert principal.token is None
        assert principal.has_capability(Capability.VIEW_EVENTS) is False
        assert await store.load("tok-u") is None

    async def test_logout_is_idempotent(self, store):
        principal = SessionPrincipal(store, _api())
        await principal.resolve(None)

        await principal.logout()
        await principal.logout()

        assert principal.state is SessionState.UNAUTHENTICATED

    async def test_logout_completes_when_store_fails(self):
        store = AsyncMock()
        store.clear.side_effect = ConnectionError("redis down")
        api = _api(AuthResult(identity=_identity(Role.ADMIN), token="tok-a"))
        principal = SessionPrincipal(store, api)
        await principal.login("pat@example.com", "Secret123")

        await principal.logout()

        store.clear.assert_awaited_once_with("tok-a")
        assert principal.state is SessionState.UNAUTHENTICATED
        assert principal.identity is None
        assert principal.token is None
        assert principal.has_capability(Capability.MANAGE_USERS) is False

    async def test_relogin_completes_when_store_clear_fails(self):
        store = AsyncMock()
        store.clear.side_effect = ConnectionError("redis down")
        api = _api(AuthResult(identity=_identity(Role.HOST), token="first"))
        principal = SessionPrincipal(store, api)
        await principal.login("pat@example.com", "Secret123")

        api.login.return_value = AuthResult(identity=_identity(Role.USER, "u-2"), token="second")
        identity = await principal.login("pat@example.com", "Secret123")

        assert identity.id == "u-2"
        assert principal.token == "second"
        assert principal.is_role(Role.USER) is True

    async def test_logged_out_token_no_longer_resolves(self, store):
        api = _api(AuthResult(identity=_identity(Role.HOST), token="tok"))
        principal = SessionPrincipal(store, api)
        await principal.login("pat@example.com", "Secret123")
        await principal.logout()

        fresh = SessionPrincipal(store, api)
        assert await fresh.resolve("tok") is None
