"""Persistence for the credential token + identity pair.

The Auth API hands back an opaque access token together with the user
object. Both are stored under the token so later requests can recover the
identity without another round-trip to the backend. Token and identity are
always written and removed together.

Stored records are raw Auth API payloads; validating them is the session's
job, so a corrupted or incomplete record can be detected and discarded.
"""

import json
from datetime import timedelta
from typing import Any, Protocol, runtime_checkable

from eventhub.auth.identity import Identity
from eventhub.config import CredentialStoreBackend, settings
from eventhub.logging_config import get_logger
from eventhub.redis.client import get_redis_client, get_redis_health

logger = get_logger(__name__)

SESSION_PREFIX = "eh:session:"
USER_SESSIONS_PREFIX = "eh:user_sessions:"


def _session_ttl() -> int:
    """Session TTL in seconds from config."""
    return int(timedelta(hours=settings.auth.session_ttl_hours).total_seconds())


@runtime_checkable
class CredentialStore(Protocol):
    """Where token + identity pairs live between requests."""

    async def save(self, token: str, identity: Identity) -> None: ...

    async def load(self, token: str) -> dict[str, Any] | None:
        """Return the stored identity payload, or None if absent/expired."""
        ...

    async def clear(self, token: str) -> bool:
        """Remove a token and its identity. Returns True if it existed."""
        ...

    async def clear_all_for_user(self, user_id: str) -> int:
        """Remove every token stored for a user. Returns the count removed."""
        ...

    async def health(self) -> bool: ...


class RedisCredentialStore:
    """Redis-backed store with a TTL per token.

    Also keeps a per-user set of tokens so every session of a user can be
    revoked at once (e.g. after an admin bans the account).
    """

    async def save(self, token: str, identity: Identity) -> None:
        redis = get_redis_client()
        ttl = _session_ttl()
        session_key = SESSION_PREFIX + token
        user_key = USER_SESSIONS_PREFIX + identity.id

        async with redis.pipeline(transaction=True) as pipe:
            pipe.set(session_key, json.dumps(identity.to_payload()), ex=ttl)
            pipe.sadd(user_key, token)
            pipe.expire(user_key, ttl)
            await pipe.execute()

        logger.debug("Credentials stored", user_id=identity.id)

    async def load(self, token: str) -> dict[str, Any] | None:
        redis = get_redis_client()
        data = await redis.get(SESSION_PREFIX + token)
        if data is None:
            return None
        try:
            parsed = json.loads(data)
        except ValueError:
            logger.warning("Stored identity is not valid JSON")
            return {}
        return parsed if isinstance(parsed, dict) else {}

    async def clear(self, token: str) -> bool:
        redis = get_redis_client()
        session_key = SESSION_PREFIX + token

        # Read first to find the owning user's token set
        data = await redis.get(session_key)
        user_id = None
        if data is not None:
            try:
                user_id = json.loads(data).get("_id")
            except (ValueError, AttributeError):
                user_id = None

        async with redis.pipeline(transaction=True) as pipe:
            pipe.delete(session_key)
            if user_id:
                pipe.srem(USER_SESSIONS_PREFIX + user_id, token)
            results = await pipe.execute()

        return results[0] > 0

    async def clear_all_for_user(self, user_id: str) -> int:
        """Revoke every stored token for a user. Returns the count removed."""
        redis = get_redis_client()
        user_key = USER_SESSIONS_PREFIX + user_id

        tokens = await redis.smembers(user_key)
        if not tokens:
            return 0

        async with redis.pipeline(transaction=True) as pipe:
            for token in tokens:
                pipe.delete(SESSION_PREFIX + token)
            pipe.delete(user_key)
            results = await pipe.execute()

        count = sum(1 for r in results[:-1] if r > 0)
        logger.info("Cleared all credentials for user", user_id=user_id, count=count)
        return count

    async def health(self) -> bool:
        return await get_redis_health()


class MemoryCredentialStore:
    """Process-local store for development and tests. No expiry."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Any]] = {}

    async def save(self, token: str, identity: Identity) -> None:
        self._records[token] = identity.to_payload()

    async def load(self, token: str) -> dict[str, Any] | None:
        record = self._records.get(token)
        return dict(record) if record is not None else None

    async def clear(self, token: str) -> bool:
        return self._records.pop(token, None) is not None

    async def clear_all_for_user(self, user_id: str) -> int:
        tokens = [t for t, record in self._records.items() if record.get("_id") == user_id]
        for token in tokens:
            del self._records[token]
        return len(tokens)

    async def health(self) -> bool:
        return True


_store: CredentialStore | None = None


def init_credential_store() -> CredentialStore:
    """Create the configured store. Called from the application lifespan."""
    global _store  # noqa: PLW0603
    backend = settings.auth.credential_store
    if backend == CredentialStoreBackend.MEMORY:
        _store = MemoryCredentialStore()
    else:
        _store = RedisCredentialStore()
    logger.info("Credential store initialized", backend=str(backend))
    return _store


def get_credential_store() -> CredentialStore:
    """Return the configured store, creating it on first use."""
    if _store is None:
        return init_credential_store()
    return _store
