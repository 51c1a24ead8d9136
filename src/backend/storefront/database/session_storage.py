"""
Storefront session storage.

One Redis hash per session (serialized state plus bookkeeping fields) with a
TTL that is refreshed on every read and write. When Redis is disabled or
unreachable an in-memory store with the same interface is used instead; it
enforces the TTL with a background cleanup task.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from redis.asyncio import Redis

from ..models.session import SESSION_SCHEMA_VERSION, StorefrontSession

logger = logging.getLogger(__name__)

_SESSION_ID_PATTERN = re.compile(r"^[a-fA-F0-9-]{8,50}$")  # UUID-like format


def validate_session_id(session_id: str) -> str:
    """
    Validate session ID format before it is used in a storage key.

    Raises:
        ValueError: If session ID is invalid
    """
    if not session_id or not isinstance(session_id, str):
        raise ValueError("session_id cannot be empty")

    if not _SESSION_ID_PATTERN.match(session_id):
        raise ValueError(
            "session_id must be a valid UUID-like format (hex digits and hyphens, 8-50 chars)"
        )

    return session_id


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySessionStorage:
    """
    Process-local session store used when Redis is unavailable.

    Sessions are copied on the way in and out so callers never share state.
    Sessions idle for longer than the TTL are dropped by a cleanup task
    (ttl=0 disables the task).
    """

    def __init__(self, ttl: int = 3600, cleanup_interval: float = 60):
        self.ttl = ttl
        self.cleanup_interval = cleanup_interval
        self._sessions: Dict[str, StorefrontSession] = {}
        self._last_touched: Dict[str, datetime] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

        if self.ttl > 0:
            logger.info(f"Starting in-memory session cleanup task (TTL: {self.ttl}s)")
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def save_session(self, session: StorefrontSession):
        validate_session_id(session.session_id)
        session.last_updated = _utc_now()
        session.schema_version = SESSION_SCHEMA_VERSION

        self._sessions[session.session_id] = session.model_copy(deep=True)
        self._last_touched[session.session_id] = session.last_updated
        logger.debug("Saved session %s to in-memory storage", session.session_id)

    async def get_session(self, session_id: str) -> Optional[StorefrontSession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        self._last_touched[session_id] = _utc_now()
        return session.model_copy(deep=True)

    async def delete_session(self, session_id: str):
        self._sessions.pop(session_id, None)
        self._last_touched.pop(session_id, None)
        logger.debug("Deleted session %s from in-memory storage", session_id)

    async def _cleanup_loop(self):
        try:
            while True:
                await asyncio.sleep(self.cleanup_interval)
                await self._cleanup_expired_sessions()
        except asyncio.CancelledError:
            logger.info("Session cleanup loop cancelled")
            raise

    async def _cleanup_expired_sessions(self) -> int:
        """Remove sessions idle for longer than the TTL; returns how many were removed."""
        now = _utc_now()
        expired = [
            session_id
            for session_id, touched in self._last_touched.items()
            if (now - touched).total_seconds() > self.ttl
        ]
        for session_id in expired:
            await self.delete_session(session_id)

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")
        return len(expired)

    async def stop_cleanup_loop(self):
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            logger.info("In-memory session cleanup task stopped")
        self._cleanup_task = None


class RedisSessionStorage:
    """
    Redis-backed session store.

    Key layout: ``{namespace}:{session_id}`` → hash with
    ``state`` (session JSON), ``lastTouched`` and ``schemaVersion``.
    """

    def __init__(self, redis_client: Redis, ttl: int = 3600, *, namespace: str = "storefront:sessions"):
        self.redis = redis_client
        self.ttl = ttl
        self.namespace = namespace.rstrip(":")

    def _session_key(self, session_id: str) -> str:
        return f"{self.namespace}:{validate_session_id(session_id)}"

    @staticmethod
    def _migrate_payload(payload: Dict[str, Any], session_id: str) -> bool:
        """
        Upgrade a stored payload to the current schema in place.

        Returns:
            True if the payload was changed
        """
        stored_version = payload.get("schema_version", 0)
        if stored_version == SESSION_SCHEMA_VERSION:
            return False

        logger.info(f"Migrating session {session_id} from schema v{stored_version} to v{SESSION_SCHEMA_VERSION}")

        # v0 kept the user slice and the cart items at the top level
        if stored_version == 0:
            payload.setdefault(
                "user",
                {key: payload.pop(key) for key in ("fav_products", "token", "is_authenticated") if key in payload},
            )
            payload.setdefault("cart", {"cart_items": payload.pop("cart_items", [])})

        payload["schema_version"] = SESSION_SCHEMA_VERSION
        return True

    async def save_session(self, session: StorefrontSession):
        """
        Write the session and reset its TTL.

        Raises:
            redis.exceptions.RedisError: If the write fails
        """
        key = self._session_key(session.session_id)
        session.last_updated = _utc_now()
        session.schema_version = SESSION_SCHEMA_VERSION

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.hset(
                key,
                mapping={
                    "state": json.dumps(session.model_dump(mode="json")),
                    "lastTouched": session.last_updated.isoformat(),
                    "schemaVersion": str(SESSION_SCHEMA_VERSION),
                },
            )
            pipe.expire(key, self.ttl)
            await pipe.execute()
        logger.debug("Saved session %s to Redis (TTL: %ss)", session.session_id, self.ttl)

    async def get_session(self, session_id: str) -> Optional[StorefrontSession]:
        """Read a session and refresh its TTL; unreadable sessions count as missing."""
        key = self._session_key(session_id)
        try:
            state_json = await self.redis.hget(key, "state")
            if not state_json:
                return None

            payload: Dict[str, Any] = json.loads(state_json)
            migrated = self._migrate_payload(payload, session_id)
            session = StorefrontSession(**payload)
        except Exception as exc:
            logger.error("Failed to retrieve session %s from Redis: %s", session_id, exc)
            return None

        if migrated:
            await self.save_session(session)
        else:
            await self.redis.expire(key, self.ttl)
        return session

    async def delete_session(self, session_id: str):
        await self.redis.delete(self._session_key(session_id))
        logger.debug("Deleted session %s from Redis", session_id)


SessionStorage = Union[RedisSessionStorage, InMemorySessionStorage]

# Global storage instances (initialized in main.py)
_redis_session_storage: Optional[RedisSessionStorage] = None
_in_memory_session_storage: Optional[InMemorySessionStorage] = None


def _redis_disabled() -> bool:
    return os.getenv("ENABLE_REDIS_CACHING", "true").lower() == "false"


def get_session_storage() -> SessionStorage:
    """Redis storage when initialized, otherwise the (lazily created) in-memory storage."""
    global _in_memory_session_storage

    if _redis_session_storage is not None:
        return _redis_session_storage

    if _in_memory_session_storage is None:
        if not _redis_disabled():
            logger.warning("Session storage requested before initialization, using in-memory storage")
        _in_memory_session_storage = InMemorySessionStorage()
    return _in_memory_session_storage


def init_session_storage(redis_client: Optional[Redis], ttl: int = 3600):
    """Initialize global session storage (Redis when a client is given, else in-memory)."""
    global _redis_session_storage, _in_memory_session_storage

    if redis_client is None or _redis_disabled():
        _redis_session_storage = None
        if _in_memory_session_storage is None:
            _in_memory_session_storage = InMemorySessionStorage(ttl=ttl)
        logger.info("Using in-memory session storage (TTL: %ss)", ttl)
        return

    _redis_session_storage = RedisSessionStorage(redis_client, ttl)
    logger.info("Redis session storage initialized (TTL: %ss)", ttl)


async def shutdown_session_storage():
    """Stop background work and forget the global storage instances."""
    global _redis_session_storage, _in_memory_session_storage

    if _in_memory_session_storage is not None:
        await _in_memory_session_storage.stop_cleanup_loop()
    _in_memory_session_storage = None
    _redis_session_storage = None
