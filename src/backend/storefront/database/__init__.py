"""
Database package for the storefront backend.

- Redis connection management
- Session storage (Redis with TTL, in-memory fallback)
"""

from .database import (
    RedisManager,
    redis_manager,
    init_redis,
    close_redis,
)
from .session_storage import (
    RedisSessionStorage,
    InMemorySessionStorage,
    get_session_storage,
    init_session_storage,
    shutdown_session_storage,
    validate_session_id,
)

__all__ = [
    "RedisManager",
    "redis_manager",
    "init_redis",
    "close_redis",
    "RedisSessionStorage",
    "InMemorySessionStorage",
    "get_session_storage",
    "init_session_storage",
    "shutdown_session_storage",
    "validate_session_id",
]
