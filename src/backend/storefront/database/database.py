"""
Redis connection for storefront session storage.

Connection settings come from the environment: REDIS_URL wins when set,
otherwise REDIS_HOST / REDIS_PORT / REDIS_PASSWORD / REDIS_DB.
"""

import logging
import os
from typing import Optional

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


def _client_from_env() -> Redis:
    redis_url = os.getenv("REDIS_URL")
    if redis_url:
        return Redis.from_url(redis_url, decode_responses=True, encoding="utf-8")

    return Redis(
        host=os.getenv("REDIS_HOST", "localhost"),
        port=int(os.getenv("REDIS_PORT", "6379")),
        password=os.getenv("REDIS_PASSWORD"),
        db=int(os.getenv("REDIS_DB", "0")),
        decode_responses=True,
        encoding="utf-8",
    )


class RedisManager:
    """Owns the process-wide Redis client; connect() verifies it with a ping."""

    def __init__(self):
        self.client: Optional[Redis] = None

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    async def connect(self) -> Redis:
        if self.client is not None:
            return self.client

        client = _client_from_env()
        try:
            await client.ping()
        except Exception as e:
            logger.error(f"Redis connection failed: {e}")
            await client.aclose()
            raise

        self.client = client
        logger.info("Redis connected")
        return client

    async def close(self):
        if self.client is not None:
            await self.client.aclose()
            self.client = None
            logger.info("Redis connection closed")


# Global manager instance
redis_manager = RedisManager()


async def init_redis() -> Redis:
    return await redis_manager.connect()


async def close_redis():
    await redis_manager.close()
