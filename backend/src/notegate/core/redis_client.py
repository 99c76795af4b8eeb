"""Redis-backed revocation list for access tokens.

Revoked JWT ids are stored until the token would have expired anyway.
Redis is optional: while it is offline nothing is revoked and nothing
reads as revoked.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..config import get_settings

logger = logging.getLogger(__name__)

BLACKLIST_PREFIX = "blacklist:"


class RedisClient:
    """Async Redis connection holding the token blacklist."""

    def __init__(self):
        self.settings = get_settings()
        self.redis: Optional[redis.Redis] = None

    @property
    def connected(self) -> bool:
        return self.redis is not None

    async def connect(self) -> None:
        """Open the pool and ping it. Raises if Redis cannot be reached."""
        client = redis.from_url(
            self.settings.redis_url,
            max_connections=self.settings.redis_max_connections,
            decode_responses=True,
        )
        try:
            await client.ping()
        except (RedisError, OSError):
            await client.aclose()
            raise
        self.redis = client
        logger.info("Connected to Redis")

    async def disconnect(self) -> None:
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("Disconnected from Redis")

    async def add_to_blacklist(self, token_jti: str, expire: int) -> bool:
        """Revoke a token id for ``expire`` seconds. False when Redis is unavailable."""
        if not self.redis:
            logger.warning(f"Redis offline, token {token_jti} not revoked")
            return False
        try:
            return bool(await self.redis.setex(f"{BLACKLIST_PREFIX}{token_jti}", expire, "1"))
        except RedisError as e:
            logger.error(f"Failed to blacklist token {token_jti}: {e}")
            return False

    async def is_token_blacklisted(self, token_jti: str) -> bool:
        if not self.redis:
            return False
        try:
            return await self.redis.exists(f"{BLACKLIST_PREFIX}{token_jti}") > 0
        except RedisError as e:
            logger.error(f"Blacklist lookup failed for token {token_jti}: {e}")
            return False


_redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Process-wide client, connected by the app lifespan."""
    global _redis_client
    if _redis_client is None:
        _redis_client = RedisClient()
    return _redis_client
