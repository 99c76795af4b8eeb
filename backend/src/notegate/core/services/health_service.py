"""Health probes for the database and the Redis revocation list."""

import time

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..logging import get_logger
from ..schemas.common import ComponentHealth, HealthCheckResponse
from .interfaces import IHealthService

logger = get_logger("health")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class HealthService(IHealthService):
    """Probe each dependency and fold the results into one status."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.settings = get_settings()

    async def get_health_status(self) -> HealthCheckResponse:
        database = await self.check_database_health()
        cache = await self.check_redis_health()

        # only token revocation depends on Redis
        if not database.connected:
            overall = "unhealthy"
        elif not cache.connected:
            overall = "degraded"
        else:
            overall = "healthy"

        return HealthCheckResponse(
            status=overall,
            version=self.settings.app_version,
            checks={"database": database, "redis": cache},
        )

    async def check_database_health(self) -> ComponentHealth:
        start = time.perf_counter()
        try:
            result = await self.session.execute(text("SELECT 1"))
            result.scalar()
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return ComponentHealth(connected=False, status="unhealthy", error=type(e).__name__)
        return ComponentHealth(
            connected=True, status="healthy", response_time_ms=_elapsed_ms(start)
        )

    async def check_redis_health(self) -> ComponentHealth:
        """Ping over a throwaway connection so a wedged pool cannot hide an outage."""
        client = redis.from_url(self.settings.redis_url)
        start = time.perf_counter()
        try:
            await client.ping()
        except (RedisError, OSError) as e:
            logger.warning(f"Redis health check failed: {e}")
            return ComponentHealth(connected=False, status="unhealthy", error=type(e).__name__)
        finally:
            await client.aclose()
        return ComponentHealth(
            connected=True, status="healthy", response_time_ms=_elapsed_ms(start)
        )
