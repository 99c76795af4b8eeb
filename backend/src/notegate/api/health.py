"""Health check API endpoints. An unhealthy database answers 503 for load balancers."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.schemas.common import ComponentHealth, HealthCheckResponse
from ..core.services import HealthService
from ..database import get_db_session

router = APIRouter(prefix="/health", tags=["health"])


def get_health_service(session: AsyncSession = Depends(get_db_session)) -> HealthService:
    return HealthService(session)


@router.get("/", response_model=HealthCheckResponse)
async def health_check(
    response: Response, health_service: HealthService = Depends(get_health_service)
):
    """Overall status. Degraded (no Redis) still answers 200."""
    report = await health_service.get_health_status()
    if report.status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return report


@router.get("/database", response_model=ComponentHealth)
async def database_health(
    response: Response, health_service: HealthService = Depends(get_health_service)
):
    result = await health_service.check_database_health()
    if not result.connected:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return result


@router.get("/redis", response_model=ComponentHealth)
async def redis_health(health_service: HealthService = Depends(get_health_service)):
    return await health_service.check_redis_health()
