"""Health check endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from buildops.bootstrap import ApplicationContainer
from buildops.core.cqrs.base import utc_now
from buildops.core.enums import HealthStatus
from buildops.core.logging import get_logger
from buildops.presentation.api.dependencies import Container

logger = get_logger(__name__)

router = APIRouter(tags=["health"])

HEALTH_PROBE_KEY = "health:probe"


async def check_query_cache(container: ApplicationContainer) -> HealthStatus:
    """The cache answers a lookup."""
    try:
        await container.query_cache.get(HEALTH_PROBE_KEY)
    except Exception as e:
        logger.exception("Query cache health check failed", error=str(e))
        return HealthStatus.UNHEALTHY
    return HealthStatus.HEALTHY


def check_handlers(registered: list[str]) -> HealthStatus:
    return HealthStatus.HEALTHY if registered else HealthStatus.UNHEALTHY


def overall_status(checks: dict[str, HealthStatus]) -> HealthStatus:
    if all(check == HealthStatus.HEALTHY for check in checks.values()):
        return HealthStatus.HEALTHY
    if all(check.is_operational for check in checks.values()):
        return HealthStatus.DEGRADED
    return HealthStatus.UNHEALTHY


@router.get("/health")
async def health_check(container: Container) -> JSONResponse:
    """
    Aggregate health of the dispatch pipeline.

    Checks that the query cache answers and that both dispatchers have
    handlers registered. Responds 503 when any component is unhealthy.
    """
    checks = {
        "query_cache": await check_query_cache(container),
        "command_handlers": check_handlers(container.command_dispatcher.list_registered()),
        "query_handlers": check_handlers(container.query_dispatcher.list_registered()),
    }
    health = overall_status(checks)
    settings = container.settings

    body = {
        "status": health.value,
        "version": settings.app_version,
        "environment": settings.environment.value,
        "timestamp": utc_now().isoformat(),
        "checks": {name: check.value for name, check in checks.items()},
        "dispatch": {
            "commands": container.command_dispatcher.get_metrics(),
            "queries": container.query_dispatcher.get_metrics(),
        },
    }
    code = status.HTTP_200_OK if health.is_operational else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)
