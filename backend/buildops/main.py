"""Application entry point."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import REGISTRY, make_asgi_app

from buildops.bootstrap import ApplicationContainer, bootstrap
from buildops.core.config import Settings, get_settings
from buildops.core.cqrs.base import INTERNAL_ERROR_MESSAGE, CommandResult
from buildops.core.errors import FieldError
from buildops.core.logging import LogConfig, configure_logging, get_logger
from buildops.presentation.api.middleware import CorrelationIdMiddleware
from buildops.presentation.api.routers import health, job_applications, quotes

logger = get_logger(__name__)


def log_config_for(settings: Settings) -> LogConfig:
    return LogConfig(
        level=settings.log_level,
        format=settings.log_format,
        environment=settings.environment,
        service_name=settings.app_name,
        enable_sensitive_data_filtering=settings.mask_sensitive_data,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Configure logging and make sure the app has a container."""
    settings: Settings = app.state.settings
    configure_logging(log_config_for(settings))

    if getattr(app.state, "container", None) is None:
        app.state.container = bootstrap(settings)

    logger.info(
        "Starting BuildOps Backend",
        version=settings.app_version,
        environment=settings.environment.value,
    )

    yield

    logger.info("BuildOps Backend shutdown completed")


class MetricsEndpoint:
    """
    Serves the container's Prometheus registry.

    The container may only exist once the lifespan has run, so the exporter
    is resolved on the first scrape.
    """

    def __init__(self, app: FastAPI):
        self._app = app
        self._exporter = None

    async def __call__(self, scope, receive, send) -> None:
        if self._exporter is None:
            container: ApplicationContainer | None = getattr(self._app.state, "container", None)
            registry = container.prometheus_registry if container else None
            self._exporter = make_asgi_app(registry or REGISTRY)
        await self._exporter(scope, receive, send)


def add_exception_handlers(app: FastAPI) -> None:
    """Render request and unexpected errors in the result envelope shape."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            FieldError(
                ".".join(str(part) for part in error["loc"] if part != "body") or "request",
                error["msg"],
                "VALIDATION_ERROR",
            )
            for error in exc.errors()
        ]
        result = CommandResult.failure(str(uuid4()), errors, "Request validation failed")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=result.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error in request",
            error_type=type(exc).__name__,
            path=request.url.path,
            method=request.method,
            correlation_id=getattr(request.state, "correlation_id", None),
        )
        result = CommandResult.failure(
            str(uuid4()),
            [FieldError("system", INTERNAL_ERROR_MESSAGE, "INTERNAL_ERROR")],
            "Internal system error",
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=result.to_dict()
        )


def create_app(
    container: ApplicationContainer | None = None, settings: Settings | None = None
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Pre-built container; bootstrapped at startup when omitted
        settings: Settings to use; the container's settings win when both are given
    """
    if container is not None:
        settings = container.settings
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.container = container

    app.add_middleware(CorrelationIdMiddleware)
    add_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(quotes.router)
    app.include_router(job_applications.router)

    app.mount("/metrics", MetricsEndpoint(app))

    return app


if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "8000"))

    uvicorn.run(
        "buildops.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_config=None,  # Use structlog
    )
