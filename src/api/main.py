"""FastAPI application factory and lifecycle management.

``create_app`` configures logging and tracing, registers the exception
handlers, middleware and routers, and creates the application-owned
services on ``app.state``:

- ``metrics_store``: the bounded ``OrderMetricsStore`` behind
  ``/admin/metrics``
- ``localizer``: label lookup for the order views

Middleware are executed in reverse order of registration.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI
from loguru import logger

from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.routers.orders import admin_router, router as orders_router
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.core.observability import instrument_app, setup_tracing
from src.domain.orders.localization import Localizer
from src.domain.orders.metrics import OrderMetricsStore
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_schema,
)


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Verify the database on startup and release it on shutdown.

    SQLite databases get their tables created on startup; PostgreSQL is
    migrated with alembic.

    Raises:
        RuntimeError: If database connection fails during startup.
    """
    is_healthy, error_msg = await check_database_connection()
    if not is_healthy:
        logger.error("Database connection failed during startup: {}", error_msg)
        msg = f"Database connection failed: {error_msg}"
        raise RuntimeError(msg)

    if get_settings().database_config.is_sqlite:
        await create_schema()

    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown initiated")
    await close_database()
    logger.info("Application shutdown complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)
    setup_tracing(settings)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    application.state.metrics_store = OrderMetricsStore(
        max_samples=settings.metrics_config.max_samples,
        last_errors_count=settings.metrics_config.last_errors_count,
    )
    application.state.localizer = Localizer.from_config(settings.localization_config)

    register_exception_handlers(application)

    # 2. Request logging (runs inside the correlation context)
    application.add_middleware(RequestLoggingMiddleware, log_config=settings.log_config)
    # 1. Request context (creates correlation ID)
    application.add_middleware(RequestContextMiddleware)

    application.include_router(orders_router)
    application.include_router(admin_router)

    @application.get("/health")
    async def health() -> dict[str, object]:
        """Report service health; "degraded" when the database is unreachable."""
        is_healthy, error_msg = await check_database_connection()
        if not is_healthy:
            logger.warning("Database health check failed: {}", error_msg)

        return {
            "status": "healthy" if is_healthy else "degraded",
            "database": is_healthy,
        }

    @application.get("/info")
    async def info(
        app_settings: Annotated[Settings, Depends(get_settings)],
    ) -> dict[str, Any]:
        """Get application information."""
        return {
            "app_name": app_settings.app_name,
            "version": app_settings.app_version,
            "environment": app_settings.environment,
            "debug": app_settings.debug,
        }

    instrument_app(application, settings)

    return application


app = create_app()
