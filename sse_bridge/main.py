"""
Main FastAPI application entry point.

Builds the application, wires exception handlers and routers, and closes
the backplane on shutdown.

Run:
    uvicorn sse_bridge.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from sse_bridge.core.config import get_settings
from sse_bridge.core.container import get_backplane, get_logger
from sse_bridge.presentation.routers.api.v1.errors import register_exception_handlers
from sse_bridge.presentation.routers.api.v1.streams import streams_router
from sse_bridge.presentation.routers.system import system_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan context manager.

    Handles startup and shutdown events:
    - Startup: log configuration summary
    - Shutdown: close the backplane if one was created

    Args:
        app: FastAPI application instance.

    Yields:
        None during application lifetime.
    """
    settings = get_settings()
    logger = get_logger()
    logger.info(
        "app_starting",
        environment=settings.environment.value,
        backplane=settings.backplane.value,
    )

    yield

    # Only close a backplane that was actually created
    if get_backplane.cache_info().currsize:
        await get_backplane().aclose()
        get_backplane.cache_clear()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Returns:
        FastAPI: Configured application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Server-Sent Events bridge over a pub/sub backplane",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # RFC 7807 error responses
    register_exception_handlers(app)

    v1_router = APIRouter(prefix=settings.api_v1_prefix)
    v1_router.include_router(streams_router)

    app.include_router(system_router)
    app.include_router(v1_router)

    return app


app = create_app()
