"""FastAPI application factory and lifespan management."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from nginx_viewer.config import Settings
from nginx_viewer.content.assets import StaticAssets
from nginx_viewer.events import BroadcastHub, ChangeDetector, EventBus
from nginx_viewer.middleware.logging import RequestLoggingMiddleware
from nginx_viewer.routes import events, health, raw, static
from nginx_viewer.version import VERSION

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Builds the event bus, broadcast hub and change detector, and starts
    the detector. A detector that cannot start aborts startup. On
    shutdown the detector is stopped and open streams are closed.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info(
        "viewer_startup",
        host=settings.host,
        port=settings.port,
        path=str(settings.tracked_path),
        version=VERSION,
    )

    event_bus = EventBus(inbox_size=settings.inbox_size)
    broadcast_hub = BroadcastHub(
        event_bus,
        heartbeat_interval=settings.heartbeat_interval,
    )

    loop = asyncio.get_running_loop()
    detector = ChangeDetector(
        settings.tracked_path,
        loop=loop,
        on_change=event_bus.broadcast,
        debounce_ms=settings.debounce_ms,
    )

    app.state.event_bus = event_bus
    app.state.broadcast_hub = broadcast_hub
    app.state.detector = detector

    detector.start()

    try:
        yield
    finally:
        detector.stop()
        broadcast_hub.shutdown()
        logger.info("viewer_shutdown")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="nginx config viewer",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.static_assets = StaticAssets(settings.static_dir)

    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health.router)
    app.include_router(events.router)
    app.include_router(raw.router)
    app.include_router(static.router)

    return app
