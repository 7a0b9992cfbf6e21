"""
Application factory - creates and configures the FastAPI application.
This isolates all initialization logic from main.py.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from todoboard import __version__
from todoboard.api.routes import groups, health, tasks
from todoboard.config import Settings
from todoboard.dependencies.services import ServiceContainer
from todoboard.exceptions.handlers import setup_exception_handlers
from todoboard.middleware.logging_setup import setup_logging
from todoboard.middleware.setup import setup_middleware
from todoboard.storage.interface import StorageInterface

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan."""
    logger.info("Application starting up...")
    yield
    logger.info("Application shutting down...")
    app.state.services.close()
    logger.info("Shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[StorageInterface] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Explicit settings; read from the environment when omitted.
        storage: Pre-built storage backend; built from settings when omitted.
        configure_logging: Install the root logging configuration.

    Returns:
        Configured FastAPI app instance ready to run.
    """
    settings = settings or Settings.from_env()
    if configure_logging:
        setup_logging(settings.log_level)

    app = FastAPI(
        title="todoboard",
        description="Task and group management service",
        version=__version__,
        lifespan=lifespan
    )

    # Storage, credential store and repositories are built once per app.
    app.state.services = ServiceContainer(settings, storage=storage)

    setup_middleware(app, settings)
    setup_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(groups.router)
    app.include_router(tasks.router)

    if settings.tracing_enabled:
        from todoboard.tracing import setup_tracing, instrument_fastapi
        setup_tracing(otlp_endpoint=settings.otlp_endpoint)
        instrument_fastapi(app)

    logger.info("FastAPI app created and configured")
    return app
