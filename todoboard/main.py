"""
todoboard - REST API for task and group management.

Main entry point. All initialization logic is in app/factory.py.
"""
import argparse
import logging

import uvicorn

from todoboard.app import create_app
from todoboard.config import Settings
from todoboard.dependencies.services import ServiceContainer
from todoboard.middleware.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="todoboard", description="Run the todoboard API server.")
    parser.add_argument("--host", help="Bind address (default: TODO_SERVICE_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Port (default: TODO_SERVICE_PORT or 3000)")
    parser.add_argument(
        "--init-only",
        action="store_true",
        help="Create the storage and seed the default account, then exit",
    )
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port

    if args.init_only:
        setup_logging(settings.log_level)
        ServiceContainer(settings).close()
        logger.info("Storage initialized")
        return 0

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30,
    )
    server = uvicorn.Server(config)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        logger.info("Service stopped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
