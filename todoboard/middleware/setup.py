"""
Middleware setup and configuration.
"""
from fastapi.middleware.cors import CORSMiddleware

from todoboard.monitoring import MetricsMiddleware


def setup_middleware(app, settings):
    """Set up all middleware for the FastAPI application."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    # Added last so it wraps CORS and sees every response.
    app.add_middleware(MetricsMiddleware)
