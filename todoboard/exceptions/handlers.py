"""
Exception handlers for the application.
"""
import sqlite3
import logging

from todoboard.adapters.http_framework import HTTPFrameworkAdapter
from todoboard.exceptions.errors import TodoError, AuthError, InternalError
from todoboard.monitoring import get_request_id

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Request = http_adapter.Request
JSONResponse = http_adapter.JSONResponse
RequestValidationError = http_adapter.RequestValidationError
StarletteHTTPException = http_adapter.StarletteHTTPException

logger = logging.getLogger(__name__)

DEFAULT_REALM = "TODO Application"


def _challenge_headers(request: Request) -> dict:
    services = getattr(request.app.state, "services", None)
    realm = services.settings.auth_realm if services else DEFAULT_REALM
    return {"WWW-Authenticate": f'Basic realm="{realm}"'}


def _internal_error_response(request: Request, exc: Exception, label: str) -> JSONResponse:
    request_id = get_request_id() or '-'
    logger.error(
        f"{label} in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "exception_type": type(exc).__name__,
        }
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "request_id": request_id,
        }
    )


async def todo_error_handler(request: Request, exc: TodoError) -> JSONResponse:
    """Map domain errors to their status code with an ``{"error": ...}`` body."""
    if isinstance(exc, InternalError):
        return _internal_error_response(request, exc, "Internal error")

    headers = _challenge_headers(request) if isinstance(exc, AuthError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework-raised HTTP errors (bad Basic header, unknown route) in the ``{"error": ...}`` shape."""
    if exc.status_code == 401:
        return JSONResponse(
            status_code=401,
            content={"error": "Authentication required"},
            headers=_challenge_headers(request),
        )

    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests (wrong types, bad ids) as 400."""
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append(f"{field}: {error['msg']}")

    logger.warning(
        f"Validation error in {request.method} {request.url.path}: {', '.join(errors)}",
        extra={"method": request.method, "path": request.url.path}
    )
    return JSONResponse(
        status_code=400,
        content={"error": "Validation error", "errors": errors}
    )


async def sqlite_exception_handler(request: Request, exc: sqlite3.Error) -> JSONResponse:
    """Handler for SQLite database errors."""
    return _internal_error_response(request, exc, "Database error")


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions."""
    return _internal_error_response(request, exc, "Unhandled exception")


def setup_exception_handlers(app):
    """
    Register exception handlers with the FastAPI app.
    """
    app.add_exception_handler(TodoError, todo_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(sqlite3.Error, sqlite_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
