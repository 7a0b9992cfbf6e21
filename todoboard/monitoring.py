"""
Monitoring and observability utilities for the service.

Provides:
- Prometheus metrics (requests, latencies, errors)
- Request tracing (unique request IDs)
- Health information for the storage backend
"""
import re
import time
import uuid
import logging
from typing import Callable, Dict, Any
from contextvars import ContextVar

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST

# Request context variable for tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

service_uptime_seconds = Gauge(
    'service_uptime_seconds',
    'Service uptime in seconds'
)

service_start_time = time.time()

logger = logging.getLogger(__name__)


def get_request_id() -> str:
    """Get the current request ID from context."""
    return request_id_var.get('')


def set_request_id(request_id: str) -> None:
    """Set the request ID in context."""
    request_id_var.set(request_id)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware for collecting Prometheus metrics and request tracing."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = str(uuid.uuid4())[:8]
        set_request_id(request_id)

        endpoint = self._get_endpoint_path(request.url.path)
        start_time = time.time()
        service_uptime_seconds.set(time.time() - service_start_time)

        logger.debug(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "client_ip": request.client.host if request.client else None,
            }
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                "Request failed with exception",
                exc_info=True,
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_seconds": duration,
                    "exception_type": type(e).__name__,
                }
            )
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error_type="exception"
            ).inc()
            raise

        status_code = response.status_code
        duration = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} -> {status_code} ({duration:.3f}s)",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": status_code,
                "duration_seconds": duration,
            }
        )

        http_requests_total.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).inc()
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=status_code
        ).observe(duration)

        if status_code >= 400:
            error_type = "client_error" if status_code < 500 else "server_error"
            http_errors_total.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
                error_type=error_type
            ).inc()

        response.headers["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _get_endpoint_path(path: str) -> str:
        """Normalize endpoint path for metrics (numeric IDs become {id})."""
        path = re.sub(r'/\d+', '/{id}', path)
        return path[:100]


def get_metrics() -> bytes:
    """Get Prometheus metrics in text format."""
    return generate_latest()


def check_storage_health(storage) -> Dict[str, Any]:
    """
    Check storage connectivity.

    Returns:
        Dictionary with storage health status
    """
    start_time = time.time()
    try:
        reachable = storage.ping()
        response_time_ms = round((time.time() - start_time) * 1000, 2)
        return {
            "status": "healthy" if reachable else "unhealthy",
            "type": storage.backend,
            "response_time_ms": response_time_ms,
        }
    except Exception as e:
        response_time_ms = round((time.time() - start_time) * 1000, 2)
        logger.warning(
            "Storage health check failed",
            extra={"error_type": type(e).__name__, "response_time_ms": response_time_ms}
        )
        return {
            "status": "unhealthy",
            "type": getattr(storage, "backend", "unknown"),
            "response_time_ms": response_time_ms,
            "error_type": type(e).__name__,
        }


def get_health_info(storage=None) -> Dict[str, Any]:
    """
    Build the /health payload.

    ``status`` is "ok" while the storage backend answers, "unhealthy" otherwise.
    """
    uptime = time.time() - service_start_time
    components = {}
    overall = "ok"

    if storage is not None:
        components["database"] = check_storage_health(storage)
        if components["database"]["status"] != "healthy":
            overall = "unhealthy"

    return {
        "status": overall,
        "uptime_seconds": round(uptime, 3),
        "components": components,
    }


METRICS_CONTENT_TYPE = CONTENT_TYPE_LATEST
