"""
Health and metrics API routes.
"""
from todoboard.adapters.http_framework import HTTPFrameworkAdapter
from todoboard.dependencies.services import get_services
from todoboard.monitoring import get_health_info, get_metrics, METRICS_CONTENT_TYPE

# Initialize adapter
http_adapter = HTTPFrameworkAdapter()
Request = http_adapter.Request
Response = http_adapter.Response
JSONResponse = http_adapter.JSONResponse

router = http_adapter.create_router(tags=["health"])


@router.get("/health")
async def health_check(request: Request):
    """Unauthenticated health check with storage status."""
    health_info = get_health_info(get_services(request).storage)
    if health_info["status"] != "ok":
        return JSONResponse(content=health_info, status_code=503)
    return health_info


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=METRICS_CONTENT_TYPE)
