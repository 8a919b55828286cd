"""FastAPI middleware for request tracing and metrics"""

import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from atm_core.infrastructure.observability.metrics import request_duration_histogram

logger = logging.getLogger("atm_core.access")


def _endpoint(request: Request) -> str:
    # Route template keeps label cardinality bounded (/balance/{account_id})
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID, reusing one supplied by the ATM terminal"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        logger.info(
            "Request handled",
            extra={
                "request_id": request_id,
                "method": request.method,
                "endpoint": _endpoint(request),
                "status": response.status_code,
            },
        )
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request latency per route"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)

        request_duration_histogram.labels(
            method=request.method,
            endpoint=_endpoint(request),
            status=response.status_code,
        ).observe(time.perf_counter() - start_time)

        return response
