"""
Request observability middleware for FastAPI/Starlette.

Features:
- Assign a correlation ID per request (from X-Request-ID / X-Correlation-ID, or generated)
- Log one structured "request" record with method, path, status, duration_ms and client ip
- Forward the request log and an http_request metric via services.observability

Headers:
- Sets X-Correlation-ID on the response
"""

from __future__ import annotations

import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from setlist.core.logging import clear_correlation_id, get_logger, set_correlation_id
from setlist.services.observability import send_log, send_metric

logger = get_logger("setlist.request")


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Middleware to log and measure requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming_cid = request.headers.get("X-Request-ID") or request.headers.get("X-Correlation-ID")
        cid = set_correlation_id(incoming_cid)

        start = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start) * 1000.0, 2)
            fields = {
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
                "ip": _client_ip(request),
            }
            logger.info("request", extra=fields)
            await send_metric(
                name="http_request",
                metrics={"duration_ms": duration_ms, "status_code": response.status_code, "count": 1},
                metadata={"method": request.method, "path": request.url.path},
            )
            await send_log("INFO", "request", metadata=fields)
        finally:
            clear_correlation_id()

        response.headers["X-Correlation-ID"] = cid
        return response
