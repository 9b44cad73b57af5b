from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.middleware.rate_limit import client_ip

logger = logging.getLogger("apply.request")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line per request; 5xx answers and unhandled errors are logged as errors."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        fields = {
            "method": request.method,
            "path": request.url.path,
            "client_ip": client_ip(request),
        }
        try:
            response = await call_next(request)
        except Exception:
            fields["duration_ms"] = int((time.perf_counter() - start) * 1000)
            logger.exception("request_failed", extra=fields)
            raise
        fields["status_code"] = response.status_code
        fields["duration_ms"] = int((time.perf_counter() - start) * 1000)
        level = logging.ERROR if response.status_code >= 500 else logging.INFO
        logger.log(level, "request_completed", extra=fields)
        return response
