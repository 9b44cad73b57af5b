from __future__ import annotations

import logging
from urllib.parse import urlsplit

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.core.config import settings
from app.services.tracking import capture_tracking, parse_tracking_cookie, serialize_tracking

logger = logging.getLogger("apply.tracking")

# First path segments that never name a tenant.
RESERVED_SEGMENTS = frozenset(
    {"api", "static", "functions", "health", "docs", "redoc", "openapi.json", "favicon.ico"}
)


def is_page_path(path: str) -> bool:
    first = path.lstrip("/").split("/", 1)[0]
    return first not in RESERVED_SEGMENTS


def is_same_origin(referer: str, request: Request) -> bool:
    if not referer:
        return False
    parts = urlsplit(referer)
    return (parts.scheme, parts.netloc) == (request.url.scheme, request.url.netloc)


class TrackingCaptureMiddleware(BaseHTTPMiddleware):
    """
    Captures the landing URL, query params and Referer on page hits into a
    short-lived cookie, before any client-side navigation can strip them.
    Navigation within the site (language switcher, thank-you redirect) keeps
    the existing capture untouched.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path or "/"
        if request.method != "GET" or not is_page_path(path):
            return await call_next(request)

        referer = request.headers.get("referer", "")
        query = request.url.query
        logger.info(
            "page_hit",
            extra={
                "url": str(request.url),
                "referer": referer or "(none)",
                "params": query or "(none)",
                "user_agent": (request.headers.get("user-agent") or "")[:80],
            },
        )

        if (not query and not referer) or is_same_origin(referer, request):
            return await call_next(request)

        tracking = capture_tracking(
            landing_url=str(request.url),
            params=dict(request.query_params),
            referer=referer,
            previous=parse_tracking_cookie(request.cookies.get(settings.tracking_cookie_name)),
        )
        request.state.tracking = tracking

        response = await call_next(request)
        response.set_cookie(
            settings.tracking_cookie_name,
            serialize_tracking(tracking),
            max_age=settings.tracking_cookie_max_age,
            path="/",
            httponly=False,
            samesite="lax",
        )
        return response
