import asyncio
import math
import time
from collections import defaultdict, deque
from typing import Callable, Deque

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # Left-most entry is the original client.
        return forwarded.split(",")[0].strip() or "unknown"
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding window of submissions per client IP, applied to POSTs under ``path_prefixes``."""

    def __init__(
        self,
        app,
        *,
        limit: int,
        window_seconds: int,
        path_prefixes: tuple[str, ...] = ("/api/runs",),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(app)
        self.limit = limit
        self.window_seconds = window_seconds
        self.path_prefixes = path_prefixes
        self._submissions: dict[str, Deque[float]] = defaultdict(deque)
        self._lock = asyncio.Lock()
        self._clock = clock
        self._last_sweep = clock()

    def _applies(self, request: Request) -> bool:
        return request.method == "POST" and request.url.path.startswith(self.path_prefixes)

    def _sweep(self, now: float) -> None:
        cutoff = now - self.window_seconds
        idle = [ip for ip, window in self._submissions.items() if not window or window[-1] <= cutoff]
        for ip in idle:
            del self._submissions[ip]
        self._last_sweep = now

    async def _retry_after(self, ip: str) -> float | None:
        now = self._clock()
        async with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            window = self._submissions[ip]
            while window and window[0] <= now - self.window_seconds:
                window.popleft()
            if len(window) >= self.limit:
                return window[0] + self.window_seconds - now
            window.append(now)
            return None

    async def dispatch(self, request: Request, call_next):
        if not self._applies(request):
            return await call_next(request)

        retry_after = await self._retry_after(client_ip(request))
        if retry_after is not None:
            seconds = max(1, math.ceil(retry_after))
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "rate_limited", "retryAfter": seconds},
                headers={"Retry-After": str(seconds)},
            )
        return await call_next(request)
