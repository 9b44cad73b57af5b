import logging

import httpx
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api.router import api_router
from app.core.config import settings
from app.core.paths import package_root
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.tracking import TrackingCaptureMiddleware
from app.services.event_bus import event_bus

logging.basicConfig(level=logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(TrackingCaptureMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    limit=settings.apply_rate_limit_per_min,
    window_seconds=settings.apply_rate_limit_window_seconds,
)
app.add_middleware(RequestLoggingMiddleware)

app.mount("/static", StaticFiles(directory=str(package_root() / "static")), name="static")


@app.get("/health")
async def health_check():
    return {"status": "ok", "environment": settings.environment}


app.include_router(api_router)


@app.on_event("startup")
async def _startup_clients() -> None:
    app.state.http_client = httpx.AsyncClient(follow_redirects=True)


@app.on_event("shutdown")
async def _shutdown_clients() -> None:
    client = getattr(app.state, "http_client", None)
    if client:
        await client.aclose()
    await event_bus.close()
