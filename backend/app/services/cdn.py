from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.config import settings

logger = logging.getLogger("apply.cdn")

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


async def fetch_json(client: httpx.AsyncClient, url: str) -> Any | None:
    """GET a JSON document from the CDN; ``None`` on any failure."""
    try:
        response = await client.get(url, headers=NO_STORE_HEADERS, timeout=settings.cdn_timeout_seconds)
    except httpx.HTTPError as exc:
        logger.debug("Failed to fetch %s: %s", url, exc)
        return None
    if not response.is_success:
        logger.debug("CDN returned %s for %s", response.status_code, url)
        return None
    try:
        return response.json()
    except ValueError as exc:
        logger.debug("Invalid JSON at %s: %s", url, exc)
        return None


def _looks_like_image(response: httpx.Response) -> bool:
    content_type = (response.headers.get("content-type") or "").split(";", 1)[0].strip().lower()
    return not content_type or content_type.startswith("image/")


async def probe_image(client: httpx.AsyncClient, url: str) -> bool:
    try:
        response = await client.head(url, timeout=settings.cdn_timeout_seconds)
        if response.status_code in {405, 501}:
            response = await client.get(url, timeout=settings.cdn_timeout_seconds)
    except httpx.HTTPError as exc:
        logger.debug("Image probe failed for %s: %s", url, exc)
        return False
    if not response.is_success:
        logger.debug("Image not found at %s (%s)", url, response.status_code)
        return False
    return _looks_like_image(response)
