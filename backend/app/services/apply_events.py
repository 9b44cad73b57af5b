from __future__ import annotations

import logging

import httpx

from app.core.config import settings
from app.schemas.apply import ApplyEventDetail

logger = logging.getLogger("apply.events")

PUBLISH_TIMEOUT_SECONDS = 15


async def publish_apply_event(client: httpx.AsyncClient, detail: ApplyEventDetail) -> None:
    """Fire-and-forget call of the publish function. Failures are logged, never raised."""
    url = settings.publish_apply_event_url
    if not url:
        logger.error("PUBLISH_APPLY_EVENT_URL is not set, skipping event publish")
        return

    try:
        response = await client.post(
            url,
            json=detail.model_dump(by_alias=True),
            timeout=PUBLISH_TIMEOUT_SECONDS,
        )
    except Exception:  # noqa: BLE001
        logger.exception("Error invoking publish function")
        return

    if response.is_success:
        logger.info("Publish function invoked (status %s)", response.status_code)
    else:
        logger.error("Publish function returned status %s: %s", response.status_code, response.text)
