"""
Republishes an apply event onto the apply event bus.

Invoked with a function-URL style event ({"body": ..., "isBase64Encoded": ...});
the body is the apply event detail as JSON.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

from app.core.config import settings
from app.services.event_bus import EventBus, EventPublishError, event_bus

logger = logging.getLogger("apply.events")

EVENT_DETAIL_TYPE = "apply:file:uploaded"


def _response(status_code: int, body: dict[str, Any]) -> dict[str, Any]:
    return {"statusCode": status_code, "body": json.dumps(body)}


def _decode_body(event: dict[str, Any]) -> Any:
    body = event.get("body")
    if event.get("isBase64Encoded"):
        raw = base64.b64decode(body or "").decode("utf-8")
    else:
        raw = body or "{}"
    return json.loads(raw)


def build_entry(detail: Any) -> dict[str, Any]:
    return {
        "Source": settings.event_source,
        "DetailType": EVENT_DETAIL_TYPE,
        "EventBusName": settings.event_bus_name,
        "Detail": json.dumps(detail),
    }


async def handler(event: dict[str, Any], context: Any = None, *, bus: EventBus | None = None) -> dict[str, Any]:
    try:
        detail = _decode_body(event or {})
        entry = build_entry(detail)
        try:
            await (bus or event_bus).publish(entry, strict=True)
        except EventPublishError as exc:
            failed = {**entry, "ErrorMessage": str(exc)}
            logger.error("Failed entries: %s", json.dumps([failed]))
            return _response(500, {"error": "Failed to publish event", "entries": [failed]})

        logger.info("Event published: %s", EVENT_DETAIL_TYPE)
        return _response(200, {"success": True})
    except Exception:  # noqa: BLE001
        logger.exception("Error publishing event")
        return _response(500, {"error": "Internal error publishing event"})
