from __future__ import annotations

import json
import logging
import time
from typing import Mapping
from urllib.parse import quote, unquote

from pydantic import ValidationError

from app.core.config import settings
from app.schemas.tracking import TrackingData

logger = logging.getLogger("apply.tracking")


def parse_tracking_cookie(raw: str | None) -> TrackingData | None:
    if not raw:
        return None
    try:
        payload = json.loads(unquote(raw))
    except (TypeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    try:
        return TrackingData.model_validate(payload)
    except ValidationError:
        return None


def capture_tracking(
    *,
    landing_url: str,
    params: Mapping[str, str],
    referer: str,
    previous: TrackingData | None = None,
    now_ms: int | None = None,
) -> TrackingData:
    """
    Build the tracking payload for a page hit.

    A previous capture from the same session is extended: the landing URL is
    appended to its redirect chain, the original referer is kept and new
    query params overlay the earlier ones.
    """
    captured_at = now_ms if now_ms is not None else int(time.time() * 1000)
    chain: list[str] = []
    merged_params: dict[str, str] = {}
    first_referer = referer
    if previous is not None:
        chain = list(previous.chain) or ([previous.landing_url] if previous.landing_url else [])
        merged_params.update(previous.params)
        first_referer = previous.referer or referer

    if not chain or chain[-1] != landing_url:
        chain.append(landing_url)
    chain = chain[-settings.tracking_chain_max :]
    merged_params.update(params)

    return TrackingData(
        params=merged_params,
        landing_url=landing_url,
        referer=first_referer,
        captured_at=captured_at,
        redirect_count=max(len(chain) - 1, 0),
        chain=chain,
    )


def serialize_tracking(data: TrackingData) -> str:
    # URL-encoded so the cookie value needs no quoting.
    return quote(json.dumps(data.model_dump(by_alias=True), ensure_ascii=True, separators=(",", ":")), safe="")


def parse_url_params(raw: str | None) -> dict[str, str]:
    """Form field ``urlParams``: a JSON object of strings; anything else is dropped."""
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        logger.info("Discarding malformed urlParams")
        return {}
    if not isinstance(payload, dict):
        return {}
    return {str(key): str(value) for key, value in payload.items() if value is not None}
