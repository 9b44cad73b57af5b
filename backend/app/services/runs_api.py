from __future__ import annotations

import logging
from typing import Any
from uuid import uuid4

import httpx

from app.core.config import settings
from app.schemas.apply import RunRelayIn

logger = logging.getLogger("apply.runs")

REFERENCE_KEYS = ("id", "runId", "referenceId")


class UpstreamError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _reference_id(body: Any) -> str:
    if isinstance(body, dict):
        for key in REFERENCE_KEYS:
            value = body.get(key)
            if isinstance(value, (str, int)) and str(value):
                return str(value)
    return f"run-{uuid4().hex}"


async def submit_run(client: httpx.AsyncClient, payload: RunRelayIn) -> str:
    """Relays one application to the runs API and returns its reference id."""
    headers = {"Accept": "application/json"}
    if settings.runs_api_key:
        headers["x-api-key"] = settings.runs_api_key
    try:
        response = await client.post(
            settings.runs_api_url,
            json=payload.model_dump(by_alias=True),
            headers=headers,
            timeout=settings.runs_api_timeout_seconds,
        )
    except httpx.HTTPError as exc:
        raise UpstreamError(f"Runs API unreachable: {exc!r}") from exc

    if not response.is_success:
        logger.error(
            "runs_api_rejected",
            extra={"status_code": response.status_code, "body": response.text[:500]},
        )
        raise UpstreamError("Runs API rejected the submission", status_code=response.status_code)

    try:
        body = response.json()
    except ValueError:
        body = None
    return _reference_id(body)
