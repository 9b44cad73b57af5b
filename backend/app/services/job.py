from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.uploads import is_safe_segment
from app.schemas.job import JobData
from app.services.cdn import fetch_json

logger = logging.getLogger("apply.cdn")


def job_url(tenant: str, source_job_id: str) -> str:
    return f"{settings.cdn_base_url.rstrip('/')}/tenants/{tenant}/apply/{source_job_id}.json"


async def load_job_data(client: httpx.AsyncClient, tenant: str, source_job_id: str) -> JobData | None:
    if not is_safe_segment(tenant) or not is_safe_segment(source_job_id):
        return None
    url = job_url(tenant, source_job_id)
    data = await fetch_json(client, url)
    if not isinstance(data, dict) or not data.get("name"):
        return None
    try:
        return JobData.model_validate(data)
    except ValidationError as exc:
        logger.debug("Job descriptor at %s has an unexpected shape: %s", url, exc)
        return None


def map_locale_to_language(locale: str | None) -> str:
    prefix = (locale or "")[:2].lower()
    if prefix in settings.supported_languages:
        return prefix
    return settings.default_language


def localized_job_name(job: JobData, language: str) -> str | None:
    names = job.name
    if not names:
        return None
    for key, value in names.items():
        if key[:2].lower() == language:
            return value
    return next(iter(names.values()))
