from __future__ import annotations

import re
from datetime import datetime, timezone
from uuid import uuid4

UPLOAD_PREFIX = "uploads"
OCTET_STREAM_MIME_TYPES = {"application/octet-stream", "binary/octet-stream"}

_SAFE_SEGMENT_RE = re.compile(r"[^A-Za-z0-9_-]")
_SEGMENT_RE = re.compile(r"[A-Za-z0-9_-]+")
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]{1,10}")


def sanitize_tenant(raw: str | None) -> str:
    return _SAFE_SEGMENT_RE.sub("_", raw or "")


def is_safe_segment(value: str | None) -> bool:
    """True when ``value`` can be placed into a CDN or storage path as-is."""
    return bool(value) and _SEGMENT_RE.fullmatch(value) is not None


def file_extension(filename: str | None) -> str:
    name = filename or ""
    dot = name.rfind(".")
    if dot == -1:
        return ""
    ext = name[dot:].lower()
    if not _EXTENSION_RE.fullmatch(ext):
        return ""
    return ext


def normalize_content_type(raw: str | None) -> str:
    content_type = (raw or "").strip().lower()
    if ";" in content_type:
        content_type = content_type.split(";", 1)[0].strip()
    return content_type or "application/octet-stream"


def build_upload_key(
    tenant: str,
    filename: str | None,
    *,
    now: datetime | None = None,
    token: str | None = None,
) -> str:
    """
    uploads/tenantName={tenant}/year=YYYY/month=MM/day=DD/{token}{ext}

    The date is UTC; the object name is a random hex token so the original
    filename never lands in storage paths.
    """
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    name = f"{token or uuid4().hex}{file_extension(filename)}"
    return (
        f"{UPLOAD_PREFIX}/tenantName={sanitize_tenant(tenant)}"
        f"/year={moment.year}/month={moment.month:02d}/day={moment.day:02d}/{name}"
    )
