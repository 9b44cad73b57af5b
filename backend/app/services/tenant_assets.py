from __future__ import annotations

import httpx

from app.core.config import settings
from app.core.uploads import is_safe_segment
from app.services.cdn import probe_image


def tenant_logo_url(tenant: str) -> str:
    return f"{settings.cdn_base_url.rstrip('/')}/tenants/{tenant}/apply/logo.jpg"


def tenant_background_url(tenant: str) -> str:
    return f"{settings.cdn_base_url.rstrip('/')}/tenant/{tenant}/bg.jpg"


def display_name(tenant: str | None, fallback: str | None = None) -> str:
    if not tenant:
        return fallback or ""
    return tenant[:1].upper() + tenant[1:].lower()


def _skip(tenant: str | None) -> bool:
    return not tenant or tenant == settings.default_tenant or not is_safe_segment(tenant)


async def load_tenant_logo(client: httpx.AsyncClient, tenant: str | None) -> str | None:
    if _skip(tenant):
        return None
    url = tenant_logo_url(tenant)
    return url if await probe_image(client, url) else None


async def load_tenant_background(client: httpx.AsyncClient, tenant: str | None) -> str | None:
    if _skip(tenant):
        return None
    url = tenant_background_url(tenant)
    return url if await probe_image(client, url) else None
