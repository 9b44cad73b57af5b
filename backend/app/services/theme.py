from __future__ import annotations

import re
from typing import Any

import httpx

from app.core.config import settings
from app.schemas.theme import DEFAULT_THEME, Theme
from app.services.cdn import fetch_json

_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{3,8}$")


def _is_color(value: Any) -> bool:
    return isinstance(value, str) and _COLOR_RE.match(value) is not None


def validate_theme(data: Any) -> dict[str, str]:
    """
    Map a CDN theme document onto ``Theme`` fields.

    Accepts both the customizer envelope ({"customizer": {...}}) and the flat
    format. Unknown or malformed values are dropped.
    """
    if not isinstance(data, dict):
        return {}
    obj = data.get("customizer") if isinstance(data.get("customizer"), dict) else data

    theme: dict[str, str] = {}
    logo_url = obj.get("logoUrl")
    if isinstance(logo_url, str) and logo_url.startswith("http"):
        theme["logo_url"] = logo_url
    brand_name = obj.get("brandName")
    if isinstance(brand_name, str) and len(brand_name) < 100:
        theme["brand_name"] = brand_name
    if _is_color(obj.get("primaryColor")):
        theme["primary_color"] = obj["primaryColor"]
    if _is_color(obj.get("secondaryColor")):
        theme["secondary_color"] = obj["secondaryColor"]
    if _is_color(obj.get("lightBackgroundColor")):
        theme["background_color"] = obj["lightBackgroundColor"]
    elif _is_color(obj.get("backgroundColor")):
        theme["background_color"] = obj["backgroundColor"]
    button_radius = obj.get("buttonRadius")
    if isinstance(button_radius, str) and len(button_radius) < 20:
        theme["button_radius"] = button_radius
    return theme


def theme_url(tenant: str) -> str:
    return f"{settings.theme_base_url.rstrip('/')}/tenants/{tenant}/apply/theme.json"


async def _fetch_theme(client: httpx.AsyncClient, url: str) -> dict[str, str]:
    return validate_theme(await fetch_json(client, url))


async def load_theme(client: httpx.AsyncClient, tenant: str | None = None) -> Theme:
    """Tenant theme, then the global theme, then the built-in default."""
    if tenant and tenant != settings.default_tenant:
        tenant_theme = await _fetch_theme(client, theme_url(tenant))
        if tenant_theme:
            return DEFAULT_THEME.model_copy(update=tenant_theme)

    global_theme = await _fetch_theme(client, theme_url(settings.global_theme_tenant))
    if global_theme:
        return DEFAULT_THEME.model_copy(update=global_theme)

    return DEFAULT_THEME.model_copy()


def theme_css_vars(theme: Theme) -> dict[str, str]:
    return {
        "--primary-color": theme.primary_color,
        "--secondary-color": theme.secondary_color,
        "--background-color": theme.background_color,
        "--button-radius": theme.button_radius,
    }
