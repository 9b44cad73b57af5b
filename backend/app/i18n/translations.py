from __future__ import annotations

import copy
import json
import logging
from functools import lru_cache
from typing import Any

import httpx

from app.core.config import settings
from app.core.paths import package_root
from app.core.uploads import is_safe_segment
from app.services.cdn import fetch_json

logger = logging.getLogger("apply.i18n")

TranslationDict = dict[str, Any]


@lru_cache(maxsize=None)
def _bundled(lang: str) -> TranslationDict:
    path = package_root() / "i18n" / "locales" / f"{lang}.json"
    return json.loads(path.read_text(encoding="utf-8"))


def is_valid_language(lang: str | None) -> bool:
    return bool(lang) and lang in settings.supported_languages


def get_translations(lang: str | None) -> TranslationDict:
    if is_valid_language(lang):
        return _bundled(lang)
    return _bundled(settings.default_language)


def t(translations: TranslationDict, path: str) -> str:
    """Dotted lookup ("form.title"); the path itself is returned when missing."""
    result: Any = translations
    for key in path.split("."):
        if isinstance(result, dict) and key in result:
            result = result[key]
        else:
            logger.warning("Translation missing for path: %s", path)
            return path
    return result if isinstance(result, str) else path


def detect_language(
    query_lang: str | None = None,
    cookie_lang: str | None = None,
    accept_language: str | None = None,
) -> str:
    if is_valid_language(query_lang):
        return query_lang
    if is_valid_language(cookie_lang):
        return cookie_lang
    if accept_language:
        preferred = accept_language.split(",")[0].split(";")[0].split("-")[0].strip().lower()
        if is_valid_language(preferred):
            return preferred
    return settings.default_language


def should_set_language_cookie(query_lang: str | None, cookie_lang: str | None) -> bool:
    return is_valid_language(query_lang) and query_lang != cookie_lang


def _deep_merge(base: TranslationDict, override: TranslationDict) -> TranslationDict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        elif isinstance(value, str):
            merged[key] = value
    return merged


def translations_url(tenant: str, lang: str) -> str:
    return f"{settings.cdn_base_url.rstrip('/')}/tenants/{tenant}/apply/i18n/{lang}.json"


async def load_translations(client: httpx.AsyncClient, tenant: str | None, lang: str) -> TranslationDict:
    """Bundled dictionary, overlaid with the tenant's CDN overrides when present."""
    bundled = get_translations(lang)
    if not tenant or tenant == settings.default_tenant or not is_safe_segment(tenant):
        return bundled
    override = await fetch_json(client, translations_url(tenant, lang))
    if not isinstance(override, dict) or not override:
        return bundled
    return _deep_merge(bundled, override)
