import asyncio
from datetime import datetime, timezone

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.api import deps
from app.core.config import settings
from app.core.paths import package_root
from app.core.uploads import is_safe_segment
from app.core.validation import CLIENT_PHONE_RE, EMAIL_RE
from app.i18n.translations import detect_language, load_translations, should_set_language_cookie, t
from app.schemas.tracking import TrackingData
from app.services.job import load_job_data, localized_job_name
from app.services.tenant_assets import display_name, load_tenant_background, load_tenant_logo
from app.services.theme import load_theme, theme_css_vars
from app.services.tracking import parse_tracking_cookie

router = APIRouter(tags=["pages"])

templates = Jinja2Templates(directory=str(package_root() / "templates"))


def _tenant_base_path(tenant: str) -> str:
    return "" if tenant == settings.default_tenant else f"/{tenant}"


def _resolve_language(request: Request) -> tuple[str, bool]:
    query_lang = request.query_params.get("lang")
    cookie_lang = request.cookies.get(settings.language_cookie_name)
    language = detect_language(query_lang, cookie_lang, request.headers.get("accept-language"))
    return language, should_set_language_cookie(query_lang, cookie_lang)


def _tracking(request: Request) -> TrackingData | None:
    captured = getattr(request.state, "tracking", None)
    if captured is not None:
        return captured
    return parse_tracking_cookie(request.cookies.get(settings.tracking_cookie_name))


async def _load_job(client: httpx.AsyncClient, tenant: str, source_job_id: str | None):
    if not source_job_id:
        return None
    return await load_job_data(client, tenant, source_job_id)


def _check_tenant(tenant: str) -> None:
    if not is_safe_segment(tenant):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


def _render(request: Request, template: str, context: dict, *, language: str, set_cookie: bool) -> HTMLResponse:
    translations = context["translations"]
    response = templates.TemplateResponse(
        request,
        template,
        {
            **context,
            "t": lambda path: t(translations, path),
            "language": language,
            "languages": settings.supported_languages,
            "year": datetime.now(timezone.utc).year,
        },
    )
    if set_cookie:
        response.set_cookie(
            settings.language_cookie_name,
            language,
            max_age=settings.language_cookie_max_age,
            path="/",
            samesite="lax",
        )
    return response


async def _apply_page(request: Request, tenant: str, source_job_id: str | None, client: httpx.AsyncClient):
    language, set_cookie = _resolve_language(request)
    theme, translations, tenant_logo, job = await asyncio.gather(
        load_theme(client, tenant),
        load_translations(client, tenant, language),
        load_tenant_logo(client, tenant),
        _load_job(client, tenant, source_job_id),
    )
    context = {
        "tenant": tenant,
        "source_job_id": source_job_id or "",
        "job_name": localized_job_name(job, language) if job else None,
        "theme": theme,
        "css_vars": theme_css_vars(theme),
        "logo_url": theme.logo_url or tenant_logo,
        "brand_name": theme.brand_name or "SmartyTalent",
        "translations": translations,
        "tracking": _tracking(request),
        "source_url": str(request.url),
        "thank_you_url": f"{_tenant_base_path(tenant)}/thank-you",
        "email_pattern": EMAIL_RE.pattern,
        "phone_pattern": CLIENT_PHONE_RE.pattern,
        "max_file_size": settings.max_file_size,
        "allowed_extensions": settings.allowed_file_extensions,
        "allowed_types": settings.allowed_file_types,
    }
    return _render(request, "apply.html", context, language=language, set_cookie=set_cookie)


async def _thank_you_page(request: Request, tenant: str, client: httpx.AsyncClient):
    language, set_cookie = _resolve_language(request)
    theme, translations, logo_url, background_url = await asyncio.gather(
        load_theme(client, tenant),
        load_translations(client, tenant, language),
        load_tenant_logo(client, tenant),
        load_tenant_background(client, tenant),
    )
    context = {
        "tenant": tenant,
        "theme": theme,
        "css_vars": theme_css_vars(theme),
        "logo_url": logo_url,
        "logo_text": display_name(tenant, theme.brand_name or "SmartyTalent"),
        "background_url": background_url,
        "translations": translations,
    }
    return _render(request, "thank_you.html", context, language=language, set_cookie=set_cookie)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def default_apply_page(request: Request, client: httpx.AsyncClient = Depends(deps.get_http_client)):
    return await _apply_page(request, settings.default_tenant, None, client)


@router.get("/thank-you", response_class=HTMLResponse, include_in_schema=False)
async def default_thank_you_page(request: Request, client: httpx.AsyncClient = Depends(deps.get_http_client)):
    return await _thank_you_page(request, settings.default_tenant, client)


@router.get("/{tenant}/thank-you", response_class=HTMLResponse, include_in_schema=False)
async def tenant_thank_you_page(
    tenant: str,
    request: Request,
    client: httpx.AsyncClient = Depends(deps.get_http_client),
):
    _check_tenant(tenant)
    return await _thank_you_page(request, tenant, client)


@router.get("/{tenant}/{source_job_id}", response_class=HTMLResponse, include_in_schema=False)
async def tenant_job_apply_page(
    tenant: str,
    source_job_id: str,
    request: Request,
    client: httpx.AsyncClient = Depends(deps.get_http_client),
):
    _check_tenant(tenant)
    return await _apply_page(request, tenant, source_job_id, client)


@router.get("/{tenant}", response_class=HTMLResponse, include_in_schema=False)
async def tenant_apply_page(
    tenant: str,
    request: Request,
    client: httpx.AsyncClient = Depends(deps.get_http_client),
):
    _check_tenant(tenant)
    return await _apply_page(request, tenant, None, client)
