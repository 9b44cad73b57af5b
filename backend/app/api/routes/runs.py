import logging
import os

import anyio
import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from app.api import deps
from app.core.config import settings
from app.core.uploads import build_upload_key, is_safe_segment, normalize_content_type
from app.core.validation import INVALID_TENANT, validate_cv, validate_fields
from app.i18n.translations import is_valid_language
from app.schemas.apply import ApplyErrorOut, ApplyEventDetail, ApplyRunOut, RunRelayIn, UploadedFile
from app.services.apply_events import publish_apply_event
from app.services.runs_api import UpstreamError, submit_run
from app.services.storage import StorageError
from app.services.tracking import parse_url_params

logger = logging.getLogger("apply.runs")

router = APIRouter(prefix="/api", tags=["runs"])

UPLOAD_FAILED = "Upload failed"
UPSTREAM_UNAVAILABLE = "Upstream service unavailable"
INTERNAL_ERROR = "Internal server error"


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(ApplyErrorOut(error=message).model_dump(), status_code=status_code)


def _text(form, key: str) -> str:
    value = form.get(key)
    if value is None or isinstance(value, UploadFile):
        return ""
    return str(value).strip()


def _truthy(raw: str) -> bool:
    return raw.strip().lower() in {"yes", "true", "1", "on", "y"}


def _upload_size(cv: UploadFile) -> int:
    """Size of the spooled upload, measured without reading it into memory."""
    if cv.size is not None:
        return cv.size
    position = cv.file.tell()
    cv.file.seek(0, os.SEEK_END)
    size = cv.file.tell()
    cv.file.seek(position)
    return size


@router.post("/runs", response_model=ApplyRunOut)
async def create_run(
    request: Request,
    background_tasks: BackgroundTasks,
    client: httpx.AsyncClient = Depends(deps.get_http_client),
    uploader: deps.Uploader = Depends(deps.get_uploader),
):
    try:
        form = await request.form()

        tenant = _text(form, "tenant") or settings.default_tenant
        language = _text(form, "language")
        if not is_valid_language(language):
            language = settings.default_language
        name = _text(form, "name")
        email = _text(form, "email")
        phone = _text(form, "phone")

        error = validate_fields(name, email, phone)
        if error:
            return _error(error, status.HTTP_400_BAD_REQUEST)

        cv = form.get("cv")
        if not isinstance(cv, UploadFile):
            cv = None
        error = validate_cv(
            cv.filename if cv else None,
            cv.content_type if cv else None,
            _upload_size(cv) if cv else None,
        )
        if error:
            return _error(error, status.HTTP_400_BAD_REQUEST)

        if not is_safe_segment(tenant):
            return _error(INVALID_TENANT, status.HTTP_400_BAD_REQUEST)

        data = await cv.read()

        key = build_upload_key(tenant, cv.filename)
        content_type = normalize_content_type(cv.content_type)
        try:
            stored = await anyio.to_thread.run_sync(
                lambda: uploader(key, content_type=content_type, data=data)
            )
        except StorageError as exc:
            logger.error("cv_upload_failed", extra={"tenant": tenant, "key": key, "error": str(exc)})
            return _error(UPLOAD_FAILED, status.HTTP_502_BAD_GATEWAY)
        logger.info("cv_uploaded", extra={"tenant": tenant, "key": stored.key})

        detail = ApplyEventDetail(
            tenant=tenant,
            language=language,
            name=name,
            email=email,
            phone=phone,
            files=[UploadedFile(file_url=stored.key, original_filename=cv.filename or "")],
            consent_current=_truthy(_text(form, "consentCurrent")),
            consent_future=_truthy(_text(form, "consentFuture")),
            source_url=_text(form, "sourceUrl"),
            referrer=_text(form, "referrer"),
            landing_url=_text(form, "landingUrl"),
            url_params=parse_url_params(_text(form, "urlParams")),
            source_job_id=_text(form, "sourceJobId"),
        )

        try:
            reference_id = await submit_run(client, RunRelayIn(**detail.model_dump(), cv_key=stored.key))
        except UpstreamError as exc:
            logger.error(
                "runs_relay_failed",
                extra={"tenant": tenant, "status_code": exc.status_code, "error": str(exc)},
            )
            return _error(UPSTREAM_UNAVAILABLE, status.HTTP_502_BAD_GATEWAY)

        background_tasks.add_task(publish_apply_event, client, detail)
        logger.info("run_submitted", extra={"tenant": tenant, "reference_id": reference_id})
        return JSONResponse(ApplyRunOut(reference_id=reference_id).model_dump(by_alias=True))
    except Exception:  # noqa: BLE001
        logger.exception("Error processing apply submission")
        return _error(INTERNAL_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR)
