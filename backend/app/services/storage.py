from __future__ import annotations

import io
import os
from dataclasses import dataclass

import google.auth
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseUpload

from app.core.config import settings
from app.core.paths import resolve_backend_path

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


class StorageError(RuntimeError):
    pass


@dataclass(frozen=True)
class StoredObject:
    key: str
    file_id: str
    file_url: str


def _drive_client():
    scopes = ["https://www.googleapis.com/auth/drive"]

    service_account_path = settings.google_application_credentials or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    key_file = resolve_backend_path(service_account_path) if service_account_path else None
    if key_file is not None and key_file.exists():
        credentials = Credentials.from_service_account_file(str(key_file), scopes=scopes)
    else:
        credentials, _ = google.auth.default(scopes=scopes)

    return build("drive", "v3", credentials=credentials, cache_discovery=False)


def _file_url(file_id: str) -> str:
    return f"https://drive.google.com/file/d/{file_id}/view"


def _child_folder(service, parent_id: str, name: str) -> str:
    """Id of the folder ``name`` directly under ``parent_id``, created when absent."""
    quoted = name.replace("\\", "\\\\").replace("'", "\\'")
    listing = (
        service.files()
        .list(
            q=f"'{parent_id}' in parents and name='{quoted}' and mimeType='{FOLDER_MIME_TYPE}' and trashed=false",
            fields="files(id)",
            pageSize=1,
            supportsAllDrives=True,
            includeItemsFromAllDrives=True,
            corpora="allDrives",
        )
        .execute()
    )
    for item in listing.get("files", []):
        return item["id"]
    body = {"name": name, "mimeType": FOLDER_MIME_TYPE, "parents": [parent_id]}
    return service.files().create(body=body, fields="id", supportsAllDrives=True).execute()["id"]


def _root_folder_id() -> str:
    root_id = settings.drive_root_folder_id or os.environ.get("APPLY_BUCKET_FOLDER_ID", "")
    if not root_id:
        raise StorageError("Missing APPLY_DRIVE_ROOT_FOLDER_ID")
    return root_id


def _ensure_key_folders(service, key: str) -> tuple[str, str]:
    """
    Walks the key's folder segments below the root, creating any that are
    missing. Returns (parent_folder_id, object_name).
    """
    segments = [segment for segment in key.split("/") if segment]
    if not segments:
        raise StorageError(f"Invalid storage key: {key!r}")
    parent_id = _root_folder_id()
    for folder in segments[:-1]:
        parent_id = _child_folder(service, parent_id, folder)
    return parent_id, segments[-1]


def upload_object(key: str, *, content_type: str, data: bytes, service=None) -> StoredObject:
    """
    Stores ``data`` under ``key`` (a slash separated path mirrored as Drive
    folders). Blocking; run it in a worker thread from async code.
    """
    try:
        service = service or _drive_client()
        parent_id, name = _ensure_key_folders(service, key)
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=content_type or "application/octet-stream", resumable=False)
        file_metadata = {"name": name, "parents": [parent_id]}
        created = (
            service.files()
            .create(body=file_metadata, media_body=media, fields="id", supportsAllDrives=True)
            .execute()
        )
    except StorageError:
        raise
    except Exception as exc:  # noqa: BLE001
        raise StorageError(f"Upload of {key} failed: {exc}") from exc
    file_id = created["id"]
    return StoredObject(key=key, file_id=file_id, file_url=_file_url(file_id))
