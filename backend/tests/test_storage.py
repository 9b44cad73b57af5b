from __future__ import annotations

import itertools
import re

import pytest

from app.services.storage import FOLDER_MIME_TYPE, StorageError, upload_object


class _Call:
    def __init__(self, result):
        self._result = result

    def execute(self):
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class FakeDriveFiles:
    """Just enough of the Drive v3 files() resource for folder walking and uploads."""

    def __init__(self, fail_upload: bool = False):
        self.items: dict[str, dict] = {}
        self.uploads: list[dict] = []
        self._ids = itertools.count(1)
        self._fail_upload = fail_upload

    def list(self, q, **kwargs):
        name = re.search(r"name='((?:[^'\\]|\\.)*)'", q).group(1).replace("\\'", "'")
        parent = re.search(r"'([^']+)' in parents", q).group(1)
        found = [
            {"id": item_id, "name": item["name"]}
            for item_id, item in self.items.items()
            if item["name"] == name and parent in item["parents"] and item.get("mimeType") == FOLDER_MIME_TYPE
        ]
        return _Call({"files": found[:1]})

    def create(self, body, media_body=None, **kwargs):
        if media_body is not None and self._fail_upload:
            return _Call(RuntimeError("quota exceeded"))
        item_id = f"id-{next(self._ids)}"
        self.items[item_id] = dict(body)
        if media_body is not None:
            self.uploads.append({"id": item_id, **body, "mimetype": media_body.mimetype()})
        return _Call({"id": item_id})


class FakeDrive:
    def __init__(self, **kwargs):
        self._files = FakeDriveFiles(**kwargs)

    def files(self):
        return self._files


KEY = "uploads/tenantName=acme/year=2026/month=03/day=07/abc.pdf"


def _folder_path(drive: FakeDrive, item_id: str) -> list[str]:
    names = []
    items = drive.files().items
    parent = items[item_id]["parents"][0]
    while parent in items:
        names.append(items[parent]["name"])
        parent = items[parent]["parents"][0]
    names.append(parent)
    return list(reversed(names))


def test_key_segments_become_folders():
    drive = FakeDrive()

    stored = upload_object(KEY, content_type="application/pdf", data=b"pdf", service=drive)

    upload = drive.files().uploads[0]
    assert upload["name"] == "abc.pdf"
    assert upload["mimetype"] == "application/pdf"
    assert _folder_path(drive, upload["id"]) == [
        "root-folder",
        "uploads",
        "tenantName=acme",
        "year=2026",
        "month=03",
        "day=07",
    ]
    assert stored.key == KEY
    assert stored.file_url == f"https://drive.google.com/file/d/{stored.file_id}/view"


def test_existing_folders_are_reused():
    drive = FakeDrive()

    upload_object(KEY, content_type="application/pdf", data=b"1", service=drive)
    upload_object(KEY.replace("abc", "def"), content_type="application/pdf", data=b"2", service=drive)

    folders = [item for item in drive.files().items.values() if item.get("mimeType") == FOLDER_MIME_TYPE]
    assert len(folders) == 5
    assert len(drive.files().uploads) == 2


def test_upload_failure_is_wrapped():
    with pytest.raises(StorageError, match="quota exceeded"):
        upload_object(KEY, content_type="application/pdf", data=b"pdf", service=FakeDrive(fail_upload=True))


def test_missing_root_folder(monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "drive_root_folder_id", "")
    monkeypatch.delenv("APPLY_BUCKET_FOLDER_ID", raising=False)

    with pytest.raises(StorageError, match="APPLY_DRIVE_ROOT_FOLDER_ID"):
        upload_object(KEY, content_type="application/pdf", data=b"pdf", service=FakeDrive())
