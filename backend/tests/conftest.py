import os

os.environ["APPLY_ENVIRONMENT"] = "test"
os.environ["APPLY_RUNS_API_URL"] = "https://runs.test/v1/runs"
os.environ["APPLY_PUBLISH_APPLY_EVENT_URL"] = "https://events.test/publish"
os.environ["APPLY_THEME_BASE_URL"] = "https://theme.test"
os.environ["APPLY_CDN_BASE_URL"] = "https://cdn.test"
os.environ["APPLY_REDIS_URL"] = ""
os.environ["APPLY_SM_ENV"] = "dev"
os.environ["APPLY_DRIVE_ROOT_FOLDER_ID"] = "root-folder"
os.environ["APPLY_APPLY_RATE_LIMIT_PER_MIN"] = "1000"

from dataclasses import dataclass, field
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.main import app
from app.services.event_bus import EventBus
from app.services.storage import StorageError, StoredObject

Handler = Callable[[httpx.Request], httpx.Response]


class FakeUpstream:
    """Routes outbound requests by (method, url); unknown URLs answer 404."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, handler: Handler) -> None:
        self.routes[(method.upper(), url)] = handler

    def respond(self, method: str, url: str, status_code: int = 200, **kwargs: Any) -> None:
        self.add(method, url, lambda request: httpx.Response(status_code, **kwargs))

    def json(self, url: str, payload: Any, status_code: int = 200) -> None:
        self.respond("GET", url, status_code, json=payload)

    def image(self, url: str) -> None:
        self.respond("HEAD", url, headers={"content-type": "image/jpeg"})

    def sent(self, method: str, url: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and str(r.url) == url]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url).split("?", 1)[0]
        handler = self.routes.get((request.method, url))
        if handler is None:
            return httpx.Response(404)
        return handler(request)


@dataclass
class FakeUploader:
    fail: bool = False
    calls: list[dict] = field(default_factory=list)

    def __call__(self, key: str, *, content_type: str, data: bytes) -> StoredObject:
        self.calls.append({"key": key, "content_type": content_type, "data": data})
        if self.fail:
            raise StorageError("drive unavailable")
        return StoredObject(key=key, file_id="file-1", file_url="https://drive.google.com/file/d/file-1/view")


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def http_client(upstream: FakeUpstream) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture()
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture()
def bus() -> EventBus:
    return EventBus(redis_url="", channel="sm-dev-app-apply-eventbus")


@pytest.fixture()
def client(http_client, uploader, bus):
    app.dependency_overrides[deps.get_http_client] = lambda: http_client
    app.dependency_overrides[deps.get_uploader] = lambda: uploader
    app.dependency_overrides[deps.get_event_bus] = lambda: bus
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
