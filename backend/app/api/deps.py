from typing import Callable

import httpx
from fastapi import Request

from app.services.event_bus import EventBus, event_bus
from app.services.storage import StoredObject, upload_object

Uploader = Callable[..., StoredObject]


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_uploader() -> Uploader:
    return upload_object


def get_event_bus() -> EventBus:
    return event_bus
