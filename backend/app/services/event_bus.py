from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict

import redis.asyncio as redis

from app.core.config import settings

logger = logging.getLogger("apply.events")


class EventPublishError(RuntimeError):
    pass


class EventBus:
    def __init__(self, redis_url: str | None = None, channel: str | None = None) -> None:
        self._subscribers: set[asyncio.Queue[str]] = set()
        self._lock = asyncio.Lock()
        self._redis_url = (settings.redis_url if redis_url is None else redis_url).strip()
        self._redis: redis.Redis | None = None
        self._redis_lock = asyncio.Lock()
        self._channel = channel or settings.event_bus_name

    @property
    def channel(self) -> str:
        return self._channel

    async def _broadcast(self, data: str) -> int:
        delivered = 0
        async with self._lock:
            for queue in list(self._subscribers):
                if queue.full():
                    try:
                        queue.get_nowait()
                    except asyncio.QueueEmpty:
                        pass
                try:
                    queue.put_nowait(data)
                    delivered += 1
                except asyncio.QueueFull:
                    continue
        return delivered

    async def _ensure_redis(self) -> bool:
        if not self._redis_url:
            return False
        if self._redis is None:
            async with self._redis_lock:
                if self._redis is None:
                    self._redis = redis.from_url(self._redis_url, decode_responses=True)
        return True

    async def subscribe(self) -> asyncio.Queue[str]:
        queue: asyncio.Queue[str] = asyncio.Queue(maxsize=200)
        async with self._lock:
            self._subscribers.add(queue)
        return queue

    async def unsubscribe(self, queue: asyncio.Queue[str]) -> None:
        async with self._lock:
            self._subscribers.discard(queue)

    async def publish(self, payload: Dict[str, Any], *, strict: bool = False) -> str:
        """
        Publishes to the redis channel, or broadcasts in-process when redis is
        not configured. On a redis failure the local broadcast is used unless
        ``strict`` is set, in which case ``EventPublishError`` is raised.
        Returns the transport used ("redis" or "local").
        """
        data = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        if await self._ensure_redis():
            try:
                if self._redis:
                    await self._redis.publish(self._channel, data)
                    return "redis"
            except Exception as exc:  # noqa: BLE001
                if strict:
                    raise EventPublishError(str(exc)) from exc
                logger.warning("Redis publish failed, broadcasting locally: %s", exc)
        await self._broadcast(data)
        return "local"

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


event_bus = EventBus()
