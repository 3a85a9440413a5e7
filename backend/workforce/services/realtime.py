"""
Realtime notification delivery over WebSockets.

Every process keeps the sockets it accepted in a ConnectionRegistry. With
USE_REDIS_PUBSUB enabled, publishers write to the Redis channel
``<prefix>:<user_id>`` and each process runs a listener that forwards
messages to its own sockets, so delivery works across workers and survives
restarts of any single process. Without Redis the hub delivers directly to
the local registry.
"""
from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections import defaultdict
from typing import Any, Awaitable, Callable

from fastapi.encoders import jsonable_encoder

from workforce.core.config import settings
from workforce.core.redis import get_redis

logger = logging.getLogger(__name__)

RETRY_DELAY = 1.0
MAX_RETRY_DELAY = 30.0


class ConnectionRegistry:
    """Open sockets of this process, keyed by user id."""

    def __init__(self) -> None:
        self._connections: dict[uuid.UUID, set[Any]] = defaultdict(set)

    def register(self, user_id: uuid.UUID, websocket: Any) -> None:
        self._connections[user_id].add(websocket)

    def unregister(self, user_id: uuid.UUID, websocket: Any) -> None:
        sockets = self._connections.get(user_id)
        if not sockets:
            return
        sockets.discard(websocket)
        if not sockets:
            del self._connections[user_id]

    def count(self, user_id: uuid.UUID) -> int:
        return len(self._connections.get(user_id, ()))

    async def deliver(self, user_id: uuid.UUID, payload: dict) -> int:
        """Send to every socket of the user; sockets that fail are dropped."""
        delivered = 0
        for websocket in list(self._connections.get(user_id, ())):
            try:
                await websocket.send_json(payload)
                delivered += 1
            except Exception as exc:
                logger.info("Dropping dead socket for user %s: %s", user_id, exc)
                self.unregister(user_id, websocket)
        return delivered


class NotificationHub:

    def __init__(
        self,
        registry: ConnectionRegistry,
        redis_factory: Callable[[], Awaitable[Any]] = get_redis,
        use_pubsub: bool | None = None,
        channel_prefix: str | None = None,
        retry_delay: float = RETRY_DELAY,
    ) -> None:
        self.registry = registry
        self._redis_factory = redis_factory
        self.use_pubsub = settings.USE_REDIS_PUBSUB if use_pubsub is None else use_pubsub
        self.channel_prefix = channel_prefix or settings.NOTIFICATION_CHANNEL_PREFIX
        self.retry_delay = retry_delay
        self._listener: asyncio.Task | None = None

    def channel_for(self, user_id: uuid.UUID) -> str:
        return f"{self.channel_prefix}:{user_id}"

    def user_from_channel(self, channel: str) -> uuid.UUID:
        return uuid.UUID(channel.rsplit(":", 1)[1])

    async def publish(self, user_id: uuid.UUID, payload: dict) -> None:
        data = jsonable_encoder(payload)
        if not self.use_pubsub:
            await self.registry.deliver(user_id, data)
            return
        redis = await self._redis_factory()
        await redis.publish(self.channel_for(user_id), json.dumps(data))

    async def handle_message(self, message: dict) -> None:
        """Forward one pub/sub message to local sockets."""
        if message.get("type") != "pmessage":
            return
        try:
            user_id = self.user_from_channel(message["channel"])
            payload = json.loads(message["data"])
        except (KeyError, ValueError) as exc:
            logger.warning("Ignoring malformed notification message: %s", exc)
            return
        await self.registry.deliver(user_id, payload)

    async def _listen_once(self) -> None:
        redis = await self._redis_factory()
        pubsub = redis.pubsub()
        try:
            await pubsub.psubscribe(f"{self.channel_prefix}:*")
            logger.info("Listening for notifications on %s:*", self.channel_prefix)
            async for message in pubsub.listen():
                await self.handle_message(message)
        finally:
            await pubsub.aclose()

    async def listen(self) -> None:
        """Keep the subscription alive, reconnecting with a growing delay."""
        delay = self.retry_delay
        while True:
            try:
                await self._listen_once()
                delay = self.retry_delay
                logger.warning("Notification subscription ended; reconnecting")
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning("Notification listener failed (%s); retrying in %.1fs", exc, delay)
            await asyncio.sleep(delay)
            delay = min(delay * 2, MAX_RETRY_DELAY)

    def start(self) -> None:
        if self.use_pubsub and self._listener is None:
            self._listener = asyncio.create_task(self.listen())
            self._listener.add_done_callback(_log_listener_exit)

    async def stop(self) -> None:
        if self._listener is None:
            return
        self._listener.cancel()
        try:
            await self._listener
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Notification listener ended with an error")
        self._listener = None


def _log_listener_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Notification listener stopped: %r", exc)


hub = NotificationHub(ConnectionRegistry())
