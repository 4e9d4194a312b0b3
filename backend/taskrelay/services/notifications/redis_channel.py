"""Redis pub/sub notification channel for multi-worker deployments."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import redis.asyncio as redis

from taskrelay.core.logging import get_logger
from taskrelay.services.notifications.channel import Notification

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from uuid import UUID

logger = get_logger(__name__)


def _redis_client(redis_url: str) -> redis.Redis:
    return redis.Redis.from_url(redis_url)


class RedisNotificationChannel:
    """Publishes each room as a Redis channel named `<prefix>:<user_id>`."""

    def __init__(self, redis_url: str, *, prefix: str) -> None:
        self._client = _redis_client(redis_url)
        self._prefix = prefix

    def channel_name(self, user_id: UUID) -> str:
        return f"{self._prefix}:{user_id}"

    async def publish(self, user_id: UUID, notification: Notification) -> None:
        receivers = await self._client.publish(
            self.channel_name(user_id),
            notification.to_json(),
        )
        logger.debug(
            "notifications.redis.published",
            extra={
                "user_id": str(user_id),
                "event": notification.event,
                "receivers": receivers,
            },
        )

    async def _listen(self, pubsub: redis.client.PubSub) -> AsyncIterator[Notification]:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                yield Notification.from_json(message["data"])
            except (ValueError, KeyError, TypeError):
                logger.warning(
                    "notifications.redis.malformed_message",
                    extra={"channel": str(message.get("channel"))},
                )

    @asynccontextmanager
    async def subscribe(self, user_id: UUID) -> AsyncIterator[AsyncIterator[Notification]]:
        pubsub = self._client.pubsub()
        channel = self.channel_name(user_id)
        await pubsub.subscribe(channel)
        try:
            yield self._listen(pubsub)
        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()

    async def close(self) -> None:
        await self._client.aclose()
