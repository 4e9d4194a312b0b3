"""In-process notification hub backed by per-session asyncio queues."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from taskrelay.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from uuid import UUID

    from taskrelay.services.notifications.channel import Notification

logger = get_logger(__name__)


class InMemoryNotificationHub:
    """Rooms of session queues living in this process.

    Only sessions connected to this process are reachable; use the Redis
    channel when running more than one worker.
    """

    def __init__(self, max_queue_size: int) -> None:
        self._rooms: dict[UUID, set[asyncio.Queue[Notification]]] = {}
        self._max_queue_size = max_queue_size

    def session_count(self, user_id: UUID) -> int:
        return len(self._rooms.get(user_id, ()))

    async def publish(self, user_id: UUID, notification: Notification) -> None:
        sessions = self._rooms.get(user_id)
        if not sessions:
            logger.debug(
                "notifications.hub.no_sessions",
                extra={"user_id": str(user_id), "event": notification.event},
            )
            return
        for queue in list(sessions):
            try:
                queue.put_nowait(notification)
            except asyncio.QueueFull:
                logger.warning(
                    "notifications.hub.session_queue_full",
                    extra={"user_id": str(user_id), "event": notification.event},
                )

    async def _drain(self, queue: asyncio.Queue[Notification]) -> AsyncIterator[Notification]:
        while True:
            yield await queue.get()

    @asynccontextmanager
    async def subscribe(self, user_id: UUID) -> AsyncIterator[AsyncIterator[Notification]]:
        queue: asyncio.Queue[Notification] = asyncio.Queue(maxsize=self._max_queue_size)
        self._rooms.setdefault(user_id, set()).add(queue)
        logger.debug(
            "notifications.hub.joined",
            extra={"user_id": str(user_id), "sessions": self.session_count(user_id)},
        )
        try:
            yield self._drain(queue)
        finally:
            sessions = self._rooms.get(user_id)
            if sessions is not None:
                sessions.discard(queue)
                if not sessions:
                    del self._rooms[user_id]
            logger.debug(
                "notifications.hub.left",
                extra={"user_id": str(user_id), "sessions": self.session_count(user_id)},
            )

    async def close(self) -> None:
        self._rooms.clear()
