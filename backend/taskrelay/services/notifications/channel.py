"""Notification channel contract shared by the hub and Redis transports."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from contextlib import AbstractAsyncContextManager
    from uuid import UUID


@dataclass(frozen=True)
class Notification:
    """One live event as delivered to a user's sessions."""

    event: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps({"event": self.event, "payload": self.payload}, sort_keys=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> Notification:
        data = json.loads(raw)
        return cls(event=str(data["event"]), payload=dict(data.get("payload") or {}))

    def to_sse(self) -> dict[str, str]:
        """Render as an `EventSourceResponse` item."""
        return {"event": self.event, "data": json.dumps(self.payload)}


class NotificationChannel(Protocol):
    """Publish/subscribe transport keyed by user identity.

    Each user id is a room; every live session subscribed to the room gets
    every event published to it. Rooms without subscribers drop events.
    """

    async def publish(self, user_id: UUID, notification: Notification) -> None:
        """Deliver `notification` to all sessions of `user_id`."""
        ...

    def subscribe(
        self,
        user_id: UUID,
    ) -> AbstractAsyncContextManager[AsyncIterator[Notification]]:
        """Join the room of `user_id` for the lifetime of the context."""
        ...

    async def close(self) -> None:
        """Release transport resources."""
        ...
