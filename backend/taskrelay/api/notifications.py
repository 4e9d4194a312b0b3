"""Server-sent event stream of live task notifications for the caller."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request
from sse_starlette.sse import EventSourceResponse

from taskrelay.api.deps import CHANNEL_DEP, STREAM_AUTH_DEP
from taskrelay.core.config import settings
from taskrelay.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from uuid import UUID

    from taskrelay.core.auth import AuthContext
    from taskrelay.services.notifications.channel import NotificationChannel

router = APIRouter(prefix="/notifications", tags=["notifications"])
logger = get_logger(__name__)


async def relay_notifications(
    request: Request,
    channel: NotificationChannel,
    user_id: UUID,
) -> AsyncIterator[dict[str, str]]:
    """Yield SSE items for the user's room until the client goes away."""
    logger.info("notifications.stream.opened", extra={"user_id": str(user_id)})
    try:
        async with channel.subscribe(user_id) as notifications:
            async for notification in notifications:
                if await request.is_disconnected():
                    break
                yield notification.to_sse()
    finally:
        logger.info("notifications.stream.closed", extra={"user_id": str(user_id)})


@router.get(
    "/stream",
    summary="Stream Task Notifications",
    description=(
        "Open a server-sent event stream joined to the caller's notification room. "
        "Events are `taskAssigned`, `taskUpdated`, and `taskDeleted`, each carrying "
        "the task as JSON. EventSource clients may pass the token as `access_token`."
    ),
)
async def stream_notifications(
    request: Request,
    auth: AuthContext = STREAM_AUTH_DEP,
    channel: NotificationChannel = CHANNEL_DEP,
) -> EventSourceResponse:
    """Relay every notification published to the caller's room."""
    return EventSourceResponse(
        relay_notifications(request, channel, auth.user.id),
        ping=settings.notification_stream_ping_seconds,
    )
