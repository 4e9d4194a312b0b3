"""Live task notification channels and the process-wide channel accessor."""

from __future__ import annotations

from taskrelay.core.config import settings
from taskrelay.core.logging import get_logger
from taskrelay.core.notification_backend import NotificationBackend
from taskrelay.services.notifications.channel import Notification, NotificationChannel
from taskrelay.services.notifications.hub import InMemoryNotificationHub
from taskrelay.services.notifications.redis_channel import RedisNotificationChannel

logger = get_logger(__name__)
_channel: NotificationChannel | None = None


def build_notification_channel() -> NotificationChannel:
    """Create the channel selected by `NOTIFICATION_BACKEND`."""
    if settings.notification_backend == NotificationBackend.REDIS:
        logger.info("notifications.channel.redis")
        return RedisNotificationChannel(
            settings.notification_redis_url,
            prefix=settings.notification_channel_prefix,
        )
    logger.info("notifications.channel.memory")
    return InMemoryNotificationHub(max_queue_size=settings.notification_queue_size)


def get_notification_channel() -> NotificationChannel:
    """Return the process-wide channel, creating it on first use."""
    global _channel
    if _channel is None:
        _channel = build_notification_channel()
    return _channel


async def close_notification_channel() -> None:
    """Close and forget the process-wide channel."""
    global _channel
    if _channel is None:
        return
    channel, _channel = _channel, None
    await channel.close()


__all__ = [
    "InMemoryNotificationHub",
    "Notification",
    "NotificationChannel",
    "RedisNotificationChannel",
    "build_notification_channel",
    "close_notification_channel",
    "get_notification_channel",
]
