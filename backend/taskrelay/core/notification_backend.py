"""Shared notification-backend enum values."""

from __future__ import annotations

from enum import Enum


class NotificationBackend(str, Enum):
    """Supported transports for live task notifications."""

    MEMORY = "memory"
    REDIS = "redis"
