"""Backplane implementations selectable through configuration."""

from enum import Enum


class BackplaneKind(str, Enum):
    """Which pub/sub engine backs the event streams."""

    REDIS = "redis"
    MEMORY = "memory"
