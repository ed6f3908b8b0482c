"""Common utilities for GuildEvents."""

from guildevents.common.errors import BucketConfigError, FailureReason
from guildevents.common.settings import Settings, get_settings

__all__ = [
    "BucketConfigError",
    "FailureReason",
    "Settings",
    "get_settings",
]
