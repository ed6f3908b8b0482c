"""Outcomes of a single bucket request."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from guildevents.common.errors import FailureReason


class Resource(str, Enum):
    """The objects published in the bucket."""

    EVENTS = "events.json"
    ORGANISATIONS = "organisations.json"


@dataclass(frozen=True)
class Body:
    """Object content from a successful GET."""

    text: str


@dataclass(frozen=True)
class LastModified:
    """Modification time from a successful HEAD."""

    timestamp: datetime


@dataclass(frozen=True)
class Failure:
    """A request that produced no usable value."""

    reason: FailureReason
    status_code: int | None = None
    detail: str = ""


FetchResult = Body | LastModified | Failure
