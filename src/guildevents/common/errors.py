"""Shared error types and failure codes."""

from __future__ import annotations

from enum import Enum


class FailureReason(str, Enum):
    """Why a bucket request produced no value."""

    TRANSPORT = "transport"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    HTTP = "http"
    MISSING_BODY = "missing_body"
    MISSING_METADATA = "missing_metadata"


def classify_status(status_code: int) -> FailureReason:
    """Map a non-2xx status code to a failure reason."""
    if status_code in (401, 403):
        return FailureReason.AUTH
    if status_code == 404:
        return FailureReason.NOT_FOUND
    return FailureReason.HTTP


class BucketConfigError(Exception):
    """Bucket settings are incomplete; no request can be signed."""

    def __init__(self, missing: list[str]):
        super().__init__(f"Missing bucket settings: {', '.join(missing)}")
        self.missing = missing
