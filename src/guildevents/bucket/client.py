"""Signed HTTP client for reading objects from the events bucket."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import datetime
from typing import cast

import aiohttp

from guildevents.bucket.results import Body, Failure, FetchResult, LastModified, Resource
from guildevents.bucket.signer import Credentials, signed_headers
from guildevents.bucket.timestamps import amz_date, parse_http_date
from guildevents.common.errors import FailureReason, classify_status
from guildevents.common.logging import get_logger
from guildevents.common.metrics import record_bucket_request
from guildevents.common.settings import Settings
from guildevents.common.tracing import span

logger = get_logger(__name__)


class BucketClient:
    """
    HTTP client for the events bucket.

    Each operation is one signed HEAD or GET. Failures never raise: they are
    logged with the status, body and headers the server returned and then
    collapse to ``None`` (or a ``Failure`` for the ``*_result`` variants).
    """

    def __init__(
        self,
        settings: Settings,
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], str] = amz_date,
    ):
        """
        Initialize the bucket client.

        Args:
            settings: Application settings
            session: Optional pre-built session (the client will not close it)
            clock: Returns the x-amz-date for the next request

        Raises:
            BucketConfigError: If any bucket setting is missing
        """
        self._credentials = Credentials.from_settings(settings)
        self._base_url = settings.bucket_base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=settings.http_timeout)
        self._session = session
        self._owns_session = session is None
        self._clock = clock

    async def __aenter__(self) -> BucketClient:
        """Enter async context."""
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        await self.close()

    async def close(self) -> None:
        """Close the connection pool if this client created it."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session exists."""
        if not self._session:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    def url_for(self, path: str) -> str:
        """Absolute URL of an object in the bucket."""
        return f"{self._base_url}/{path}"

    async def _request(self, method: str, path: str) -> FetchResult:
        """Send one signed request and interpret the response."""
        timestamp = self._clock()
        headers = signed_headers(self._credentials, method, path, timestamp)
        url = self.url_for(path)

        logger.debug("Bucket request", method=method, path=path, amz_date=timestamp)

        start = time.perf_counter()
        with span("bucket.request", {"http.method": method, "bucket.path": path}) as current_span:
            try:
                session = self._ensure_session()
                async with session.request(method, url, headers=headers) as response:
                    result = await self._interpret(method, path, response)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                detail = str(e) or type(e).__name__
                logger.error("Bucket request failed", method=method, path=path, error=detail)
                result = Failure(FailureReason.TRANSPORT, detail=detail)

            outcome = result.reason.value if isinstance(result, Failure) else "success"
            current_span.set_attribute("bucket.outcome", outcome)

        record_bucket_request(method, path, outcome, time.perf_counter() - start)
        return result

    async def _interpret(
        self,
        method: str,
        path: str,
        response: aiohttp.ClientResponse,
    ) -> FetchResult:
        if not 200 <= response.status < 300:
            body = (await response.read()).decode("utf-8", errors="replace")
            reason = classify_status(response.status)
            logger.error(
                "Bucket request was not successful",
                method=method,
                path=path,
                status=response.status,
                reason=reason.value,
                body=body or "NO BODY",
                headers=dict(response.headers),
            )
            return Failure(reason, response.status, body)

        if method == "HEAD":
            last_modified = parse_http_date(response.headers.get("Last-Modified"))
            if last_modified is None:
                logger.warning(
                    "Bucket response has no usable Last-Modified header",
                    path=path,
                    headers=dict(response.headers),
                )
                return Failure(
                    FailureReason.MISSING_METADATA,
                    response.status,
                    "Last-Modified missing or unparseable",
                )
            return LastModified(last_modified)

        raw = await response.read()
        if not raw:
            logger.warning("Bucket response has no body", path=path, status=response.status)
            return Failure(FailureReason.MISSING_BODY, response.status)
        return Body(raw.decode("utf-8", errors="replace"))

    # === Object Operations ===

    async def fetch_object_result(self, path: str) -> Body | Failure:
        """GET an object, keeping the failure detail."""
        return cast(Body | Failure, await self._request("GET", path))

    async def fetch_last_modified_result(self, path: str) -> LastModified | Failure:
        """HEAD an object, keeping the failure detail."""
        return cast(LastModified | Failure, await self._request("HEAD", path))

    async def fetch_object(self, path: str) -> str | None:
        """
        Get the contents of an object.

        Args:
            path: Object key relative to the bucket root

        Returns:
            The body as text, or None if it could not be fetched
        """
        result = await self.fetch_object_result(path)
        return result.text if isinstance(result, Body) else None

    async def fetch_last_modified(self, path: str) -> datetime | None:
        """
        Get the time an object was last modified in the bucket.

        Args:
            path: Object key relative to the bucket root

        Returns:
            Aware UTC datetime, or None if it could not be fetched
        """
        result = await self.fetch_last_modified_result(path)
        return result.timestamp if isinstance(result, LastModified) else None

    # === Named Resources ===

    async def get_events(self) -> str | None:
        """Get the events document as JSON text."""
        return await self.fetch_object(Resource.EVENTS.value)

    async def get_events_last_modified(self) -> datetime | None:
        """Get when the events document last changed."""
        return await self.fetch_last_modified(Resource.EVENTS.value)

    async def get_organisations(self) -> str | None:
        """Get the organisations document as JSON text."""
        return await self.fetch_object(Resource.ORGANISATIONS.value)

    async def get_organisations_last_modified(self) -> datetime | None:
        """Get when the organisations document last changed."""
        return await self.fetch_last_modified(Resource.ORGANISATIONS.value)
