"""Blocking facade over the async bucket client."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Coroutine
from datetime import datetime
from typing import Any, TypeVar

from guildevents.bucket.client import BucketClient
from guildevents.common.settings import Settings

T = TypeVar("T")


class BlockingBucketClient:
    """
    Plain blocking calls for callers without an event loop.

    The wrapped client runs on a private event loop in a daemon thread, so the
    connection pool is shared by every call and callers on any thread may use
    the same instance.
    """

    def __init__(self, settings: Settings, client: BucketClient | None = None):
        self._client = client or BucketClient(settings)
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(
            target=self._loop.run_forever,
            name="guildevents-bucket",
            daemon=True,
        )
        self._thread.start()
        self._closed = False

    def __enter__(self) -> BlockingBucketClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _run(self, coro: Coroutine[Any, Any, T]) -> T:
        if self._closed:
            coro.close()
            raise RuntimeError("BlockingBucketClient is closed")
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()

    def close(self) -> None:
        """Close the connection pool and stop the loop thread."""
        if self._closed:
            return
        self._run(self._client.close())
        self._closed = True
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join()
        self._loop.close()

    def fetch_object(self, path: str) -> str | None:
        return self._run(self._client.fetch_object(path))

    def fetch_last_modified(self, path: str) -> datetime | None:
        return self._run(self._client.fetch_last_modified(path))

    def get_events(self) -> str | None:
        return self._run(self._client.get_events())

    def get_events_last_modified(self) -> datetime | None:
        return self._run(self._client.get_events_last_modified())

    def get_organisations(self) -> str | None:
        return self._run(self._client.get_organisations())

    def get_organisations_last_modified(self) -> datetime | None:
        return self._run(self._client.get_organisations_last_modified())
