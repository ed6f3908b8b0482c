"""Conditional refresh of bucket resources into the local cache."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from guildevents.bucket.client import BucketClient
from guildevents.bucket.results import Resource
from guildevents.common.cache import ResourceCache
from guildevents.common.logging import get_logger
from guildevents.common.metrics import record_sync_result

logger = get_logger(__name__)


class SyncStatus(str, Enum):
    """What a refresh did with one resource."""

    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SyncOutcome:
    """Result of refreshing one resource."""

    resource: Resource
    status: SyncStatus
    last_modified: datetime | None = None
    body: str | None = None


class ResourceSynchronizer:
    """
    Downloads a resource only when the bucket holds a newer copy.

    A HEAD request reads the remote modification time first; the GET is only
    issued when the cache is empty or older. Any absent answer from the bucket
    skips the resource for this cycle and leaves the cached copy in place.
    """

    def __init__(self, client: BucketClient, cache: ResourceCache):
        self._client = client
        self._cache = cache

    async def refresh(self, resource: Resource, force: bool = False) -> SyncOutcome:
        """
        Refresh a single resource.

        Args:
            resource: Resource to refresh
            force: Download even when the cached copy is current

        Returns:
            Outcome describing whether new content was stored
        """
        name = resource.value
        remote = await self._client.fetch_last_modified(name)
        if remote is None:
            return self._finish(resource, SyncStatus.SKIPPED)

        cached = self._cache.get(name)
        if cached is not None and not force and cached.last_modified >= remote:
            logger.debug(
                "Resource unchanged",
                resource=name,
                last_modified=remote.isoformat(),
            )
            return self._finish(resource, SyncStatus.UNCHANGED, cached.last_modified)

        body = await self._client.fetch_object(name)
        if body is None:
            return self._finish(resource, SyncStatus.SKIPPED)

        self._cache.set(name, remote, body)
        logger.info(
            "Resource updated",
            resource=name,
            last_modified=remote.isoformat(),
            previous=cached.last_modified.isoformat() if cached else None,
            size=len(body),
        )
        return self._finish(resource, SyncStatus.UPDATED, remote, body)

    async def refresh_all(
        self,
        resources: Iterable[Resource] = tuple(Resource),
        force: bool = False,
    ) -> list[SyncOutcome]:
        """Refresh resources one after another."""
        return [await self.refresh(resource, force=force) for resource in resources]

    def _finish(
        self,
        resource: Resource,
        status: SyncStatus,
        last_modified: datetime | None = None,
        body: str | None = None,
    ) -> SyncOutcome:
        if status == SyncStatus.SKIPPED:
            logger.warning("Resource refresh skipped", resource=resource.value)
        record_sync_result(resource.value, status.value)
        return SyncOutcome(
            resource=resource,
            status=status,
            last_modified=last_modified,
            body=body,
        )
