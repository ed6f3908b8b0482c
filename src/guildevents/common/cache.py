"""Local stores for fetched resources and their modification times."""

from __future__ import annotations

import sqlite3
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class CachedResource:
    """A resource body as last downloaded, with the server timestamp it had."""

    name: str
    last_modified: datetime
    body: str
    fetched_at: float


class ResourceCache(Protocol):
    """Storage for the most recent copy of each resource."""

    def get(self, name: str) -> CachedResource | None: ...

    def set(self, name: str, last_modified: datetime, body: str) -> CachedResource: ...


class MemoryResourceCache:
    """Keeps resources for the lifetime of the process."""

    def __init__(self) -> None:
        self._entries: dict[str, CachedResource] = {}

    def get(self, name: str) -> CachedResource | None:
        """Get the cached copy of a resource, if any."""
        return self._entries.get(name)

    def set(self, name: str, last_modified: datetime, body: str) -> CachedResource:
        """Store a freshly downloaded resource."""
        entry = CachedResource(
            name=name,
            last_modified=last_modified,
            body=body,
            fetched_at=time.time(),
        )
        self._entries[name] = entry
        return entry


class SqliteResourceCache:
    """SQLite store so unchanged resources are not re-downloaded across runs."""

    def __init__(self, path: str) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.execute(
            "CREATE TABLE IF NOT EXISTS resources ("
            "name TEXT PRIMARY KEY,"
            "last_modified REAL NOT NULL,"
            "body TEXT NOT NULL,"
            "fetched_at REAL NOT NULL"
            ")"
        )
        self._conn.commit()

    def get(self, name: str) -> CachedResource | None:
        row = self._conn.execute(
            "SELECT last_modified, body, fetched_at FROM resources WHERE name = ?",
            (name,),
        ).fetchone()
        if not row:
            return None
        last_modified, body, fetched_at = row
        return CachedResource(
            name=name,
            last_modified=datetime.fromtimestamp(last_modified, tz=timezone.utc),
            body=body,
            fetched_at=fetched_at,
        )

    def set(self, name: str, last_modified: datetime, body: str) -> CachedResource:
        fetched_at = time.time()
        self._conn.execute(
            "REPLACE INTO resources (name, last_modified, body, fetched_at) VALUES (?, ?, ?, ?)",
            (name, last_modified.timestamp(), body, fetched_at),
        )
        self._conn.commit()
        return CachedResource(
            name=name,
            last_modified=last_modified,
            body=body,
            fetched_at=fetched_at,
        )

    def close(self) -> None:
        self._conn.close()


def create_resource_cache(storage: str, sqlite_path: str) -> ResourceCache:
    """Build the cache backend named by settings."""
    if storage == "sqlite":
        return SqliteResourceCache(sqlite_path)
    return MemoryResourceCache()
