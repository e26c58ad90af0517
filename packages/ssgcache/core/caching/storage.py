"""Storage backends for cache entries and statuses.

Two interchangeable backends share one contract:

- PersistentStorage: one ``.cache`` record (entry JSON) and one ``.stat``
  record (status token) per key, via the FileSystem abstraction. Survives the
  process and is shared by every build worker on the same disk.
- MemoryStorage: the same records held in a process-scoped MemoryStore.
  Instances in one process see each other's writes; other processes don't.

Both key their records by the same resolved address string.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol
import weakref

from pydantic import ValidationError

from ssgcache.core.caching.errors import StorageError
from ssgcache.core.caching.models import CacheEntry, CacheKey, CacheStatus, StorageMode
from ssgcache.core.io import AbsolutePath, FileSystem

logger = logging.getLogger(__name__)

ENTRY_EXT = "cache"
STATUS_EXT = "stat"
LOCK_EXT = "lock"


class MemoryStore:
    """
    Process-scoped store of entries and statuses.

    Also hands out one asyncio.Lock per address, which the cache uses to
    serialize the status check and PENDING write of concurrent callers in the
    same process, whatever the storage mode. ``producing`` holds the
    addresses whose producer is currently running in this process.
    """

    def __init__(self) -> None:
        self.entries: dict[str, CacheEntry] = {}
        self.statuses: dict[str, CacheStatus] = {}
        self.producing: set[str] = set()
        # Weak values: a lock lives only while some coroutine holds or awaits it
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def key_lock(self, address: str) -> asyncio.Lock:
        """Return the in-process lock guarding ``address``."""
        lock = self._locks.get(address)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[address] = lock
        return lock

    def clear(self) -> None:
        self.entries.clear()
        self.statuses.clear()


_default_store: MemoryStore | None = None


def default_memory_store() -> MemoryStore:
    """Return the process-wide MemoryStore (created on first use)."""
    global _default_store
    if _default_store is None:
        _default_store = MemoryStore()
    return _default_store


class StorageBackend(Protocol):
    """Key → entry/status persistence contract."""

    build_dir: Path

    @property
    def mode(self) -> StorageMode: ...

    def address(self, key: CacheKey, ext: str) -> str:
        """Resolved address of a key's record with extension ``ext``."""
        ...

    async def write_entry(self, key: CacheKey, entry: CacheEntry) -> None: ...

    async def read_entry(self, key: CacheKey) -> CacheEntry | None:
        """Return the entry, or None if the key was never populated."""
        ...

    async def write_status(self, key: CacheKey, status: CacheStatus) -> None: ...

    async def read_status(self, key: CacheKey) -> CacheStatus:
        """Return the status, ABSENT if never written."""
        ...


def _parse_status(token: str) -> CacheStatus:
    try:
        return CacheStatus(int(token.strip()))
    except ValueError:
        return CacheStatus.ABSENT


class PersistentStorage:
    """
    Filesystem-backed storage under one build directory.

    Layout:
        <build_dir>/<joined-key>.cache   CacheEntry JSON
        <build_dir>/<joined-key>.stat    status token ("0", "1" or "2")
    """

    def __init__(self, fs: FileSystem, build_dir: AbsolutePath) -> None:
        self.fs = fs
        self.build_dir = build_dir

    @property
    def mode(self) -> StorageMode:
        return StorageMode.PERSISTENT

    def path(self, key: CacheKey, ext: str) -> AbsolutePath:
        return self.fs.join(self.build_dir, f"{key.joined()}.{ext}")

    def address(self, key: CacheKey, ext: str) -> str:
        return str(self.path(key, ext))

    async def write_entry(self, key: CacheKey, entry: CacheEntry) -> None:
        path = self.path(key, ENTRY_EXT)
        try:
            payload = entry.to_json()
        except ValueError as e:
            raise StorageError(
                f"Entry is not JSON-serializable: {e}", operation="write_entry", address=str(path)
            ) from e
        try:
            await self.fs.write_text(path, payload)
        except OSError as e:
            raise StorageError(str(e), operation="write_entry", address=str(path)) from e

    async def read_entry(self, key: CacheKey) -> CacheEntry | None:
        path = self.path(key, ENTRY_EXT)
        try:
            raw = await self.fs.read_text(path)
        except FileNotFoundError:
            logger.debug(f"Cache miss: {key}")
            return None
        except OSError as e:
            raise StorageError(str(e), operation="read_entry", address=str(path)) from e

        if not raw:
            return None
        try:
            return CacheEntry.model_validate_json(raw)
        except ValidationError as e:
            # Corrupt payload -> miss; the next population overwrites it
            logger.debug(f"Discarding unreadable cache entry {path}: {e}")
            return None

    async def write_status(self, key: CacheKey, status: CacheStatus) -> None:
        path = self.path(key, STATUS_EXT)
        try:
            await self.fs.write_text(path, str(int(status)))
        except OSError as e:
            raise StorageError(str(e), operation="write_status", address=str(path)) from e

    async def read_status(self, key: CacheKey) -> CacheStatus:
        path = self.path(key, STATUS_EXT)
        try:
            token = await self.fs.read_text(path)
        except FileNotFoundError:
            return CacheStatus.ABSENT
        except OSError as e:
            raise StorageError(str(e), operation="read_status", address=str(path)) from e
        return _parse_status(token)


class MemoryStorage:
    """
    In-memory storage backed by a MemoryStore.

    Addresses match PersistentStorage's, so the layout stays the same
    whichever mode an instance ends up in.
    """

    def __init__(self, store: MemoryStore, build_dir: AbsolutePath | Path) -> None:
        self.store = store
        self.build_dir = Path(build_dir)

    @property
    def mode(self) -> StorageMode:
        return StorageMode.MEMORY

    def address(self, key: CacheKey, ext: str) -> str:
        return str(self.build_dir / f"{key.joined()}.{ext}")

    async def write_entry(self, key: CacheKey, entry: CacheEntry) -> None:
        self.store.entries[self.address(key, ENTRY_EXT)] = entry

    async def read_entry(self, key: CacheKey) -> CacheEntry | None:
        return self.store.entries.get(self.address(key, ENTRY_EXT))

    async def write_status(self, key: CacheKey, status: CacheStatus) -> None:
        self.store.statuses[self.address(key, STATUS_EXT)] = status

    async def read_status(self, key: CacheKey) -> CacheStatus:
        return self.store.statuses.get(self.address(key, STATUS_EXT), CacheStatus.ABSENT)
