"""Coordination waiter: block until a key leaves PENDING.

One capability, two backends selected by storage mode:

- WatchWaiter (persistent): observes the key's ``.stat`` record for changes,
  so it reacts to producers in *other processes* finishing.
- PollWaiter (memory): re-reads the status at a fixed interval.

Both give up after ``max_wait_seconds`` with WaitTimeoutError, so a PENDING
left behind by a crashed producer never blocks a caller forever.

Without the lock layer this is observe-and-recheck, not mutual exclusion:
two processes that both read ABSENT will both produce.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
from contextlib import aclosing
import logging

from ssgcache.core.caching.errors import WaitTimeoutError
from ssgcache.core.caching.models import CacheKey, CacheStatus
from ssgcache.core.caching.storage import STATUS_EXT, PersistentStorage, StorageBackend
from ssgcache.core.io import watch_file

logger = logging.getLogger(__name__)

DEFAULT_MAX_WAIT_SECONDS = 60.0


class CoordinationWaiter(ABC):
    """Waits for a key's status to resolve, bounded by ``max_wait_seconds``."""

    def __init__(self, storage: StorageBackend, max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS):
        if max_wait_seconds <= 0:
            raise ValueError(f"max_wait_seconds must be positive, got {max_wait_seconds}")
        self.storage = storage
        self.max_wait_seconds = max_wait_seconds

    async def wait_for_resolution(
        self, key: CacheKey, timeout_seconds: float | None = None
    ) -> CacheStatus:
        """
        Return the key's status once it is no longer PENDING.

        Returns immediately when the status isn't PENDING.

        Args:
            key: Key to wait on
            timeout_seconds: Remaining budget of a caller that already spent
                part of its wait (defaults to ``max_wait_seconds``)

        Raises:
            WaitTimeoutError: If the key stays PENDING past the timeout
        """
        status = await self.storage.read_status(key)
        if status != CacheStatus.PENDING:
            return status

        timeout = self.max_wait_seconds if timeout_seconds is None else max(timeout_seconds, 0.0)
        logger.debug(f"Waiting for in-flight population of {key}")
        try:
            return await asyncio.wait_for(self._await_change(key), timeout=timeout)
        except TimeoutError as e:
            raise WaitTimeoutError(str(key), timeout) from e

    @abstractmethod
    async def _await_change(self, key: CacheKey) -> CacheStatus:
        """Block until status != PENDING (unbounded; caller applies the ceiling)."""


class WatchWaiter(CoordinationWaiter):
    """Change-notification waiter on the key's status file."""

    storage: PersistentStorage

    def __init__(
        self,
        storage: PersistentStorage,
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
        interval_seconds: float = 0.25,
    ):
        super().__init__(storage, max_wait_seconds)
        self.interval_seconds = interval_seconds

    async def _await_change(self, key: CacheKey) -> CacheStatus:
        path = self.storage.path(key, STATUS_EXT)
        async with aclosing(watch_file(self.storage.fs, path, self.interval_seconds)) as changes:
            async for _ in changes:
                status = await self.storage.read_status(key)
                if status != CacheStatus.PENDING:
                    return status
        raise RuntimeError(f"Status watch on {path} ended unexpectedly")


class PollWaiter(CoordinationWaiter):
    """Fixed-interval polling waiter."""

    def __init__(
        self,
        storage: StorageBackend,
        max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
        interval_seconds: float = 0.05,
    ):
        super().__init__(storage, max_wait_seconds)
        self.interval_seconds = interval_seconds

    async def _await_change(self, key: CacheKey) -> CacheStatus:
        while True:
            await asyncio.sleep(self.interval_seconds)
            status = await self.storage.read_status(key)
            if status != CacheStatus.PENDING:
                return status


def create_waiter(
    storage: StorageBackend,
    *,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    watch_interval_seconds: float = 0.25,
    poll_interval_seconds: float = 0.05,
) -> CoordinationWaiter:
    """Pick the waiter backend matching the storage mode."""
    if isinstance(storage, PersistentStorage):
        return WatchWaiter(storage, max_wait_seconds, watch_interval_seconds)
    return PollWaiter(storage, max_wait_seconds, poll_interval_seconds)
