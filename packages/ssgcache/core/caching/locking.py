"""Optional advisory lock-file layer.

Restores cross-process mutual exclusion for a key's population: the producer
holds ``<build_dir>/<joined-key>.lock`` from before PENDING is written until
READY is written. Acquisition polls and gives up at a hard ceiling.

OS-level locks (fcntl/msvcrt via filelock) are released when their process
dies, so a crashed producer never leaves a stale lock behind.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from filelock import FileLock, Timeout

from ssgcache.core.caching.errors import LockTimeoutError

logger = logging.getLogger(__name__)


class FileLockProvider:
    """Hands out per-key lock files with bounded acquisition.

    Attributes:
        timeout_seconds: Ceiling on waiting for another holder
        poll_interval_seconds: Delay between acquisition attempts
    """

    def __init__(self, timeout_seconds: float = 60.0, poll_interval_seconds: float = 0.05) -> None:
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self.timeout_seconds = timeout_seconds
        self.poll_interval_seconds = poll_interval_seconds

    @asynccontextmanager
    async def hold(self, path: str, label: str | None = None) -> AsyncIterator[None]:
        """
        Hold the lock file at ``path`` for the duration of the block.

        Args:
            path: Lock file path
            label: Key label for errors and logs (defaults to path)

        Raises:
            LockTimeoutError: If the lock isn't acquired within ``timeout_seconds``
        """
        lock = FileLock(path)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_seconds

        while True:
            try:
                lock.acquire(blocking=False)
                break
            except Timeout:
                if loop.time() >= deadline:
                    raise LockTimeoutError(label or path, self.timeout_seconds) from None
                await asyncio.sleep(self.poll_interval_seconds)

        logger.debug(f"Acquired lock {path}")
        try:
            yield
        finally:
            lock.release()
