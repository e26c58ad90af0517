"""File change observation on top of the FileSystem protocol.

Stat-polling watcher: works identically for real and fake filesystems and
across processes sharing a disk, at the cost of `interval` latency.
"""

import asyncio
from collections.abc import AsyncIterator

from .models import AbsolutePath, FileStat
from .protocols import FileSystem


async def watch_file(
    fs: FileSystem,
    path: AbsolutePath,
    interval: float = 0.25,
) -> AsyncIterator[FileStat | None]:
    """
    Yield whenever ``path`` changes.

    Takes a baseline snapshot and yields it once immediately, so callers can
    re-check state that may have changed before the watch began. After that,
    polls ``fs.stat()`` every ``interval`` seconds and yields the new snapshot
    (None once the file is removed) each time it differs from the previous one.

    The iterator never ends on its own; callers break out or bound it with a
    timeout.

    Args:
        fs: Filesystem to observe
        path: File to watch (may not exist yet)
        interval: Seconds between stat polls

    Example:
        >>> async for _ in watch_file(fs, status_path):
        ...     if await read_status() != CacheStatus.PENDING:
        ...         break
    """
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")

    previous = await fs.stat(path)
    yield previous

    while True:
        await asyncio.sleep(interval)
        current = await fs.stat(path)
        if current != previous:
            previous = current
            yield current
