"""Tests for the stat-polling file watcher."""

import asyncio
from contextlib import aclosing
from pathlib import Path

import pytest

from ssgcache.core.io import FakeFileSystem, RealFileSystem, absolute_path, watch_file


async def test_yields_baseline_immediately(fs: FakeFileSystem):
    """The first yield is the snapshot taken when watching starts."""
    path = fs.join(absolute_path("/w"), "key.stat")
    await fs.write_text(path, "1")
    baseline = await fs.stat(path)

    async with aclosing(watch_file(fs, path, interval=0.01)) as changes:
        first = await asyncio.wait_for(anext(changes), timeout=1.0)

    assert first == baseline


async def test_yields_none_baseline_for_missing_file(fs: FakeFileSystem):
    path = fs.join(absolute_path("/w"), "missing.stat")

    async with aclosing(watch_file(fs, path, interval=0.01)) as changes:
        assert await asyncio.wait_for(anext(changes), timeout=1.0) is None


async def test_yields_on_change(fs: FakeFileSystem):
    path = fs.join(absolute_path("/w"), "key.stat")
    await fs.write_text(path, "1")

    async with aclosing(watch_file(fs, path, interval=0.01)) as changes:
        await anext(changes)

        async def rewrite() -> None:
            await asyncio.sleep(0.03)
            await fs.write_text(path, "2")

        writer = asyncio.create_task(rewrite())
        changed = await asyncio.wait_for(anext(changes), timeout=1.0)
        await writer

    assert changed == await fs.stat(path)


async def test_does_not_yield_without_change(fs: FakeFileSystem):
    path = fs.join(absolute_path("/w"), "key.stat")
    await fs.write_text(path, "1")

    async with aclosing(watch_file(fs, path, interval=0.01)) as changes:
        await anext(changes)
        with pytest.raises(TimeoutError):
            await asyncio.wait_for(anext(changes), timeout=0.05)


async def test_observes_real_file_creation(tmp_path: Path):
    real_fs = RealFileSystem()
    path = real_fs.join(absolute_path(tmp_path), "key.stat")

    async with aclosing(watch_file(real_fs, path, interval=0.01)) as changes:
        assert await anext(changes) is None
        await real_fs.write_text(path, "2")
        snapshot = await asyncio.wait_for(anext(changes), timeout=1.0)

    assert snapshot is not None
    assert snapshot.size == 1


async def test_rejects_non_positive_interval(fs: FakeFileSystem):
    path = fs.join(absolute_path("/w"), "key.stat")

    with pytest.raises(ValueError, match="interval"):
        await anext(watch_file(fs, path, interval=0))
