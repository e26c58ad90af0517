"""Shared pytest fixtures for ssg-cache tests."""

from __future__ import annotations

import logging

import pytest

from ssgcache.core.caching import BuildCache, MemoryStore
from ssgcache.core.config import CacheConfig
from ssgcache.core.io import AbsolutePath, FakeFileSystem, FileSystem, absolute_path

# ============================================================================
# Filesystem Fixtures
# ============================================================================


@pytest.fixture
def fs() -> FakeFileSystem:
    """Provide fresh FakeFileSystem instance."""
    return FakeFileSystem()


@pytest.fixture
def cache_root() -> AbsolutePath:
    """Provide cache root path."""
    return absolute_path("/.ssg-cache")


# ============================================================================
# Cache Fixtures
# ============================================================================


@pytest.fixture
def memory_store() -> MemoryStore:
    """Provide a MemoryStore isolated from the process-wide one."""
    return MemoryStore()


@pytest.fixture
def fast_config() -> CacheConfig:
    """CacheConfig with short intervals and ceilings so tests stay quick."""
    return CacheConfig(
        max_wait_seconds=1.0,
        watch_interval_seconds=0.01,
        poll_interval_seconds=0.01,
        retry_attempts=3,
        retry_delay_seconds=0.0,
        lock_timeout_seconds=1.0,
        lock_poll_interval_seconds=0.01,
    )


@pytest.fixture
def make_cache(fast_config: CacheConfig, cache_root: AbsolutePath, memory_store: MemoryStore):
    """Factory building BuildCache instances on the shared root and store."""

    def _make(fs: FileSystem, config: CacheConfig | None = None, **kwargs) -> BuildCache:
        kwargs.setdefault("cache_dir", cache_root)
        kwargs.setdefault("memory_store", memory_store)
        return BuildCache(config or fast_config, fs=fs, **kwargs)

    return _make


@pytest.fixture
async def cache(fs: FakeFileSystem, make_cache) -> BuildCache:
    """Provide initialized, persistent BuildCache on a FakeFileSystem."""
    c = make_cache(fs)
    await c.initialize()
    return c


# ============================================================================
# Logging Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Drop handlers installed by configure_logging() once a test ends."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if not type(handler).__module__.startswith("_pytest"):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
