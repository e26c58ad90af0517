"""Build cache facade.

Memoizes async producers across a build: within one process, across
processes sharing the cache directory, and across successive get() calls,
until the build id changes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from contextlib import AsyncExitStack
import logging
from pathlib import Path
import time
from typing import Any, NamedTuple, TypeVar

from pydantic import BaseModel, ValidationError

from ssgcache.core.caching.errors import StorageError, WaitTimeoutError
from ssgcache.core.caching.identity import BuildIdentity
from ssgcache.core.caching.locking import FileLockProvider
from ssgcache.core.caching.models import (
    CacheEntry,
    CacheKey,
    CacheOptions,
    CacheStatus,
    StorageMode,
)
from ssgcache.core.caching.retry import RetryPolicy
from ssgcache.core.caching.storage import (
    LOCK_EXT,
    STATUS_EXT,
    MemoryStorage,
    MemoryStore,
    PersistentStorage,
    StorageBackend,
    default_memory_store,
)
from ssgcache.core.caching.waiter import CoordinationWaiter, create_waiter
from ssgcache.core.config.models import CacheConfig
from ssgcache.core.io import AbsolutePath, FileSystem, RealFileSystem, absolute_path

logger = logging.getLogger(__name__)

T = TypeVar("T")

RawKey = str | Sequence[str] | CacheKey


class _Hit(NamedTuple):
    value: Any


class BuildCache:
    """
    Build-scoped memoizing cache.

    Storage mode is chosen once, on first use: persistent when the build
    directory can be created, in-memory otherwise (with a single warning).

    Example:
        >>> await BuildCache.init()          # once, at build start
        >>> cache = BuildCache()
        >>> post = await cache.get(["posts", "123"], lambda: fetch_post(123))
    """

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        fs: FileSystem | None = None,
        cache_dir: str | Path | None = None,
        memory_store: MemoryStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize build cache (no I/O until first use).

        Args:
            config: Cache configuration (defaults to CacheConfig())
            fs: Async filesystem implementation (defaults to RealFileSystem)
            cache_dir: Cache root, overriding the config/environment
            memory_store: Store used in memory mode and for in-process
                coordination (defaults to the process-wide store)
            clock: Wall clock in epoch seconds, used for TTL expiry
        """
        self.config = config or CacheConfig()
        self.fs: FileSystem = fs or RealFileSystem()
        self.cache_dir: AbsolutePath = absolute_path(
            cache_dir if cache_dir is not None else self.config.resolved_cache_dir()
        )
        self.memory_store = memory_store or default_memory_store()
        self.retry_policy = RetryPolicy(
            max_attempts=self.config.retry_attempts,
            delay_seconds=self.config.retry_delay_seconds,
        )
        self._clock = clock

        self.build_id: str | None = None
        self._storage: StorageBackend | None = None
        self._waiter: CoordinationWaiter | None = None
        self._locks: FileLockProvider | None = None
        self._init_lock = asyncio.Lock()

    @classmethod
    async def init(
        cls,
        config: CacheConfig | None = None,
        *,
        fs: FileSystem | None = None,
        cache_dir: str | Path | None = None,
    ) -> str:
        """
        Start a new build: persist a fresh build id under the cache root.

        Call once per build before constructing caches; every cache created
        afterwards on the same root shares the new namespace.

        Returns:
            The new build id
        """
        config = config or CacheConfig()
        fs = fs or RealFileSystem()
        root = absolute_path(cache_dir if cache_dir is not None else config.resolved_cache_dir())
        identity = BuildIdentity(fs, root, filename=config.build_id_filename)
        return await identity.init()

    async def initialize(self) -> None:
        """
        Resolve the build id and select the storage mode.

        Called automatically on first use. Safe to call multiple times;
        the mode is decided only once.

        Raises:
            IdentityError: If no build id can be obtained
        """
        async with self._init_lock:
            if self._storage is not None:
                return

            identity = BuildIdentity(self.fs, self.cache_dir, filename=self.config.build_id_filename)
            resolved = await identity.resolve()
            build_dir = self.fs.join(self.cache_dir, self.config.cache_subdir, resolved.build_id)

            storage: StorageBackend | None = None
            if resolved.shared:
                try:
                    await self.fs.mkdirs(build_dir, exist_ok=True)
                    storage = PersistentStorage(self.fs, build_dir)
                except OSError as e:
                    logger.debug(f"Unable to create cache directory {build_dir}: {e}")

            if storage is None:
                logger.warning("Running in memory-only mode")
                storage = MemoryStorage(self.memory_store, build_dir)

            self._waiter = create_waiter(
                storage,
                max_wait_seconds=self.config.max_wait_seconds,
                watch_interval_seconds=self.config.watch_interval_seconds,
                poll_interval_seconds=self.config.poll_interval_seconds,
            )
            if self.config.use_lock_files and storage.mode == StorageMode.PERSISTENT:
                self._locks = FileLockProvider(
                    timeout_seconds=self.config.lock_timeout_seconds,
                    poll_interval_seconds=self.config.lock_poll_interval_seconds,
                )
            self.build_id = resolved.build_id
            self._storage = storage
            logger.debug(f"Cache ready: build={self.build_id} mode={storage.mode.value}")

    @property
    def storage(self) -> StorageBackend:
        if self._storage is None:
            raise RuntimeError("BuildCache is not initialized; await initialize() first")
        return self._storage

    @property
    def mode(self) -> StorageMode:
        return self.storage.mode

    @property
    def persistent(self) -> bool:
        return self.storage.mode == StorageMode.PERSISTENT

    def path(self, key: RawKey, ext: str | None = None) -> str:
        """Resolved storage address of ``key`` (build directory when ext is None)."""
        storage = self.storage
        if ext is None:
            return str(storage.build_dir)
        return storage.address(CacheKey.of(key), ext)

    async def read_status(self, key: RawKey) -> CacheStatus:
        await self.initialize()
        return await self.storage.read_status(CacheKey.of(key))

    async def write_status(self, key: RawKey, status: CacheStatus) -> None:
        await self.initialize()
        await self.storage.write_status(CacheKey.of(key), status)

    async def read_entry(self, key: RawKey) -> CacheEntry | None:
        await self.initialize()
        return await self.storage.read_entry(CacheKey.of(key))

    @property
    def waiter(self) -> CoordinationWaiter:
        if self._waiter is None:
            raise RuntimeError("BuildCache is not initialized; await initialize() first")
        return self._waiter

    async def wait_for_resolution(self, key: RawKey) -> CacheStatus:
        """Block until ``key`` is no longer PENDING (bounded by max_wait_seconds)."""
        await self.initialize()
        return await self.waiter.wait_for_resolution(CacheKey.of(key))

    async def get(
        self,
        key: RawKey,
        producer: Callable[[], Awaitable[T]],
        options: CacheOptions | None = None,
        *,
        model_cls: type[BaseModel] | None = None,
    ) -> T:
        """
        Return the cached value for ``key``, producing it on a miss.

        Workflow:
        1. Unless skip_cache: wait out any in-flight population, return a
           fresh READY entry
        2. Mark the key PENDING (holding the key's lock file if enabled)
        3. Run producer(), write the entry, mark READY

        Each attempt waits at most max_wait_seconds before it produces or
        fails. Any failure restarts the whole sequence, up to the retry bound.

        Args:
            key: Store name or sequence of segments (store name first)
            producer: Zero-argument async function producing the value
            options: Per-call behavior (skip_cache, ttl_seconds)
            model_cls: Optional pydantic model to validate cached values into

        Returns:
            Cached or freshly produced value

        Raises:
            TypeError: If model_cls is not a pydantic model class
            Exception: The last error once the retry bound is exhausted
        """
        if model_cls is not None and not (
            isinstance(model_cls, type) and issubclass(model_cls, BaseModel)
        ):
            raise TypeError(f"model_cls must be a pydantic BaseModel subclass, got {model_cls!r}")

        cache_key = CacheKey.of(key)
        opts = options or CacheOptions()
        await self.initialize()

        return await self.retry_policy.run(
            lambda: self._get_once(cache_key, producer, opts, model_cls),
            description=f"get {cache_key}",
        )

    async def _get_once(
        self,
        key: CacheKey,
        producer: Callable[[], Awaitable[T]],
        opts: CacheOptions,
        model_cls: type[BaseModel] | None,
    ) -> T:
        storage = self.storage
        address = storage.address(key, STATUS_EXT)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.config.max_wait_seconds

        while True:
            # Waiting happens before the key lock, so every caller gets its own ceiling
            stale = False
            if not opts.skip_cache:
                stale = await self._await_settled(key, deadline - loop.time())

            async with AsyncExitStack() as stack:
                if self._locks is not None:
                    await stack.enter_async_context(
                        self._locks.hold(storage.address(key, LOCK_EXT), str(key))
                    )
                    # Every producer holds the lock file, so a PENDING seen now is stale
                    stale = True

                # Held only for the check -> PENDING step; the producer runs outside it
                async with self.memory_store.key_lock(address):
                    if not opts.skip_cache:
                        status = await storage.read_status(key)
                        if status == CacheStatus.READY:
                            hit = await self._read_hit(key, opts, model_cls)
                            if hit is not None:
                                return hit.value
                        elif status == CacheStatus.PENDING:
                            if not stale or address in self.memory_store.producing:
                                if loop.time() >= deadline:
                                    raise WaitTimeoutError(str(key), self.config.max_wait_seconds)
                                continue
                            logger.warning(f"Reclaiming stale pending entry {key}")

                    await storage.write_status(key, CacheStatus.PENDING)
                    self.memory_store.producing.add(address)

                try:
                    return await self._produce(key, producer, opts)
                finally:
                    self.memory_store.producing.discard(address)

    async def _await_settled(self, key: CacheKey, timeout_seconds: float) -> bool:
        """Wait out an in-flight population; True when it went stale instead."""
        try:
            await self.waiter.wait_for_resolution(key, timeout_seconds)
        except WaitTimeoutError as e:
            if not self.config.reclaim_stale_pending:
                raise
            logger.debug(f"Pending entry {key} unresolved after {e.waited_seconds:.1f}s")
            return True
        return False

    async def _produce(
        self,
        key: CacheKey,
        producer: Callable[[], Awaitable[T]],
        opts: CacheOptions,
    ) -> T:
        storage = self.storage
        logger.debug(f"Fetching: {key}")
        try:
            data = await producer()
            exp = self._clock() + opts.ttl_seconds if opts.ttl_seconds is not None else None
            await storage.write_entry(key, CacheEntry(data=_to_storable(data), exp=exp))
            await storage.write_status(key, CacheStatus.READY)
        except Exception:
            await self._abandon(key)
            raise
        return data

    async def _abandon(self, key: CacheKey) -> None:
        """Drop our PENDING after a failed population so nobody waits on it."""
        try:
            await self.storage.write_status(key, CacheStatus.ABSENT)
        except StorageError as e:
            # Left PENDING; waiters fall back to the max_wait ceiling
            logger.debug(f"Unable to reset status of {key}: {e}")

    async def _read_hit(
        self,
        key: CacheKey,
        opts: CacheOptions,
        model_cls: type[BaseModel] | None,
    ) -> _Hit | None:
        """Return the fresh value of a READY key, or None on missing/expired/invalid."""
        entry = await self.storage.read_entry(key)
        if entry is None:
            logger.warning(f"Status READY without an entry for {key}; refetching")
            return None

        if not entry.is_fresh(self._clock(), opts.ttl_seconds):
            logger.debug(f"Cache expired: {key}")
            return None

        if model_cls is None:
            logger.debug(f"Cache hit: {key}")
            return _Hit(entry.data)

        try:
            value = model_cls.model_validate(entry.data)
        except ValidationError as e:
            logger.debug(f"Cached value for {key} no longer matches {model_cls.__name__}: {e}")
            return None
        logger.debug(f"Cache hit: {key}")
        return _Hit(value)



def _to_storable(data: Any) -> Any:
    """JSON-mode dump of pydantic models; other values pass through."""
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    return data
