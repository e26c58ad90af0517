"""Build-time memoizing cache.

Returns a previously produced value for a key when one exists and is still
valid, otherwise runs the producer once, persists the result and returns it.

Key features:
- Build-scoped namespaces (one BUILD_ID per build)
- Persistent storage shared by build workers, in-memory fallback
- Per-key ABSENT/PENDING/READY status with bounded cross-process waiting
- Optional lock files for strict single-producer semantics
- TTL expiry and bounded retries

Example:
    >>> from ssgcache.core.caching import BuildCache, CacheOptions
    >>>
    >>> await BuildCache.init()
    >>> cache = BuildCache()
    >>> post = await cache.get(
    ...     ["posts", "123"],
    ...     lambda: fetch_post(123),
    ...     CacheOptions(ttl_seconds=600),
    ... )
"""

from ssgcache.core.caching.cache import BuildCache
from ssgcache.core.caching.errors import (
    CacheError,
    IdentityError,
    LockTimeoutError,
    StorageError,
    WaitTimeoutError,
)
from ssgcache.core.caching.identity import BuildIdentity, ResolvedIdentity, generate_build_id
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
    MemoryStorage,
    MemoryStore,
    PersistentStorage,
    StorageBackend,
    default_memory_store,
)
from ssgcache.core.caching.waiter import (
    CoordinationWaiter,
    PollWaiter,
    WatchWaiter,
    create_waiter,
)

__all__ = [
    # Facade
    "BuildCache",
    # Models
    "CacheEntry",
    "CacheKey",
    "CacheOptions",
    "CacheStatus",
    "StorageMode",
    # Identity
    "BuildIdentity",
    "ResolvedIdentity",
    "generate_build_id",
    # Storage
    "StorageBackend",
    "PersistentStorage",
    "MemoryStorage",
    "MemoryStore",
    "default_memory_store",
    # Coordination
    "CoordinationWaiter",
    "WatchWaiter",
    "PollWaiter",
    "create_waiter",
    "FileLockProvider",
    "RetryPolicy",
    # Errors
    "CacheError",
    "IdentityError",
    "StorageError",
    "WaitTimeoutError",
    "LockTimeoutError",
]
