"""Models for cache system.

Provides cache key, entry, status and per-call option models.
"""

from collections.abc import Sequence
from enum import Enum, IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ssgcache.core.io.utils import flatten_path_component

KEY_SEPARATOR = "-"


class CacheStatus(IntEnum):
    """
    Per-key population state.

    The integer value is the token persisted in ``.stat`` records.
    """

    ABSENT = 0
    PENDING = 1
    READY = 2


class StorageMode(str, Enum):
    """Where a cache instance keeps entries and statuses."""

    PERSISTENT = "persistent"
    MEMORY = "memory"


class CacheKey(BaseModel):
    """
    Stable identifier for a cache entry.

    An ordered, non-empty sequence of string segments. The first segment
    names the logical store (e.g. ``"posts"``); the rest narrow it down
    (e.g. ``"123"``).
    """

    model_config = ConfigDict(frozen=True)

    segments: tuple[str, ...] = Field(description="Key segments, store name first")

    @field_validator("segments")
    @classmethod
    def validate_segments(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("Cache key must have at least one segment")
        if not value[0]:
            raise ValueError("Cache key store name must not be empty")
        return value

    @classmethod
    def of(cls, raw: "str | Sequence[str] | CacheKey") -> "CacheKey":
        """
        Normalize a raw key into a CacheKey.

        Args:
            raw: Store name, sequence of segments, or an existing CacheKey

        Returns:
            CacheKey instance

        Raises:
            ValueError: If the key is empty

        Example:
            >>> CacheKey.of("posts").segments
            ('posts',)
            >>> CacheKey.of(["posts", "123"]).segments
            ('posts', '123')
        """
        if isinstance(raw, CacheKey):
            return raw
        if isinstance(raw, str):
            return cls(segments=(raw,))
        return cls(segments=tuple(raw))

    @property
    def store(self) -> str:
        return self.segments[0]

    def joined(self) -> str:
        """Join segments into a single flat storage address component."""
        return flatten_path_component(KEY_SEPARATOR.join(self.segments), KEY_SEPARATOR)

    def __str__(self) -> str:
        return "/".join(self.segments)


class CacheEntry(BaseModel):
    """
    A populated cache value.

    ``exp`` is an absolute epoch timestamp (seconds); None never expires.
    """

    data: Any = Field(description="Cached value (JSON-compatible)")
    exp: float | None = Field(default=None, description="Expiry timestamp (epoch seconds)")

    def is_fresh(self, now: float, ttl_seconds: float | None) -> bool:
        """
        Check whether this entry may be served to a reader.

        Readers that don't request a TTL accept any entry, whatever its
        ``exp``.

        Args:
            now: Current clock reading (epoch seconds)
            ttl_seconds: TTL requested by the reader

        Returns:
            True if the entry is valid for this reader
        """
        if ttl_seconds is None or self.exp is None:
            return True
        return now < self.exp

    def to_json(self) -> str:
        # Omit exp when unset; data is kept even when None
        exclude = {"exp"} if self.exp is None else None
        return self.model_dump_json(exclude=exclude)


class CacheOptions(BaseModel):
    """
    Per-call cache behavior configuration.
    """

    skip_cache: bool = Field(
        default=False,
        description="Ignore any cached value and re-run the producer (still stores the result)",
    )
    ttl_seconds: float | None = Field(
        default=None,
        ge=0.0,
        description="Entry lifetime; also makes this reader honor stored expiry",
    )
