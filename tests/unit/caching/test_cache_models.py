"""Tests for cache models (keys, entries, options)."""

from pydantic import ValidationError
import pytest

from ssgcache.core.caching import CacheEntry, CacheKey, CacheOptions, CacheStatus


class TestCacheKey:
    """Tests for key normalization and addressing."""

    def test_string_is_single_segment(self):
        assert CacheKey.of("test").segments == ("test",)

    def test_string_and_one_element_list_are_equivalent(self):
        assert CacheKey.of("test") == CacheKey.of(["test"])
        assert CacheKey.of("test").joined() == CacheKey.of(["test"]).joined()

    def test_existing_key_passes_through(self):
        key = CacheKey.of(["posts", "123"])
        assert CacheKey.of(key) is key

    def test_store_is_first_segment(self):
        assert CacheKey.of(["posts", "123"]).store == "posts"

    def test_joined_uses_separator(self):
        assert CacheKey.of(["posts", "123"]).joined() == "posts-123"

    def test_joined_flattens_path_separators(self):
        """Segments containing '/' never create subdirectories."""
        key = CacheKey.of(["pages", "blog/2024/hello"])
        assert key.joined() == "pages-blog-2024-hello"
        assert "/" not in key.joined()

    def test_str_is_readable(self):
        assert str(CacheKey.of(["posts", "123"])) == "posts/123"

    def test_empty_sequence_rejected(self):
        with pytest.raises(ValidationError):
            CacheKey.of([])

    def test_empty_store_name_rejected(self):
        with pytest.raises(ValidationError):
            CacheKey.of("")

    def test_keys_are_hashable(self):
        assert len({CacheKey.of("a"), CacheKey.of(["a"]), CacheKey.of(["a", "b"])}) == 2


class TestCacheEntry:
    """Tests for entry freshness and serialization."""

    def test_reader_without_ttl_accepts_expired_entry(self):
        entry = CacheEntry(data=1, exp=100.0)
        assert entry.is_fresh(now=200.0, ttl_seconds=None)

    def test_entry_without_expiry_is_always_fresh(self):
        entry = CacheEntry(data=1)
        assert entry.is_fresh(now=200.0, ttl_seconds=10.0)

    def test_entry_fresh_before_expiry(self):
        entry = CacheEntry(data=1, exp=100.0)
        assert entry.is_fresh(now=99.9, ttl_seconds=10.0)

    def test_entry_stale_at_and_after_expiry(self):
        entry = CacheEntry(data=1, exp=100.0)
        assert not entry.is_fresh(now=100.0, ttl_seconds=10.0)
        assert not entry.is_fresh(now=150.0, ttl_seconds=10.0)

    def test_to_json_omits_missing_expiry(self):
        assert CacheEntry(data={"title": "Hello"}).to_json() == '{"data":{"title":"Hello"}}'

    def test_to_json_keeps_null_data(self):
        """A producer returning None still yields a populated entry."""
        entry = CacheEntry.model_validate_json(CacheEntry(data=None, exp=5.0).to_json())
        assert entry.data is None
        assert entry.exp == 5.0


class TestCacheOptions:
    def test_defaults(self):
        opts = CacheOptions()
        assert opts.skip_cache is False
        assert opts.ttl_seconds is None

    def test_negative_ttl_rejected(self):
        with pytest.raises(ValidationError):
            CacheOptions(ttl_seconds=-1)


def test_status_tokens():
    """Persisted status tokens are fixed."""
    assert [int(s) for s in CacheStatus] == [0, 1, 2]
    assert CacheStatus.PENDING.name == "PENDING"
