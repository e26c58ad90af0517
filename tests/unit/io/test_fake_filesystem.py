"""Tests for FakeFileSystem (async).

Tests the in-memory fake filesystem used by the cache tests.
"""

import pytest

from ssgcache.core.io import AbsolutePath, FakeFileSystem, absolute_path


@pytest.fixture
def test_root():
    """Provide test root path."""
    return absolute_path("/test")


class TestJoin:
    """Tests for path joining (sync operation)."""

    def test_join_multiple_parts(self, fs: FakeFileSystem, test_root: AbsolutePath):
        result = fs.join(test_root, "cache", "build-1", "posts-123.stat")
        assert str(result) == "/test/cache/build-1/posts-123.stat"


class TestExistence:
    """Tests for existence checks."""

    async def test_stat_returns_none_for_nonexistent(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        assert await fs.stat(fs.join(test_root, "BUILD_ID")) is None

    async def test_file_and_directory_are_distinguished(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        """Writing a file records its parent as a directory, not a file."""
        test_file = fs.join(test_root, "BUILD_ID")
        await fs.write_text(test_file, "abc")

        assert await fs.stat(test_file) is not None
        assert str(test_file) not in fs._dirs
        assert str(test_root) in fs._dirs
        assert await fs.stat(test_root) is None


class TestReadWrite:
    """Tests for read/write operations."""

    async def test_write_and_read_roundtrip(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Test write → read roundtrip succeeds."""
        test_file = fs.join(test_root, "posts-123.cache")
        content = '{"data":{"title":"Hello"}}'

        result = await fs.write_text(test_file, content)
        assert result.bytes_written == len(content.encode("utf-8"))
        assert result.path == str(test_file)

        assert await fs.read_text(test_file) == content

    async def test_write_creates_parent_directories(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        test_file = fs.join(test_root, "a", "b", "test.txt")
        await fs.write_text(test_file, "content")

        assert str(fs.join(test_root, "a")) in fs._dirs
        assert str(fs.join(test_root, "a", "b")) in fs._dirs

    async def test_read_nonexistent_raises_error(self, fs: FakeFileSystem, test_root: AbsolutePath):
        with pytest.raises(FileNotFoundError):
            await fs.read_text(fs.join(test_root, "nonexistent.txt"))

    async def test_write_overwrites_existing_file(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        test_file = fs.join(test_root, "test.stat")

        await fs.write_text(test_file, "1")
        await fs.write_text(test_file, "2")

        assert await fs.read_text(test_file) == "2"


class TestStat:
    """Tests for change-detection snapshots."""

    async def test_stat_missing_returns_none(self, fs: FakeFileSystem, test_root: AbsolutePath):
        assert await fs.stat(fs.join(test_root, "missing.stat")) is None

    async def test_stat_changes_on_every_write(self, fs: FakeFileSystem, test_root: AbsolutePath):
        """Rewriting identical content still yields a new snapshot."""
        test_file = fs.join(test_root, "test.stat")

        await fs.write_text(test_file, "1")
        first = await fs.stat(test_file)
        await fs.write_text(test_file, "1")
        second = await fs.stat(test_file)

        assert first is not None
        assert second is not None
        assert first.size == 1
        assert first != second

    async def test_stat_is_stable_without_writes(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        test_file = fs.join(test_root, "test.stat")
        await fs.write_text(test_file, "2")

        assert await fs.stat(test_file) == await fs.stat(test_file)


class TestDirectories:
    """Tests for directory operations."""

    async def test_mkdirs_creates_parents(self, fs: FakeFileSystem, test_root: AbsolutePath):
        nested = fs.join(test_root, "a", "b", "c")
        await fs.mkdirs(nested)

        assert str(test_root) in fs._dirs
        assert str(fs.join(test_root, "a", "b")) in fs._dirs
        assert str(nested) in fs._dirs

    async def test_mkdirs_exist_ok_true_does_not_raise(
        self, fs: FakeFileSystem, test_root: AbsolutePath
    ):
        await fs.mkdirs(test_root, exist_ok=True)
        await fs.mkdirs(test_root, exist_ok=True)

    async def test_mkdirs_exist_ok_false_raises(self, fs: FakeFileSystem, test_root: AbsolutePath):
        await fs.mkdirs(test_root, exist_ok=True)
        with pytest.raises(FileExistsError):
            await fs.mkdirs(test_root, exist_ok=False)
