"""Tests for build identity creation and resolution."""

import pytest

from ssgcache.core.caching import BuildIdentity, IdentityError, generate_build_id
from ssgcache.core.io import AbsolutePath, FakeFileSystem, ReadOnlyFileSystem


@pytest.fixture
def identity(fs: FakeFileSystem, cache_root: AbsolutePath) -> BuildIdentity:
    return BuildIdentity(fs, cache_root)


def test_generated_ids_are_unique():
    ids = {generate_build_id() for _ in range(100)}
    assert len(ids) == 100
    assert all(ids)


class TestInit:
    """Tests for starting a new build."""

    async def test_init_persists_id(
        self, identity: BuildIdentity, fs: FakeFileSystem, cache_root: AbsolutePath
    ):
        build_id = await identity.init()

        assert build_id
        assert await fs.read_text(fs.join(cache_root, "BUILD_ID")) == build_id
        assert str(cache_root) in fs._dirs

    async def test_init_replaces_previous_id(self, identity: BuildIdentity):
        first = await identity.init()
        second = await identity.init()

        assert first != second
        assert await identity.read() == second

    async def test_init_with_empty_factory_fails(
        self, fs: FakeFileSystem, cache_root: AbsolutePath
    ):
        identity = BuildIdentity(fs, cache_root, id_factory=lambda: "")

        with pytest.raises(IdentityError):
            await identity.init()

    async def test_init_propagates_write_failure(self, cache_root: AbsolutePath):
        identity = BuildIdentity(ReadOnlyFileSystem(), cache_root)

        with pytest.raises(PermissionError):
            await identity.init()

    async def test_custom_filename(self, fs: FakeFileSystem, cache_root: AbsolutePath):
        identity = BuildIdentity(fs, cache_root, filename="CURRENT_BUILD")

        build_id = await identity.init()

        assert await fs.read_text(fs.join(cache_root, "CURRENT_BUILD")) == build_id


class TestResolve:
    """Tests for loading the id on first cache use."""

    async def test_resolve_uses_existing_id(self, identity: BuildIdentity):
        build_id = await identity.init()

        resolved = await identity.resolve()

        assert resolved.build_id == build_id
        assert resolved.shared

    async def test_resolve_strips_whitespace(
        self, identity: BuildIdentity, fs: FakeFileSystem, cache_root: AbsolutePath
    ):
        await fs.write_text(fs.join(cache_root, "BUILD_ID"), "abc123\n")

        assert (await identity.resolve()).build_id == "abc123"

    async def test_resolve_creates_and_persists_missing_id(
        self, identity: BuildIdentity, fs: FakeFileSystem, cache_root: AbsolutePath
    ):
        resolved = await identity.resolve()

        assert resolved.shared
        assert await fs.read_text(fs.join(cache_root, "BUILD_ID")) == resolved.build_id

    async def test_resolve_treats_empty_file_as_missing(
        self, identity: BuildIdentity, fs: FakeFileSystem, cache_root: AbsolutePath
    ):
        await fs.write_text(fs.join(cache_root, "BUILD_ID"), "  ")

        resolved = await identity.resolve()

        assert resolved.build_id.strip()
        assert await identity.read() == resolved.build_id

    async def test_resolve_falls_back_to_unshared_id(self, cache_root: AbsolutePath):
        """An id that can't be persisted is still usable by this instance."""
        identity = BuildIdentity(ReadOnlyFileSystem(), cache_root, id_factory=lambda: "local")

        resolved = await identity.resolve()

        assert resolved.build_id == "local"
        assert not resolved.shared

    async def test_resolve_fails_without_any_id(self, cache_root: AbsolutePath):
        identity = BuildIdentity(ReadOnlyFileSystem(), cache_root, id_factory=lambda: "")

        with pytest.raises(IdentityError):
            await identity.resolve()

    async def test_read_returns_none_when_missing(self, identity: BuildIdentity):
        assert await identity.read() is None
