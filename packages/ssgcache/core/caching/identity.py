"""Build identity: one id per build, shared by every worker of that build.

All cache records are namespaced under the build id, so successive or
concurrent builds never read each other's data.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import NamedTuple
from uuid import uuid4

from ssgcache.core.caching.errors import IdentityError
from ssgcache.core.io import AbsolutePath, FileSystem

logger = logging.getLogger(__name__)

BUILD_ID_FILENAME = "BUILD_ID"


def generate_build_id() -> str:
    """Generate a fresh, unique build id."""
    return uuid4().hex


class ResolvedIdentity(NamedTuple):
    """Outcome of BuildIdentity.resolve().

    ``shared`` is False when the id could not be persisted and is therefore
    known to this instance only.
    """

    build_id: str
    shared: bool


class BuildIdentity:
    """Creates, persists and loads the build id under a cache root."""

    def __init__(
        self,
        fs: FileSystem,
        cache_dir: AbsolutePath,
        *,
        filename: str = BUILD_ID_FILENAME,
        id_factory: Callable[[], str] = generate_build_id,
    ) -> None:
        self.fs = fs
        self.cache_dir = cache_dir
        self.path = fs.join(cache_dir, filename)
        self._id_factory = id_factory

    async def init(self) -> str:
        """
        Start a new build: ensure the cache root exists and persist a fresh id.

        Meant to run once per build, before any cache is used. Every cache
        constructed afterwards on the same root picks this id up.

        Returns:
            The new build id

        Raises:
            IdentityError: If the id factory produced nothing
            OSError: If the root or id file can't be written
        """
        await self.fs.mkdirs(self.cache_dir, exist_ok=True)
        build_id = self._generate()
        await self.fs.write_text(self.path, build_id)
        logger.debug(f"Initialized build {build_id} at {self.cache_dir}")
        return build_id

    async def read(self) -> str | None:
        """Return the persisted build id, or None if there isn't a readable one."""
        try:
            build_id = (await self.fs.read_text(self.path)).strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug(f"Unable to read build ID {self.path}: {e}")
            return None
        return build_id or None

    async def resolve(self) -> ResolvedIdentity:
        """
        Load the persisted build id, creating one if there is none.

        A freshly generated id is persisted so other instances and processes
        agree on it. If persisting fails the id is still used, but only by this
        instance (``shared=False``).

        Raises:
            IdentityError: If no id can be produced at all
        """
        existing = await self.read()
        if existing is not None:
            return ResolvedIdentity(existing, shared=True)

        build_id = self._generate()
        try:
            await self.fs.mkdirs(self.cache_dir, exist_ok=True)
            await self.fs.write_text(self.path, build_id)
        except OSError as e:
            logger.debug(f"Unable to write build ID: {e}")
            return ResolvedIdentity(build_id, shared=False)

        return ResolvedIdentity(build_id, shared=True)

    def _generate(self) -> str:
        build_id = self._id_factory()
        if not build_id:
            raise IdentityError("Empty build ID")
        return build_id
