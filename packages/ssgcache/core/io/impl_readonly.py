"""Read-only filesystem for restricted environments.

Every write fails with PermissionError.
All reads see an empty tree.
"""

from pathlib import Path

from .models import AbsolutePath, FileStat, WriteResult


class ReadOnlyFileSystem:
    """
    Async filesystem that refuses all writes.

    Mirrors a read-only mount (serverless bundles, locked-down CI runners).
    Handing it to a cache forces the in-memory storage path.
    """

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """Join paths (sync - no I/O)."""
        return AbsolutePath(Path(base).joinpath(*parts))

    async def stat(self, path: AbsolutePath) -> FileStat | None:
        """Always returns None (async)."""
        return None

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        """Always raises FileNotFoundError (async)."""
        raise FileNotFoundError(f"ReadOnlyFileSystem: {path}")

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Always raises PermissionError (async)."""
        raise PermissionError(f"Read-only filesystem: {path}")

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """Always raises PermissionError (async)."""
        raise PermissionError(f"Read-only filesystem: {path}")
