"""In-memory filesystem for fast, isolated testing.

Simulates filesystem operations without disk I/O.
Async operations complete immediately but maintain async interface.
"""

from pathlib import Path

from .models import AbsolutePath, FileStat, WriteResult


class FakeFileSystem:
    """
    In-memory async filesystem for testing.

    Simulates filesystem operations without disk I/O.
    Not thread-safe (use per-test instance).
    """

    def __init__(self) -> None:
        self._files: dict[str, str] = {}
        self._dirs: set[str] = {"/"}  # Root always exists
        # Bumped on every write so stat() reports a change
        self._versions: dict[str, int] = {}
        self._clock = 0

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """Join paths (sync - no I/O)."""
        result = Path(base).joinpath(*parts)

        # Normalize to absolute
        if not result.is_absolute():
            result = Path("/") / result

        return AbsolutePath(result)

    async def stat(self, path: AbsolutePath) -> FileStat | None:
        """Stat file (async, immediate)."""
        path_str = str(Path(path))
        if path_str not in self._files:
            return None
        return FileStat(
            mtime_ns=self._versions[path_str],
            size=len(self._files[path_str].encode("utf-8")),
        )

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        """Read text (async, immediate)."""
        path_str = str(Path(path))
        if path_str not in self._files:
            raise FileNotFoundError(f"File not found: {path}")
        return self._files[path_str]

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Write text (async, immediate)."""
        path_obj = Path(path)
        path_str = str(path_obj)

        # Auto-create parent directories
        if str(path_obj.parent) not in self._dirs:
            self._ensure_parents(path_obj.parent)

        self._files[path_str] = content
        self._clock += 1
        self._versions[path_str] = self._clock

        return WriteResult(
            path=path_str,
            bytes_written=len(content.encode(encoding)),
            duration_ms=0.0,
        )

    def _ensure_parents(self, path: Path) -> None:
        """Recursively create parent directories (sync helper)."""
        parts = path.parts
        for i in range(1, len(parts) + 1):
            self._dirs.add(str(Path(*parts[:i])))

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """Create directory (async, immediate)."""
        path_str = str(Path(path))
        if not exist_ok and path_str in self._dirs:
            raise FileExistsError(f"Directory exists: {path}")
        self._ensure_parents(Path(path))
