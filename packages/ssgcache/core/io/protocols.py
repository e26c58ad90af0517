"""Protocol for filesystem operations.

Defines the async FileSystem protocol consumed by the cache.
"""

from typing import Protocol

from .models import AbsolutePath, FileStat, WriteResult


class FileSystem(Protocol):
    """
    Protocol for async filesystem operations.

    All implementations must provide atomic write semantics and
    handle platform-specific details transparently.
    """

    # Path operations (sync - no I/O)
    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """
        Safely join path components.

        Args:
            base: Base absolute path
            *parts: Path segments to join

        Returns:
            New absolute path

        Raises:
            ValueError: If result escapes base directory
        """
        ...

    # Metadata (async)
    async def stat(self, path: AbsolutePath) -> FileStat | None:
        """
        Snapshot change-detection attributes of a file.

        Returns:
            FileStat, or None if the file doesn't exist
        """
        ...

    # Read operations (async)
    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        """
        Read text file contents.

        Args:
            path: File path
            encoding: Text encoding

        Returns:
            File contents as string

        Raises:
            FileNotFoundError: If file doesn't exist
            OSError: On read failure
        """
        ...

    # Write operations (async, atomic)
    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """
        Atomically write text to file.

        Uses temp file + atomic replace to ensure readers never
        observe partial writes.

        Args:
            path: Target file path
            content: Text to write
            encoding: Text encoding

        Returns:
            WriteResult with metadata

        Raises:
            OSError: On write failure
        """
        ...

    # Directory operations (async)
    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """
        Create directory and all parents.

        Args:
            path: Directory path
            exist_ok: Don't raise if directory exists

        Raises:
            OSError: On creation failure
        """
        ...
