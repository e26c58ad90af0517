"""Real filesystem implementation using aiofiles for async I/O.

Provides atomic writes via temp file + os.replace().
"""

import asyncio
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
import time

import aiofiles  # type: ignore[import-untyped]
import aiofiles.os  # type: ignore[import-untyped]

from .models import AbsolutePath, FileStat, WriteResult


class RealFileSystem:
    """
    Real filesystem implementation using aiofiles for async I/O.

    Provides atomic writes via temp file + os.replace(), so a status or
    entry file shared with other build workers is never observed half-written.
    """

    def join(self, base: AbsolutePath, *parts: str) -> AbsolutePath:
        """Join paths (sync - no I/O)."""
        result = Path(base).joinpath(*parts).resolve()

        # Security: Ensure result is still under base
        base_resolved = Path(base).resolve()
        try:
            result.relative_to(base_resolved)
        except ValueError as e:
            raise ValueError(f"Path traversal detected: {result} escapes {base}") from e

        return AbsolutePath(result)

    async def stat(self, path: AbsolutePath) -> FileStat | None:
        """Stat file asynchronously (None if missing)."""
        try:
            st = await aiofiles.os.stat(path)
        except FileNotFoundError:
            return None
        return FileStat(mtime_ns=st.st_mtime_ns, size=st.st_size, inode=st.st_ino)

    async def read_text(self, path: AbsolutePath, encoding: str = "utf-8") -> str:
        """Read text file asynchronously."""
        async with aiofiles.open(path, encoding=encoding) as f:
            content: str = await f.read()
            return content

    async def write_text(
        self,
        path: AbsolutePath,
        content: str,
        encoding: str = "utf-8",
    ) -> WriteResult:
        """Atomically write text file asynchronously."""
        start = time.perf_counter()
        path_obj = Path(path)

        # Ensure parent directory exists
        await aiofiles.os.makedirs(path_obj.parent, exist_ok=True)

        # Temp file in same directory for atomic replace
        loop = asyncio.get_running_loop()

        def create_temp_file() -> str:
            tmp = NamedTemporaryFile(
                mode="w",
                encoding=encoding,
                dir=path_obj.parent,
                prefix=f".{path_obj.name}.",
                delete=False,
            )
            tmp_path = tmp.name
            tmp.close()
            return tmp_path

        tmp_path = await loop.run_in_executor(None, create_temp_file)

        try:
            async with aiofiles.open(tmp_path, mode="w", encoding=encoding) as f:
                await f.write(content)

            await loop.run_in_executor(None, os.replace, tmp_path, str(path))
        except BaseException:
            # Clean up temp on failure, then re-raise the original error
            try:
                await aiofiles.os.unlink(tmp_path)
            except OSError:
                pass
            raise

        duration = (time.perf_counter() - start) * 1000
        bytes_written = len(content.encode(encoding))

        return WriteResult(
            path=str(path),
            bytes_written=bytes_written,
            duration_ms=duration,
        )

    async def mkdirs(self, path: AbsolutePath, exist_ok: bool = True) -> None:
        """Create directory and parents asynchronously."""
        await aiofiles.os.makedirs(path, exist_ok=exist_ok)
