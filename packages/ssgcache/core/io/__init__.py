"""Filesystem abstraction layer for ssg-cache.

Provides safe, testable, async-first filesystem operations.

Example:
    >>> from ssgcache.core.io import RealFileSystem, absolute_path
    >>> fs = RealFileSystem()
    >>> path = fs.join(absolute_path("/tmp"), "ssg-cache", "BUILD_ID")
    >>> await fs.write_text(path, "3f2a...")
    >>> content = await fs.read_text(path)
"""

from .impl_fake import FakeFileSystem
from .impl_readonly import ReadOnlyFileSystem
from .impl_real import RealFileSystem
from .models import AbsolutePath, FileStat, WriteResult, absolute_path
from .protocols import FileSystem
from .utils import flatten_path_component
from .watch import watch_file

__all__ = [
    # Path types and constructors
    "AbsolutePath",
    "absolute_path",
    # Result types
    "WriteResult",
    "FileStat",
    # Protocols
    "FileSystem",
    # Implementations
    "RealFileSystem",
    "FakeFileSystem",
    "ReadOnlyFileSystem",
    # Utilities
    "flatten_path_component",
    "watch_file",
]
