"""Cache error hierarchy."""

from __future__ import annotations


class CacheError(Exception):
    """Base exception for all cache errors."""


class IdentityError(CacheError):
    """No build id could be obtained, not even an in-memory one."""


class StorageError(CacheError):
    """A storage read or write failed.

    Attributes:
        operation: Storage operation name (e.g. "write_entry")
        address: Resolved storage address involved
    """

    def __init__(self, message: str, *, operation: str, address: str) -> None:
        self.operation = operation
        self.address = address
        super().__init__(f"{message} | {operation} {address}")


class WaitTimeoutError(CacheError, TimeoutError):
    """Waiting for another producer exceeded the configured ceiling.

    Attributes:
        key: Human-readable cache key
        waited_seconds: How long the caller waited
    """

    def __init__(self, key: str, waited_seconds: float, what: str = "resolution") -> None:
        self.key = key
        self.waited_seconds = waited_seconds
        super().__init__(f"Timed out after {waited_seconds:.2f}s waiting for {what} of {key}")


class LockTimeoutError(WaitTimeoutError):
    """Acquiring the key's lock file exceeded the configured ceiling."""

    def __init__(self, key: str, waited_seconds: float) -> None:
        super().__init__(key, waited_seconds, what="lock")
