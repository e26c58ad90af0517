"""Bounded retry with fixed backoff."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
from typing import TypeVar

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for cache operations.

    Attributes:
        max_attempts: Total attempts including the first (hard bound, >= 1)
        delay_seconds: Fixed delay between attempts
    """

    max_attempts: int = 5
    delay_seconds: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {self.delay_seconds}")

    async def run(self, operation: Callable[[], Awaitable[R]], description: str = "operation") -> R:
        """
        Run ``operation`` until it succeeds or attempts run out.

        Each attempt starts the operation from scratch.

        Args:
            operation: Zero-argument async callable
            description: Label used in log messages

        Returns:
            The operation's result

        Raises:
            Exception: The last attempt's error, unchanged
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                if attempt >= self.max_attempts:
                    logger.debug(
                        f"{description} failed after {attempt}/{self.max_attempts} attempts: {e!r}"
                    )
                    raise
                logger.debug(
                    f"{description} failed (attempt {attempt}/{self.max_attempts}), "
                    f"retrying in {self.delay_seconds}s: {e!r}"
                )
            await asyncio.sleep(self.delay_seconds)
            attempt += 1
