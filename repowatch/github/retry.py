"""Retry with exponential backoff for GitHub API operations."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from .exceptions import GitHubError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable_error(error: BaseException) -> bool:
    """Default predicate: retry everything except rejected requests (4xx)."""
    if isinstance(error, GitHubError):
        return error.is_retryable
    return True


@dataclass
class RetryPolicy:
    """Reusable retry policy with exponential backoff and deterministic jitter.

    The delay after a failed attempt ``i`` (0-indexed) is
    ``base_delay * 2**i`` seconds plus ``(i * 137 + 37)`` milliseconds. The
    jitter term is fixed per attempt so that retry timing is reproducible.

    Attributes:
        max_attempts: Total number of attempts including the first one
        base_delay: Base delay in seconds
        retryable: Predicate deciding whether an error should be retried
        sleep: Coroutine used to wait between attempts
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    retryable: Callable[[BaseException], bool] = is_retryable_error
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay cannot be negative")

    def get_delay(self, attempt: int) -> float:
        """Get the backoff delay in seconds after the given attempt."""
        jitter_ms = attempt * 137 + 37
        return self.base_delay * (2**attempt) + jitter_ms / 1000

    async def execute(
        self, operation: Callable[[], Awaitable[T]], description: str = "operation"
    ) -> T:
        """Run an async operation, retrying transient failures.

        Args:
            operation: Zero-argument callable returning an awaitable
            description: Label used in log messages

        Returns:
            Result of the first successful attempt

        Raises:
            The error of a non-retryable failure immediately, or the last
            error once all attempts are exhausted
        """
        last_error: Exception | None = None

        for attempt in range(self.max_attempts):
            try:
                return await operation()
            except Exception as e:
                last_error = e

                if not self.retryable(e):
                    logger.error(
                        f"{description} failed with non-retryable error: {e}",
                        extra={"status": getattr(e, "status_code", None)},
                    )
                    raise

                if attempt < self.max_attempts - 1:
                    delay = self.get_delay(attempt)
                    logger.warning(
                        f"{description} failed (attempt {attempt + 1}), "
                        f"retrying in {delay:.3f}s: {e}",
                        extra={
                            "attempt": attempt + 1,
                            "status": getattr(e, "status_code", None),
                        },
                    )
                    await self.sleep(delay)

        logger.error(
            f"{description} failed after {self.max_attempts} attempts: {last_error}"
        )
        if last_error:
            raise last_error
        raise GitHubError(f"{description} failed after {self.max_attempts} attempts")
