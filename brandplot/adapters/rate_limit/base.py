"""Rate limiter interfaces.

Routes depend on this abstraction rather than the in-memory implementation,
so a shared store can replace it without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Max requests per window.
        remaining: Requests left in the current window (0 when blocked).
        reset_at: UNIX epoch seconds at which the client's window ends.
        retry_after_seconds: Suggested wait in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Count one request for ``key`` and decide whether it is allowed.

        Args:
            key: Client identifier (e.g. resolved IP address).

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError

    def check(self, key: str) -> RateLimitResult:
        """Alias of :meth:`consume`."""
        return self.consume(key)

    @abstractmethod
    def sweep(self) -> int:
        """Drop records whose window has ended.

        Returns:
            Number of records removed.
        """
        raise NotImplementedError
