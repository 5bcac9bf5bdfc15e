"""In-memory rolling-window rate limiter.

Notes:
- Per-process and volatile: state is lost on restart and each worker
  process enforces its own limits.
- Thread-safe: a lock guards the shared record map.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from brandplot.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 3
DEFAULT_WINDOW_SECONDS = 24 * 60 * 60


@dataclass
class RateLimitRecord:
    """Requests seen from one client in its current window."""

    count: int
    reset_at: float


class InMemoryRateLimiter(AbstractRateLimiter):
    """Counts requests per key in a window that opens on the key's first request.

    A key's window lasts ``window_seconds`` from the request that created its
    record. Once the clock passes ``reset_at`` the next request replaces the
    record instead of incrementing it.
    """

    def __init__(
        self,
        *,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the limiter.

        Args:
            max_requests: Requests allowed per window.
            window_seconds: Window length in seconds.
            clock: Time source returning UNIX time in seconds.

        Raises:
            ValueError: If max_requests or window_seconds are invalid.
        """
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._records: dict[str, RateLimitRecord] = {}

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def get_record(self, key: str) -> RateLimitRecord | None:
        """Return a copy of the stored record for ``key``, if any."""
        with self._lock:
            record = self._records.get(key)
            if record is None:
                return None
            return RateLimitRecord(count=record.count, reset_at=record.reset_at)

    def consume(self, key: str) -> RateLimitResult:
        """Count a request for ``key`` and return the allow/deny decision.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            record = self._records.get(key)

            if record is None or now > record.reset_at:
                record = RateLimitRecord(count=1, reset_at=now + self._window_seconds)
                self._records[key] = record
                return self._allowed(record)

            if record.count < self._max_requests:
                record.count += 1
                return self._allowed(record)

            return RateLimitResult(
                allowed=False,
                limit=self._max_requests,
                remaining=0,
                reset_at=record.reset_at,
                retry_after_seconds=max(0, int(math.ceil(record.reset_at - now))),
            )

    def sweep(self) -> int:
        """Remove every record whose ``reset_at`` has passed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, record in self._records.items() if now > record.reset_at]
            for key in expired:
                del self._records[key]
            remaining = len(self._records)

        if expired:
            logger.debug(
                "rate_limit.swept",
                extra={"removed": len(expired), "tracked": remaining},
            )
        return len(expired)

    def reset(self) -> None:
        """Forget all records."""
        with self._lock:
            self._records.clear()

    def _allowed(self, record: RateLimitRecord) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            limit=self._max_requests,
            remaining=self._max_requests - record.count,
            reset_at=record.reset_at,
            retry_after_seconds=None,
        )
