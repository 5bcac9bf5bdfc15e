"""Background task that periodically sweeps expired rate limit records."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Callable

from brandplot.adapters.rate_limit.base import AbstractRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 30 * 60


class PeriodicSweeper:
    """Runs ``limiter.sweep()`` every ``interval_seconds`` on the event loop.

    ``limiter`` is either a limiter or a zero-argument callable returning one.
    A callable is resolved on every tick, so a limiter rebuilt after startup
    is the one that gets swept.

    The handle is owned by the application lifespan: ``start()`` on startup,
    ``stop()`` on shutdown. Sweeping only reclaims memory, so a failed sweep is
    logged and the loop keeps going.
    """

    def __init__(
        self,
        limiter: AbstractRateLimiter | Callable[[], AbstractRateLimiter],
        *,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")

        if isinstance(limiter, AbstractRateLimiter):
            self._resolve_limiter: Callable[[], AbstractRateLimiter] = lambda: limiter
        else:
            self._resolve_limiter = limiter
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the sweep loop. Calling it while running is a no-op."""
        if self.running:
            return

        self._task = asyncio.create_task(self._run(), name="rate-limit-sweeper")
        logger.info("rate_limit.sweeper_started", extra={"interval_s": self._interval})

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("rate_limit.sweeper_stopped")

    def sweep_once(self) -> int:
        """Sweep the current limiter once and return the number of records removed."""
        return self._resolve_limiter().sweep()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("rate_limit.sweep_failed")
