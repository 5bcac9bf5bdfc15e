"""Rate limiting dependency for FastAPI routes.

Routes that trigger costly work declare ``Depends(enforce_rate_limit)``. The
client is identified by its resolved IP address (proxy headers first) and
one request is counted against a process-wide in-memory limiter.
"""

from __future__ import annotations

import logging
import math

from fastapi import HTTPException, Request, Response, status

from brandplot.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from brandplot.adapters.rate_limit.in_memory import InMemoryRateLimiter
from brandplot.adapters.rate_limit.sweeper import PeriodicSweeper
from brandplot.core.client_ip import resolve_client_ip
from brandplot.core.config import settings
from brandplot.core.logging import hash_identifier

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int] | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide limiter, rebuilding it if its settings changed.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_max_requests,
        settings.app.rate_limit_window_seconds,
    )

    if _limiter is None or _limiter_config != config:
        _limiter = InMemoryRateLimiter(
            max_requests=settings.app.rate_limit_max_requests,
            window_seconds=settings.app.rate_limit_window_seconds,
        )
        _limiter_config = config

    return _limiter


def build_sweeper() -> PeriodicSweeper:
    """Create the sweep task handle; each tick sweeps whichever limiter is current."""

    return PeriodicSweeper(
        lambda: get_rate_limiter(),
        interval_seconds=settings.app.rate_limit_sweep_interval_seconds,
    )


def client_identifier(request: Request) -> str:
    """Rate limit key for ``request``: proxy-resolved IP, then socket peer."""

    peer = request.client.host if request.client else None
    return resolve_client_ip(request.headers, fallback=peer)


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(int(math.ceil(result.reset_at))),
    }
    if result.retry_after_seconds is not None:
        headers["Retry-After"] = str(result.retry_after_seconds)
    return headers


async def enforce_rate_limit(request: Request, response: Response) -> RateLimitResult | None:
    """FastAPI dependency enforcing the per-client limit.

    Args:
        request: FastAPI request.
        response: Outgoing response, decorated with X-RateLimit-* headers.

    Returns:
        The limiter decision, or None when rate limiting is disabled.

    Raises:
        HTTPException: 429 Too Many Requests when the client is over its limit.
    """

    if not settings.app.rate_limit_enabled:
        return None

    limiter = get_rate_limiter()
    key = client_identifier(request)
    result = limiter.consume(key)

    log_extra = {
        "client_hash": hash_identifier(key),
        "limit": result.limit,
        "remaining": result.remaining,
        "window_s": settings.app.rate_limit_window_seconds,
    }

    if result.allowed:
        logger.info("rate_limit.allowed", extra=log_extra)
        if settings.app.rate_limit_include_headers:
            response.headers.update(rate_limit_headers(result))
        return result

    logger.warning(
        "rate_limit.exceeded",
        extra={**log_extra, "retry_after_s": result.retry_after_seconds},
    )

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Try again later.",
        headers=rate_limit_headers(result) if settings.app.rate_limit_include_headers else None,
    )
