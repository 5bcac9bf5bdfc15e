"""Rate limiting adapters.

An in-memory limiter for a single process, behind an abstraction that lets
a shared store (e.g. Redis) take its place later.
"""

from brandplot.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from brandplot.adapters.rate_limit.in_memory import InMemoryRateLimiter, RateLimitRecord
from brandplot.adapters.rate_limit.sweeper import PeriodicSweeper

__all__ = [
    "AbstractRateLimiter",
    "InMemoryRateLimiter",
    "PeriodicSweeper",
    "RateLimitRecord",
    "RateLimitResult",
]
