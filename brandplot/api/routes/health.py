from __future__ import annotations

from fastapi import APIRouter

from brandplot.adapters.rate_limit.in_memory import InMemoryRateLimiter
from brandplot.core.rate_limit import get_rate_limiter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness probe for load balancers and monitoring.

    Returns:
        dict: ``status`` plus how many clients the limiter currently tracks.
    """

    limiter = get_rate_limiter()
    tracked = len(limiter) if isinstance(limiter, InMemoryRateLimiter) else None
    return {"status": "ok", "tracked_clients": tracked}
