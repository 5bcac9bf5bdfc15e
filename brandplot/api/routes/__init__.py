from __future__ import annotations

from brandplot.api.routes.brand import router as brand_router
from brandplot.api.routes.cache import router as cache_router
from brandplot.api.routes.health import router as health_router

__all__ = ["brand_router", "cache_router", "health_router"]
