"""Application factory for the BrandPlot FastAPI app.

Builds the app (metadata, middleware, handlers, routers) and owns the
lifespan of the rate limit sweeper.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from brandplot.api.routes import brand_router, cache_router, health_router
from brandplot.core.config import settings
from brandplot.core.exception_handlers import setup_exception_handlers
from brandplot.core.logging import configure_logging
from brandplot.core.middleware import request_id_middleware
from brandplot.core.openapi import apply_openapi_customizations
from brandplot.core.rate_limit import build_sweeper

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the rate limit sweeper on startup and stop it on shutdown."""
    sweeper = build_sweeper()
    app.state.rate_limit_sweeper = sweeper
    await sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="BrandPlot API",
        description=(
            "Backend utilities for the BrandPlot dashboard: company identifier "
            "generation behind a per-IP rate limit, and a durable cache for the "
            "last generated brand result with a sliding 24h expiry."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(brand_router, prefix="/v1")
    app.include_router(cache_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    logger.info("app.created", extra={"app_env": settings.app_env})
    return app
