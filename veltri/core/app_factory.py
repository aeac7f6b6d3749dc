"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
the throttle table) so tests can build isolated applications.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from veltri.adapters.rate_limit.base import AbstractRateLimiter
from veltri.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from veltri.api.routes import ai_router, health_router
from veltri.core.config import settings
from veltri.core.exception_handlers import setup_exception_handlers
from veltri.core.logging import configure_logging
from veltri.core.middleware import request_id_middleware
from veltri.core.openapi import apply_openapi_customizations


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the throttle sweeper for as long as the app serves requests."""
    limiter = app.state.rate_limiter
    if isinstance(limiter, InMemoryFixedWindowRateLimiter):
        limiter.start_sweeper()
    try:
        yield
    finally:
        if isinstance(limiter, InMemoryFixedWindowRateLimiter):
            await limiter.stop_sweeper()


def create_app(rate_limiter: AbstractRateLimiter | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Throttle table to use; a fresh in-memory one by default.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Veltri API",
        description=(
            "AI services for the Veltri note marketplace: tag suggestions, "
            "summaries, quality reviews, editor chat and AI-generated text "
            "detection. Requires X-API-Key; every AI operation is throttled per caller."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    if rate_limiter is None:
        rate_limiter = InMemoryFixedWindowRateLimiter(
            sweep_interval_seconds=settings.app.rate_limit_sweep_interval_seconds,
        )
    app.state.rate_limiter = rate_limiter

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(ai_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
