from __future__ import annotations

from fastapi import APIRouter, Request

from veltri.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check.

    Also reports the in-memory throttle table size so operators can see it
    is being swept.
    """

    limiter = getattr(request.app.state, "rate_limiter", None)
    stats = limiter.stats() if isinstance(limiter, InMemoryFixedWindowRateLimiter) else {}
    return {"status": "ok", "rate_limiter": stats}
