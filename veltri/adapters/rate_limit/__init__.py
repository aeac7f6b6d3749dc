"""Request throttling adapters.

The HTTP layer depends on ``AbstractRateLimiter`` only, so the in-process
table can later be replaced by a shared store without touching the routes.
"""

from veltri.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from veltri.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "RateLimitResult",
]
