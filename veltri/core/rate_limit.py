"""Rate limiting dependency for FastAPI routes.

Wires the throttle adapter into the HTTP layer.

- Each throttled route names an operation (``ai-tags``, ``ai-detect``, ...)
  whose limit and window come from settings.
- Callers are identified by the first ``X-Forwarded-For`` entry, then the
  socket peer address, then ``"unknown"``. The peer address is used only
  when the header is absent; a header whose first entry is blank keys as
  ``"unknown"``.
- The limiter instance lives on ``app.state`` and is built by the app
  factory, so each application (and each test app) owns its table.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Annotated, Awaitable, Callable

from fastapi import Header, HTTPException, Request, status

from veltri.adapters.rate_limit.base import AbstractRateLimiter
from veltri.core.config import settings

logger = logging.getLogger(__name__)

UNKNOWN_ORIGIN = "unknown"
KEY_SEPARATOR = ":"

# operation name -> settings field infix
_OPERATION_SETTINGS: dict[str, str] = {
    "ai-tags": "tags",
    "ai-detect": "detect",
    "ai-summary": "summary",
    "ai-review": "review",
    "ai-chat": "chat",
}


@dataclass(frozen=True)
class ThrottlePolicy:
    operation: str
    limit: int
    window_seconds: int


def get_policy(operation: str) -> ThrottlePolicy:
    """Resolve the configured limit/window for an operation.

    Settings are read on every call so runtime overrides take effect.

    Raises:
        ValueError: If the operation has no configured policy.
    """
    infix = _OPERATION_SETTINGS.get(operation)
    if infix is None:
        raise ValueError(f"no rate limit policy for operation '{operation}'")
    return ThrottlePolicy(
        operation=operation,
        limit=getattr(settings.app, f"rate_limit_{infix}_requests"),
        window_seconds=getattr(settings.app, f"rate_limit_{infix}_window_seconds"),
    )


def client_origin(forwarded_for: str | None) -> str:
    """Return the first address of a forwarded-for list, or ``"unknown"``.

    Examples:
        >>> client_origin("1.2.3.4, 10.0.0.1")
        '1.2.3.4'
        >>> client_origin(None)
        'unknown'
    """
    if not forwarded_for:
        return UNKNOWN_ORIGIN
    first = forwarded_for.split(",")[0].strip()
    return first or UNKNOWN_ORIGIN


def derive_key(request_origin: str | None, operation_name: str) -> str:
    """Build the throttle key for an (operation, caller) pair.

    Operation names may not contain the separator, which keeps keys of
    different operations from colliding.

    Args:
        request_origin: Caller identifier, typically an X-Forwarded-For value.
        operation_name: Logical operation being throttled.

    Returns:
        ``"{operation_name}:{origin}"``.

    Raises:
        ValueError: If operation_name is empty or contains ':'.
    """
    if not operation_name or KEY_SEPARATOR in operation_name:
        raise ValueError("operation_name must be non-empty and must not contain ':'")
    return f"{operation_name}{KEY_SEPARATOR}{client_origin(request_origin)}"


def _hash_limiter_key(key: str) -> str:
    """Hash the key for logging without exposing caller addresses."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the running application."""
    return request.app.state.rate_limiter


def rate_limited(operation: str) -> Callable[..., Awaitable[None]]:
    """Build a FastAPI dependency that throttles ``operation`` per caller.

    Usage:
        @router.post("/ai/tags", dependencies=[Depends(rate_limited("ai-tags"))])

    Args:
        operation: Operation name with a configured policy.

    Returns:
        Async dependency raising HTTP 429 when the caller is over the limit.
    """
    # Fail at import time for unknown operations, not on first request.
    get_policy(operation)

    async def enforce_rate_limit(
        request: Request,
        x_forwarded_for: Annotated[str | None, Header(alias="X-Forwarded-For")] = None,
    ) -> None:
        if not settings.app.rate_limit_enabled:
            return

        policy = get_policy(operation)
        origin = x_forwarded_for or (request.client.host if request.client else None)
        key = derive_key(origin, operation)
        key_hash = _hash_limiter_key(key)

        result = get_rate_limiter(request).check(
            key, limit=policy.limit, window_seconds=policy.window_seconds
        )
        if result.allowed:
            logger.info(
                "rate_limit.allowed",
                extra={
                    "operation": operation,
                    "key_hash": key_hash,
                    "limit": result.limit,
                    "remaining": result.remaining,
                    "window_s": policy.window_seconds,
                },
            )
            return

        retry_after = result.retry_after_seconds or 0
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "operation": operation,
                "key_hash": key_hash,
                "limit": result.limit,
                "window_s": policy.window_seconds,
                "retry_after_s": retry_after,
            },
        )

        headers: dict[str, str] = {}
        if settings.app.rate_limit_include_headers:
            headers["Retry-After"] = str(retry_after)
            headers["X-RateLimit-Limit"] = str(result.limit)
            headers["X-RateLimit-Remaining"] = str(result.remaining)
            headers["X-RateLimit-Reset"] = str(result.reset_at)

        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
            headers=headers or None,
        )

    return enforce_rate_limit
