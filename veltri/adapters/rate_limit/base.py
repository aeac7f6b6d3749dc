"""Rate limiter interfaces.

Routes depend on this abstraction (not the concrete table) so a shared
backend can be substituted without changing the API layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Admission decision for a single request.

    Attributes:
        allowed: Whether the request is admitted.
        limit: Max admissions per window for the checked key.
        remaining: Admissions left in the current window (0 when blocked).
        reset_at_ms: Epoch milliseconds at which the current window ends.
        retry_after_seconds: Whole seconds until retry is useful, when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at_ms: int
    retry_after_seconds: int | None = None

    @property
    def reset_at(self) -> int:
        """Window end in epoch seconds, rounded up."""
        return -(-self.reset_at_ms // 1000)


class AbstractRateLimiter(ABC):
    """Interface for per-key admission control."""

    @abstractmethod
    def check(self, key: str, *, limit: int, window_seconds: int) -> RateLimitResult:
        """Record a request for ``key`` and decide whether to admit it.

        Args:
            key: Identifies the (operation, caller) pair.
            limit: Maximum admissions per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult describing the decision.

        Raises:
            ValueError: If key is empty or limit/window are not positive.
        """
        raise NotImplementedError
