"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- A window starts at the first request for a key and lasts ``window_seconds``.
  Bursts straddling a window boundary can admit up to twice the limit.
- Expired entries are dropped by a periodic sweep task owned by the limiter,
  not on access.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from veltri.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass
class WindowEntry:
    count: int
    reset_at_ms: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Fixed-window admission counters keyed by (operation, caller).

    One instance owns one table. The application builds a single instance at
    startup; tests build their own with a fake clock.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        sweep_interval_seconds: float = 60.0,
    ) -> None:
        """Initialize an empty table.

        Args:
            clock: Time source returning UNIX time in seconds.
            sweep_interval_seconds: Delay between background sweeps.

        Raises:
            ValueError: If sweep_interval_seconds is not positive.
        """
        if sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be > 0")

        self._clock = clock
        self._sweep_interval = sweep_interval_seconds
        self._lock = threading.RLock()
        self._entries: dict[str, WindowEntry] = {}
        self._sweeper: asyncio.Task[None] | None = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def check(self, key: str, *, limit: int, window_seconds: int) -> RateLimitResult:
        """Count a request against ``key`` and return the admission decision.

        Args:
            key: Throttle key, see ``veltri.core.rate_limit.derive_key``.
            limit: Maximum admissions per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult. A rejected request leaves the counter untouched
            and reports the unchanged window end.

        Raises:
            ValueError: If key is empty or limit/window_seconds are invalid.
        """
        if not key:
            raise ValueError("key must be a non-empty string")
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        now_ms = self._now_ms()

        with self._lock:
            entry = self._entries.get(key)

            if entry is None or now_ms > entry.reset_at_ms:
                entry = WindowEntry(count=1, reset_at_ms=now_ms + window_seconds * 1000)
                self._entries[key] = entry
                return RateLimitResult(
                    allowed=True,
                    limit=limit,
                    remaining=limit - 1,
                    reset_at_ms=entry.reset_at_ms,
                )

            if entry.count >= limit:
                retry_after = max(0, math.ceil((entry.reset_at_ms - now_ms) / 1000))
                return RateLimitResult(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_at_ms=entry.reset_at_ms,
                    retry_after_seconds=retry_after,
                )

            entry.count += 1
            return RateLimitResult(
                allowed=True,
                limit=limit,
                remaining=limit - entry.count,
                reset_at_ms=entry.reset_at_ms,
            )

    def expired_keys(self, now_ms: int | None = None) -> list[str]:
        """Snapshot the keys whose window ended before ``now_ms``."""
        now_ms = self._now_ms() if now_ms is None else now_ms
        with self._lock:
            return [k for k, e in self._entries.items() if e.reset_at_ms < now_ms]

    def evict_if_expired(self, key: str, now_ms: int) -> bool:
        """Delete ``key`` only if its entry is still expired at ``now_ms``.

        A request that refreshed the key after it was snapshotted gave it a
        later window end, so it survives.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.reset_at_ms >= now_ms:
                return False
            del self._entries[key]
            return True

    def sweep(self) -> int:
        """Remove expired entries.

        Returns:
            Number of entries removed.
        """
        now_ms = self._now_ms()
        removed = sum(1 for key in self.expired_keys(now_ms) if self.evict_if_expired(key, now_ms))
        if removed:
            logger.debug(
                "rate_limit.sweep",
                extra={"removed": removed, "entries": len(self._entries)},
            )
        return removed

    async def _run_sweeper(self) -> None:
        logger.info("rate_limit.sweeper_started", extra={"interval_s": self._sweep_interval})
        while True:
            await asyncio.sleep(self._sweep_interval)
            self.sweep()

    def start_sweeper(self) -> asyncio.Task[None]:
        """Start the periodic sweep on the running event loop.

        Calling it again while the sweeper runs returns the existing task.
        """
        if self._sweeper is not None and not self._sweeper.done():
            return self._sweeper
        self._sweeper = asyncio.get_running_loop().create_task(
            self._run_sweeper(), name="rate-limit-sweeper"
        )
        return self._sweeper

    async def stop_sweeper(self) -> None:
        """Cancel the periodic sweep and wait for it to finish."""
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.info("rate_limit.sweeper_stopped")

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    def stats(self) -> dict[str, int | float | bool]:
        """Table size and sweeper state, without exposing keys."""
        with self._lock:
            return {
                "entries": len(self._entries),
                "sweep_interval_seconds": self._sweep_interval,
                "sweeper_running": self.sweeper_running,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
