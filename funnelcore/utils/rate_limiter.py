# ==============================================================================
# Fixed Window Rate Limiter
# ==============================================================================
"""
Fixed-window request limiter for the storefront assistant endpoint.

Each key (client IP, or tenant + session) gets ``max_requests`` per window.
The first request after a window has elapsed opens a new one. State lives in
the limiter instance, which the handler receives at construction time, so
tests and separate endpoints never share counters.

Usage::

    limiter = FixedWindowRateLimiter(max_requests=20, window_seconds=60)
    decision = limiter.check(client_ip)
    if not decision.allowed:
        return too_many_requests(retry_after=decision.retry_after)
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from funnelcore.utils.config import RateLimitSettings, get_settings


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single check."""

    allowed: bool
    remaining: int
    retry_after: float = 0.0


@dataclass
class _Window:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    """Counter-per-key rate limiter with a reset timestamp per key.

    Args:
        max_requests: Requests allowed per key per window.
        window_seconds: Window length in seconds.
        clock: Monotonic time source (injectable for tests).
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {max_requests}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {window_seconds}")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: RateLimitSettings | None = None) -> "FixedWindowRateLimiter":
        """Build a limiter from RATE_LIMIT_* settings."""
        settings = settings or get_settings().rate_limit
        return cls(max_requests=settings.max_requests, window_seconds=settings.window_seconds)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(self, key: str | None) -> RateLimitDecision:
        """Count a request against *key* and report whether it may proceed.

        Requests without a key cannot be attributed and are always allowed
        with the full quota reported.
        """
        if key is None:
            return RateLimitDecision(allowed=True, remaining=self.max_requests)

        with self._lock:
            now = self._clock()
            window = self._windows.get(key)

            if window is None or now >= window.reset_at:
                self._windows[key] = _Window(count=1, reset_at=now + self.window_seconds)
                return RateLimitDecision(allowed=True, remaining=self.max_requests - 1)

            if window.count >= self.max_requests:
                return RateLimitDecision(
                    allowed=False, remaining=0, retry_after=window.reset_at - now
                )

            window.count += 1
            return RateLimitDecision(allowed=True, remaining=self.max_requests - window.count)

    def allow(self, key: str | None) -> bool:
        """Shorthand for ``check(key).allowed``."""
        return self.check(key).allowed

    def purge_expired(self) -> int:
        """Drop windows that have elapsed. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, window in self._windows.items() if now >= window.reset_at]
            for key in expired:
                del self._windows[key]
            return len(expired)

    def reset(self) -> None:
        """Forget every key."""
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
