"""Fixed-window request throttling.

Counters live in process memory, keyed by caller IP or user id. They are not
shared between server instances.
"""

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from src.config import Settings
from src.errors import RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """Allow `limit` hits per key within each `window_seconds` window."""

    def __init__(
        self,
        name: str,
        limit: int,
        window_seconds: int,
        message: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.limit = limit
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._last_sweep = clock()

    def _sweep(self, now: float) -> None:
        """Forget keys whose window has ended, at most once per window period."""
        if now - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = now
        expired = [k for k, w in self._windows.items() if now - w.started_at >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    def _window(self, key: str) -> _Window:
        now = self._clock()
        self._sweep(now)
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            window = _Window(started_at=now)
            self._windows[key] = window
        return window

    def retry_after(self, key: str) -> int:
        window = self._window(key)
        remaining = self.window_seconds - (self._clock() - window.started_at)
        return max(1, math.ceil(remaining))

    def check(self, key: str) -> None:
        """Raise RateLimitError if the key has used up its window."""
        if self._window(key).count >= self.limit:
            logger.warning(f"Rate limit exceeded ({self.name}) for {key}")
            raise RateLimitError(self.message, retry_after=self.retry_after(key))

    def hit(self, key: str) -> None:
        self._window(key).count += 1

    def consume(self, key: str) -> None:
        self.check(key)
        self.hit(key)

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)


@dataclass
class RateLimiters:
    """The limiters guarding the API, one per protected concern."""

    general: FixedWindowRateLimiter
    auth: FixedWindowRateLimiter
    notification: FixedWindowRateLimiter
    broadcast: FixedWindowRateLimiter
    create_resource: FixedWindowRateLimiter

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimiters":
        return cls(
            general=FixedWindowRateLimiter(
                "general",
                settings.general_rate_limit,
                settings.general_rate_window,
                "Too many requests. Try again in a few seconds.",
            ),
            auth=FixedWindowRateLimiter(
                "auth",
                settings.auth_rate_limit,
                settings.auth_rate_window,
                "Too many login attempts. Try again in 15 minutes.",
            ),
            notification=FixedWindowRateLimiter(
                "notification",
                settings.notification_rate_limit,
                settings.notification_rate_window,
                "Notification limit reached. Try again in 1 minute.",
            ),
            broadcast=FixedWindowRateLimiter(
                "broadcast",
                settings.broadcast_rate_limit,
                settings.broadcast_rate_window,
                "Broadcast limit reached. Try again in 1 hour.",
            ),
            create_resource=FixedWindowRateLimiter(
                "create_resource",
                settings.create_resource_rate_limit,
                settings.create_resource_rate_window,
                "Too many creations. Try again in a few seconds.",
            ),
        )

    def get(self, name: str) -> FixedWindowRateLimiter:
        return getattr(self, name)

    def reset(self) -> None:
        for limiter in (self.general, self.auth, self.notification, self.broadcast, self.create_resource):
            limiter.reset()
