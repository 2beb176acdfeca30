"""Fixed-window per-client request counter.

One instance is shared by the whole app (see api.dependencies). The clock and
the sweeper's wait are injectable so tests can drive time explicitly.
"""

import asyncio
import logging
import threading
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from services.errors import RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class WindowState:
    count: int
    reset_at: float


class FixedWindowRateLimiter:
    def __init__(
        self,
        limit: int,
        window_seconds: float = 60.0,
        max_clients: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self.max_clients = max_clients
        self._clock = clock
        self._windows: dict[str, WindowState] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._windows)

    def check_and_increment(self, key: str) -> WindowState:
        """Count one request for ``key``; raise RateLimitError past the limit."""
        now = self._clock()
        with self._lock:
            state = self._windows.get(key)
            if state is None or now > state.reset_at:
                if state is None and len(self._windows) >= self.max_clients:
                    self._make_room(now)
                state = WindowState(count=1, reset_at=now + self.window_seconds)
                self._windows[key] = state
            else:
                state.count += 1

            if state.count > self.limit:
                retry_after = max(0.0, state.reset_at - now)
                logger.warning("Rate limit exceeded for %s (%d requests)", key, state.count)
                raise RateLimitError(
                    f"Rate limit exceeded: {self.limit} requests per minute",
                    retry_after=retry_after,
                )
            return WindowState(state.count, state.reset_at)

    def sweep(self) -> int:
        """Drop every expired window. Returns how many were removed."""
        with self._lock:
            return self._prune(self._clock())

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _prune(self, now: float) -> int:
        expired = [key for key, state in self._windows.items() if now > state.reset_at]
        for key in expired:
            del self._windows[key]
        return len(expired)

    def _make_room(self, now: float) -> None:
        # Full table: drop expired windows, else the one ending first
        if self._prune(now):
            return
        oldest = min(self._windows, key=lambda k: self._windows[k].reset_at)
        del self._windows[oldest]

    async def run_sweeper(
        self,
        stop_event: asyncio.Event,
        interval: float = 300.0,
        wait: Callable[[asyncio.Event, float], Awaitable[bool]] | None = None,
    ) -> None:
        """Sweep every ``interval`` seconds until ``stop_event`` is set."""
        wait = wait or _wait_or_timeout
        while not stop_event.is_set():
            removed = self.sweep()
            if removed:
                logger.info("rate_limit_sweep removed=%d remaining=%d", removed, len(self))
            if await wait(stop_event, interval):
                break


async def _wait_or_timeout(stop_event: asyncio.Event, timeout: float) -> bool:
    """True if stop_event was set before the timeout elapsed."""
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=timeout)
        return True
    except asyncio.TimeoutError:
        return False
