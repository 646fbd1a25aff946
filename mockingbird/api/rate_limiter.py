"""Per-client fixed-window rate limiting for HTTP routes.

Responsibilities:
- Count requests per client identifier inside fixed, non-sliding windows.
- Reject requests beyond the window ceiling without consuming further resources.
- Sweep elapsed entries on a background interval to bound memory growth.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Event, Lock, Thread
from time import monotonic
from typing import Callable, Iterable

from ..models.datatypes import RateLimitDecision, RateLimitEntry


@dataclass(slots=True)
class FixedWindowRateLimiter:
    """Fixed-window request counter keyed by client identifier."""

    clock: Callable[[], float] = monotonic
    _entries: dict[str, RateLimitEntry] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)

    def check_and_consume(
        self,
        client_id: str,
        max_requests: int,
        window_seconds: float,
    ) -> RateLimitDecision:
        """Consume one request slot for a client and report whether it is allowed."""

        with self._lock:
            now = self.clock()
            entry = self._entries.get(client_id)
            if entry is None or now >= entry.window_reset_at:
                self._entries[client_id] = RateLimitEntry(
                    count=1,
                    window_reset_at=now + window_seconds,
                )
                return RateLimitDecision(allowed=True, remaining=max_requests - 1)

            if entry.count >= max_requests:
                return RateLimitDecision(allowed=False, remaining=0)

            entry.count += 1
            return RateLimitDecision(allowed=True, remaining=max_requests - entry.count)

    def sweep(self) -> int:
        """Remove entries whose window has elapsed and return how many were dropped."""

        with self._lock:
            now = self.clock()
            expired = [
                client_id
                for client_id, entry in self._entries.items()
                if now >= entry.window_reset_at
            ]
            for client_id in expired:
                del self._entries[client_id]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass(slots=True)
class RateLimitPolicy:
    """A limiter bound to its request ceiling and window length."""

    max_requests: int
    window_seconds: float
    limiter: FixedWindowRateLimiter = field(default_factory=FixedWindowRateLimiter)

    def check(self, client_id: str) -> RateLimitDecision:
        """Apply this policy to one request from a client."""

        return self.limiter.check_and_consume(
            client_id,
            self.max_requests,
            self.window_seconds,
        )


class RateLimitSweeper:
    """Daemon thread that periodically sweeps a set of limiters."""

    def __init__(
        self,
        limiters: Iterable[FixedWindowRateLimiter],
        interval_seconds: float = 60.0,
        on_sweep: Callable[[int], None] | None = None,
    ) -> None:
        """Initialize sweep targets and interval; the thread starts on `start()`."""

        self._limiters = tuple(limiters)
        self._interval_seconds = interval_seconds
        self._on_sweep = on_sweep
        self._stop_event = Event()
        self._thread: Thread | None = None

    def start(self) -> None:
        """Start the background sweep thread if it is not already running."""

        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = Thread(target=self._run, name="rate-limit-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout_seconds: float = 1.0) -> None:
        """Signal the sweep thread to stop and wait briefly for it."""

        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout_seconds)
            self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def sweep_once(self) -> int:
        """Sweep every limiter once and return the total number of dropped entries."""

        removed = sum(limiter.sweep() for limiter in self._limiters)
        if self._on_sweep is not None:
            self._on_sweep(removed)
        return removed

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval_seconds):
            self.sweep_once()
