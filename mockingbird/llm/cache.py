"""Bounded response cache for provider-backed sarcasm generation.

Responsibilities:
- Build unambiguous cache keys from mode, intent, context, and normalized text.
- Evict by recency under capacity pressure and by absolute age (TTL).
- Track basic cache telemetry (hits/misses) for health diagnostics.

Text is lower-cased and trimmed for the key; context is trimmed only.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from threading import Lock
from time import monotonic
from typing import Callable

from ..models.datatypes import CacheEntry


DEFAULT_CACHE_MAX_SIZE = 500
DEFAULT_CACHE_TTL_SECONDS = 300.0

# (mode, intent, context, lower-cased text)
CacheKey = tuple[str, str, str, str]


@dataclass(slots=True)
class ResponseCache:
    """Thread-safe LRU cache with per-entry time-to-live."""

    max_size: int = DEFAULT_CACHE_MAX_SIZE
    ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    clock: Callable[[], float] = monotonic
    hits: int = 0
    misses: int = 0
    _entries: OrderedDict[CacheKey, CacheEntry] = field(default_factory=OrderedDict)
    _lock: Lock = field(default_factory=Lock)

    def __post_init__(self) -> None:
        if self.max_size <= 0:
            raise ValueError("`max_size` must be a positive integer.")
        if self.ttl_seconds <= 0:
            raise ValueError("`ttl_seconds` must be positive.")

    @staticmethod
    def make_key(text: str, mode: str, intent: str, context: str = "") -> CacheKey:
        """Build the cache key; lookups are case-insensitive on text only."""

        normalized_context = context.strip() if context else ""
        return (mode, intent, normalized_context, text.strip().lower())

    def get(self, text: str, mode: str, intent: str, context: str = "") -> str | None:
        """Return a fresh cached value and mark it most recently used."""

        key = self.make_key(text, mode, intent, context)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            if self.clock() - entry.created_at > self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return entry.value

    def set(self, text: str, mode: str, intent: str, context: str, value: str) -> None:
        """Store a value, evicting the least recently used entry when full."""

        key = self.make_key(text, mode, intent, context)
        with self._lock:
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_size:
                self._entries.popitem(last=False)
            self._entries[key] = CacheEntry(key=key, value=value, created_at=self.clock())

    def clear(self) -> None:
        """Drop every entry and reset telemetry counters."""

        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    @property
    def size(self) -> int:
        """Return the number of stored entries, including not-yet-observed expired ones."""

        with self._lock:
            return len(self._entries)

    def hit_rate(self) -> float:
        """Return cache hit rate for current cache lifecycle."""

        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / float(total)

    def stats(self) -> dict[str, int]:
        """Return the cache section of the health payload."""

        return {"cacheSize": self.size, "maxCacheSize": self.max_size}
