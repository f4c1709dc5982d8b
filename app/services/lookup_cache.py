"""Bounded TTL cache for poster, plot and search-term lookups."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A cached lookup. ``value`` is None when the lookup found nothing."""

    value: Any
    expires_at: float


class LookupCache:
    """TTL cache for OMDb lookups shared by the poster pipeline.

    A hit with a ``None`` value means OMDb was asked and had no poster or
    plot, which is different from a miss. Each map holds at most
    ``max_entries`` items; inserting past that evicts the oldest entry.
    """

    def __init__(
        self,
        ttl_seconds: int,
        max_entries: int,
        query_ttl_seconds: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.query_ttl_seconds = ttl_seconds if query_ttl_seconds is None else query_ttl_seconds
        self.max_entries = max(1, max_entries)
        self._clock = clock
        self._lock = threading.Lock()
        self._posters: dict[str, CacheEntry] = {}
        self._plots: dict[str, CacheEntry] = {}
        self._queries: dict[str, CacheEntry] = {}

    def _get(self, store: dict[str, CacheEntry], key: str) -> CacheEntry | None:
        now = self._clock()
        with self._lock:
            entry = store.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                store.pop(key, None)
                return None
            return entry

    def _set(self, store: dict[str, CacheEntry], key: str, value: Any, ttl_seconds: int) -> None:
        if ttl_seconds <= 0:
            return
        with self._lock:
            store.pop(key, None)
            if len(store) >= self.max_entries:
                oldest_key = next(iter(store))
                store.pop(oldest_key, None)
            store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)

    def get_poster(self, imdb_id: str) -> CacheEntry | None:
        """Return the cached poster entry for a movie."""
        return self._get(self._posters, imdb_id)

    def set_poster(self, imdb_id: str, poster: str | None) -> None:
        """Cache a poster URL, or None when the movie has no poster."""
        self._set(self._posters, imdb_id, poster, self.ttl_seconds)

    def get_plot(self, imdb_id: str) -> CacheEntry | None:
        """Return the cached plot entry for a movie."""
        return self._get(self._plots, imdb_id)

    def set_plot(self, imdb_id: str, plot: str | None) -> None:
        """Cache a plot, or None when the movie has no plot."""
        self._set(self._plots, imdb_id, plot, self.ttl_seconds)

    def was_queried(self, term: str) -> bool:
        """Return True when a search term was already sent to OMDb."""
        return self._get(self._queries, term.lower()) is not None

    def mark_queried(self, term: str) -> None:
        """Record that a search term was sent to OMDb."""
        self._set(self._queries, term.lower(), True, self.query_ttl_seconds)

    def reset_queries(self) -> None:
        """Forget every queried search term."""
        with self._lock:
            self._queries.clear()

    def sweep_expired(self) -> int:
        """Drop expired entries from every map and return how many were removed."""
        now = self._clock()
        removed = 0
        with self._lock:
            for store in (self._posters, self._plots, self._queries):
                expired = [key for key, entry in store.items() if entry.expires_at <= now]
                for key in expired:
                    del store[key]
                removed += len(expired)
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._posters) + len(self._plots) + len(self._queries)
