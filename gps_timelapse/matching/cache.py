"""Optional in-memory cache for segment search outcomes."""

from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from threading import RLock
from typing import Hashable, Iterator, Optional, Tuple

from ..config import MATCH_CACHE_MAX_ENTRIES
from ..models import GpsPoint
from .models import MatchOutcome, ScoringConfig

MatchCacheKey = Tuple[Hashable, ...]


def match_cache_key(
    source_track: str,
    search_window: Tuple[float, float],
    target_track: str,
    clip_duration: float,
    target_start: GpsPoint,
    target_end: GpsPoint,
    fade_overlap: float,
    master_end: Optional[GpsPoint],
    config: ScoringConfig,
) -> MatchCacheKey:
    """Return the key identifying one segment search.

    Targets are part of the key because a continuation clip starts wherever
    the previous clip ended, not at a fixed reference time.
    """

    return (
        source_track,
        round(float(search_window[0]), 6),
        round(float(search_window[1]), 6),
        target_track,
        float(clip_duration),
        target_start,
        target_end,
        float(fade_overlap),
        master_end,
        config,
    )


class MatchCache:
    """Thread-safe LRU cache of segment search outcomes."""

    def __init__(self, max_entries: int = MATCH_CACHE_MAX_ENTRIES) -> None:
        self._cache: "OrderedDict[MatchCacheKey, MatchOutcome]" = OrderedDict()
        self._lock = RLock()
        self._max_entries = max(1, max_entries)
        self.hits = 0
        self.misses = 0

    def get(self, key: MatchCacheKey) -> Optional[MatchOutcome]:
        """Return a cached outcome if available."""
        with self._lock:
            value = self._cache.get(key)
            if value is None:
                self.misses += 1
                return None
            self.hits += 1
            self._cache.move_to_end(key)
            return value

    def set(self, key: MatchCacheKey, value: MatchOutcome) -> None:
        """Persist an outcome in the cache."""
        with self._lock:
            self._cache[key] = value
            self._cache.move_to_end(key)
            while len(self._cache) > self._max_entries:
                self._cache.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


@contextmanager
def match_cache_scope(
    max_entries: int = MATCH_CACHE_MAX_ENTRIES,
) -> Iterator[MatchCache]:
    """Provide a run-scoped cache and ensure cleanup afterwards."""

    cache = MatchCache(max_entries=max_entries)
    try:
        yield cache
    finally:
        cache.clear()


__all__ = ["MatchCache", "MatchCacheKey", "match_cache_key", "match_cache_scope"]
