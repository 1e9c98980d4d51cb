from __future__ import annotations

from gps_timelapse.matching import (
    InvalidMatch,
    MatchCache,
    ScoringConfig,
    match_cache_key,
    match_cache_scope,
)
from gps_timelapse.models import GpsPoint

START = GpsPoint(0.0, 0.0, 0.0)
END = GpsPoint(5.0, 0.0, 0.001)


def _key(source: str = "A", start: GpsPoint = START):
    return match_cache_key(
        source, (0.0, 30.0), "M", 5.0, start, END, 1.0, END, ScoringConfig()
    )


def test_key_depends_on_target_position() -> None:
    assert _key() == _key()
    assert _key() != _key(start=GpsPoint(0.0, 0.0, 0.0005))
    assert _key("A") != _key("B")


def test_cache_hits_and_misses() -> None:
    cache = MatchCache()
    outcome = InvalidMatch(reason="nothing")
    assert cache.get(_key()) is None
    cache.set(_key(), outcome)
    assert cache.get(_key()) is outcome
    assert (cache.hits, cache.misses) == (1, 1)


def test_cache_evicts_least_recently_used() -> None:
    cache = MatchCache(max_entries=2)
    a, b, c = _key("A"), _key("B"), _key("C")
    cache.set(a, InvalidMatch(reason="a"))
    cache.set(b, InvalidMatch(reason="b"))
    cache.get(a)
    cache.set(c, InvalidMatch(reason="c"))
    assert len(cache) == 2
    assert cache.get(b) is None
    assert cache.get(a) is not None


def test_cache_scope_clears_on_exit() -> None:
    with match_cache_scope() as cache:
        cache.set(_key(), InvalidMatch(reason="x"))
        assert len(cache) == 1
    assert len(cache) == 0
