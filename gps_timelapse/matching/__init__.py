"""Public entry points for GPS-continuity segment matching."""

from __future__ import annotations

from .cache import MatchCache, match_cache_key, match_cache_scope
from .geo import (
    EARTH_RADIUS_M,
    distance_meters,
    distances_to,
    nearest_index,
    nearest_point,
    point_distance,
)
from .models import (
    InvalidMatch,
    MatchOutcome,
    MatchResult,
    ScoreBreakdown,
    ScoringConfig,
    ValidMatch,
)
from .scoring import rate, score, weighted_total
from .segment import fade_tolerance, find_segment

__all__ = [
    "EARTH_RADIUS_M",
    "InvalidMatch",
    "MatchCache",
    "MatchOutcome",
    "MatchResult",
    "ScoreBreakdown",
    "ScoringConfig",
    "ValidMatch",
    "distance_meters",
    "distances_to",
    "fade_tolerance",
    "find_segment",
    "match_cache_key",
    "match_cache_scope",
    "nearest_index",
    "nearest_point",
    "point_distance",
    "rate",
    "score",
    "weighted_total",
]
