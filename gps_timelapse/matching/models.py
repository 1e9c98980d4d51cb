"""Dataclasses describing scoring inputs and segment search outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .. import config
from ..models import GpsPoint, Rating


@dataclass(frozen=True, slots=True)
class ScoringConfig:
    """Weights and thresholds used to rate candidate segments."""

    w_start: float = config.SCORE_WEIGHT_START
    w_end: float = config.SCORE_WEIGHT_END
    w_duration: float = config.SCORE_WEIGHT_DURATION
    w_master: float = config.SCORE_WEIGHT_MASTER
    max_distance_m: float = config.MATCHING_MAX_DISTANCE_M
    start_distance_multiplier: float = config.MATCHING_START_DISTANCE_MULTIPLIER
    min_duration_multiplier: float = config.MATCHING_MIN_DURATION_MULTIPLIER
    max_duration_multiplier: float = config.MATCHING_MAX_DURATION_MULTIPLIER

    def __post_init__(self) -> None:
        if self.max_distance_m <= 0.0:
            raise ValueError("max_distance_m must be positive")
        if self.start_distance_multiplier <= 0.0:
            raise ValueError("start_distance_multiplier must be positive")
        if not 0.0 < self.min_duration_multiplier <= self.max_duration_multiplier:
            raise ValueError("duration multipliers must satisfy 0 < min <= max")

    @property
    def start_threshold_m(self) -> float:
        """Stricter threshold applied to the start point."""

        return self.max_distance_m * self.start_distance_multiplier


@dataclass(frozen=True, slots=True)
class ScoreBreakdown:
    """Weighted score and validity flags for one start/end pairing."""

    start_distance: float
    end_distance: float
    duration_deviation: float
    master_deviation: float
    total_score: float
    rating: Rating
    is_start_valid: bool
    is_end_valid: bool

    @property
    def is_valid(self) -> bool:
        return self.is_start_valid and self.is_end_valid


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of scoring one candidate segment inside a track."""

    start_point: GpsPoint
    end_point: GpsPoint
    start_distance: float
    end_distance: float
    duration_deviation: float
    master_deviation: float
    total_score: float
    rating: Rating
    is_start_valid: bool
    is_end_valid: bool
    failure_reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.is_start_valid and self.is_end_valid

    @property
    def duration(self) -> float:
        return self.end_point.t - self.start_point.t


@dataclass(frozen=True, slots=True)
class ValidMatch:
    """Segment search succeeded; ``result`` is safe to extract."""

    result: MatchResult

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class InvalidMatch:
    """Segment search failed.

    ``best_attempt`` holds the lowest-scoring scored candidate for diagnostics
    and is ``None`` when nothing could be scored at all.
    """

    reason: str
    best_attempt: Optional[MatchResult] = None

    @property
    def is_valid(self) -> bool:
        return False


MatchOutcome = Union[ValidMatch, InvalidMatch]


__all__ = [
    "InvalidMatch",
    "MatchOutcome",
    "MatchResult",
    "ScoreBreakdown",
    "ScoringConfig",
    "ValidMatch",
]
