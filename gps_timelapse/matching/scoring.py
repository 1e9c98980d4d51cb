"""Weighted scoring and rating of candidate segments."""

from __future__ import annotations

from typing import TypeVar

import numpy as np

from ..config import RATING_EXCELLENT_BELOW, RATING_FAIR_BELOW, RATING_GOOD_BELOW
from ..models import Rating
from .models import ScoreBreakdown, ScoringConfig

Number = TypeVar("Number", float, np.ndarray)


def weighted_total(
    start_distance: Number,
    end_distance: Number,
    duration_deviation: Number,
    master_deviation: Number,
    config: ScoringConfig,
) -> Number:
    """Return the weighted sum for scalars or equally shaped numpy arrays."""

    return (
        start_distance * config.w_start
        + end_distance * config.w_end
        + duration_deviation * config.w_duration
        + master_deviation * config.w_master
    )


def rate(total_score: float, is_valid: bool) -> Rating:
    """Map a total score onto its qualitative band."""

    if not is_valid:
        return Rating.UNUSABLE
    if total_score < RATING_EXCELLENT_BELOW:
        return Rating.EXCELLENT
    if total_score < RATING_GOOD_BELOW:
        return Rating.GOOD
    if total_score < RATING_FAIR_BELOW:
        return Rating.FAIR
    return Rating.POOR


def score(
    start_distance: float,
    end_distance: float,
    duration_deviation: float,
    master_deviation: float,
    config: ScoringConfig,
) -> ScoreBreakdown:
    """Score one start/end pairing against a target window.

    The start threshold is ``max_distance_m * start_distance_multiplier`` and
    therefore stricter than the end threshold.
    """

    total = float(
        weighted_total(
            start_distance, end_distance, duration_deviation, master_deviation, config
        )
    )
    is_start_valid = start_distance <= config.start_threshold_m
    is_end_valid = end_distance <= config.max_distance_m
    return ScoreBreakdown(
        start_distance=float(start_distance),
        end_distance=float(end_distance),
        duration_deviation=float(duration_deviation),
        master_deviation=float(master_deviation),
        total_score=total,
        rating=rate(total, is_start_valid and is_end_valid),
        is_start_valid=bool(is_start_valid),
        is_end_valid=bool(is_end_valid),
    )


__all__ = ["rate", "score", "weighted_total"]
