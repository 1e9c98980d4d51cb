"""Search a single track for the segment that best continues a GPS window."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Optional, Tuple

import numpy as np

from ..models import GpsPoint, Track
from .geo import distance_meters, distances_to, nearest_index
from .models import (
    InvalidMatch,
    MatchOutcome,
    MatchResult,
    ScoringConfig,
    ValidMatch,
)
from .scoring import score, weighted_total

_LOG = logging.getLogger(__name__)

SearchWindow = Tuple[float, float]


@dataclass(slots=True)
class _Candidate:
    """Indices and raw measurements for the best pairing seen so far."""

    total_score: float
    start_index: int
    end_index: int
    start_distance: float
    end_distance: float
    duration_deviation: float
    master_deviation: float


@dataclass(slots=True)
class _SearchStats:
    fade_rejected: int = 0
    start_pruned: int = 0
    no_duration: int = 0
    closest_start_m: float = float("inf")


def fade_tolerance(track: Track, fade_overlap: float) -> float:
    """Return how far the lead-in sample may sit from ``p.t - fade_overlap``.

    Half the fade, widened to half the sampling interval on tracks recorded
    more coarsely than the fade itself.
    """

    return max(fade_overlap / 2.0, track.sample_interval / 2.0)


def find_segment(
    track: Track,
    target_start: GpsPoint,
    target_end: GpsPoint,
    clip_duration: float,
    search_window: SearchWindow,
    config: ScoringConfig,
    fade_overlap: float = 0.0,
    master_end: Optional[GpsPoint] = None,
) -> MatchOutcome:
    """Return the best-scoring segment of ``track`` for a target window.

    Args:
        track: Source track searched for candidate start/end samples.
        target_start: Position the segment should start from.
        target_end: Position the segment should converge towards.
        clip_duration: Desired segment length in seconds.
        search_window: Inclusive ``(start, end)`` time bounds for start samples.
        config: Weights and thresholds used for scoring.
        fade_overlap: Lead-in seconds consumed by a crossfade. When positive,
            the sample nearest ``p.t - fade_overlap`` is compared against
            ``target_start`` instead of ``p`` itself.
        master_end: Optional reference end position; adds a master deviation
            term to every candidate's score.

    Returns:
        :class:`ValidMatch` with the lowest-scoring valid candidate, otherwise
        :class:`InvalidMatch` carrying the best scored attempt (if any) and a
        readable reason.
    """

    window_start, window_end = float(search_window[0]), float(search_window[1])
    times = track.times
    lo = int(np.searchsorted(times, window_start, side="left"))
    hi = int(np.searchsorted(times, window_end, side="right"))
    if window_end < window_start or hi <= lo:
        reason = (
            f"no track points within search window "
            f"[{window_start:.1f}s, {window_end:.1f}s]"
        )
        _LOG.debug("Track %s: %s", track.track_id, reason)
        return InvalidMatch(reason=reason)

    min_span = clip_duration * config.min_duration_multiplier
    max_span = clip_duration * config.max_duration_multiplier
    start_threshold = config.start_threshold_m
    tolerance = fade_tolerance(track, fade_overlap) if fade_overlap > 0.0 else 0.0

    # End samples past the video or GPS coverage cannot be extracted.
    end_limit = int(np.searchsorted(times, track.effective_max, side="right"))

    best_valid: Optional[_Candidate] = None
    best_attempt: Optional[_Candidate] = None
    stats = _SearchStats()

    for i in range(lo, hi):
        p_time = float(times[i])
        compare_idx = i
        if fade_overlap > 0.0:
            lead_time = p_time - fade_overlap
            compare_idx = nearest_index(track, lead_time)
            if abs(float(times[compare_idx]) - lead_time) > tolerance:
                stats.fade_rejected += 1
                continue

        start_distance = distance_meters(
            target_start.lat,
            target_start.lon,
            float(track.lats[compare_idx]),
            float(track.lons[compare_idx]),
        )
        if start_distance > start_threshold:
            stats.start_pruned += 1
            stats.closest_start_m = min(stats.closest_start_m, start_distance)
            continue

        j_lo = int(np.searchsorted(times, p_time + min_span, side="left"))
        j_hi = min(
            end_limit, int(np.searchsorted(times, p_time + max_span, side="right"))
        )
        if j_hi <= j_lo:
            stats.no_duration += 1
            continue

        end_distances = distances_to(
            target_end.lat, target_end.lon, track.lats[j_lo:j_hi], track.lons[j_lo:j_hi]
        )
        deviations = np.abs((times[j_lo:j_hi] - p_time) - clip_duration)
        if master_end is not None:
            master_deviations = distances_to(
                master_end.lat,
                master_end.lon,
                track.lats[j_lo:j_hi],
                track.lons[j_lo:j_hi],
            )
        else:
            master_deviations = np.zeros_like(end_distances)
        totals = weighted_total(
            start_distance, end_distances, deviations, master_deviations, config
        )

        k = int(np.argmin(totals))
        if best_attempt is None or totals[k] < best_attempt.total_score:
            best_attempt = _candidate(
                totals, k, i, j_lo, start_distance, end_distances, deviations,
                master_deviations,
            )

        end_valid = end_distances <= config.max_distance_m
        if np.any(end_valid):
            masked = np.where(end_valid, totals, np.inf)
            k = int(np.argmin(masked))
            if best_valid is None or masked[k] < best_valid.total_score:
                best_valid = _candidate(
                    totals, k, i, j_lo, start_distance, end_distances, deviations,
                    master_deviations,
                )

    if best_valid is not None:
        return ValidMatch(result=_to_result(track, best_valid, config))

    reason = _failure_reason(stats, best_attempt, config, min_span, max_span, fade_overlap)
    _LOG.debug("Track %s: no valid segment (%s)", track.track_id, reason)
    attempt = None
    if best_attempt is not None:
        attempt = replace(_to_result(track, best_attempt, config), failure_reason=reason)
    return InvalidMatch(reason=reason, best_attempt=attempt)


def _candidate(
    totals: np.ndarray,
    k: int,
    start_index: int,
    offset: int,
    start_distance: float,
    end_distances: np.ndarray,
    deviations: np.ndarray,
    master_deviations: np.ndarray,
) -> _Candidate:
    return _Candidate(
        total_score=float(totals[k]),
        start_index=start_index,
        end_index=offset + k,
        start_distance=start_distance,
        end_distance=float(end_distances[k]),
        duration_deviation=float(deviations[k]),
        master_deviation=float(master_deviations[k]),
    )


def _to_result(track: Track, candidate: _Candidate, config: ScoringConfig) -> MatchResult:
    breakdown = score(
        candidate.start_distance,
        candidate.end_distance,
        candidate.duration_deviation,
        candidate.master_deviation,
        config,
    )
    return MatchResult(
        start_point=track.points[candidate.start_index],
        end_point=track.points[candidate.end_index],
        start_distance=breakdown.start_distance,
        end_distance=breakdown.end_distance,
        duration_deviation=breakdown.duration_deviation,
        master_deviation=breakdown.master_deviation,
        total_score=breakdown.total_score,
        rating=breakdown.rating,
        is_start_valid=breakdown.is_start_valid,
        is_end_valid=breakdown.is_end_valid,
    )


def _failure_reason(
    stats: _SearchStats,
    best_attempt: Optional[_Candidate],
    config: ScoringConfig,
    min_span: float,
    max_span: float,
    fade_overlap: float,
) -> str:
    if best_attempt is not None:
        return (
            f"end distance {best_attempt.end_distance:.1f}m exceeds "
            f"{config.max_distance_m:.1f}m threshold"
        )
    if stats.no_duration:
        return f"no points within duration range [{min_span:.1f}s, {max_span:.1f}s]"
    if stats.start_pruned:
        return (
            f"start distance {stats.closest_start_m:.1f}m exceeds "
            f"{config.start_threshold_m:.1f}m threshold"
        )
    return f"no sample close to the {fade_overlap:.1f}s fade lead-in"


__all__ = ["SearchWindow", "fade_tolerance", "find_segment"]
