"""Tests for the single-track segment search."""

from __future__ import annotations

import pytest

from conftest import make_line_track
from gps_timelapse.matching import (
    InvalidMatch,
    ScoringConfig,
    ValidMatch,
    fade_tolerance,
    find_segment,
    nearest_point,
)
from gps_timelapse.models import GpsPoint, Rating, build_track

CFG = ScoringConfig()


def test_exact_continuation_scores_zero() -> None:
    track = make_line_track("A")
    outcome = find_segment(
        track,
        nearest_point(track, 10.0),
        nearest_point(track, 15.0),
        5.0,
        (0.0, 40.0),
        CFG,
    )

    assert isinstance(outcome, ValidMatch)
    result = outcome.result
    assert (result.start_point.t, result.end_point.t) == (10.0, 15.0)
    assert result.total_score == pytest.approx(0.0)
    assert result.rating is Rating.EXCELLENT
    assert result.duration == pytest.approx(5.0)


def test_start_sample_stays_inside_search_window() -> None:
    track = make_line_track("A")
    # Halfway between the t=11 and t=12 samples; only t=12 is inside the window.
    between = GpsPoint(0.0, 0.0, 11.5e-4)
    outcome = find_segment(
        track,
        between,
        nearest_point(track, 17.0),
        5.0,
        (12.0, 40.0),
        CFG,
    )

    assert isinstance(outcome, ValidMatch)
    assert outcome.result.start_point.t == 12.0
    assert outcome.result.end_point.t == 17.0
    assert outcome.result.start_distance == pytest.approx(5.56, abs=0.05)


def test_empty_window_reports_reason() -> None:
    track = make_line_track("A", 20)
    outcome = find_segment(
        track, track.points[0], track.points[5], 5.0, (30.0, 40.0), CFG
    )
    assert isinstance(outcome, InvalidMatch)
    assert "no track points within search window" in outcome.reason
    assert outcome.best_attempt is None


def test_far_away_start_reports_start_distance() -> None:
    track = make_line_track("A")
    far = GpsPoint(0.0, 1.0, 1.0)
    outcome = find_segment(track, far, far, 5.0, (0.0, 60.0), CFG)
    assert isinstance(outcome, InvalidMatch)
    assert outcome.reason.startswith("start distance")
    assert outcome.best_attempt is None


def test_end_distance_failure_keeps_best_attempt() -> None:
    track = make_line_track("A")
    far_end = GpsPoint(0.0, 0.5, 0.0)
    outcome = find_segment(track, track.points[0], far_end, 5.0, (0.0, 5.0), CFG)
    assert isinstance(outcome, InvalidMatch)
    assert outcome.reason.startswith("end distance")
    attempt = outcome.best_attempt
    assert attempt is not None
    assert attempt.rating is Rating.UNUSABLE
    assert not attempt.is_end_valid
    assert attempt.failure_reason == outcome.reason


def test_no_end_sample_in_duration_range() -> None:
    track = make_line_track("A", 20)
    outcome = find_segment(
        track, track.points[19], track.points[20], 5.0, (19.0, 20.0), CFG
    )
    assert isinstance(outcome, InvalidMatch)
    assert outcome.reason.startswith("no points within duration range")


def test_end_samples_capped_by_video_duration() -> None:
    track = make_line_track("A", 60, video_duration=12.0)
    outcome = find_segment(
        track,
        nearest_point(track, 0.0),
        nearest_point(track, 20.0),
        10.0,
        (0.0, 12.0),
        CFG,
    )
    result = outcome.result if outcome.is_valid else outcome.best_attempt
    assert result is not None
    assert result.end_point.t <= 12.0


def test_fade_overlap_compares_lead_in_sample() -> None:
    track = make_line_track("A")
    # Previous clip ended at t=20; with a one second fade the extraction
    # starts at t=20 so the playable part starts at t=21.
    outcome = find_segment(
        track,
        nearest_point(track, 20.0),
        nearest_point(track, 25.0),
        5.0,
        (0.0, 60.0),
        CFG,
        fade_overlap=1.0,
    )
    assert isinstance(outcome, ValidMatch)
    assert outcome.result.start_point.t == 21.0
    assert outcome.result.start_distance == pytest.approx(0.0)


def test_fade_lead_in_before_track_start_is_rejected() -> None:
    track = make_line_track("A")
    # Only t=0 is searched; its lead-in (t=-1) has no sample within 0.5 s.
    outcome = find_segment(
        track, track.points[0], track.points[5], 5.0, (0.0, 0.0), CFG, fade_overlap=1.0
    )
    assert isinstance(outcome, InvalidMatch)
    assert "fade lead-in" in outcome.reason
    assert outcome.best_attempt is None


def test_fade_tolerance_widens_on_sparse_tracks() -> None:
    samples = [(t, 0.0, t * 1.0e-5) for t in (0.0, 10.0, 20.0, 30.0)]
    track = build_track("sparse", samples)
    assert fade_tolerance(track, 1.0) == pytest.approx(5.0)


def test_fade_tolerance_uses_half_fade_on_dense_tracks() -> None:
    track = make_line_track("A", step_s=0.1)
    assert fade_tolerance(track, 1.0) == pytest.approx(0.5)


def test_master_deviation_breaks_ties_towards_reference_end() -> None:
    track = make_line_track("A")
    reference_end = nearest_point(track, 16.0)
    without = find_segment(
        track, track.points[10], track.points[15], 5.0, (10.0, 10.0), CFG
    )
    with_master = find_segment(
        track,
        track.points[10],
        track.points[15],
        5.0,
        (10.0, 10.0),
        CFG,
        master_end=reference_end,
    )
    assert without.result.master_deviation == 0.0
    assert with_master.result.master_deviation == pytest.approx(11.12, abs=0.05)
    assert with_master.result.total_score > without.result.total_score


def test_reference_end_at_target_end_adds_to_end_weight() -> None:
    track = make_line_track("A")
    target_end = GpsPoint(0.0, 0.0, 15.5e-4)
    outcome = find_segment(
        track,
        track.points[10],
        target_end,
        5.0,
        (10.0, 10.0),
        CFG,
        master_end=target_end,
    )

    assert isinstance(outcome, ValidMatch)
    result = outcome.result
    assert result.end_point.t == 15.0
    assert result.master_deviation == pytest.approx(result.end_distance)
    assert result.total_score == pytest.approx(
        result.end_distance * (CFG.w_end + CFG.w_master)
    )


def test_ties_prefer_first_candidate() -> None:
    samples = [(float(t), 0.0, 0.0) for t in range(0, 21)]
    track = build_track("still", samples)
    outcome = find_segment(
        track, track.points[0], track.points[0], 5.0, (0.0, 20.0), CFG
    )
    assert isinstance(outcome, ValidMatch)
    assert outcome.result.start_point.t == 0.0
    assert outcome.result.end_point.t == 5.0
