from __future__ import annotations

import numpy as np
import pytest

from gps_timelapse.matching import ScoringConfig, rate, score, weighted_total
from gps_timelapse.models import Rating


def test_default_weights_and_thresholds() -> None:
    cfg = ScoringConfig()
    assert (cfg.w_start, cfg.w_end, cfg.w_duration, cfg.w_master) == (10.0, 2.0, 0.5, 0.5)
    assert cfg.max_distance_m == 25.0
    assert cfg.start_threshold_m == pytest.approx(15.0)


@pytest.mark.parametrize(
    "total,expected",
    [
        (0.0, Rating.EXCELLENT),
        (59.99, Rating.EXCELLENT),
        (60.0, Rating.GOOD),
        (179.9, Rating.GOOD),
        (180.0, Rating.FAIR),
        (349.9, Rating.FAIR),
        (350.0, Rating.POOR),
        (10_000.0, Rating.POOR),
    ],
)
def test_rating_bands(total: float, expected: Rating) -> None:
    assert rate(total, True) is expected


def test_rating_is_monotonic() -> None:
    order = [Rating.EXCELLENT, Rating.GOOD, Rating.FAIR, Rating.POOR]
    previous = 0
    for total in np.linspace(0.0, 500.0, 101):
        current = order.index(rate(float(total), True))
        assert current >= previous
        previous = current


def test_invalid_match_is_unusable_regardless_of_score() -> None:
    assert rate(0.0, False) is Rating.UNUSABLE


def test_score_combines_weights() -> None:
    result = score(1.0, 2.0, 3.0, 4.0, ScoringConfig())
    assert result.total_score == pytest.approx(10.0 + 4.0 + 1.5 + 2.0)
    assert result.rating is Rating.EXCELLENT
    assert result.is_valid


def test_start_threshold_is_stricter_than_end_threshold() -> None:
    cfg = ScoringConfig()
    # 20 m passes the end threshold but not the start threshold.
    start_fail = score(20.0, 0.0, 0.0, 0.0, cfg)
    end_ok = score(0.0, 20.0, 0.0, 0.0, cfg)
    assert not start_fail.is_start_valid
    assert start_fail.rating is Rating.UNUSABLE
    assert end_ok.is_valid


def test_threshold_boundaries_are_inclusive() -> None:
    cfg = ScoringConfig()
    assert score(cfg.start_threshold_m, cfg.max_distance_m, 0.0, 0.0, cfg).is_valid
    assert not score(0.0, cfg.max_distance_m + 0.01, 0.0, 0.0, cfg).is_end_valid


def test_weighted_total_accepts_arrays() -> None:
    cfg = ScoringConfig()
    ends = np.array([0.0, 1.0, 2.0])
    totals = weighted_total(1.0, ends, np.zeros(3), np.zeros(3), cfg)
    assert totals.tolist() == pytest.approx([10.0, 12.0, 14.0])


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_distance_m": 0.0},
        {"start_distance_multiplier": -1.0},
        {"min_duration_multiplier": 3.0, "max_duration_multiplier": 2.0},
    ],
)
def test_invalid_scoring_config_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        ScoringConfig(**kwargs)
