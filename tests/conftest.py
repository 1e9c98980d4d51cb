"""Global pytest fixtures & helpers.

Adds project root to path and provides synthetic track builders shared by the
matcher, scheduler and evaluator tests.
"""
from __future__ import annotations

import os
import sys
from typing import Callable, List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from gps_timelapse.models import Track, build_track

# Roughly 11.1 m of longitude per 1e-4 degrees at the equator.
LON_STEP_DEG = 1.0e-4


# --- Factory helpers -------------------------------------------------
def make_line_track(
    track_id: str,
    duration_s: int = 60,
    *,
    step_s: float = 1.0,
    lat: float = 0.0,
    lon_offset: float = 0.0,
    video_duration: Optional[float] = None,
) -> Track:
    """Track moving east at ~11 m/s, sampled every ``step_s`` seconds."""

    count = int(duration_s / step_s) + 1
    samples = [
        (i * step_s, lat, lon_offset + i * step_s * LON_STEP_DEG) for i in range(count)
    ]
    return build_track(track_id, samples, video_duration=video_duration)


def make_scenario_pair() -> List[Track]:
    samples = [(0.0, 0.0, 0.0), (5.0, 0.0, 0.001), (10.0, 0.0, 0.002)]
    return [build_track("A", samples), build_track("B", samples)]


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def line_track_factory() -> Callable[..., Track]:
    return make_line_track


@pytest.fixture
def scenario_pair() -> List[Track]:
    return make_scenario_pair()


@pytest.fixture
def parallel_tracks() -> List[Track]:
    return [make_line_track(name) for name in ("A", "B", "C")]
