"""Benchmark the clip scheduler and master evaluation on synthetic tracks."""

from __future__ import annotations

import argparse
import statistics
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Late imports rely on the adjusted sys.path above.
from gps_timelapse.models import Track, build_track  # noqa: E402
from gps_timelapse.scheduling import ScheduleSettings, build_schedule  # noqa: E402
from gps_timelapse.services import (  # noqa: E402
    MasterEvaluator,
    MasterEvaluatorConfig,
)


@dataclass(slots=True)
class StageDurations:
    """Timing measurements (in seconds) for one iteration."""

    schedule: float
    evaluation: float

    @property
    def total(self) -> float:
        return self.schedule + self.evaluation


def _build_tracks(track_count: int, duration_s: int, sample_hz: int) -> List[Track]:
    """Generate parallel tracks along one road with small per-track offsets."""

    base_lat = 47.0
    base_lon = 8.0
    step_deg = 1.0e-4  # roughly 11 m/s eastwards
    tracks: List[Track] = []
    for track_idx in range(track_count):
        jitter = track_idx * 2.0e-6
        samples = []
        for sample_idx in range(duration_s * sample_hz + 1):
            t = sample_idx / sample_hz
            samples.append((t, base_lat + jitter, base_lon + t * step_deg))
        tracks.append(build_track(f"track-{track_idx}", samples))
    return tracks


def run_benchmark(
    track_count: int,
    duration_s: int,
    sample_hz: int,
    iterations: int,
) -> Dict[str, float]:
    if iterations <= 0:
        raise ValueError("iterations must be positive")
    tracks = _build_tracks(track_count, duration_s, sample_hz)
    settings = ScheduleSettings(clip_length=5.0, fade_duration=1.0)

    durations: List[StageDurations] = []
    clip_count = 0
    for _ in range(iterations):
        start = time.perf_counter()
        result = build_schedule(tracks, 0, settings=settings)
        schedule_s = time.perf_counter() - start
        clip_count = len(result.clips)

        start = time.perf_counter()
        evaluator = MasterEvaluator(
            tracks, settings=settings, config=MasterEvaluatorConfig(use_cache=False)
        )
        evaluator.evaluate()
        evaluation_s = time.perf_counter() - start
        durations.append(StageDurations(schedule=schedule_s, evaluation=evaluation_s))

    return {
        "tracks": track_count,
        "points_per_track": duration_s * sample_hz + 1,
        "clips": clip_count,
        "mean_schedule_ms": statistics.fmean(d.schedule for d in durations) * 1000.0,
        "mean_evaluation_ms": statistics.fmean(d.evaluation for d in durations)
        * 1000.0,
        "worst_total_ms": max(d.total for d in durations) * 1000.0,
    }


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchmark scheduling and master evaluation",
    )
    parser.add_argument("--tracks", type=int, default=4)
    parser.add_argument("--duration", type=int, default=600, help="Seconds per track")
    parser.add_argument("--hz", type=int, default=10, help="GPS samples per second")
    parser.add_argument("--iterations", type=int, default=3)
    return parser.parse_args()


def main() -> None:
    """Entry point when running the module as a script."""

    args = _parse_args()
    summary = run_benchmark(args.tracks, args.duration, args.hz, args.iterations)
    for key, value in summary.items():
        if isinstance(value, int):
            print(f"{key}: {value}")
        else:
            print(f"{key}: {value:.3f}")


if __name__ == "__main__":
    main()
