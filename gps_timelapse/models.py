"""Core records shared by the matcher, scheduler and reporting layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from .errors import InputError

MIN_TRACK_POINTS = 3


class Rating(str, Enum):
    """Qualitative band attached to a scored match."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    UNUSABLE = "Unusable"


@dataclass(frozen=True, slots=True)
class GpsPoint:
    t: float
    lat: float
    lon: float


@dataclass(frozen=True, slots=True)
class Track:
    """GPS trace belonging to one source video.

    ``points`` must hold at least three samples sorted by time. When
    ``video_duration`` is known the usable range stops at whichever of the
    video or the GPS coverage ends first.
    """

    track_id: str
    points: Tuple[GpsPoint, ...]
    video_duration: Optional[float] = None
    times: NDArray[np.float64] = field(init=False, repr=False, compare=False)
    lats: NDArray[np.float64] = field(init=False, repr=False, compare=False)
    lons: NDArray[np.float64] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        points = tuple(self.points)
        if len(points) < MIN_TRACK_POINTS:
            raise InputError(
                f"Track {self.track_id} has {len(points)} points; "
                f"at least {MIN_TRACK_POINTS} are required"
            )
        for index, point in enumerate(points):
            _validate_point(self.track_id, index, point)
        times = np.fromiter((p.t for p in points), dtype=float, count=len(points))
        if np.any(np.diff(times) < 0.0):
            raise InputError(f"Track {self.track_id} points are not sorted by time")
        if self.video_duration is not None and not self.video_duration > 0.0:
            raise InputError(
                f"Track {self.track_id} has invalid video duration {self.video_duration}"
            )
        object.__setattr__(self, "points", points)
        object.__setattr__(self, "times", times)
        object.__setattr__(
            self,
            "lats",
            np.fromiter((p.lat for p in points), dtype=float, count=len(points)),
        )
        object.__setattr__(
            self,
            "lons",
            np.fromiter((p.lon for p in points), dtype=float, count=len(points)),
        )

    def __len__(self) -> int:
        return len(self.points)

    @property
    def min_time(self) -> float:
        return float(self.times[0])

    @property
    def max_time(self) -> float:
        return float(self.times[-1])

    @property
    def duration(self) -> float:
        return self.max_time - self.min_time

    @property
    def effective_max(self) -> float:
        """Return the time beyond which GPS coverage or the video ends."""

        if self.video_duration is None:
            return self.max_time
        return min(float(self.video_duration), self.max_time)

    @property
    def sample_interval(self) -> float:
        """Return the median spacing between distinct sample times."""

        deltas = np.diff(self.times)
        positive = deltas[deltas > 0.0]
        if positive.size == 0:
            return 0.0
        return float(np.median(positive))


def _validate_point(track_id: str, index: int, point: GpsPoint) -> None:
    values = (point.t, point.lat, point.lon)
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
        raise InputError(f"Track {track_id} point {index} has non-finite values")
    if point.t < 0.0:
        raise InputError(f"Track {track_id} point {index} has negative time {point.t}")
    if not -90.0 <= point.lat <= 90.0:
        raise InputError(f"Track {track_id} point {index} latitude {point.lat} out of range")
    if not -180.0 <= point.lon <= 180.0:
        raise InputError(
            f"Track {track_id} point {index} longitude {point.lon} out of range"
        )


def build_track(
    track_id: str,
    samples: Sequence[Tuple[float, float, float]],
    video_duration: Optional[float] = None,
) -> Track:
    """Create a :class:`Track` from ``(t, lat, lon)`` tuples."""

    points = tuple(GpsPoint(float(t), float(lat), float(lon)) for t, lat, lon in samples)
    return Track(track_id=track_id, points=points, video_duration=video_duration)


@dataclass(frozen=True, slots=True)
class ClipAssignment:
    """One entry of the extraction plan handed to the external cutter."""

    clip_index: int
    source_track: str
    extract_start: float
    extract_duration: float
    rating: Rating
    score: float
    skips: int = 0
    is_fallback: bool = False

    @property
    def extract_end(self) -> float:
        return self.extract_start + self.extract_duration


@dataclass(frozen=True, slots=True)
class MasterCandidateResult:
    """Path-quality summary for one candidate reference track."""

    candidate_track: str
    clips_extracted: int
    average_clip_score: float
    skip_penalty: float
    total_score: float
    excellent_count: int
    good_count: int
    error: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        return self.error is None and self.clips_extracted > 0


__all__ = [
    "ClipAssignment",
    "GpsPoint",
    "MasterCandidateResult",
    "MIN_TRACK_POINTS",
    "Rating",
    "Track",
    "build_track",
]
