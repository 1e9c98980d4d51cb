"""Great-circle distance and time lookups over GPS tracks."""

from __future__ import annotations

import math
from typing import Sequence, Union

import numpy as np
from numpy.typing import NDArray

from ..errors import EmptyTrackError
from ..models import GpsPoint, Track

EARTH_RADIUS_M = 6_371_000.0

MetricArray = NDArray[np.float64]
TrackLike = Union[Track, Sequence[GpsPoint]]


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the haversine distance in metres between two coordinates."""

    sin = math.sin
    cos = math.cos
    radians = math.radians
    lat1_rad = radians(lat1)
    lat2_rad = radians(lat2)
    delta_lat = lat2_rad - lat1_rad
    delta_lon = radians(lon2 - lon1)
    sin_half_lat = sin(delta_lat / 2.0)
    sin_half_lon = sin(delta_lon / 2.0)
    a = sin_half_lat**2 + cos(lat1_rad) * cos(lat2_rad) * sin_half_lon**2
    # Rounding can push ``a`` marginally above 1 for antipodal pairs.
    if a > 1.0:
        a = 1.0
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return EARTH_RADIUS_M * c


def point_distance(first: GpsPoint, second: GpsPoint) -> float:
    return distance_meters(first.lat, first.lon, second.lat, second.lon)


def distances_to(
    lat: float,
    lon: float,
    lats: MetricArray,
    lons: MetricArray,
) -> MetricArray:
    """Vectorised haversine from one coordinate to many."""

    lat_rad = np.radians(lat)
    lats_rad = np.radians(np.asarray(lats, dtype=float))
    delta_lat = lats_rad - lat_rad
    delta_lon = np.radians(np.asarray(lons, dtype=float) - lon)
    a = (
        np.sin(delta_lat / 2.0) ** 2
        + np.cos(lat_rad) * np.cos(lats_rad) * np.sin(delta_lon / 2.0) ** 2
    )
    a = np.clip(a, 0.0, 1.0)
    return EARTH_RADIUS_M * 2.0 * np.arctan2(np.sqrt(a), np.sqrt(1.0 - a))


def nearest_index(track: TrackLike, target_time: float) -> int:
    """Return the index of the sample closest in time to ``target_time``.

    Ties resolve to the earliest sample. Raises :class:`EmptyTrackError` when
    the track holds no samples.
    """

    if isinstance(track, Track):
        times = track.times
    else:
        times = np.fromiter((p.t for p in track), dtype=float)
    if times.size == 0:
        raise EmptyTrackError("Cannot look up a nearest point on an empty track")
    # argmin returns the first occurrence, which is the tie-break we want.
    return int(np.argmin(np.abs(times - float(target_time))))


def nearest_point(track: TrackLike, target_time: float) -> GpsPoint:
    """Return the sample whose time is closest to ``target_time``."""

    index = nearest_index(track, target_time)
    return track.points[index] if isinstance(track, Track) else track[index]


__all__ = [
    "EARTH_RADIUS_M",
    "distance_meters",
    "distances_to",
    "nearest_index",
    "nearest_point",
    "point_distance",
]
