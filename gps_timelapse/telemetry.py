"""Telemetry readers turning sidecar files into :class:`Track` objects.

Two formats are supported:

* subtitle (``.srt``) telemetry written by action cameras and drones, where
  every cue carries the position at the cue's start time, either as
  ``[latitude: 47.1] [longitude: 8.5]`` or ``GPS(8.5, 47.1, 420)`` (lon first);
* ``.csv`` files with time, latitude and longitude columns.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .config import TELEMETRY_SUFFIXES, VIDEO_SUFFIXES
from .errors import InputError, MediaProbeError, TelemetryParseError
from .media_probe import probe_duration
from .models import MIN_TRACK_POINTS, Track, build_track

_LOG = logging.getLogger(__name__)

Sample = Tuple[float, float, float]
DurationProbe = Callable[[Path], float]

_CUE_TIME_RE = re.compile(r"(\d+):(\d{2}):(\d{2})[,.](\d{1,3})\s*-->")
_LAT_RE = re.compile(r"latitude\s*:\s*(-?\d+(?:\.\d+)?)", re.IGNORECASE)
# Some firmware writes "longtitude".
_LON_RE = re.compile(r"longt?itude\s*:\s*(-?\d+(?:\.\d+)?)", re.IGNORECASE)
_GPS_TUPLE_RE = re.compile(
    r"GPS\s*\(\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)", re.IGNORECASE
)

_CSV_TIME_COLUMNS = ("t", "time", "time_s", "seconds")
_CSV_LAT_COLUMNS = ("lat", "latitude")
_CSV_LON_COLUMNS = ("lon", "lng", "longitude")


def parse_srt_samples(text: str) -> List[Sample]:
    """Return ``(t, lat, lon)`` samples from subtitle telemetry text.

    Cues without a position, without a fix (0, 0) or with out-of-range
    coordinates are skipped.
    """

    samples: List[Sample] = []
    skipped = 0
    for block in re.split(r"\r?\n\s*\r?\n", text):
        time_match = _CUE_TIME_RE.search(block)
        if time_match is None:
            continue
        hours, minutes, seconds, millis = time_match.groups()
        t = (
            int(hours) * 3600
            + int(minutes) * 60
            + int(seconds)
            + int(millis.ljust(3, "0")) / 1000.0
        )
        position = _block_position(block)
        if position is None or not _plausible(*position):
            skipped += 1
            continue
        samples.append((t, position[0], position[1]))
    if skipped:
        _LOG.debug("Skipped %d subtitle cues without a usable position", skipped)
    return samples


def _block_position(block: str) -> Optional[Tuple[float, float]]:
    lat_match = _LAT_RE.search(block)
    lon_match = _LON_RE.search(block)
    if lat_match and lon_match:
        return float(lat_match.group(1)), float(lon_match.group(1))
    gps_match = _GPS_TUPLE_RE.search(block)
    if gps_match:
        lon, lat = gps_match.groups()
        return float(lat), float(lon)
    return None


def _plausible(lat: float, lon: float) -> bool:
    if lat == 0.0 and lon == 0.0:
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def _finish_track(
    path: Path,
    samples: List[Sample],
    track_id: Optional[str],
    video_duration: Optional[float],
) -> Track:
    if len(samples) < MIN_TRACK_POINTS:
        raise TelemetryParseError(
            f"{path} holds {len(samples)} usable GPS samples; "
            f"at least {MIN_TRACK_POINTS} are required"
        )
    # Stable sort keeps recording order for duplicate timestamps.
    samples = sorted(samples, key=lambda sample: sample[0])
    return build_track(track_id or path.stem, samples, video_duration=video_duration)


def read_srt_track(
    path: str | Path,
    *,
    track_id: Optional[str] = None,
    video_duration: Optional[float] = None,
) -> Track:
    """Load a subtitle telemetry file into a track."""

    srt_path = Path(path)
    text = srt_path.read_text(encoding="utf-8-sig", errors="replace")
    return _finish_track(srt_path, parse_srt_samples(text), track_id, video_duration)


def _pick_column(columns: Iterable[str], aliases: Sequence[str]) -> Optional[str]:
    lookup = {str(column).strip().lower(): column for column in columns}
    for alias in aliases:
        if alias in lookup:
            return lookup[alias]
    return None


def read_csv_track(
    path: str | Path,
    *,
    track_id: Optional[str] = None,
    video_duration: Optional[float] = None,
) -> Track:
    """Load a ``t,lat,lon`` CSV file into a track."""

    csv_path = Path(path)
    try:
        df = pd.read_csv(csv_path)
    except (ValueError, pd.errors.ParserError) as exc:
        raise TelemetryParseError(f"Unable to read {csv_path}: {exc}") from exc

    time_col = _pick_column(df.columns, _CSV_TIME_COLUMNS)
    lat_col = _pick_column(df.columns, _CSV_LAT_COLUMNS)
    lon_col = _pick_column(df.columns, _CSV_LON_COLUMNS)
    if time_col is None or lat_col is None or lon_col is None:
        raise TelemetryParseError(
            f"{csv_path} must provide time, latitude and longitude columns "
            f"(found: {', '.join(map(str, df.columns))})"
        )

    frame = df[[time_col, lat_col, lon_col]].apply(pd.to_numeric, errors="coerce")
    frame = frame.dropna()
    samples = [
        (float(t), float(lat), float(lon))
        for t, lat, lon in frame.itertuples(index=False, name=None)
        if t >= 0.0 and _plausible(float(lat), float(lon))
    ]
    return _finish_track(csv_path, samples, track_id, video_duration)


def discover_telemetry(paths: Sequence[str | Path]) -> List[Path]:
    """Expand files and directories into a sorted list of telemetry files."""

    found: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found.extend(
                sorted(
                    child
                    for child in path.iterdir()
                    if child.is_file() and child.suffix.lower() in TELEMETRY_SUFFIXES
                )
            )
        elif path.is_file():
            found.append(path)
        else:
            raise InputError(f"Telemetry path not found: {path}")
    return found


def find_video(telemetry_path: Path) -> Optional[Path]:
    """Return the video next to a telemetry file sharing its stem, if any."""

    for candidate in sorted(telemetry_path.parent.glob(f"{telemetry_path.stem}.*")):
        if candidate.suffix.lower() in VIDEO_SUFFIXES:
            return candidate
    return None


def read_track(
    path: Path,
    *,
    track_id: Optional[str] = None,
    video_duration: Optional[float] = None,
) -> Track:
    suffix = path.suffix.lower()
    if suffix == ".srt":
        return read_srt_track(path, track_id=track_id, video_duration=video_duration)
    if suffix == ".csv":
        return read_csv_track(path, track_id=track_id, video_duration=video_duration)
    raise InputError(f"Unsupported telemetry format: {path}")


def load_tracks(
    paths: Sequence[str | Path],
    *,
    probe: bool = True,
    prober: DurationProbe = probe_duration,
) -> List[Track]:
    """Load every telemetry file into a track, probing sibling video durations.

    Probe failures are logged and the track falls back to its GPS coverage.
    """

    files = discover_telemetry(paths)
    if not files:
        raise InputError("No telemetry files found")

    tracks: List[Track] = []
    for path in files:
        duration: Optional[float] = None
        if probe:
            video = find_video(path)
            if video is None:
                _LOG.info("No video found next to %s; using GPS coverage only", path.name)
            else:
                try:
                    duration = prober(video)
                except MediaProbeError as exc:
                    _LOG.warning("Duration probe failed for %s: %s", video.name, exc)
        track = read_track(path, video_duration=duration)
        _LOG.info(
            "Loaded track %s: %d points, %.1fs usable",
            track.track_id,
            len(track),
            track.effective_max,
        )
        tracks.append(track)

    ids = [track.track_id for track in tracks]
    duplicates = sorted({track_id for track_id in ids if ids.count(track_id) > 1})
    if duplicates:
        raise InputError(f"Duplicate track identifiers: {', '.join(duplicates)}")
    return tracks


__all__ = [
    "discover_telemetry",
    "find_video",
    "load_tracks",
    "parse_srt_samples",
    "read_csv_track",
    "read_srt_track",
    "read_track",
]
