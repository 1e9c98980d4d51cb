"""Video duration lookup via ``ffprobe``.

Only the container duration and per-stream durations are requested; the
usable range of a track is capped at whichever is known.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from .config import FFPROBE_BINARY
from .errors import MediaProbeError

_LOG = logging.getLogger(__name__)

_DURATION_ENTRIES = "format=duration:stream=codec_type,duration"


def probe_duration(video_path: str | Path) -> float:
    """Return the duration of a video in seconds."""

    source_path = Path(video_path).expanduser()
    if not source_path.exists():
        raise MediaProbeError(f"Video file not found: {source_path}")

    duration = _extract_duration(_query_durations(source_path))
    if duration is None:
        raise MediaProbeError(f"ffprobe reported no duration for {source_path}")
    _LOG.debug("Probed %s duration=%.3fs", source_path.name, duration)
    return duration


def _query_durations(video_path: Path) -> dict[str, Any]:
    command = [
        FFPROBE_BINARY,
        "-v",
        "error",
        "-show_entries",
        _DURATION_ENTRIES,
        "-of",
        "json",
        str(video_path),
    ]
    try:
        completed = subprocess.run(command, check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise MediaProbeError(
            f"ffprobe executable '{FFPROBE_BINARY}' was not found; install FFmpeg "
            "or set TIMELAPSE_FFPROBE"
        ) from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise MediaProbeError(
            f"ffprobe could not read {video_path.name}: {stderr or 'exit code ' + str(exc.returncode)}"
        ) from exc

    try:
        return json.loads(completed.stdout)
    except json.JSONDecodeError as exc:
        raise MediaProbeError(f"ffprobe returned invalid JSON for {video_path.name}") from exc


def _extract_duration(payload: dict[str, Any]) -> float | None:
    duration = _to_positive_float(payload.get("format", {}).get("duration"))
    if duration is not None:
        return duration
    # Some containers only report per-stream durations.
    known = [
        value
        for value in (
            _to_positive_float(stream.get("duration"))
            for stream in payload.get("streams", [])
            if stream.get("codec_type") == "video"
        )
        if value is not None
    ]
    return max(known) if known else None


def _to_positive_float(value: Any) -> float | None:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0.0 else None
