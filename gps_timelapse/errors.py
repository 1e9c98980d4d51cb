"""Central error types used across the application."""

from __future__ import annotations


class TimelapseError(RuntimeError):
    """Base error for timelapse assembly failures."""


class InputError(TimelapseError):
    """Raised when tracks or track lists violate the input contract."""


class EmptyTrackError(InputError):
    """Raised when a nearest-point lookup is attempted on an empty track."""


class ScheduleExhaustedError(TimelapseError):
    """Raised when a schedule ends with fewer clips than the caller requires."""


class TelemetryParseError(InputError):
    """Raised when a telemetry file yields no usable GPS samples."""


class MediaProbeError(TimelapseError):
    """Raised when ffprobe cannot report a video duration."""


__all__ = [
    "TimelapseError",
    "InputError",
    "EmptyTrackError",
    "ScheduleExhaustedError",
    "TelemetryParseError",
    "MediaProbeError",
]
