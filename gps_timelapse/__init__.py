"""GPS timelapse assembly package."""

from .main import main
from .models import ClipAssignment, GpsPoint, MasterCandidateResult, Rating, Track
from .errors import InputError, ScheduleExhaustedError, TimelapseError

__all__ = [
    "main",
    "ClipAssignment",
    "GpsPoint",
    "MasterCandidateResult",
    "Rating",
    "Track",
    "InputError",
    "ScheduleExhaustedError",
    "TimelapseError",
]
