"""Clip scheduling across multiple GPS-tagged source tracks."""

from .scheduler import (
    STOP_EXHAUSTED,
    STOP_MAX_ATTEMPTS,
    STOP_MAX_CLIPS,
    STOP_REFERENCE_TOO_SHORT,
    STOP_TIMELINE_COMPLETE,
    ClipScheduler,
    ScheduleResult,
    ScheduleSettings,
    build_schedule,
    require_min_clips,
)
from .state import SchedulePhase, ScheduleState, SelectionState, next_selection_state

__all__ = [
    "ClipScheduler",
    "SchedulePhase",
    "ScheduleResult",
    "ScheduleSettings",
    "ScheduleState",
    "SelectionState",
    "STOP_EXHAUSTED",
    "STOP_MAX_ATTEMPTS",
    "STOP_MAX_CLIPS",
    "STOP_REFERENCE_TOO_SHORT",
    "STOP_TIMELINE_COMPLETE",
    "build_schedule",
    "next_selection_state",
    "require_min_clips",
]
