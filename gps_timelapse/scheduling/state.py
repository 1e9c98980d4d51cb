"""Mutable per-run scheduling state and the pure selection state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Sequence

from ..models import GpsPoint, Track


class SchedulePhase(str, Enum):
    """Where a scheduler run stands on the reference timeline."""

    SEED = "seed"
    CONTINUE = "continue"
    EXHAUSTED = "exhausted"


class SelectionState(str, Enum):
    """Progress of picking a source track for a single clip."""

    SEEKING = "seeking"
    FOUND = "found"
    FALLBACK = "fallback"
    EXHAUSTED = "exhausted"


_TERMINAL_SELECTION = frozenset(
    {SelectionState.FOUND, SelectionState.FALLBACK, SelectionState.EXHAUSTED}
)


def next_selection_state(
    state: SelectionState,
    *,
    match_valid: bool,
    tracks_remaining: int,
    fallback_available: bool,
) -> SelectionState:
    """Return the selection state after one track has been tried.

    Terminal states are returned unchanged.
    """

    if state in _TERMINAL_SELECTION:
        return state
    if match_valid:
        return SelectionState.FOUND
    if tracks_remaining > 0:
        return SelectionState.SEEKING
    if fallback_available:
        return SelectionState.FALLBACK
    return SelectionState.EXHAUSTED


@dataclass(slots=True)
class ScheduleState:
    """State owned by exactly one scheduler run.

    ``cursors`` maps a track index to the time up to which that track has
    been consumed.
    """

    cursors: Dict[int, float]
    round_robin_index: int
    last_used_track_index: int
    clip_counter: int = 0
    master_time_position: float = 0.0
    attempts: int = 0
    previous_clip_end_gps: Optional[GpsPoint] = None
    previous_clip_track: Optional[int] = None
    previous_clip_end_time: Optional[float] = None
    exhausted: bool = field(default=False)

    @classmethod
    def start(cls, tracks: Sequence[Track], start_index: int) -> "ScheduleState":
        return cls(
            cursors={index: track.min_time for index, track in enumerate(tracks)},
            round_robin_index=start_index,
            last_used_track_index=start_index,
        )

    def phase(self, total_duration: float) -> SchedulePhase:
        if self.exhausted or self.master_time_position >= total_duration:
            return SchedulePhase.EXHAUSTED
        if self.clip_counter == 0:
            return SchedulePhase.SEED
        return SchedulePhase.CONTINUE


__all__ = [
    "SchedulePhase",
    "ScheduleState",
    "SelectionState",
    "next_selection_state",
]
