"""Round-robin clip scheduler.

Walks the reference timeline clip by clip. Each clip starts wherever the
previous clip actually ended and aims at the reference track's position one
clip length further on, so small per-clip errors do not compound. Source
tracks are tried in rotation; when none of them continues the path the last
used track simply keeps playing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import List, Optional, Sequence, Tuple

from .. import config
from ..errors import InputError, ScheduleExhaustedError
from ..models import ClipAssignment, GpsPoint, Rating, Track
from ..matching import (
    MatchCache,
    MatchOutcome,
    MatchResult,
    ScoringConfig,
    find_segment,
    match_cache_key,
    nearest_point,
)
from .state import (
    SchedulePhase,
    ScheduleState,
    SelectionState,
    next_selection_state,
)

_LOG = logging.getLogger(__name__)

STOP_TIMELINE_COMPLETE = "timeline complete"
STOP_EXHAUSTED = "tracks exhausted"
STOP_MAX_CLIPS = "max clips reached"
STOP_MAX_ATTEMPTS = "max attempts reached"
STOP_REFERENCE_TOO_SHORT = "reference shorter than one clip"


@dataclass(frozen=True, slots=True)
class ScheduleSettings:
    """Timeline parameters for one scheduler run."""

    clip_length: float = config.CLIP_LENGTH_S
    fade_duration: float = config.FADE_DURATION_S
    search_half_window: float = config.SEARCH_HALF_WINDOW_S
    max_clips: int = config.MAX_CLIPS
    max_attempts: int = config.MAX_ATTEMPTS
    legacy_mode: bool = config.LEGACY_MATCHING
    fallback_clip_score: float = config.FALLBACK_CLIP_SCORE
    min_extract_duration: float = config.MIN_EXTRACT_DURATION_S

    def __post_init__(self) -> None:
        if self.clip_length <= 0.0:
            raise ValueError("clip_length must be positive")
        if not 0.0 <= self.fade_duration < self.clip_length:
            raise ValueError("fade_duration must be in [0, clip_length)")
        if self.search_half_window <= 0.0:
            raise ValueError("search_half_window must be positive")
        if self.max_clips <= 0 or self.max_attempts <= 0:
            raise ValueError("max_clips and max_attempts must be positive")


@dataclass(slots=True)
class ScheduleResult:
    """Ordered clip plan plus how the run ended."""

    master_track: str
    clips: List[ClipAssignment] = field(default_factory=list)
    stop_reason: str = STOP_TIMELINE_COMPLETE
    attempts: int = 0
    timeline_position: float = 0.0

    @property
    def fallback_count(self) -> int:
        return sum(1 for clip in self.clips if clip.is_fallback)


class ClipScheduler:
    """Builds a clip plan for one reference (master) track.

    Instances are stateless between runs; every :meth:`run` call owns a fresh
    :class:`ScheduleState`.

    The end target is always the reference track's position, and the same
    point is passed as ``master_end``. Outside legacy mode the master
    deviation therefore equals the end distance, so end error is weighted
    ``w_end + w_master``. Legacy mode drops the master term and weighs it
    ``w_end`` alone.
    """

    def __init__(
        self,
        tracks: Sequence[Track],
        scoring: Optional[ScoringConfig] = None,
        settings: Optional[ScheduleSettings] = None,
        cache: Optional[MatchCache] = None,
    ) -> None:
        if not tracks:
            raise InputError("At least one track is required to build a schedule")
        ids = [track.track_id for track in tracks]
        if len(set(ids)) != len(ids):
            raise InputError("Track identifiers must be unique")
        self.tracks: Tuple[Track, ...] = tuple(tracks)
        self.scoring = scoring or ScoringConfig()
        self.settings = settings or ScheduleSettings()
        self.cache = cache
        self._log = logging.getLogger(self.__class__.__name__)

    def index_of(self, track_id: str) -> int:
        for index, track in enumerate(self.tracks):
            if track.track_id == track_id:
                return index
        raise InputError(f"Unknown track '{track_id}'")

    def run(self, master_index: int, start_index: Optional[int] = None) -> ScheduleResult:
        """Return the clip plan using ``tracks[master_index]`` as reference."""

        if not 0 <= master_index < len(self.tracks):
            raise InputError(f"Master index {master_index} out of range")
        start = master_index if start_index is None else start_index
        if not 0 <= start < len(self.tracks):
            raise InputError(f"Round-robin start index {start} out of range")

        master = self.tracks[master_index]
        total_duration = float(math.floor(master.effective_max))
        state = ScheduleState.start(self.tracks, start)
        result = ScheduleResult(master_track=master.track_id)
        self._log.debug(
            "Scheduling against master=%s total=%.1fs tracks=%d legacy=%s",
            master.track_id,
            total_duration,
            len(self.tracks),
            self.settings.legacy_mode,
        )

        if total_duration < self.settings.clip_length:
            result.stop_reason = STOP_REFERENCE_TOO_SHORT
        else:
            result.stop_reason = self._fill(master, total_duration, state, result.clips)

        result.attempts = state.attempts
        result.timeline_position = state.master_time_position
        self._log.debug(
            "Master %s produced %d clips (%s, attempts=%d, fallbacks=%d)",
            master.track_id,
            len(result.clips),
            result.stop_reason,
            result.attempts,
            result.fallback_count,
        )
        return result

    # ------------------------------------------------------------------
    # Timeline loop
    # ------------------------------------------------------------------
    def _fill(
        self,
        master: Track,
        total_duration: float,
        state: ScheduleState,
        clips: List[ClipAssignment],
    ) -> str:
        while True:
            phase = state.phase(total_duration)
            if phase is SchedulePhase.EXHAUSTED:
                return STOP_EXHAUSTED if state.exhausted else STOP_TIMELINE_COMPLETE
            if len(clips) >= self.settings.max_clips:
                return STOP_MAX_CLIPS
            if state.attempts >= self.settings.max_attempts:
                return STOP_MAX_ATTEMPTS
            clip = self._next_clip(master, total_duration, phase, state)
            if clip is None:
                state.exhausted = True
                continue
            clips.append(clip)

    def _next_clip(
        self,
        master: Track,
        total_duration: float,
        phase: SchedulePhase,
        state: ScheduleState,
    ) -> Optional[ClipAssignment]:
        settings = self.settings
        seed = phase is SchedulePhase.SEED
        if seed or state.previous_clip_end_gps is None:
            target_start = nearest_point(master, 0.0)
        else:
            target_start = state.previous_clip_end_gps
        target_end_time = min(
            state.master_time_position + settings.clip_length, total_duration
        )
        target_end = nearest_point(master, target_end_time)
        fade_overlap = 0.0 if seed or settings.legacy_mode else settings.fade_duration
        master_end = None if settings.legacy_mode else target_end

        selection = SelectionState.SEEKING
        skips = 0
        track_count = len(self.tracks)
        for offset in range(track_count):
            index = (state.round_robin_index + offset) % track_count
            outcome = self._search_track(
                index, master, state, target_start, target_end, fade_overlap, master_end
            )
            state.attempts += 1
            selection = next_selection_state(
                selection,
                match_valid=outcome.is_valid,
                tracks_remaining=track_count - offset - 1,
                fallback_available=self._fallback_available(state),
            )
            if selection is SelectionState.FOUND:
                return self._accept(index, outcome.result, state, skips)
            skips += 1

        if selection is SelectionState.FALLBACK:
            return self._fallback(state, skips)
        self._log.info(
            "No track can extend the timeline at %.1fs; stopping",
            state.master_time_position,
        )
        return None

    def _search_track(
        self,
        index: int,
        master: Track,
        state: ScheduleState,
        target_start: GpsPoint,
        target_end: GpsPoint,
        fade_overlap: float,
        master_end: Optional[GpsPoint],
    ) -> MatchOutcome:
        track = self.tracks[index]
        cursor = state.cursors[index]
        half = self.settings.search_half_window
        expected = max(cursor, state.master_time_position)
        window = (max(cursor, expected - half), min(track.effective_max, expected + half))
        clip_length = self.settings.clip_length

        key = None
        if self.cache is not None:
            key = match_cache_key(
                track.track_id,
                window,
                master.track_id,
                clip_length,
                target_start,
                target_end,
                fade_overlap,
                master_end,
                self.scoring,
            )
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        outcome = find_segment(
            track,
            target_start,
            target_end,
            clip_length,
            window,
            self.scoring,
            fade_overlap=fade_overlap,
            master_end=master_end,
        )
        if key is not None:
            self.cache.set(key, outcome)
        if not outcome.is_valid:
            self._log.debug(
                "Clip %d: track %s rejected (%s)",
                state.clip_counter,
                track.track_id,
                outcome.reason,
            )
        return outcome

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------
    def _lead_in(self, state: ScheduleState, start: float) -> float:
        if state.clip_counter == 0:
            return 0.0
        return max(0.0, min(self.settings.fade_duration, start))

    def _advance_timeline(self, state: ScheduleState) -> None:
        if state.clip_counter == 0:
            state.master_time_position += self.settings.clip_length
        else:
            state.master_time_position += (
                self.settings.clip_length - self.settings.fade_duration
            )
        state.clip_counter += 1

    def _accept(
        self,
        index: int,
        match: MatchResult,
        state: ScheduleState,
        skips: int,
    ) -> ClipAssignment:
        track = self.tracks[index]
        start = match.start_point.t
        end = match.end_point.t
        lead = self._lead_in(state, start)
        clip = ClipAssignment(
            clip_index=state.clip_counter,
            source_track=track.track_id,
            extract_start=start - lead,
            extract_duration=(end - start) + lead,
            rating=match.rating,
            score=match.total_score,
            skips=skips,
        )
        state.cursors[index] = end
        state.previous_clip_end_gps = match.end_point
        state.previous_clip_track = index
        state.previous_clip_end_time = end
        state.last_used_track_index = index
        state.round_robin_index = (index + 1) % len(self.tracks)
        self._advance_timeline(state)
        self._log.debug(
            "Clip %d: %s %.2fs+%.2fs score=%.1f (%s, skips=%d)",
            clip.clip_index,
            clip.source_track,
            clip.extract_start,
            clip.extract_duration,
            clip.score,
            clip.rating.value,
            skips,
        )
        return clip

    def _fallback_available(self, state: ScheduleState) -> bool:
        index = state.last_used_track_index
        remaining = self.tracks[index].effective_max - state.cursors[index]
        return remaining >= self.settings.min_extract_duration

    def _fallback(self, state: ScheduleState, skips: int) -> ClipAssignment:
        index = state.last_used_track_index
        track = self.tracks[index]
        start = state.cursors[index]
        duration = min(self.settings.clip_length, track.effective_max - start)
        end = start + duration
        lead = self._lead_in(state, start)
        clip = ClipAssignment(
            clip_index=state.clip_counter,
            source_track=track.track_id,
            extract_start=start - lead,
            extract_duration=duration + lead,
            rating=Rating.UNUSABLE,
            score=self.settings.fallback_clip_score,
            skips=skips,
            is_fallback=True,
        )
        state.cursors[index] = end
        state.previous_clip_end_gps = nearest_point(track, end)
        state.previous_clip_track = index
        state.previous_clip_end_time = end
        self._advance_timeline(state)
        self._log.warning(
            "Clip %d: no track continues the path; reusing %s from %.1fs unvalidated",
            clip.clip_index,
            track.track_id,
            start,
        )
        return clip


def build_schedule(
    tracks: Sequence[Track],
    master_index: int = 0,
    *,
    scoring: Optional[ScoringConfig] = None,
    settings: Optional[ScheduleSettings] = None,
    start_index: Optional[int] = None,
    cache: Optional[MatchCache] = None,
) -> ScheduleResult:
    """Convenience wrapper running a :class:`ClipScheduler` once."""

    scheduler = ClipScheduler(tracks, scoring=scoring, settings=settings, cache=cache)
    return scheduler.run(master_index, start_index=start_index)


def require_min_clips(
    result: ScheduleResult, min_clips: int = config.MIN_CLIPS
) -> List[ClipAssignment]:
    """Return the plan or raise when it is shorter than ``min_clips``."""

    if len(result.clips) < min_clips:
        raise ScheduleExhaustedError(
            f"Schedule for master {result.master_track} produced "
            f"{len(result.clips)} clips ({result.stop_reason}); "
            f"at least {min_clips} required"
        )
    return result.clips


__all__ = [
    "ClipScheduler",
    "ScheduleResult",
    "ScheduleSettings",
    "STOP_EXHAUSTED",
    "STOP_MAX_ATTEMPTS",
    "STOP_MAX_CLIPS",
    "STOP_REFERENCE_TOO_SHORT",
    "STOP_TIMELINE_COMPLETE",
    "build_schedule",
    "require_min_clips",
]
