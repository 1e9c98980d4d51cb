"""Reference (master) track evaluation service.

Simulates a full schedule once per candidate reference track and ranks the
candidates by path quality. Simulations are independent, so they run on a
thread pool; each one owns its own scheduling state. Aggregation is kept in
pure functions (`summarize_candidate`, `rank_candidates`) so it can be tested
without running the scheduler.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import MASTER_EVAL_MAX_WORKERS, MASTER_SKIP_PENALTY
from ..errors import InputError
from ..matching import MatchCache, ScoringConfig
from ..models import ClipAssignment, MasterCandidateResult, Rating, Track
from ..scheduling import ClipScheduler, ScheduleResult, ScheduleSettings


def summarize_candidate(
    candidate_track: str,
    clips: Sequence[ClipAssignment],
    *,
    skip_penalty: float = MASTER_SKIP_PENALTY,
    stop_reason: Optional[str] = None,
) -> MasterCandidateResult:
    """Aggregate one simulated plan into a :class:`MasterCandidateResult`.

    Every clip that needed more than one skipped track to fill costs
    ``skip_penalty`` per extra skip. A plan without clips marks the candidate
    unusable.
    """

    if not clips:
        detail = f" ({stop_reason})" if stop_reason else ""
        return MasterCandidateResult(
            candidate_track=candidate_track,
            clips_extracted=0,
            average_clip_score=0.0,
            skip_penalty=0.0,
            total_score=float("inf"),
            excellent_count=0,
            good_count=0,
            error=f"candidate produced no clips{detail}",
        )
    average = sum(clip.score for clip in clips) / len(clips)
    penalty = sum(max(0, clip.skips - 1) for clip in clips) * skip_penalty
    return MasterCandidateResult(
        candidate_track=candidate_track,
        clips_extracted=len(clips),
        average_clip_score=average,
        skip_penalty=penalty,
        total_score=average + penalty,
        excellent_count=sum(1 for clip in clips if clip.rating is Rating.EXCELLENT),
        good_count=sum(1 for clip in clips if clip.rating is Rating.GOOD),
    )


def rank_candidates(
    results: Sequence[MasterCandidateResult],
) -> Tuple[List[MasterCandidateResult], List[MasterCandidateResult]]:
    """Split results into (ranked usable, unusable).

    Usable candidates sort ascending by total score; ties keep input order.
    """

    usable = [r for r in results if r.is_usable]
    unusable = [r for r in results if not r.is_usable]
    usable.sort(key=lambda r: r.total_score)
    return usable, unusable


@dataclass(slots=True)
class MasterEvaluation:
    """Outcome of evaluating every candidate reference track."""

    ranked: List[MasterCandidateResult] = field(default_factory=list)
    unusable: List[MasterCandidateResult] = field(default_factory=list)
    schedules: Dict[str, ScheduleResult] = field(default_factory=dict)

    @property
    def recommended(self) -> Optional[MasterCandidateResult]:
        return self.ranked[0] if self.ranked else None


@dataclass(slots=True)
class MasterEvaluatorConfig:
    max_workers: int = MASTER_EVAL_MAX_WORKERS
    skip_penalty: float = MASTER_SKIP_PENALTY
    use_cache: bool = True
    logger: logging.Logger | None = None


class MasterEvaluator:
    def __init__(
        self,
        tracks: Sequence[Track],
        scoring: Optional[ScoringConfig] = None,
        settings: Optional[ScheduleSettings] = None,
        config: Optional[MasterEvaluatorConfig] = None,
    ):
        self.config = config or MasterEvaluatorConfig()
        if self.config.max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        self._cache = MatchCache() if self.config.use_cache else None
        self._scheduler = ClipScheduler(
            tracks, scoring=scoring, settings=settings, cache=self._cache
        )

    @property
    def tracks(self) -> Tuple[Track, ...]:
        return self._scheduler.tracks

    def evaluate(self, candidates: Sequence[str] | None = None) -> MasterEvaluation:
        """Simulate every candidate and rank them by path quality."""

        if candidates is None:
            indices = list(range(len(self.tracks)))
        else:
            if not candidates:
                raise InputError("Candidate list is empty")
            indices = [self._scheduler.index_of(track_id) for track_id in candidates]

        self._log.info(
            "Evaluating %d master candidates across %d tracks",
            len(indices),
            len(self.tracks),
        )
        summaries: Dict[int, MasterCandidateResult] = {}
        schedules: Dict[str, ScheduleResult] = {}
        workers = min(self.config.max_workers, len(indices))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_map = {
                executor.submit(self._scheduler.run, index): index for index in indices
            }
            for future in as_completed(future_map):
                index = future_map[future]
                track_id = self.tracks[index].track_id
                try:
                    schedule = future.result()
                except InputError as exc:
                    self._log.error("Master candidate %s failed: %s", track_id, exc)
                    summaries[index] = _failed_candidate(track_id, str(exc))
                    continue
                schedules[track_id] = schedule
                summaries[index] = summarize_candidate(
                    track_id,
                    schedule.clips,
                    skip_penalty=self.config.skip_penalty,
                    stop_reason=schedule.stop_reason,
                )

        ordered = [summaries[index] for index in indices]
        ranked, unusable = rank_candidates(ordered)
        for result in unusable:
            self._log.warning(
                "Master candidate %s unusable: %s", result.candidate_track, result.error
            )
        if ranked:
            best = ranked[0]
            self._log.info(
                "Recommended master %s (score=%.1f, clips=%d, skip penalty=%.0f)",
                best.candidate_track,
                best.total_score,
                best.clips_extracted,
                best.skip_penalty,
            )
        else:
            self._log.warning("No usable master candidate found")
        return MasterEvaluation(ranked=ranked, unusable=unusable, schedules=schedules)


def _failed_candidate(track_id: str, message: str) -> MasterCandidateResult:
    return MasterCandidateResult(
        candidate_track=track_id,
        clips_extracted=0,
        average_clip_score=0.0,
        skip_penalty=0.0,
        total_score=float("inf"),
        excellent_count=0,
        good_count=0,
        error=message,
    )


__all__ = [
    "MasterEvaluation",
    "MasterEvaluator",
    "MasterEvaluatorConfig",
    "rank_candidates",
    "summarize_candidate",
]
