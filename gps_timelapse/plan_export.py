"""Serialisation helpers for clip plans and master rankings."""

from __future__ import annotations

import json
import math
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Sequence

from .models import ClipAssignment, MasterCandidateResult


def _normalise_value(value: Any) -> Any:
    """Convert objects to JSON-friendly representations."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (list, tuple)):
        return [_normalise_value(item) for item in value]
    if isinstance(value, dict):
        return {str(key): _normalise_value(val) for key, val in value.items()}
    return value


def json_dumps_sorted(value: Any) -> str:
    """Return canonical JSON for hashing / comparisons."""

    normalised = _normalise_value(value)
    return json.dumps(normalised, sort_keys=True, separators=(",", ":"))


def plan_to_records(clips: Sequence[ClipAssignment]) -> List[Dict[str, Any]]:
    """Return one flat row per clip, in plan order."""

    rows: List[Dict[str, Any]] = []
    for clip in clips:
        rows.append(
            {
                "Clip": clip.clip_index,
                "Source Track": clip.source_track,
                "Extract Start (s)": round(clip.extract_start, 3),
                "Extract Duration (s)": round(clip.extract_duration, 3),
                "Extract End (s)": round(clip.extract_end, 3),
                "Rating": clip.rating.value,
                "Score": round(clip.score, 2),
                "Skipped Tracks": clip.skips,
                "Fallback": clip.is_fallback,
            }
        )
    return rows


def ranking_to_records(
    results: Sequence[MasterCandidateResult],
) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for rank, result in enumerate(results, start=1):
        rows.append(
            {
                "Rank": rank if result.is_usable else None,
                "Candidate": result.candidate_track,
                "Clips": result.clips_extracted,
                "Average Clip Score": _finite_or_none(result.average_clip_score),
                "Skip Penalty": result.skip_penalty,
                "Total Score": _finite_or_none(result.total_score),
                "Excellent": result.excellent_count,
                "Good": result.good_count,
                "Error": result.error,
            }
        )
    return rows


def _finite_or_none(value: float) -> float | None:
    return round(value, 2) if math.isfinite(value) else None


def write_plan_json(
    path: str | Path,
    clips: Sequence[ClipAssignment],
    *,
    master_track: str,
    fade_duration: float,
) -> Path:
    """Write the extraction plan consumed by the external cutter/crossfader."""

    target = Path(path)
    payload = {
        "master_track": master_track,
        "fade_duration": fade_duration,
        "clips": [asdict(clip) for clip in clips],
    }
    target.write_text(
        json.dumps(_normalise_value(payload), indent=2, sort_keys=True),
        encoding="utf-8",
    )
    return target


__all__ = [
    "json_dumps_sorted",
    "plan_to_records",
    "ranking_to_records",
    "write_plan_json",
]
