from __future__ import annotations

import argparse
from datetime import datetime
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .config import (
    CLIP_LENGTH_S,
    FADE_DURATION_S,
    LEGACY_MATCHING,
    MIN_CLIPS,
    OUTPUT_FILE,
    OUTPUT_FILE_TIMESTAMP_ENABLED,
)
from .errors import InputError, ScheduleExhaustedError, TimelapseError
from .excel_writer import write_report
from .matching import ScoringConfig
from .models import MasterCandidateResult, Track
from .plan_export import write_plan_json
from .scheduling import (
    ClipScheduler,
    ScheduleResult,
    ScheduleSettings,
    require_min_clips,
)
from .services import MasterEvaluation, MasterEvaluator
from .telemetry import load_tracks
from .tools.plan_map import create_plan_map

AUTO_MASTER = "auto"


def _setup_logging(verbose: bool = False) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _resolve_output_path(explicit: Optional[Path]) -> Path:
    if explicit is not None:
        return explicit
    if OUTPUT_FILE_TIMESTAMP_ENABLED:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return Path(f"{OUTPUT_FILE}_{timestamp}.xlsx")
    return Path(f"{OUTPUT_FILE}.xlsx")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Plan a continuous timelapse from several GPS-tagged videos by"
            " chaining the segments that best continue a reference path."
        )
    )
    parser.add_argument(
        "telemetry",
        nargs="+",
        type=Path,
        help="Telemetry files (.srt/.csv) or directories containing them",
    )
    parser.add_argument(
        "--master",
        default=AUTO_MASTER,
        help="Reference track id, or 'auto' to evaluate every candidate (default)",
    )
    parser.add_argument("--clip-length", type=float, default=CLIP_LENGTH_S)
    parser.add_argument("--fade", type=float, default=FADE_DURATION_S)
    parser.add_argument(
        "--legacy",
        action="store_true",
        default=LEGACY_MATCHING,
        help="Compare literal start times instead of fade-shifted lead-ins",
    )
    parser.add_argument(
        "--no-probe",
        action="store_true",
        help="Skip ffprobe and rely on GPS coverage for track lengths",
    )
    parser.add_argument("--min-clips", type=int, default=MIN_CLIPS)
    parser.add_argument("--output", type=Path, help="Report workbook (.xlsx)")
    parser.add_argument("--json", type=Path, help="Write the clip plan as JSON")
    parser.add_argument("--map", type=Path, help="Write an HTML map of the plan")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _choose_master(
    tracks: Sequence[Track],
    master: str,
    scoring: ScoringConfig,
    settings: ScheduleSettings,
) -> Tuple[ScheduleResult, Optional[MasterEvaluation]]:
    if master != AUTO_MASTER:
        scheduler = ClipScheduler(tracks, scoring=scoring, settings=settings)
        return scheduler.run(scheduler.index_of(master)), None

    evaluation = MasterEvaluator(tracks, scoring=scoring, settings=settings).evaluate()
    best = evaluation.recommended
    if best is None:
        raise ScheduleExhaustedError("No master candidate produced any clips")
    return evaluation.schedules[best.candidate_track], evaluation


def run(args: argparse.Namespace) -> ScheduleResult:
    """Load tracks, plan the clips and write every requested output."""

    scoring = ScoringConfig()
    settings = ScheduleSettings(
        clip_length=args.clip_length,
        fade_duration=args.fade,
        legacy_mode=args.legacy,
    )
    logging.info("Loading telemetry from %d path(s) ...", len(args.telemetry))
    tracks = load_tracks(args.telemetry, probe=not args.no_probe)

    schedule, evaluation = _choose_master(tracks, args.master, scoring, settings)
    clips = require_min_clips(schedule, args.min_clips)
    logging.info(
        "Planned %d clips against master %s (%s, fallbacks=%d)",
        len(clips),
        schedule.master_track,
        schedule.stop_reason,
        schedule.fallback_count,
    )

    ranking: Optional[List[MasterCandidateResult]] = None
    unusable: Optional[List[MasterCandidateResult]] = None
    if evaluation is not None:
        ranking, unusable = evaluation.ranked, evaluation.unusable

    output_path = _resolve_output_path(args.output)
    write_report(
        output_path,
        clips,
        master_track=schedule.master_track,
        ranking=ranking,
        unusable=unusable,
        summary={
            "Stop Reason": schedule.stop_reason,
            "Clip Length (s)": settings.clip_length,
            "Fade (s)": settings.fade_duration,
            "Legacy Matching": settings.legacy_mode,
        },
    )
    if args.json is not None:
        write_plan_json(
            args.json,
            clips,
            master_track=schedule.master_track,
            fade_duration=settings.fade_duration,
        )
        logging.info("Clip plan written to %s", args.json)
    if args.map is not None:
        create_plan_map(tracks, clips, schedule.master_track, output_html_path=args.map)
        logging.info("Plan map written to %s", args.map)
    return schedule


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point used via ``python -m gps_timelapse`` or ``gps-timelapse``."""

    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        run(args)
    except (InputError, FileNotFoundError) as exc:
        logging.error("Failed to load telemetry: %s", exc)
        return 1
    except ScheduleExhaustedError as exc:
        logging.error("%s", exc)
        return 1
    except (TimelapseError, ValueError) as exc:
        logging.error("Planning failed: %s", exc)
        return 1
    return 0
