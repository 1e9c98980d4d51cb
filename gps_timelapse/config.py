"""Central configuration for the GPS timelapse assembler.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Every tunable can be overridden through environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Input/Output
# ---------------------------------------------------------------------------
# Report workbook name (without extension). Paths can be absolute or relative.
OUTPUT_FILE = os.getenv("TIMELAPSE_OUTPUT_FILE", "timelapse_plan")

# Append _YYYYMMDD_HHMMSS to the output name when True.
OUTPUT_FILE_TIMESTAMP_ENABLED = _env_bool("TIMELAPSE_OUTPUT_TIMESTAMP", True)

# Telemetry file suffixes picked up when a directory is given on the CLI.
TELEMETRY_SUFFIXES = (".srt", ".csv")

# Video suffixes probed for duration next to a telemetry file.
VIDEO_SUFFIXES = (".mp4", ".mov", ".m4v", ".mkv")

# ffprobe binary used for duration lookups.
FFPROBE_BINARY = os.getenv("TIMELAPSE_FFPROBE", "ffprobe")


# ---------------------------------------------------------------------------
# Clip scheduling
# ---------------------------------------------------------------------------
# Target length (seconds) of every clip on the reference timeline.
CLIP_LENGTH_S = _env_float("TIMELAPSE_CLIP_LENGTH_S", 5.0)

# Crossfade overlap (seconds) between consecutive clips.
FADE_DURATION_S = _env_float("TIMELAPSE_FADE_DURATION_S", 1.0)

# Half-width (seconds) of the per-track search window around the expected time.
SEARCH_HALF_WINDOW_S = _env_float("TIMELAPSE_SEARCH_HALF_WINDOW_S", 30.0)

# Safety valves against pathological input.
MAX_CLIPS = _env_int("TIMELAPSE_MAX_CLIPS", 200)
MAX_ATTEMPTS = _env_int("TIMELAPSE_MAX_ATTEMPTS", 500)

# A plan shorter than this is reported as exhausted.
MIN_CLIPS = _env_int("TIMELAPSE_MIN_CLIPS", 2)

# Shortest clip the external cutter accepts.
MIN_EXTRACT_DURATION_S = 0.5

# Score attached to fallback clips, which carry no GPS validation.
FALLBACK_CLIP_SCORE = _env_float("TIMELAPSE_FALLBACK_CLIP_SCORE", 500.0)

# Compare the literal start time instead of the fade-shifted lead-in position.
LEGACY_MATCHING = _env_bool("TIMELAPSE_LEGACY_MATCHING", False)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------
SCORE_WEIGHT_START = _env_float("TIMELAPSE_WEIGHT_START", 10.0)
SCORE_WEIGHT_END = _env_float("TIMELAPSE_WEIGHT_END", 2.0)
SCORE_WEIGHT_DURATION = _env_float("TIMELAPSE_WEIGHT_DURATION", 0.5)
SCORE_WEIGHT_MASTER = _env_float("TIMELAPSE_WEIGHT_MASTER", 0.5)

# Maximum end-point distance (metres); the start threshold is a fraction of it.
MATCHING_MAX_DISTANCE_M = _env_float("TIMELAPSE_MAX_DISTANCE_M", 25.0)
MATCHING_START_DISTANCE_MULTIPLIER = _env_float(
    "TIMELAPSE_START_DISTANCE_MULTIPLIER", 0.6
)

# Candidate durations are limited to this band around the clip length.
MATCHING_MIN_DURATION_MULTIPLIER = _env_float(
    "TIMELAPSE_MIN_DURATION_MULTIPLIER", 0.5
)
MATCHING_MAX_DURATION_MULTIPLIER = _env_float(
    "TIMELAPSE_MAX_DURATION_MULTIPLIER", 2.0
)

# Rating bands applied to valid total scores.
RATING_EXCELLENT_BELOW = 60.0
RATING_GOOD_BELOW = 180.0
RATING_FAIR_BELOW = 350.0


# ---------------------------------------------------------------------------
# Master evaluation
# ---------------------------------------------------------------------------
# Penalty per extra track skipped while filling a clip.
MASTER_SKIP_PENALTY = _env_float("TIMELAPSE_MASTER_SKIP_PENALTY", 100.0)

# Threads used to simulate candidate masters in parallel.
MASTER_EVAL_MAX_WORKERS = _env_int("TIMELAPSE_MASTER_EVAL_MAX_WORKERS", 4)

# Maximum number of segment search results kept in the in-memory cache.
MATCH_CACHE_MAX_ENTRIES = _env_int("TIMELAPSE_MATCH_CACHE_MAX_ENTRIES", 4096)


# ---------------------------------------------------------------------------
# Excel formatting
# ---------------------------------------------------------------------------
# Automatically size columns after writing each sheet (openpyxl only).
EXCEL_AUTOSIZE_COLUMNS = True
EXCEL_AUTOSIZE_MAX_WIDTH = 50  # characters
EXCEL_AUTOSIZE_MIN_WIDTH = 6  # characters
EXCEL_AUTOSIZE_PADDING = 2  # extra characters added to the detected max
EXCEL_AUTOSIZE_MAX_ROWS = 5000  # skip autosize for very large sheets
