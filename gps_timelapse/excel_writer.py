"""Excel report writer for clip plans and master rankings."""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path
from typing import Any, Dict, Sequence

import pandas as pd
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from .models import ClipAssignment, MasterCandidateResult
from .plan_export import plan_to_records, ranking_to_records

PLAN_SHEET = "Clip Plan"
RANKING_SHEET = "Master Ranking"
UNUSABLE_SHEET = "Unusable Candidates"
SUMMARY_SHEET = "Summary"

PLAN_COLUMNS = [
    "Clip",
    "Source Track",
    "Extract Start (s)",
    "Extract Duration (s)",
    "Extract End (s)",
    "Rating",
    "Score",
    "Skipped Tracks",
    "Fallback",
]
RANKING_COLUMNS = [
    "Rank",
    "Candidate",
    "Clips",
    "Average Clip Score",
    "Skip Penalty",
    "Total Score",
    "Excellent",
    "Good",
]

__all__ = ["write_report"]

SUMMARY_HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(patternType="solid", fgColor="FFFF40FF")
HEADER_BORDER = Border(
    left=Side(style="thin", color="000000"),
    right=Side(style="thin", color="000000"),
    top=Side(style="thin", color="000000"),
    bottom=Side(style="thin", color="000000"),
)
RATING_FILLS = {
    "Excellent": PatternFill(patternType="solid", fgColor="FFC6EFCE"),
    "Good": PatternFill(patternType="solid", fgColor="FFDDEBF7"),
    "Fair": PatternFill(patternType="solid", fgColor="FFFFEB9C"),
    "Poor": PatternFill(patternType="solid", fgColor="FFF8CBAD"),
    "Unusable": PatternFill(patternType="solid", fgColor="FFFFC7CE"),
}

LOGGER = logging.getLogger(__name__)

PathInput = str | Path | PathLike[str]


def _coerce_path(pathlike: PathInput) -> str:
    return str(Path(pathlike))


def _autosize(ws: Worksheet) -> None:
    from .config import (
        EXCEL_AUTOSIZE_COLUMNS,
        EXCEL_AUTOSIZE_MAX_WIDTH,
        EXCEL_AUTOSIZE_MIN_WIDTH,
        EXCEL_AUTOSIZE_PADDING,
        EXCEL_AUTOSIZE_MAX_ROWS,
    )

    if not EXCEL_AUTOSIZE_COLUMNS:
        return
    try:
        if ws.max_row > EXCEL_AUTOSIZE_MAX_ROWS:
            return
        for col_cells in ws.columns:
            max_len = 0
            col_letter = getattr(col_cells[0], "column_letter", None)
            for cell in col_cells:
                val = cell.value
                if val is None:
                    continue
                max_len = max(max_len, len(str(val)))
            width = min(
                EXCEL_AUTOSIZE_MAX_WIDTH,
                max(EXCEL_AUTOSIZE_MIN_WIDTH, max_len + EXCEL_AUTOSIZE_PADDING),
            )
            if col_letter:
                ws.column_dimensions[col_letter].width = width
    except Exception as exc:  # pragma: no cover - autosize is best-effort
        LOGGER.debug("Autosize failed for sheet %s: %s", getattr(ws, "title", "?"), exc)


def _get_worksheet(writer: pd.ExcelWriter, sheet_name: str) -> Worksheet | None:
    try:
        return writer.book[sheet_name]
    except KeyError:
        return writer.sheets.get(sheet_name)


def _style_header_row(ws: Worksheet, row_idx: int, max_col: int | None = None) -> None:
    if row_idx <= 0:
        return
    max_col = max_col or ws.max_column
    for col_idx in range(1, max_col + 1):
        cell = ws.cell(row=row_idx, column=col_idx)
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER
        cell.font = SUMMARY_HEADER_FONT


def _colour_ratings(ws: Worksheet, df: pd.DataFrame) -> None:
    if "Rating" not in df.columns:
        return
    col_idx = list(df.columns).index("Rating") + 1
    for row_idx in range(2, len(df) + 2):
        cell = ws.cell(row=row_idx, column=col_idx)
        fill = RATING_FILLS.get(str(cell.value))
        if fill is not None:
            cell.fill = fill


def _write_sheet(
    writer: pd.ExcelWriter,
    sheet_name: str,
    rows: Sequence[Dict[str, Any]],
    columns: Sequence[str],
) -> None:
    df = pd.DataFrame(list(rows), columns=list(columns))
    df.to_excel(writer, sheet_name=sheet_name, index=False)
    ws = _get_worksheet(writer, sheet_name)
    if ws is None:
        return
    _style_header_row(ws, 1, len(df.columns))
    _colour_ratings(ws, df)
    _autosize(ws)
    LOGGER.debug("Wrote sheet %s rows=%d", sheet_name, len(df))


def write_report(
    filepath: PathInput,
    clips: Sequence[ClipAssignment],
    *,
    master_track: str,
    ranking: Sequence[MasterCandidateResult] | None = None,
    unusable: Sequence[MasterCandidateResult] | None = None,
    summary: Dict[str, Any] | None = None,
) -> str:
    """Write the clip plan (and optional master ranking) to an xlsx workbook."""

    filepath = _coerce_path(filepath)
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        summary_rows = [{"Field": "Master Track", "Value": master_track}]
        summary_rows.append({"Field": "Clips", "Value": len(clips)})
        summary_rows.append(
            {
                "Field": "Fallback Clips",
                "Value": sum(1 for clip in clips if clip.is_fallback),
            }
        )
        for key, value in (summary or {}).items():
            summary_rows.append({"Field": key, "Value": value})
        _write_sheet(writer, SUMMARY_SHEET, summary_rows, ["Field", "Value"])
        _write_sheet(writer, PLAN_SHEET, plan_to_records(clips), PLAN_COLUMNS)
        if ranking is not None:
            _write_sheet(
                writer, RANKING_SHEET, ranking_to_records(ranking), RANKING_COLUMNS
            )
        if unusable:
            _write_sheet(
                writer,
                UNUSABLE_SHEET,
                ranking_to_records(unusable),
                ["Candidate", "Clips", "Error"],
            )
    LOGGER.info("Report saved to %s (clips=%d)", filepath, len(clips))
    return filepath
