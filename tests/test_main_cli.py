"""End-to-end CLI runs on synthetic CSV telemetry."""

from __future__ import annotations

import json
from pathlib import Path

from openpyxl import load_workbook

from gps_timelapse.main import main


def _write_track(path: Path, seconds: int = 60) -> None:
    rows = ["t,lat,lon"]
    rows.extend(f"{t},0.0,{t * 1e-4:.6f}" for t in range(seconds + 1))
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")


def test_cli_auto_master_writes_outputs(tmp_path) -> None:
    telemetry = tmp_path / "telemetry"
    telemetry.mkdir()
    _write_track(telemetry / "A.csv")
    _write_track(telemetry / "B.csv")
    report = tmp_path / "out.xlsx"
    plan = tmp_path / "plan.json"
    html = tmp_path / "plan.html"

    exit_code = main(
        [
            str(telemetry),
            "--no-probe",
            "--output",
            str(report),
            "--json",
            str(plan),
            "--map",
            str(html),
        ]
    )

    assert exit_code == 0
    assert "Master Ranking" in load_workbook(report).sheetnames
    payload = json.loads(plan.read_text(encoding="utf-8"))
    assert payload["master_track"] in {"A", "B"}
    assert len(payload["clips"]) >= 2
    assert html.exists()


def test_cli_explicit_master(tmp_path) -> None:
    _write_track(tmp_path / "A.csv")
    _write_track(tmp_path / "B.csv")
    report = tmp_path / "out.xlsx"

    exit_code = main(
        [
            str(tmp_path / "A.csv"),
            str(tmp_path / "B.csv"),
            "--no-probe",
            "--master",
            "B",
            "--output",
            str(report),
        ]
    )

    assert exit_code == 0
    assert load_workbook(report).sheetnames == ["Summary", "Clip Plan"]


def test_cli_missing_path_fails(tmp_path) -> None:
    assert main([str(tmp_path / "missing"), "--no-probe"]) == 1


def test_cli_too_few_clips_fails(tmp_path) -> None:
    _write_track(tmp_path / "A.csv", seconds=8)
    report = tmp_path / "out.xlsx"
    exit_code = main(
        [str(tmp_path), "--no-probe", "--min-clips", "50", "--output", str(report)]
    )
    assert exit_code == 1
    assert not report.exists()
