"""Tests for SRT/CSV telemetry loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from gps_timelapse.errors import InputError, MediaProbeError, TelemetryParseError
from gps_timelapse.telemetry import (
    discover_telemetry,
    find_video,
    load_tracks,
    parse_srt_samples,
    read_csv_track,
    read_srt_track,
)

BRACKET_SRT = """1
00:00:00,000 --> 00:00:01,000
<font size="28">FrameCnt: 1, DiffTime: 33ms
[iso: 100] [latitude: 47.100000] [longitude: 8.500000] [rel_alt: 10.0]</font>

2
00:00:01,000 --> 00:00:02,000
[latitude: 47.100100] [longtitude: 8.500100]

3
00:00:02,000 --> 00:00:03,000
[latitude: 0.000000] [longitude: 0.000000]

4
00:00:03,500 --> 00:00:04,000
[latitude: 47.100200] [longitude: 8.500200]
"""

TUPLE_SRT = """1
00:00:00,000 --> 00:00:01,000
F/2.8, SS 400, ISO 100, EV 0, GPS (8.5000, 47.1000, 420), D 10m

2
00:00:01,000 --> 00:00:02,000
F/2.8, SS 400, ISO 100, EV 0, GPS (8.5001, 47.1001, 421), D 11m

3
00:00:02,000 --> 00:00:03,000
F/2.8, SS 400, ISO 100, EV 0, GPS (8.5002, 47.1002, 422), D 12m
"""


def _write_csv(path: Path, rows: int = 5, header: str = "time,latitude,longitude") -> Path:
    lines = [header]
    lines.extend(f"{i},{47.0 + i * 1e-4},{8.0 + i * 1e-4}" for i in range(rows))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_parse_bracket_srt_skips_missing_fix() -> None:
    samples = parse_srt_samples(BRACKET_SRT)
    assert [s[0] for s in samples] == [0.0, 1.0, 3.5]
    assert samples[1] == (1.0, 47.1001, 8.5001)


def test_parse_gps_tuple_srt_is_lon_first() -> None:
    samples = parse_srt_samples(TUPLE_SRT)
    assert len(samples) == 3
    assert samples[0] == (0.0, 47.1, 8.5)


def test_read_srt_track_uses_file_stem(tmp_path) -> None:
    path = tmp_path / "DJI_0001.srt"
    path.write_text(BRACKET_SRT, encoding="utf-8")
    track = read_srt_track(path, video_duration=3.0)
    assert track.track_id == "DJI_0001"
    assert len(track) == 3
    assert track.effective_max == pytest.approx(3.0)


def test_read_srt_track_rejects_sparse_files(tmp_path) -> None:
    path = tmp_path / "short.srt"
    path.write_text(TUPLE_SRT.split("\n\n")[0], encoding="utf-8")
    with pytest.raises(TelemetryParseError):
        read_srt_track(path)


def test_read_csv_track_accepts_column_aliases(tmp_path) -> None:
    track = read_csv_track(_write_csv(tmp_path / "ride.csv", header="t,lat,lng"))
    assert track.track_id == "ride"
    assert len(track) == 5
    assert track.points[2].lat == pytest.approx(47.0002)


def test_read_csv_track_requires_columns(tmp_path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("a,b,c\n1,2,3\n", encoding="utf-8")
    with pytest.raises(TelemetryParseError):
        read_csv_track(path)


def test_discover_telemetry_expands_directories(tmp_path) -> None:
    _write_csv(tmp_path / "b.csv")
    _write_csv(tmp_path / "a.csv")
    (tmp_path / "notes.txt").write_text("ignore me", encoding="utf-8")
    found = discover_telemetry([tmp_path])
    assert [p.name for p in found] == ["a.csv", "b.csv"]

    with pytest.raises(InputError):
        discover_telemetry([tmp_path / "missing"])


def test_find_video_matches_stem(tmp_path) -> None:
    telemetry = _write_csv(tmp_path / "clip1.csv")
    assert find_video(telemetry) is None
    video = tmp_path / "clip1.MP4"
    video.write_bytes(b"")
    assert find_video(telemetry) == video


def test_load_tracks_probes_sibling_videos(tmp_path) -> None:
    _write_csv(tmp_path / "a.csv", rows=10)
    _write_csv(tmp_path / "b.csv", rows=10)
    (tmp_path / "a.mp4").write_bytes(b"")
    (tmp_path / "b.mp4").write_bytes(b"")

    def fake_probe(path: Path) -> float:
        if path.stem == "b":
            raise MediaProbeError("broken")
        return 4.0

    tracks = load_tracks([tmp_path], prober=fake_probe)
    by_id = {track.track_id: track for track in tracks}
    assert by_id["a"].effective_max == pytest.approx(4.0)
    # Probe failure falls back to GPS coverage.
    assert by_id["b"].video_duration is None
    assert by_id["b"].effective_max == pytest.approx(9.0)


def test_load_tracks_without_probe_and_duplicates(tmp_path) -> None:
    first = tmp_path / "one"
    second = tmp_path / "two"
    first.mkdir()
    second.mkdir()
    _write_csv(first / "ride.csv")
    _write_csv(second / "ride.csv")

    tracks = load_tracks([first], probe=False)
    assert [t.track_id for t in tracks] == ["ride"]
    with pytest.raises(InputError):
        load_tracks([first, second], probe=False)


def test_load_tracks_requires_files(tmp_path) -> None:
    with pytest.raises(InputError):
        load_tracks([tmp_path], probe=False)
