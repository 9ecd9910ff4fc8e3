import csv
import json

import pytest

import fix_itinerary
from itinerary_continuity.output import format_report, segment_to_dict, segments_to_csv, to_json
from itinerary_continuity.pipeline import run_pipeline


@pytest.fixture
def filled(arrival_flight, plaza_stay):
    return run_pipeline([arrival_flight, plaza_stay])


def test_segment_to_dict(arrival_flight):
    data = segment_to_dict(arrival_flight)
    assert data["type"] == "FLIGHT"
    assert data["start_datetime"] == "2025-06-01T08:00:00"
    assert data["destination"]["code"] == "JFK"
    assert data["destination"]["address"] == {"city": "New York", "country": "US"}
    assert data["flight_number"] == "DL123"
    assert "pickup" not in data
    assert "inferred_reason" not in data


def test_format_report(filled):
    report = format_report(filled)
    assert "ITINERARY CONTINUITY REPORT" in report
    assert "--- 2025" in report
    assert "+ 2025-06-01 14:15" in report
    assert "Inferred (TENTATIVE): Local transfer needed from" in report
    assert "[95%]" in report
    assert "Total: 3 segments, 1 inserted, 1 gaps" in report


def test_to_json(filled, tmp_path):
    path = tmp_path / "out" / "itinerary.json"
    to_json(filled, path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert len(data["segments"]) == 3
    assert data["segments"][1]["inferred"] is True
    assert data["gaps"][0]["suggested_type"] == "TRANSFER"
    assert data["inserted"] == [filled.inserted[0].id]
    assert data["review"]["valid"] is True
    assert data["auto_fixed"] is False


def test_segments_to_csv(filled, tmp_path):
    path = tmp_path / "segments.csv"
    segments_to_csv(filled.segments, path)

    with open(path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["segment_type"] for r in rows] == ["FLIGHT", "TRANSFER", "HOTEL"]
    assert rows[1]["inferred"] == "True"
    assert rows[1]["from"] == "John F. Kennedy International Airport (JFK)"


def test_cli_writes_outputs(tmp_path):
    source = tmp_path / "trip.json"
    source.write_text(json.dumps([
        {"id": "f1", "type": "FLIGHT", "start": "2025-06-01T08:00:00", "end": "2025-06-01T14:00:00",
         "origin": {"name": "LAX", "code": "LAX"}, "destination": {"name": "JFK", "code": "JFK"}},
        {"id": "h1", "type": "HOTEL", "start": "2025-06-01T15:30:00", "end": "2025-06-03T11:00:00",
         "location": {"name": "The Plaza"}},
    ]))
    out_dir = tmp_path / "out"

    code = fix_itinerary.main(["--input", str(source), "--output-dir", str(out_dir), "--format", "all"])

    assert code == 0
    data = json.loads((out_dir / "itinerary.json").read_text(encoding="utf-8"))
    assert [s["type"] for s in data["segments"]] == ["FLIGHT", "TRANSFER", "HOTEL"]
    assert (out_dir / "segments.csv").exists()
    assert (out_dir / "continuity_report.txt").exists()


def test_cli_dry_run_writes_nothing(tmp_path):
    source = tmp_path / "trip.json"
    source.write_text("[]")
    out_dir = tmp_path / "out"
    assert fix_itinerary.main(["--input", str(source), "--output-dir", str(out_dir), "--dry-run"]) == 0
    assert not out_dir.exists()


def test_cli_missing_input(tmp_path):
    assert fix_itinerary.main(["--input", str(tmp_path / "nope.json")]) == 1
