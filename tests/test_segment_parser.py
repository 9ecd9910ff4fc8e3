import json
from datetime import datetime, timedelta, timezone

import pytest

from itinerary_continuity.models import SegmentStatus, SegmentType
from itinerary_continuity.normalize.date_parser import parse_datetime
from itinerary_continuity.normalize.segment_parser import (
    load_segments,
    location_from_dict,
    segment_from_dict,
    segments_from_list,
)


@pytest.mark.parametrize("raw,expected", [
    ("09MAR2025 1430", datetime(2025, 3, 9, 14, 30)),
    ("09MAR25", datetime(2025, 3, 9)),
    ("2025-06-01T14:00:00", datetime(2025, 6, 1, 14, 0)),
    ("June 1, 2025 2:30 PM", datetime(2025, 6, 1, 14, 30)),
])
def test_parse_datetime_formats(raw, expected):
    assert parse_datetime(raw) == expected


@pytest.mark.parametrize("raw", [
    "2025-06-01T14:00:00Z",
    "2025-06-01T14:00:00+02:00",
    "June 1, 2025 2:00 PM UTC",
    datetime(2025, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=-4))),
])
def test_parse_datetime_drops_offsets(raw):
    parsed = parse_datetime(raw)
    assert parsed.tzinfo is None
    assert parsed == datetime(2025, 6, 1, 14, 0)


@pytest.mark.parametrize("raw", [None, "", "null", "Not specified", "definitely not a date"])
def test_parse_datetime_returns_none(raw):
    assert parse_datetime(raw) is None


def test_location_from_string_and_dict():
    assert location_from_dict("Hotel Artemide").name == "Hotel Artemide"
    assert location_from_dict("   ") is None

    loc = location_from_dict({
        "name": "JFK Airport",
        "code": "jfk",
        "coordinates": {"lat": 40.6413, "lng": -73.7781},
        "address": {"city": "New York", "country": "US"},
    })
    assert loc.code == "JFK"
    assert loc.coordinates.latitude == pytest.approx(40.6413)
    assert loc.address.city == "New York"


def test_location_top_level_city():
    loc = location_from_dict({"name": "Duomo", "city": "Milan", "country": "Italy"})
    assert loc.address.city == "Milan"
    assert loc.address.country == "Italy"


def test_segment_from_camel_case_record():
    segment = segment_from_dict({
        "id": "f1",
        "type": "flight",
        "status": "confirmed",
        "startDatetime": "2025-06-01T08:00:00",
        "endDatetime": "2025-06-01T14:00:00",
        "origin": {"name": "LAX", "code": "LAX"},
        "destination": {"name": "JFK", "code": "JFK"},
        "airline": {"name": "Delta", "code": "DL"},
        "flightNumber": "DL123",
        "sourceDetails": {"confidence": 0.9, "mode": "manual"},
    })
    assert segment.segment_type == SegmentType.FLIGHT
    assert segment.status == SegmentStatus.CONFIRMED
    assert segment.start_datetime == datetime(2025, 6, 1, 8, 0)
    assert segment.airline == "Delta"
    assert segment.flight_number == "DL123"
    assert segment.source_details.mode == "manual"
    assert segment.inferred is False


def test_segment_defaults():
    segment = segment_from_dict({
        "segment_type": "TRANSFER",
        "status": "bogus",
        "start": "2025-06-01T14:30:00",
        "end": "2025-06-01T15:30:00",
        "pickupLocation": {"name": "JFK", "code": "JFK"},
        "dropoffLocation": "The Plaza",
    }, index=4)
    assert segment.id == "segment-4"
    assert segment.status == SegmentStatus.CONFIRMED
    assert segment.pickup.code == "JFK"
    assert segment.dropoff.name == "The Plaza"


def test_unknown_type_raises():
    with pytest.raises(ValueError):
        segment_from_dict({"type": "SPACESHIP"})


def test_segments_from_list_skips_bad_records():
    records = [{"type": "SPACESHIP"}, {"type": "HOTEL", "start": "2025-06-01T15:00:00"}]
    assert len(segments_from_list(records)) == 1
    with pytest.raises(ValueError):
        segments_from_list(records, strict=True)


def test_load_segments(tmp_path):
    path = tmp_path / "trip.json"
    path.write_text(json.dumps({"segments": [
        {"id": "h1", "type": "HOTEL", "start": "2025-06-01T15:00:00", "end": "2025-06-03T11:00:00",
         "location": {"name": "The Plaza", "address": {"city": "New York"}}},
    ]}))
    [segment] = load_segments(path)
    assert segment.id == "h1"
    assert segment.location.address.city == "New York"

    path.write_text(json.dumps([{"type": "ACTIVITY", "start": "2025-06-02T10:00:00"}]))
    assert load_segments(str(path))[0].end_datetime is None
