import pytest
from datetime import datetime

from itinerary_continuity.models import (
    Address,
    Coordinates,
    Location,
    Segment,
    SegmentType,
)


def _dt(value):
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _location(name, code="", city="", country="", street="", coords=None):
    address = None
    if street or city or country:
        address = Address(street=street, city=city, country=country)
    coordinates = Coordinates(*coords) if coords else None
    return Location(name=name, code=code, coordinates=coordinates, address=address)


def _segment(segment_type, start, end, seg_id=None, **kwargs):
    if isinstance(segment_type, str):
        segment_type = SegmentType(segment_type)
    _segment.counter += 1
    return Segment(
        id=seg_id or f"seg-{_segment.counter}",
        segment_type=segment_type,
        start_datetime=_dt(start),
        end_datetime=_dt(end),
        **kwargs,
    )


_segment.counter = 0


@pytest.fixture
def make_location():
    """Factory: make_location(name, code=, city=, country=, street=, coords=(lat, lng))"""
    return _location


@pytest.fixture
def make_segment():
    """Factory: make_segment(type, start_iso, end_iso, seg_id=None, **segment_fields)"""
    return _segment


@pytest.fixture
def jfk():
    return _location("John F. Kennedy International Airport", code="JFK", city="New York", country="US")


@pytest.fixture
def lax():
    return _location("Los Angeles International Airport", code="LAX", city="Los Angeles", country="US")


@pytest.fixture
def plaza():
    return _location("The Plaza", city="New York", country="United States")


@pytest.fixture
def arrival_flight(lax, jfk):
    """LAX → JFK landing at 14:00 on 1 June."""
    return _segment(
        "FLIGHT", "2025-06-01T08:00", "2025-06-01T14:00", seg_id="flight-1",
        origin=lax, destination=jfk, airline="Delta", flight_number="DL123",
    )


@pytest.fixture
def plaza_stay(plaza):
    return _segment(
        "HOTEL", "2025-06-01T15:30", "2025-06-04T11:00", seg_id="hotel-1",
        location=plaza, name="The Plaza",
    )
