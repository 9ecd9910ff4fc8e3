from datetime import datetime

import pytest

from itinerary_continuity.assemble.duration import PatternDurationInference, effective_end_time
from itinerary_continuity.models import InferredDuration


@pytest.fixture
def inference():
    return PatternDurationInference()


def _point(make_segment, name, segment_type="ACTIVITY", **kwargs):
    """A segment whose end equals its start."""
    return make_segment(segment_type, "2025-06-01T19:00", "2025-06-01T19:00", name=name, **kwargs)


@pytest.mark.parametrize("name,hours,confidence", [
    ("Dinner at Nobu", 2, "high"),
    ("Sunday brunch", 1.5, "high"),
    ("Movie showing", 2, "high"),
    ("Hamilton on Broadway", 2.5, "high"),
    ("Vatican Museums tour", 3, "medium"),
    ("Wine tasting in Chianti", 2, "medium"),
    ("Pottery workshop", 2, "medium"),
    ("Yankees game", 3, "medium"),
    ("Something unusual", 2, "low"),
])
def test_keyword_rules(inference, make_segment, name, hours, confidence):
    result = inference.infer_duration(_point(make_segment, name))
    assert result.hours == hours
    assert result.confidence == confidence


def test_location_name_is_searched(inference, make_segment, make_location):
    segment = _point(make_segment, "", location=make_location("Metropolitan Opera"))
    assert inference.infer_duration(segment).hours == 3


def test_meeting_default_precedes_class_keyword(inference, make_segment):
    review = _point(make_segment, "Quarterly review", segment_type="MEETING")
    training = _point(make_segment, "Compliance class", segment_type="MEETING")
    assert inference.infer_duration(review).hours == 1
    assert inference.infer_duration(training).hours == 1


def test_actual_duration_wins(inference, make_segment):
    segment = make_segment("ACTIVITY", "2025-06-01T19:00", "2025-06-01T22:00", name="Dinner")
    result = inference.infer_duration(segment)
    assert result.hours == 3
    assert result.confidence == "high"


def test_effective_end_time_uses_real_end(make_segment):
    segment = make_segment("ACTIVITY", "2025-06-01T19:00", "2025-06-01T20:15", name="Dinner")
    assert effective_end_time(segment) == datetime(2025, 6, 1, 20, 15)


def test_effective_end_time_infers_when_end_not_after_start(make_segment):
    segment = _point(make_segment, "Dinner")
    assert effective_end_time(segment) == datetime(2025, 6, 1, 21, 0)


def test_effective_end_time_with_injected_inference(make_segment):
    class FourHours:
        def infer_duration(self, segment):
            return InferredDuration(hours=4, confidence="high", reason="fixed")

    segment = _point(make_segment, "Dinner")
    assert effective_end_time(segment, FourHours()) == datetime(2025, 6, 1, 23, 0)
