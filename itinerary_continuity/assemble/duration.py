"""Infer how long a segment lasts when its end time is missing or meaningless."""

from datetime import datetime, timedelta
from typing import Optional, Protocol, Tuple

from itinerary_continuity.models import InferredDuration, Segment, SegmentType


class DurationInference(Protocol):
    def infer_duration(self, segment: Segment) -> InferredDuration: ...


# (keywords, hours, confidence, reason), checked in order.
# "movie" sits before "show" so "movie showing" resolves as a film.
_DURATION_RULES: Tuple[Tuple[Tuple[str, ...], float, str, str], ...] = (
    (("breakfast",), 1, "high", "Standard breakfast duration"),
    (("brunch",), 1.5, "high", "Standard brunch duration"),
    (("lunch",), 1.5, "high", "Standard lunch duration"),
    (("dinner",), 2, "high", "Standard dinner duration"),
    (("cocktail", "drinks"), 1.5, "medium", "Standard cocktail/drinks duration"),
    (("movie", "film", "cinema"), 2, "high", "Standard movie duration"),
    (("show", "broadway", "theatre", "theater"), 2.5, "high", "Standard show/theater duration"),
    (("concert",), 2.5, "high", "Standard concert duration"),
    (("opera", "ballet"), 3, "high", "Standard opera/ballet duration"),
    (("tour",), 3, "medium", "Standard tour duration"),
    (("museum", "gallery", "exhibition"), 2, "medium", "Standard museum/gallery visit duration"),
    (("spa", "massage"), 2, "medium", "Standard spa/massage duration"),
    (("golf",), 4, "medium", "Standard golf round duration"),
    (("hike", "hiking"), 3, "medium", "Standard hiking duration"),
    (("wine tasting", "vineyard"), 2, "medium", "Standard wine tasting duration"),
    (("cooking class", "culinary"), 3, "medium", "Standard cooking class duration"),
    (("shopping",), 2, "medium", "Standard shopping duration"),
)

_WORKSHOP_RULE = (("workshop", "class", "lesson"), 2, "medium", "Standard workshop/class duration")
_SPORTS_RULE = (("game", "match", "sporting"), 3, "medium", "Standard sporting event duration")

MEETING_DURATION = InferredDuration(hours=1, confidence="medium", reason="Standard meeting duration")
DEFAULT_DURATION = InferredDuration(
    hours=2, confidence="low", reason="Default duration for unknown activity type",
)


def _searchable_text(segment: Segment) -> str:
    parts = [segment.name, segment.notes]
    if segment.location is not None:
        parts.append(segment.location.name)
    return " ".join(p for p in parts if p).lower()


def _match(rule, text: str) -> Optional[InferredDuration]:
    keywords, hours, confidence, reason = rule
    if any(k in text for k in keywords):
        return InferredDuration(hours=hours, confidence=confidence, reason=reason)
    return None


class PatternDurationInference:
    """Keyword heuristics: meals, shows, tours and the like."""

    def infer_duration(self, segment: Segment) -> InferredDuration:
        if segment.has_timestamps and segment.end_datetime > segment.start_datetime:
            hours = (segment.end_datetime - segment.start_datetime).total_seconds() / 3600
            return InferredDuration(
                hours=hours, confidence="high", reason="Actual duration from segment timestamps",
            )

        text = _searchable_text(segment)
        for rule in _DURATION_RULES:
            found = _match(rule, text)
            if found:
                return found

        # Meetings default before the generic class/sports keywords
        if segment.segment_type == SegmentType.MEETING:
            return MEETING_DURATION

        for rule in (_WORKSHOP_RULE, _SPORTS_RULE):
            found = _match(rule, text)
            if found:
                return found

        return DEFAULT_DURATION


def effective_end_time(segment: Segment, inference: Optional[DurationInference] = None) -> datetime:
    """Real end time when it is after the start, otherwise start + inferred duration."""
    if segment.end_datetime is not None and segment.end_datetime > segment.start_datetime:
        return segment.end_datetime
    inference = inference or PatternDurationInference()
    duration = inference.infer_duration(segment)
    return segment.start_datetime + timedelta(hours=duration.hours)
