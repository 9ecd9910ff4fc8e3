"""Detect geographic discontinuities between consecutive segments."""

import logging
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional, Tuple

from itinerary_continuity.assemble.gap_classifier import GapClassifier
from itinerary_continuity.config import ContinuityConfig
from itinerary_continuity.models import (
    GapType,
    Location,
    LocationGap,
    Segment,
    SegmentType,
)
from itinerary_continuity.normalize.location_resolver import is_same_location

logger = logging.getLogger(__name__)

_CROSS_CITY = (GapType.DOMESTIC_GAP, GapType.INTERNATIONAL_GAP)


# ---------------------------------------------------------------------------
# Location accessors
# ---------------------------------------------------------------------------

def get_start_location(segment: Segment) -> Optional[Location]:
    if segment.segment_type == SegmentType.FLIGHT:
        return segment.origin
    if segment.segment_type == SegmentType.TRANSFER:
        return segment.pickup
    return segment.location


def get_end_location(segment: Segment) -> Optional[Location]:
    if segment.segment_type == SegmentType.FLIGHT:
        return segment.destination
    if segment.segment_type == SegmentType.TRANSFER:
        return segment.dropoff
    # hotels, activities, meetings end where they start
    return segment.location


def is_airport_segment(segment: Segment) -> bool:
    """Flights, and transfers picking up or dropping off at a coded facility."""
    if segment.segment_type == SegmentType.FLIGHT:
        return True
    if segment.segment_type == SegmentType.TRANSFER:
        return bool(
            (segment.pickup and segment.pickup.code)
            or (segment.dropoff and segment.dropoff.code)
        )
    return False


def is_hotel_segment(segment: Segment) -> bool:
    return segment.segment_type == SegmentType.HOTEL


def is_connecting_segment(segment: Segment) -> bool:
    """Flights, transfers, or anything that starts and ends in different places."""
    if segment.segment_type in (SegmentType.FLIGHT, SegmentType.TRANSFER):
        return True
    start = get_start_location(segment)
    end = get_end_location(segment)
    return bool(start and end and not is_same_location(start, end))


def sort_segments(segments: List[Segment]) -> List[Segment]:
    """Chronological order; segments without a start time go last."""
    return sorted(
        segments,
        key=lambda s: (s.start_datetime is None, s.start_datetime or datetime.min),
    )


# ---------------------------------------------------------------------------
# Overnight heuristic
# ---------------------------------------------------------------------------

def is_overnight_gap(end: datetime, start: datetime, config: ContinuityConfig) -> bool:
    """Evening → next morning, or an unusually long same-day break.

    Dinner at 21:00 → lunch at 12:00 next day is overnight; hotel checkout
    at 11:00 → checkin at 15:00 next day is not.

    The late window (21:00 / 14:00) is a subset of the evening window with
    the default hours, so it only changes the outcome when `evening_hour` or
    `morning_cutoff_hour` is narrowed.
    """
    if start.date() == end.date():
        hours = (start - end).total_seconds() / 3600
        return hours > config.overnight_gap_hours

    if start.date() < end.date():
        return False

    if end.hour >= config.evening_hour and start.hour <= config.morning_cutoff_hour:
        return True
    if end.hour >= config.late_evening_hour and start.hour <= config.late_morning_cutoff_hour:
        return True
    return False


# ---------------------------------------------------------------------------
# Confidence rules (first match wins)
# ---------------------------------------------------------------------------

class PairFacts(NamedTuple):
    gap_type: GapType
    prev: Segment
    next: Segment
    prev_airport: bool
    next_airport: bool
    prev_hotel: bool
    next_hotel: bool


def pair_facts(gap_type: GapType, prev: Segment, nxt: Segment) -> PairFacts:
    return PairFacts(
        gap_type=gap_type,
        prev=prev,
        next=nxt,
        prev_airport=is_airport_segment(prev),
        next_airport=is_airport_segment(nxt),
        prev_hotel=is_hotel_segment(prev),
        next_hotel=is_hotel_segment(nxt),
    )


def _lodging_or_activity(segment: Segment) -> bool:
    return segment.segment_type in (SegmentType.HOTEL, SegmentType.ACTIVITY)


def _airport_to_airport_cross_city(f: PairFacts) -> bool:
    return f.prev_airport and f.next_airport and f.gap_type in _CROSS_CITY


def _airport_and_stay(f: PairFacts) -> bool:
    return (
        (f.prev_airport and _lodging_or_activity(f.next))
        or (f.next_airport and _lodging_or_activity(f.prev))
    )


def _hotel_to_hotel_cross_city(f: PairFacts) -> bool:
    return f.prev_hotel and f.next_hotel and f.gap_type in _CROSS_CITY


def _hotel_and_plain(f: PairFacts) -> bool:
    return (
        (f.prev_hotel and not f.next_hotel and not f.next_airport)
        or (f.next_hotel and not f.prev_hotel and not f.prev_airport)
    )


def _local(f: PairFacts) -> bool:
    return f.gap_type == GapType.LOCAL_TRANSFER


def _plain_cross_city(f: PairFacts) -> bool:
    plain = not (f.prev_hotel or f.next_hotel or f.prev_airport or f.next_airport)
    return plain and f.gap_type in _CROSS_CITY


CONFIDENCE_RULES: Tuple[Tuple[str, Callable[[PairFacts], bool], int], ...] = (
    ("airport_to_airport_cross_city", _airport_to_airport_cross_city, 95),
    ("airport_and_hotel_or_activity", _airport_and_stay, 95),
    ("hotel_to_hotel_cross_city", _hotel_to_hotel_cross_city, 90),
    ("hotel_and_non_travel", _hotel_and_plain, 85),
    ("local_transfer", _local, 80),
    ("cross_city_between_activities", _plain_cross_city, 60),
)
DEFAULT_CONFIDENCE = 50


def score_confidence(gap_type: GapType, prev: Segment, nxt: Segment) -> int:
    facts = pair_facts(gap_type, prev, nxt)
    for _name, matches, score in CONFIDENCE_RULES:
        if matches(facts):
            return score
    return DEFAULT_CONFIDENCE


# ---------------------------------------------------------------------------
# Descriptions
# ---------------------------------------------------------------------------

def display_name(loc: Location) -> str:
    if loc.code:
        return f"{loc.name} ({loc.code})"
    if loc.address and loc.address.city:
        return f"{loc.name}, {loc.address.city}"
    return loc.name


_DESCRIPTIONS = {
    GapType.LOCAL_TRANSFER: "Local transfer needed from {end} to {start}",
    GapType.DOMESTIC_GAP: "Domestic transportation needed from {end} to {start}",
    GapType.INTERNATIONAL_GAP: "International flight needed from {end} to {start}",
    GapType.UNKNOWN: "Transportation gap between {end} and {start}",
}


def describe_gap(end_loc: Location, start_loc: Location, gap_type: GapType) -> str:
    return _DESCRIPTIONS[gap_type].format(end=display_name(end_loc), start=display_name(start_loc))


def suggest_segment_type(gap_type: GapType) -> SegmentType:
    if gap_type in _CROSS_CITY:
        return SegmentType.FLIGHT
    return SegmentType.TRANSFER


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------

class ContinuityDetector:
    def __init__(
        self,
        config: Optional[ContinuityConfig] = None,
        classifier: Optional[GapClassifier] = None,
    ):
        self.config = config or ContinuityConfig()
        self.classifier = classifier or GapClassifier()

    @staticmethod
    def _already_bridged(prev: Segment, nxt: Segment,
                         end_loc: Optional[Location], start_loc: Optional[Location]) -> bool:
        """A flight or transfer on either side already lands where the other begins."""
        if end_loc is None or start_loc is None:
            return False
        if not (is_connecting_segment(prev) or is_connecting_segment(nxt)):
            return False
        return is_same_location(end_loc, start_loc)

    def _candidate(self, i: int, prev: Segment, nxt: Segment) -> Optional[LocationGap]:
        travel_pair = (
            is_hotel_segment(prev) or is_hotel_segment(nxt)
            or is_airport_segment(prev) or is_airport_segment(nxt)
        )
        if not travel_pair and is_overnight_gap(prev.end_datetime, nxt.start_datetime, self.config):
            return None

        end_loc = get_end_location(prev)
        start_loc = get_start_location(nxt)

        if self._already_bridged(prev, nxt, end_loc, start_loc):
            return None

        if end_loc is None or start_loc is None:
            return None

        if is_same_location(end_loc, start_loc):
            return None

        gap_type = self.classifier.classify(end_loc, start_loc)
        return LocationGap(
            before_index=i,
            after_index=i + 1,
            before_segment=prev,
            after_segment=nxt,
            end_location=end_loc,
            start_location=start_loc,
            gap_type=gap_type,
            confidence=score_confidence(gap_type, prev, nxt),
            description=describe_gap(end_loc, start_loc, gap_type),
            suggested_type=suggest_segment_type(gap_type),
        )

    def detect_gaps(self, segments: List[Segment]) -> List[LocationGap]:
        """Walk adjacent pairs of a chronologically sorted list.

        Only gaps at or above the configured confidence threshold are returned.
        """
        gaps: List[LocationGap] = []
        warned = set()

        for i in range(len(segments) - 1):
            prev, nxt = segments[i], segments[i + 1]

            malformed = [s for s in (prev, nxt) if not s.has_timestamps]
            if malformed:
                for seg in malformed:
                    if seg.id not in warned:
                        warned.add(seg.id)
                        logger.warning("Skipping segment %s in gap analysis: missing timestamps", seg.id)
                continue

            gap = self._candidate(i, prev, nxt)
            if gap is None:
                continue
            if gap.confidence < self.config.gap_confidence_threshold:
                logger.debug("Dropping low-confidence gap (%d): %s", gap.confidence, gap.description)
                continue
            gaps.append(gap)

        return gaps
