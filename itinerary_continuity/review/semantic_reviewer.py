"""Second-pass review of a gap-filled itinerary: sequencing rules and auto-fix."""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from itinerary_continuity.assemble.continuity import get_end_location, get_start_location
from itinerary_continuity.assemble.gap_classifier import city_of
from itinerary_continuity.assemble.gap_resolver import new_segment_id
from itinerary_continuity.models import (
    Location,
    ReviewResult,
    Segment,
    SegmentStatus,
    SegmentType,
    SemanticIssue,
    SemanticIssueType,
    Severity,
    SourceDetails,
)

logger = logging.getLogger(__name__)

ARRIVAL_BUFFER = timedelta(minutes=30)  # customs and baggage
ARRIVAL_LEAD = timedelta(minutes=30)  # before the next segment starts
DEPARTURE_START_BEFORE = timedelta(hours=3)
DEPARTURE_END_BEFORE = timedelta(hours=2)  # check-in time
MIN_TRANSFER_DURATION = timedelta(minutes=30)


def is_airport_location(loc: Location) -> bool:
    return bool(loc.code)


def is_airport_transfer(segment: Segment) -> bool:
    if segment.segment_type != SegmentType.TRANSFER:
        return False
    return bool(
        (segment.pickup and is_airport_location(segment.pickup))
        or (segment.dropoff and is_airport_location(segment.dropoff))
    )


def is_same_city(a: Location, b: Location) -> bool:
    """Conservative same-city test.

    An airport and a non-airport place are never the same city here, since
    getting between them still needs a transfer.
    """
    a_airport = is_airport_location(a)
    b_airport = is_airport_location(b)
    if a_airport != b_airport:
        return False
    if a_airport and b_airport:
        return a.code.upper() == b.code.upper()

    city_a = city_of(a)
    city_b = city_of(b)
    if city_a and city_b:
        return city_a == city_b
    return False


def airport_transfer(
    pickup: Location,
    dropoff: Location,
    start: datetime,
    end: datetime,
    reason: str,
) -> Segment:
    if end - start < MIN_TRANSFER_DURATION:
        end = start + MIN_TRANSFER_DURATION
    return Segment(
        id=new_segment_id(),
        segment_type=SegmentType.TRANSFER,
        start_datetime=start,
        end_datetime=end,
        status=SegmentStatus.TENTATIVE,
        inferred=True,
        inferred_reason=reason,
        source_details=SourceDetails(confidence=0.95, mode="agent"),
        pickup=pickup,
        dropoff=dropoff,
        transfer_type="PRIVATE",
        notes="Auto-generated transfer for airport connection",
    )


def _code_suffix(loc: Location) -> str:
    return f" ({loc.code})" if loc.code else ""


def _timed(*segments: Segment) -> bool:
    return all(s.has_timestamps for s in segments)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def check_flight_arrivals(segments: List[Segment]) -> List[SemanticIssue]:
    """A landing must be followed by a transfer before any non-flight segment."""
    issues = []
    for i in range(len(segments) - 1):
        flight, nxt = segments[i], segments[i + 1]
        if flight.segment_type != SegmentType.FLIGHT or not _timed(flight, nxt):
            continue
        if nxt.segment_type == SegmentType.FLIGHT or is_airport_transfer(nxt):
            continue

        airport = flight.destination
        next_loc = get_start_location(nxt)
        if airport is None or next_loc is None or is_same_city(airport, next_loc):
            continue

        reason = f"Semantic review detected missing transfer between {airport.name} and {next_loc.name}"
        fix = airport_transfer(
            airport, next_loc,
            start=flight.end_datetime + ARRIVAL_BUFFER,
            end=nxt.start_datetime - ARRIVAL_LEAD,
            reason=reason,
        )
        issues.append(SemanticIssue(
            type=SemanticIssueType.MISSING_AIRPORT_TRANSFER,
            severity=Severity.HIGH,
            description=(
                f"Flight arrival at {airport.name}{_code_suffix(airport)} "
                f"is not followed by a transfer to {next_loc.name}"
            ),
            segment_indices=[i, i + 1],
            suggested_fix=fix,
        ))
    return issues


def check_flight_departures(segments: List[Segment]) -> List[SemanticIssue]:
    """A departure must be preceded by a transfer after any non-flight segment."""
    issues = []
    for i in range(1, len(segments)):
        prev, flight = segments[i - 1], segments[i]
        if flight.segment_type != SegmentType.FLIGHT or not _timed(prev, flight):
            continue
        if prev.segment_type == SegmentType.FLIGHT or is_airport_transfer(prev):
            continue

        prev_loc = get_end_location(prev)
        airport = flight.origin
        if prev_loc is None or airport is None or is_same_city(prev_loc, airport):
            continue

        reason = f"Semantic review detected missing transfer between {prev_loc.name} and {airport.name}"
        fix = airport_transfer(
            prev_loc, airport,
            start=flight.start_datetime - DEPARTURE_START_BEFORE,
            end=flight.start_datetime - DEPARTURE_END_BEFORE,
            reason=reason,
        )
        issues.append(SemanticIssue(
            type=SemanticIssueType.MISSING_AIRPORT_TRANSFER,
            severity=Severity.HIGH,
            description=(
                f"Flight departure from {airport.name}{_code_suffix(airport)} "
                f"is not preceded by a transfer from {prev_loc.name}"
            ),
            segment_indices=[i - 1, i],
            suggested_fix=fix,
        ))
    return issues


def format_time_diff(a: datetime, b: datetime) -> str:
    minutes = int(abs((b - a).total_seconds()) // 60)
    hours, rest = divmod(minutes, 60)
    if hours:
        return f"{hours}h {rest}m"
    return f"{minutes}m"


def check_time_overlaps(segments: List[Segment]) -> List[SemanticIssue]:
    issues = []
    for i in range(len(segments) - 1):
        current, nxt = segments[i], segments[i + 1]
        if not _timed(current, nxt):
            continue
        if nxt.start_datetime < current.end_datetime:
            issues.append(SemanticIssue(
                type=SemanticIssueType.OVERLAPPING_TIMES,
                severity=Severity.MEDIUM,
                description=(
                    f"Segment {i + 1} starts before segment {i} ends "
                    f"(overlap: {format_time_diff(nxt.start_datetime, current.end_datetime)})"
                ),
                segment_indices=[i, i + 1],
            ))
    return issues


REVIEW_RULES: Tuple[Tuple[str, Callable[[List[Segment]], List[SemanticIssue]]], ...] = (
    ("flight_arrivals", check_flight_arrivals),
    ("flight_departures", check_flight_departures),
    ("time_overlaps", check_time_overlaps),
)


def build_summary(issues: List[SemanticIssue]) -> str:
    if not issues:
        return "No semantic issues detected. Itinerary structure is valid."

    lines = [f"Found {len(issues)} semantic issue(s):"]
    labels = {
        Severity.HIGH: "requires immediate attention",
        Severity.MEDIUM: "should be reviewed",
        Severity.LOW: "minor issues",
    }
    for severity, label in labels.items():
        count = sum(1 for issue in issues if issue.severity == severity)
        if count:
            lines.append(f"  - {count} {severity.value} severity ({label})")

    lines.append("")
    lines.append("Issues:")
    for n, issue in enumerate(issues, start=1):
        lines.append(f"  {n}. [{issue.severity.value}] {issue.description}")
    return "\n".join(lines)


def fixable_issues(review: ReviewResult) -> List[SemanticIssue]:
    """HIGH-severity missing transfers that carry a suggested fix."""
    return [
        issue for issue in review.issues
        if issue.type == SemanticIssueType.MISSING_AIRPORT_TRANSFER
        and issue.auto_fixable
        and issue.segment_indices
    ]


class SemanticReviewer:
    def __init__(self, rules=REVIEW_RULES):
        self.rules = rules

    def review(self, segments: List[Segment]) -> ReviewResult:
        """Run every rule over an already sorted, gap-filled segment list."""
        issues: List[SemanticIssue] = []
        for _name, rule in self.rules:
            issues.extend(rule(segments))
        return ReviewResult(valid=not issues, issues=issues, summary=build_summary(issues))

    def auto_fix(self, segments: List[Segment], review: Optional[ReviewResult]) -> List[Segment]:
        """Insert the suggested transfer for every HIGH, fixable issue.

        Fixes go in descending order of each issue's higher index so earlier
        insertions never shift later targets. Each transfer lands between the
        two segments it connects. Everything else is left for a human.
        """
        if review is None:
            return list(segments)

        fixable = fixable_issues(review)
        fixed = list(segments)
        for issue in sorted(fixable, key=lambda x: max(x.segment_indices), reverse=True):
            position = max(issue.segment_indices)
            fixed.insert(position, issue.suggested_fix)
            logger.info("Auto-fixed: %s", issue.description)

        skipped = len(review.issues) - len(fixable)
        if skipped:
            logger.info("%d issue(s) left for manual review", skipped)
        return fixed
