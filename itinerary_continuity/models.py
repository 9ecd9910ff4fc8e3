"""Data models for the itinerary continuity engine."""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class SegmentType(str, Enum):
    FLIGHT = "FLIGHT"
    HOTEL = "HOTEL"
    ACTIVITY = "ACTIVITY"
    TRANSFER = "TRANSFER"
    MEETING = "MEETING"
    CUSTOM = "CUSTOM"


class SegmentStatus(str, Enum):
    TENTATIVE = "TENTATIVE"
    CONFIRMED = "CONFIRMED"
    WAITLISTED = "WAITLISTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class GapType(str, Enum):
    LOCAL_TRANSFER = "LOCAL_TRANSFER"  # same city, different venues
    DOMESTIC_GAP = "DOMESTIC_GAP"  # different cities, same country
    INTERNATIONAL_GAP = "INTERNATIONAL_GAP"
    UNKNOWN = "UNKNOWN"  # not enough location data to tell


class SemanticIssueType(str, Enum):
    MISSING_AIRPORT_TRANSFER = "MISSING_AIRPORT_TRANSFER"
    OVERLAPPING_TIMES = "OVERLAPPING_TIMES"
    IMPOSSIBLE_SEQUENCE = "IMPOSSIBLE_SEQUENCE"


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Address:
    street: str = ""
    city: str = ""
    state: str = ""
    country: str = ""  # free text or ISO code


@dataclass(frozen=True)
class Location:
    name: str
    code: str = ""  # 3-letter airport/station code if applicable
    coordinates: Optional[Coordinates] = None
    address: Optional[Address] = None


# ---------------------------------------------------------------------------
# Segments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceDetails:
    confidence: float = 1.0  # 0..1
    mode: str = "import"  # "import", "manual", "agent", ...


@dataclass(frozen=True)
class Segment:
    """One itinerary entry.

    The type-specific location fields are populated according to
    ``segment_type``: flights use origin/destination, transfers use
    pickup/dropoff, everything else uses ``location``.
    """
    id: str
    segment_type: SegmentType
    start_datetime: Optional[datetime]
    end_datetime: Optional[datetime]
    status: SegmentStatus = SegmentStatus.CONFIRMED
    inferred: bool = False
    inferred_reason: str = ""
    source_details: SourceDetails = field(default_factory=SourceDetails)
    name: str = ""  # activity name, meeting title, hotel property
    notes: str = ""
    origin: Optional[Location] = None
    destination: Optional[Location] = None
    pickup: Optional[Location] = None
    dropoff: Optional[Location] = None
    location: Optional[Location] = None
    airline: str = ""
    flight_number: str = ""
    transfer_type: str = ""

    @property
    def has_timestamps(self) -> bool:
        return self.start_datetime is not None and self.end_datetime is not None


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------

@dataclass
class LocationGap:
    before_index: int
    after_index: int
    before_segment: Segment
    after_segment: Segment
    end_location: Optional[Location]
    start_location: Optional[Location]
    gap_type: GapType
    confidence: int  # 0-100
    description: str
    suggested_type: SegmentType  # FLIGHT or TRANSFER


@dataclass
class SemanticIssue:
    type: SemanticIssueType
    severity: Severity
    description: str
    segment_indices: List[int] = field(default_factory=list)
    suggested_fix: Optional[Segment] = None

    @property
    def auto_fixable(self) -> bool:
        return self.severity == Severity.HIGH and self.suggested_fix is not None


@dataclass
class ReviewResult:
    valid: bool
    issues: List[SemanticIssue] = field(default_factory=list)
    summary: str = ""


@dataclass
class InferredDuration:
    hours: float
    confidence: str  # "high", "medium", "low"
    reason: str


@dataclass
class SearchResult:
    found: bool
    segment: Optional[Segment] = None
    error: str = ""


@dataclass
class ContinuityValidation:
    valid: bool
    gaps: List[LocationGap] = field(default_factory=list)
    segment_count: int = 0
    summary: str = ""


@dataclass
class GapResolution:
    """The segment chosen for one gap and how it was obtained."""
    gap: LocationGap
    segment: Segment
    from_search: bool = False
    warning: str = ""


@dataclass
class ContinuityResult:
    """Outcome of one pipeline run over an itinerary."""
    segments: List[Segment]
    gaps: List[LocationGap] = field(default_factory=list)
    inserted: List[Segment] = field(default_factory=list)
    review: Optional[ReviewResult] = None
    auto_fixed: bool = False
    warnings: List[str] = field(default_factory=list)
