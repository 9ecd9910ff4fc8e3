"""Close detected gaps: ask an external search, else synthesize a placeholder."""

import logging
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple

from itinerary_continuity.assemble.duration import (
    DurationInference,
    PatternDurationInference,
    effective_end_time,
)
from itinerary_continuity.config import ContinuityConfig
from itinerary_continuity.models import (
    GapResolution,
    Location,
    LocationGap,
    SearchResult,
    Segment,
    SegmentStatus,
    SegmentType,
    SourceDetails,
)

logger = logging.getLogger(__name__)

ANCHOR_BEFORE_NEXT = timedelta(minutes=1)
MIN_PLACEHOLDER_DURATION = {
    SegmentType.FLIGHT: timedelta(hours=1),
    SegmentType.TRANSFER: timedelta(minutes=30),
}


class TravelSearch(Protocol):
    """External capability that may find a real segment for a gap."""

    def search(self, gap: LocationGap, preferences: Mapping[str, Any]) -> SearchResult: ...


def new_segment_id() -> str:
    return f"seg_{uuid.uuid4().hex[:12]}"


def placeholder_window(
    gap: LocationGap,
    before_end: datetime,
    config: ContinuityConfig,
) -> Tuple[datetime, datetime, str]:
    """Start/end for a placeholder plus a warning when the schedule is tight.

    The placeholder starts a buffer after the earlier segment ends and
    finishes a minute before the later one starts. When that leaves no room
    it is anchored to the later segment with a minimum duration instead.
    """
    after_start = gap.after_segment.start_datetime
    if gap.suggested_type == SegmentType.FLIGHT:
        buffer = timedelta(minutes=config.flight_transfer_buffer_minutes)
    else:
        buffer = timedelta(minutes=config.local_transfer_buffer_minutes)

    start = before_end + buffer
    end = after_start - ANCHOR_BEFORE_NEXT
    if start < end:
        return start, end, ""

    start = end - MIN_PLACEHOLDER_DURATION[gap.suggested_type]
    warning = (
        f"Tight schedule: {gap.suggested_type.value.lower()} from "
        f"{_name_or(gap.end_location, 'unknown')} to {_name_or(gap.start_location, 'unknown')} "
        f"may overlap with adjacent segments; consider adjusting times"
    )
    return start, end, warning


def _name_or(loc: Optional[Location], fallback: str) -> str:
    return loc.name if loc is not None else fallback


def _or_placeholder(loc: Optional[Location], name: str) -> Location:
    return loc if loc is not None else Location(name=name)


def build_placeholder(
    gap: LocationGap,
    start: datetime,
    end: datetime,
    id_factory: Callable[[], str] = new_segment_id,
) -> Segment:
    common = dict(
        id=id_factory(),
        start_datetime=start,
        end_datetime=end,
        status=SegmentStatus.TENTATIVE,
        inferred=True,
        inferred_reason=gap.description,
        source_details=SourceDetails(confidence=0.5, mode="agent"),
    )
    if gap.suggested_type == SegmentType.FLIGHT:
        return Segment(
            segment_type=SegmentType.FLIGHT,
            origin=_or_placeholder(gap.end_location, "Unknown Origin"),
            destination=_or_placeholder(gap.start_location, "Unknown Destination"),
            airline="Unknown",
            flight_number="XX0000",
            notes="Placeholder flight - please verify and update with actual flight details",
            **common,
        )
    return Segment(
        segment_type=SegmentType.TRANSFER,
        pickup=_or_placeholder(gap.end_location, "Unknown Pickup"),
        dropoff=_or_placeholder(gap.start_location, "Unknown Dropoff"),
        transfer_type="PRIVATE",
        notes="Placeholder transfer - please verify and update with actual transfer details",
        **common,
    )


class GapResolver:
    """Resolve one gap at a time.

    ``searchers`` maps a suggested segment type to a search capability;
    a missing entry is a valid configuration and leads straight to a
    placeholder.
    """

    def __init__(
        self,
        searchers: Optional[Mapping[SegmentType, TravelSearch]] = None,
        duration_inference: Optional[DurationInference] = None,
        config: Optional[ContinuityConfig] = None,
        id_factory: Callable[[], str] = new_segment_id,
    ):
        self.searchers: Dict[SegmentType, TravelSearch] = dict(searchers or {})
        self.duration_inference = duration_inference or PatternDurationInference()
        self.config = config or ContinuityConfig()
        self.id_factory = id_factory
        self._last_search: Optional[float] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: Optional[Future] = None

    def resolve(self, gap: LocationGap, preferences: Optional[Mapping[str, Any]] = None) -> Segment:
        return self.resolve_gap(gap, preferences).segment

    def resolve_gap(
        self,
        gap: LocationGap,
        preferences: Optional[Mapping[str, Any]] = None,
    ) -> GapResolution:
        found = self._search(gap, preferences or {})
        if found is not None:
            return GapResolution(gap=gap, segment=found, from_search=True)

        before_end = effective_end_time(gap.before_segment, self.duration_inference)
        start, end, warning = placeholder_window(gap, before_end, self.config)
        if warning:
            logger.warning(warning)
        segment = build_placeholder(gap, start, end, self.id_factory)
        return GapResolution(gap=gap, segment=segment, warning=warning)

    # -- external search -----------------------------------------------------

    def _throttle(self):
        interval = self.config.search_min_interval_seconds
        if interval <= 0 or self._last_search is None:
            return
        remaining = interval - (time.monotonic() - self._last_search)
        if remaining > 0:
            time.sleep(remaining)

    def _mark_finished(self, _future: Future):
        self._last_search = time.monotonic()

    def _previous_finished(self) -> bool:
        """Searches never overlap: give a timed-out call one more timeout to end."""
        pending = self._pending
        if pending is None or pending.done():
            return True
        done, _ = wait([pending], timeout=self.config.search_timeout_seconds)
        if not done:
            return False
        self._last_search = time.monotonic()
        return True

    def _search(self, gap: LocationGap, preferences: Mapping[str, Any]) -> Optional[Segment]:
        searcher = self.searchers.get(gap.suggested_type)
        if searcher is None:
            return None

        if not self._previous_finished():
            logger.warning("Previous search still running; using placeholder for %s", gap.description)
            return None

        self._throttle()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1)
        future = self._executor.submit(searcher.search, gap, preferences)
        future.add_done_callback(self._mark_finished)
        self._pending = future
        try:
            result = future.result(timeout=self.config.search_timeout_seconds)
        except FutureTimeout:
            logger.warning("Search for %s timed out after %gs; using placeholder",
                           gap.description, self.config.search_timeout_seconds)
            return None
        except Exception as e:
            logger.warning("Search for %s failed: %s; using placeholder", gap.description, e)
            return None
        finally:
            if future.done():
                self._last_search = time.monotonic()

        if not result or not result.found or result.segment is None:
            logger.info("No result for %s: %s", gap.description, (result.error if result else "") or "not found")
            return None

        segment = result.segment
        if not segment.inferred or not segment.inferred_reason:
            logger.warning("Search result %s was not flagged as inferred; flagging it", segment.id)
            segment = replace(
                segment,
                inferred=True,
                inferred_reason=segment.inferred_reason or gap.description,
            )
        return segment
