"""Convert raw segment dicts (JSON from the import layer) into Segments."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from itinerary_continuity.models import (
    Address,
    Coordinates,
    Location,
    Segment,
    SegmentStatus,
    SegmentType,
    SourceDetails,
)
from itinerary_continuity.normalize.date_parser import parse_datetime

logger = logging.getLogger(__name__)

# Accept both the snake_case names used here and the camelCase of the import layer
_FIELD_ALIASES = {
    "start_datetime": ("start_datetime", "startDatetime", "start"),
    "end_datetime": ("end_datetime", "endDatetime", "end"),
    "segment_type": ("segment_type", "type"),
    "inferred_reason": ("inferred_reason", "inferredReason"),
    "source_details": ("source_details", "sourceDetails"),
    "pickup": ("pickup", "pickupLocation", "pickup_location"),
    "dropoff": ("dropoff", "dropoffLocation", "dropoff_location"),
    "flight_number": ("flight_number", "flightNumber"),
    "transfer_type": ("transfer_type", "transferType"),
    "name": ("name", "title", "property_name", "propertyName"),
}


def _get(raw: Dict[str, Any], key: str, default=None):
    for alias in _FIELD_ALIASES.get(key, (key,)):
        if raw.get(alias) is not None:
            return raw[alias]
    return default


def _coordinates(raw: Any) -> Optional[Coordinates]:
    if not isinstance(raw, dict):
        return None
    lat = raw.get("latitude", raw.get("lat"))
    lng = raw.get("longitude", raw.get("lng", raw.get("lon")))
    if lat is None or lng is None:
        return None
    try:
        return Coordinates(latitude=float(lat), longitude=float(lng))
    except (TypeError, ValueError):
        return None


def _address(raw: Any) -> Optional[Address]:
    if not isinstance(raw, dict):
        return None
    return Address(
        street=raw.get("street") or "",
        city=raw.get("city") or "",
        state=raw.get("state") or "",
        country=raw.get("country") or "",
    )


def location_from_dict(raw: Any) -> Optional[Location]:
    """Build a Location; a bare string is taken as the name."""
    if raw is None:
        return None
    if isinstance(raw, str):
        return Location(name=raw) if raw.strip() else None
    if not isinstance(raw, dict):
        return None

    address = _address(raw.get("address"))
    # Some sources put city/country at the top level of the location
    if address is None and (raw.get("city") or raw.get("country")):
        address = Address(city=raw.get("city") or "", country=raw.get("country") or "")

    name = raw.get("name") or (address.street if address else "") or raw.get("code") or ""
    return Location(
        name=name,
        code=(raw.get("code") or "").upper(),
        coordinates=_coordinates(raw.get("coordinates")),
        address=address,
    )


def segment_from_dict(raw: Dict[str, Any], index: int = 0) -> Segment:
    """Normalize one raw segment record.

    Raises:
        ValueError: unknown or missing segment type.
    """
    type_str = str(_get(raw, "segment_type") or "").upper()
    try:
        segment_type = SegmentType(type_str)
    except ValueError:
        raise ValueError(f"Unknown segment type {type_str!r} in record {index}") from None

    status_str = str(raw.get("status") or SegmentStatus.CONFIRMED.value).upper()
    try:
        status = SegmentStatus(status_str)
    except ValueError:
        status = SegmentStatus.CONFIRMED

    source_raw = _get(raw, "source_details") or {}
    source = SourceDetails(
        confidence=float(source_raw.get("confidence", 1.0)),
        mode=source_raw.get("mode") or "import",
    )

    airline = raw.get("airline") or ""
    if isinstance(airline, dict):
        airline = airline.get("name") or airline.get("code") or ""

    return Segment(
        id=str(raw.get("id") or f"segment-{index}"),
        segment_type=segment_type,
        start_datetime=parse_datetime(_get(raw, "start_datetime")),
        end_datetime=parse_datetime(_get(raw, "end_datetime")),
        status=status,
        inferred=bool(raw.get("inferred", False)),
        inferred_reason=_get(raw, "inferred_reason") or "",
        source_details=source,
        name=_get(raw, "name") or "",
        notes=raw.get("notes") or "",
        origin=location_from_dict(raw.get("origin")),
        destination=location_from_dict(raw.get("destination")),
        pickup=location_from_dict(_get(raw, "pickup")),
        dropoff=location_from_dict(_get(raw, "dropoff")),
        location=location_from_dict(raw.get("location")),
        airline=airline,
        flight_number=_get(raw, "flight_number") or "",
        transfer_type=_get(raw, "transfer_type") or "",
    )


def segments_from_list(records: List[Dict[str, Any]], strict: bool = False) -> List[Segment]:
    segments = []
    for i, record in enumerate(records):
        try:
            segments.append(segment_from_dict(record, i))
        except ValueError as e:
            if strict:
                raise
            logger.warning("Skipping record: %s", e)
    return segments


def load_segments(path: Union[str, Path], strict: bool = False) -> List[Segment]:
    """Read a JSON itinerary: either a list of segments or {"segments": [...]}."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    records = data.get("segments", []) if isinstance(data, dict) else data
    return segments_from_list(records, strict=strict)
