"""Datetime parsing for segment records."""

import re
from datetime import date, datetime
from typing import Optional, Union

from dateutil import parser as dateutil_parser

_NULLISH = ("null", "none", "not specified", "unknown", "")


def _wall_clock(dt: datetime) -> datetime:
    # Booking times are local wall-clock times; an offset is dropped, not converted
    return dt.replace(tzinfo=None) if dt.tzinfo is not None else dt


def parse_datetime(raw: Union[str, datetime, date, None]) -> Optional[datetime]:
    """Parse a timestamp in many formats, returning a naive datetime or None.

    Offsets ("Z", "+02:00", "UTC") are stripped so values from different
    sources always compare.

    Handles:
      - datetime / date objects (dates become midnight)
      - ISO 8601 with or without offset ("2025-06-01T14:00:00Z")
      - DDMONYYYY HHMM airline style ("09MAR2025 1430")
      - anything dateutil understands ("June 1, 2025 2:30 PM")
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return _wall_clock(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)

    raw = str(raw).strip()
    if raw.lower() in _NULLISH:
        return None

    # 1. DDMONYY[YY] [HHMM]
    m = re.match(r'^(\d{2})([A-Z]{3})(\d{2,4})(?:\s+(\d{2})(\d{2}))?$', raw, re.I)
    if m:
        day, mon, year, hh, mm = m.groups()
        year = year if len(year) == 4 else f"20{year}"
        try:
            parsed = datetime.strptime(f"{day}{mon.upper()}{year}", "%d%b%Y")
            if hh:
                parsed = parsed.replace(hour=int(hh), minute=int(mm))
            return parsed
        except ValueError:
            pass

    # 2. ISO 8601
    try:
        return _wall_clock(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        pass

    # 3. dateutil as general fallback
    try:
        return _wall_clock(dateutil_parser.parse(raw))
    except (ValueError, OverflowError):
        pass

    return None
