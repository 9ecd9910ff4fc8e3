"""Decide whether two location records denote the same physical place."""

import math
import re
from typing import List, Optional

from itinerary_continuity.models import Location

_EARTH_RADIUS_M = 6_371_000
SAME_PLACE_RADIUS_M = 100.0

# Words that carry no identity: articles, prepositions, lodging and street types
_STOP_WORDS = frozenset({
    "the", "at", "in", "on", "of", "and", "a", "an", "to", "for", "by",
    "resort", "hotel", "inn", "suites", "lodge", "hostel", "motel",
    "airport", "international", "collection", "luxury",
    "st", "ave", "blvd", "rd", "street", "avenue", "boulevard", "road",
    "drive", "lane", "way", "place",
})

_MIN_TOKEN_LENGTH = 3  # drops 2-letter state codes and initials
_WORD_OVERLAP_RATIO = 0.7
_CONTAINMENT_MIN_LENGTH = 5


def normalize_name(name: str) -> str:
    """Lowercase, collapse whitespace, strip punctuation."""
    if not name:
        return ""
    lowered = re.sub(r"\s+", " ", name.lower().strip())
    return re.sub(r"[^\w\s]", "", lowered)


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in metres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * _EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance with unit insert/delete/substitute costs."""
    rows = len(a) + 1
    cols = len(b) + 1
    table = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        table[i][0] = i
    for j in range(cols):
        table[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            table[i][j] = min(
                table[i - 1][j] + 1,
                table[i][j - 1] + 1,
                table[i - 1][j - 1] + cost,
            )
    return table[-1][-1]


def words_similar(a: str, b: str) -> bool:
    """Exact, containment, or small edit distance ("george" ~ "georgiou")."""
    if a == b:
        return True
    if a in b or b in a:
        return True
    limit = 2 if len(a) > 5 or len(b) > 5 else 1
    return levenshtein_distance(a, b) <= limit


def significant_words(normalized: str) -> List[str]:
    return [
        w for w in re.split(r"[\s,]+", normalized)
        if len(w) >= _MIN_TOKEN_LENGTH and w not in _STOP_WORDS
    ]


def have_similar_words(name1: str, name2: str) -> bool:
    """True when more than 70% of the smaller word set finds a match."""
    words1 = significant_words(name1)
    words2 = significant_words(name2)
    if not words1 or not words2:
        return False

    smaller, larger = (words1, words2) if len(words1) <= len(words2) else (words2, words1)
    matches = sum(1 for w in smaller if any(words_similar(w, other) for other in larger))
    return matches / len(smaller) > _WORD_OVERLAP_RATIO


def coordinates_close(a: Location, b: Location, radius_m: float = SAME_PLACE_RADIUS_M) -> bool:
    if a.coordinates is None or b.coordinates is None:
        return False
    distance = haversine_m(
        a.coordinates.latitude, a.coordinates.longitude,
        b.coordinates.latitude, b.coordinates.longitude,
    )
    return distance <= radius_m


def _street(loc: Location) -> Optional[str]:
    if loc.address and loc.address.street:
        return normalize_name(loc.address.street)
    return None


def is_address_match(a: Location, b: Location) -> bool:
    """One record's street address appearing as the other record's name."""
    street_a = _street(a)
    if street_a and street_a == normalize_name(b.name):
        return True
    street_b = _street(b)
    if street_b and street_b == normalize_name(a.name):
        return True
    return False


def is_same_location(a: Location, b: Location) -> bool:
    """Decide whether two locations are the same place.

    Checks run from most to least authoritative:
    1. Facility codes (decisive either way when both present)
    2. Coordinates within 100 m
    3. Street address of one equals the name of the other
    4. Normalized names equal
    5. Brand-name containment for names longer than 5 chars
    6. Fuzzy word overlap
    Anything else is treated as a different place.
    """
    if a.code and b.code:
        return a.code.upper() == b.code.upper()

    if coordinates_close(a, b):
        return True

    if is_address_match(a, b):
        return True

    name1 = normalize_name(a.name)
    name2 = normalize_name(b.name)
    if name1 and name1 == name2:
        return True

    if len(name1) > _CONTAINMENT_MIN_LENGTH and len(name2) > _CONTAINMENT_MIN_LENGTH:
        if name1 in name2 or name2 in name1:
            return True

    return have_similar_words(name1, name2)
