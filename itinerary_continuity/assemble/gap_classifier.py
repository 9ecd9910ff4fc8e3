"""Classify the transition between two locations: local, domestic, international."""

import re
from typing import Optional

from itinerary_continuity.models import GapType, Location
from itinerary_continuity.normalize.country_lookup import CountryLookup, normalize_country

_CITY_SUFFIX = re.compile(r"\s+(airport|international|city|municipal)$")


def normalize_city(raw: str) -> str:
    """Lowercase, strip punctuation and trailing words like "airport"/"city".

    "Milan Malpensa International Airport" → "milan malpensa"
    """
    if not raw:
        return ""
    city = re.sub(r"\s+", " ", raw.lower().strip())
    city = re.sub(r"[^\w\s]", "", city).strip()
    while True:
        stripped = _CITY_SUFFIX.sub("", city)
        if stripped == city:
            return city
        city = stripped


def city_of(loc: Location) -> str:
    if loc.address and loc.address.city:
        return normalize_city(loc.address.city)
    return normalize_city(loc.name)


class GapClassifier:
    def __init__(self, country_lookup: Optional[CountryLookup] = None):
        self.country_lookup = country_lookup or CountryLookup()

    def country_of(self, loc: Location) -> Optional[str]:
        if loc.address and loc.address.country:
            return normalize_country(loc.address.country)
        return self.country_lookup.country_for(loc.code)

    def classify(self, end_loc: Location, start_loc: Location) -> GapType:
        """Classify the move from ``end_loc`` to ``start_loc``.

        Same city wins even without country data; otherwise both countries
        must be known to call it domestic or international.
        """
        end_city = city_of(end_loc)
        start_city = city_of(start_loc)
        if end_city and start_city and end_city == start_city:
            return GapType.LOCAL_TRANSFER

        end_country = self.country_of(end_loc)
        start_country = self.country_of(start_loc)
        if not end_country or not start_country:
            return GapType.UNKNOWN

        if end_country != start_country:
            return GapType.INTERNATIONAL_GAP

        if end_city != start_city:
            return GapType.DOMESTIC_GAP

        return GapType.LOCAL_TRANSFER
