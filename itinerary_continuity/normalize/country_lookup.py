"""Facility code → country lookup, and country name normalization."""

import re
from typing import Dict, Mapping, Optional

# Airport / station code → ISO 3166 alpha-2 country.
# Small on purpose; swap in a full IATA database via CountryLookup(table=...).
DEFAULT_CODE_COUNTRIES: Dict[str, str] = {
    # United States
    "JFK": "US", "LGA": "US", "EWR": "US", "LAX": "US", "BUR": "US",
    "SFO": "US", "OAK": "US", "ORD": "US", "ATL": "US", "DFW": "US",
    "PHL": "US", "BOS": "US", "SEA": "US", "DEN": "US", "MIA": "US",
    "IAD": "US", "DCA": "US", "MSP": "US", "SLC": "US", "AUS": "US",
    "BNA": "US", "SAN": "US", "HNL": "US", "OGG": "US",
    # Italy
    "MXP": "IT", "LIN": "IT", "FCO": "IT", "CIA": "IT", "VCE": "IT",
    "FLR": "IT", "NAP": "IT",
    # United Kingdom
    "LHR": "GB", "LGW": "GB", "STN": "GB", "LCY": "GB", "MAN": "GB",
    "EDI": "GB",
    # France
    "CDG": "FR", "ORY": "FR", "NCE": "FR", "LYS": "FR", "BOD": "FR",
    # Spain
    "BCN": "ES", "MAD": "ES", "AGP": "ES", "PMI": "ES", "FUE": "ES",
    # Elsewhere in Europe
    "FRA": "DE", "MUC": "DE", "BER": "DE", "AMS": "NL", "ZRH": "CH",
    "GVA": "CH", "VIE": "AT", "LIS": "PT", "DUB": "IE", "CPH": "DK",
    "ARN": "SE", "ATH": "GR", "IST": "TR", "KEF": "IS", "PRG": "CZ",
    # Americas / elsewhere
    "YYZ": "CA", "YUL": "CA", "YVR": "CA", "MEX": "MX", "CUN": "MX",
    "LIR": "CR", "GRU": "BR", "EZE": "AR", "NRT": "JP", "HND": "JP",
    "ICN": "KR", "SIN": "SG", "HKG": "HK", "SYD": "AU", "DXB": "AE",
    "TLV": "IL", "BLR": "IN", "DEL": "IN", "BKK": "TH",
}

# Free-text country names → the codes used above
_COUNTRY_ALIASES = {
    "united states": "US",
    "united states of america": "US",
    "usa": "US",
    "us": "US",
    "america": "US",
    "united kingdom": "GB",
    "uk": "GB",
    "great britain": "GB",
    "england": "GB",
    "scotland": "GB",
    "italy": "IT",
    "italia": "IT",
    "france": "FR",
    "spain": "ES",
    "españa": "ES",
    "germany": "DE",
    "deutschland": "DE",
    "netherlands": "NL",
    "switzerland": "CH",
    "austria": "AT",
    "portugal": "PT",
    "ireland": "IE",
    "greece": "GR",
    "turkey": "TR",
    "iceland": "IS",
    "canada": "CA",
    "mexico": "MX",
    "costa rica": "CR",
    "brazil": "BR",
    "argentina": "AR",
    "japan": "JP",
    "south korea": "KR",
    "singapore": "SG",
    "australia": "AU",
    "united arab emirates": "AE",
    "israel": "IL",
    "india": "IN",
    "thailand": "TH",
}


def normalize_country(raw: str) -> str:
    """Map a free-text country ("U.S.A.", "Italy") to its alpha-2 code.

    Unknown names come back upper-cased so equal spellings still compare equal.
    """
    if not raw:
        return ""
    cleaned = re.sub(r"[.\s]+", " ", raw.replace(".", "")).strip().lower()
    if cleaned in _COUNTRY_ALIASES:
        return _COUNTRY_ALIASES[cleaned]
    return cleaned.upper()


class CountryLookup:
    """Code → country mapping that callers can extend or replace."""

    def __init__(self, table: Optional[Mapping[str, str]] = None):
        source = DEFAULT_CODE_COUNTRIES if table is None else table
        self._table: Dict[str, str] = {k.upper(): v.upper() for k, v in source.items()}

    def country_for(self, code: str) -> Optional[str]:
        if not code or len(code) != 3:
            return None
        return self._table.get(code.upper())

    def extend(self, extra: Mapping[str, str]) -> "CountryLookup":
        """Return a new lookup with ``extra`` layered over this one."""
        merged = dict(self._table)
        merged.update({k.upper(): v.upper() for k, v in extra.items()})
        return CountryLookup(merged)

    def __contains__(self, code: str) -> bool:
        return self.country_for(code) is not None

    def __len__(self):
        return len(self._table)
