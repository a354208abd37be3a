"""
Headquarters geography extraction and region bucketing.

Resolution order: structured address metadata, then a "City, ST" scan, then a
full state-name match with a city guessed from the preceding text. Nothing in
here raises on malformed input; an unresolved page yields an empty GeoResult.
"""

import re
from dataclasses import dataclass
from typing import Optional

STATE_CODES_BY_NAME = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR", "california": "CA",
    "colorado": "CO", "connecticut": "CT", "delaware": "DE", "district of columbia": "DC",
    "florida": "FL", "georgia": "GA", "hawaii": "HI", "idaho": "ID", "illinois": "IL",
    "indiana": "IN", "iowa": "IA", "kansas": "KS", "kentucky": "KY", "louisiana": "LA",
    "maine": "ME", "maryland": "MD", "massachusetts": "MA", "michigan": "MI", "minnesota": "MN",
    "mississippi": "MS", "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK", "oregon": "OR",
    "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC", "south dakota": "SD",
    "tennessee": "TN", "texas": "TX", "utah": "UT", "vermont": "VT", "virginia": "VA",
    "washington": "WA", "west virginia": "WV", "wisconsin": "WI", "wyoming": "WY",
}
STATE_CODES = frozenset(STATE_CODES_BY_NAME.values())

OPERATING_COUNTRY = "US"
_COUNTRY_ALIASES = {"us", "usa", "u.s.", "u.s.a.", "united states", "united states of america", "america"}

PRIMARY_STATES = frozenset({"MA"})
SECONDARY_STATES = frozenset({"CT", "RI", "NH", "ME", "VT"})

REGION_PRIMARY = "primary"
REGION_SECONDARY = "secondary"
REGION_OTHER = "other"

_STRUCTURED_FIELDS = {
    "region": re.compile(r"[\"']?addressRegion[\"']?\s*[:=]\s*[\"']([^\"'<>]{2,40})[\"']", re.I),
    "locality": re.compile(r"[\"']?addressLocality[\"']?\s*[:=]\s*[\"']([^\"'<>]{2,60})[\"']", re.I),
    "country": re.compile(r"[\"']?addressCountry[\"']?\s*[:=]\s*[\"']([^\"'<>]{2,60})[\"']", re.I),
}
_ITEMPROP_FIELDS = {
    "region": re.compile(r"itemprop=[\"']addressRegion[\"'][^>]*>\s*([^<]{2,40})<", re.I),
    "locality": re.compile(r"itemprop=[\"']addressLocality[\"'][^>]*>\s*([^<]{2,60})<", re.I),
    "country": re.compile(r"itemprop=[\"']addressCountry[\"'][^>]*>\s*([^<]{2,60})<", re.I),
}
_CITY_STATE = re.compile(r"\b([A-Z][a-zA-Z.'\-]+(?:\s[A-Z][a-zA-Z.'\-]+){0,3}),\s*([A-Z]{2})\b(?![a-zA-Z])")
_STATE_NAME = re.compile(
    r"\b(" + "|".join(sorted((re.escape(n) for n in STATE_CODES_BY_NAME), key=len, reverse=True)) + r")\b",
    re.I,
)
_CITY_BEFORE = re.compile(r"([A-Z][a-zA-Z\s]{1,25}),\s*$")


@dataclass(frozen=True)
class GeoResult:
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    method: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.state is not None

    @property
    def in_operating_country(self) -> bool:
        return self.country is None or self.country == OPERATING_COUNTRY


def normalize_state(value: Optional[str]) -> Optional[str]:
    """Map a state code or full state name to its two-letter code."""
    if not value:
        return None
    token = " ".join(str(value).strip().split())
    if token.upper() in STATE_CODES:
        return token.upper()
    return STATE_CODES_BY_NAME.get(token.lower())


def normalize_country(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    token = " ".join(str(value).strip().split()).lower()
    if token in _COUNTRY_ALIASES:
        return OPERATING_COUNTRY
    return token.upper() if len(token) <= 3 else token.title()


def region_bucket(state: Optional[str]) -> str:
    code = normalize_state(state)
    if code in PRIMARY_STATES:
        return REGION_PRIMARY
    if code in SECONDARY_STATES:
        return REGION_SECONDARY
    return REGION_OTHER


def _structured_field(text: str, name: str) -> Optional[str]:
    for table in (_STRUCTURED_FIELDS, _ITEMPROP_FIELDS):
        match = table[name].search(text)
        if match:
            return match.group(1).strip()
    return None


def _from_structured(text: str) -> Optional[GeoResult]:
    region = _structured_field(text, "region")
    country = normalize_country(_structured_field(text, "country"))
    if country and country != OPERATING_COUNTRY:
        return GeoResult(country=country, method="structured")
    state = normalize_state(region)
    if not state:
        return None
    city = _structured_field(text, "locality")
    return GeoResult(city=city, state=state, country=OPERATING_COUNTRY, method="structured")


def _from_city_state(text: str) -> Optional[GeoResult]:
    for match in _CITY_STATE.finditer(text):
        code = match.group(2)
        if code in STATE_CODES:
            return GeoResult(city=match.group(1).strip(), state=code, country=OPERATING_COUNTRY, method="city_state")
    return None


def _from_state_name(text: str) -> Optional[GeoResult]:
    match = _STATE_NAME.search(text)
    if not match:
        return None
    code = STATE_CODES_BY_NAME[match.group(1).lower()]
    before = text[max(0, match.start() - 40):match.start()]
    city_match = _CITY_BEFORE.search(before)
    city = city_match.group(1).strip() if city_match else None
    return GeoResult(city=city, state=code, country=OPERATING_COUNTRY, method="state_name")


def resolve_geography(text: str) -> GeoResult:
    """Extract headquarters city/state/country from raw page text.

    A foreign ``addressCountry`` short-circuits to a country-only result so the
    caller rejects the candidate regardless of any state-looking tokens.
    """
    if not text:
        return GeoResult()
    for strategy in (_from_structured, _from_city_state, _from_state_name):
        result = strategy(text)
        if result is not None:
            return result
    return GeoResult()


def resolve_page_geography(html: str, text: str) -> GeoResult:
    """Structured metadata from the raw HTML, free-text strategies over visible text only.

    Style and script blocks carry tokens such as ``font-family: Georgia`` that the
    city/state and state-name scans would otherwise read as an address.
    """
    structured = _from_structured(html) if html else None
    if structured is not None:
        return structured
    return resolve_geography(text)
