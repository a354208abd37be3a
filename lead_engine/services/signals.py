"""
Buying-signal detection over noisy page text.

Each category is detected independently. A category that does not match is
omitted from the result entirely, so callers test key presence rather than
inspecting empty placeholders.

Trigger map keys produced here (and read by scoring):
    hiring             {"open_roles_60d": int, "count_found": bool, "matched": str}
    funding            {"stage": str, "months_ago": int, "matched": str}
    leadership_change  {"title": str, "days_ago": int}           # HR / finance leaders
    csuite_change      {"role": str, "months_ago": int | None}
    vendor_change      {"vendor": str, "phrase": str, "recent": bool, "days_ago": int}
    news               {"keywords": [...], "events": [...], "press_release": bool, "strong": bool}
"""

from typing import Any, Dict, Iterable, List, Optional

from lead_engine.core.tables import (
    APPOINTMENT_WINDOW,
    CSUITE_ROLE_ALIASES,
    DEFAULT_FUNDING_MONTHS_AGO,
    DEFAULT_HIRING_MAGNITUDE,
    DEFAULT_LEADERSHIP_DAYS_AGO,
    PatternTables,
)

VENDOR_PROXIMITY_WINDOW = 100

# High-intent thresholds
HIGH_INTENT_FUNDING_MONTHS = 6
HIGH_INTENT_HIRING_ROLES = 8

# Evidence field that tells one strong signal apart from another in the same category
STRONG_SIGNAL_IDENTITY = {
    "funding": "stage",
    "leadership_change": "title",
    "csuite_change": "role",
    "vendor_change": "vendor",
}


def _near_appointment(text: str, start: int, end: int, tables: PatternTables) -> bool:
    window = text[max(0, start - APPOINTMENT_WINDOW):end + APPOINTMENT_WINDOW // 2]
    return tables.appointment.search(window) is not None


def detect_hiring(text: str, tables: PatternTables) -> Optional[Dict[str, Any]]:
    for pattern in tables.hiring_count_patterns:
        match = pattern.search(text)
        if match:
            count = int(match.group(1))
            if count > 0:
                return {"open_roles_60d": count, "count_found": True, "matched": match.group(0).strip()}
    for pattern in tables.hiring_phrase_patterns:
        match = pattern.search(text)
        if match:
            return {
                "open_roles_60d": DEFAULT_HIRING_MAGNITUDE,
                "count_found": False,
                "matched": match.group(0).strip(),
            }
    return None


def detect_funding(text: str, tables: PatternTables) -> Optional[Dict[str, Any]]:
    for pattern, stage in tables.funding_patterns:
        match = pattern.search(text)
        if not match:
            continue
        if stage == "series":
            stage = f"Series {match.group(1).upper()}"
        return {"stage": stage, "months_ago": DEFAULT_FUNDING_MONTHS_AGO, "matched": match.group(0).strip()}
    return None


def detect_leadership_change(text: str, tables: PatternTables) -> Optional[Dict[str, Any]]:
    for match in tables.hr_leader.finditer(text):
        if _near_appointment(text, match.start(), match.end(), tables):
            return {"title": " ".join(match.group(0).split()).title(), "days_ago": DEFAULT_LEADERSHIP_DAYS_AGO}
    return None


def detect_csuite_change(text: str, tables: PatternTables) -> Optional[Dict[str, Any]]:
    for match in tables.csuite.finditer(text):
        if _near_appointment(text, match.start(), match.end(), tables):
            raw = " ".join(match.group(0).lower().split())
            role = CSUITE_ROLE_ALIASES.get(raw, raw.upper())
            return {"role": role, "months_ago": None}
    return None


def proximity_match(
    text: str,
    vendors: Iterable[str],
    phrases: Iterable[str],
    window: int = VENDOR_PROXIMITY_WINDOW,
) -> Optional[Dict[str, str]]:
    """Find a vendor name and a change phrase within ``window`` characters of each other."""
    lower = (text or "").lower()
    phrases = [p.lower() for p in phrases if p and p.strip()]
    for vendor in vendors:
        needle = (vendor or "").lower().strip()
        if not needle:
            continue
        v_idx = lower.find(needle)
        while v_idx != -1:
            for phrase in phrases:
                p_idx = lower.find(phrase)
                while p_idx != -1:
                    if abs(p_idx - v_idx) <= window:
                        return {"vendor": vendor, "phrase": phrase}
                    p_idx = lower.find(phrase, p_idx + 1)
            v_idx = lower.find(needle, v_idx + 1)
    return None


def scan_keywords(text: str, keywords: Iterable[str]) -> List[str]:
    lower = (text or "").lower()
    return [kw for kw in keywords if kw and kw.lower() in lower]


def detect_vendor_change(text: str, vendor_names, change_phrases, source: str = "website") -> Optional[Dict[str, Any]]:
    if not vendor_names or not change_phrases:
        return None
    match = proximity_match(text, vendor_names, change_phrases)
    if not match:
        return None
    return {"vendor": match["vendor"], "phrase": match["phrase"], "recent": True, "days_ago": 0, "source": source}


def detect_news(text: str, keywords, tables: PatternTables) -> Optional[Dict[str, Any]]:
    press = tables.press.search(text) is not None
    events = sorted({m.group(0).lower() for m in tables.news_event.finditer(text)})
    hits = scan_keywords(text, keywords or [])
    if not (press or events or hits):
        return None
    return {
        "keywords": hits,
        "events": events,
        "press_release": press,
        "strong": press and bool(events),
    }


def detect_signals(text: str, config, tables: PatternTables) -> Dict[str, Any]:
    """Run every detector; ``config`` supplies the operator keyword lists."""
    if not text:
        return {}
    found: Dict[str, Any] = {}
    detectors = {
        "hiring": lambda: detect_hiring(text, tables),
        "funding": lambda: detect_funding(text, tables),
        "leadership_change": lambda: detect_leadership_change(text, tables),
        "csuite_change": lambda: detect_csuite_change(text, tables),
        "vendor_change": lambda: detect_vendor_change(text, config.carrier_names, config.carrier_change_phrases),
        "news": lambda: detect_news(text, config.benefits_hr_keywords, tables),
    }
    for key, detector in detectors.items():
        evidence = detector()
        if evidence:
            found[key] = evidence
    return found


def merge_triggers(existing: Optional[Dict[str, Any]], fresh: Dict[str, Any]) -> Dict[str, Any]:
    """Fresh evidence replaces stale evidence per category; untouched categories survive."""
    merged = dict(existing or {})
    merged.update(fresh or {})
    return merged


def high_intent(triggers: Optional[Dict[str, Any]]) -> tuple[bool, List[str]]:
    """Advisory high-intent flag plus reason tags. Never feeds ranking arithmetic."""
    triggers = triggers or {}
    reasons: List[str] = []

    funding = triggers.get("funding")
    if isinstance(funding, dict):
        months = funding.get("months_ago")
        if months is not None and months <= HIGH_INTENT_FUNDING_MONTHS:
            reasons.append("funding_recent")
    elif funding is True:
        reasons.append("funding_recent")

    if triggers.get("leadership_change"):
        reasons.append("hr_leader_change")
    if triggers.get("csuite_change"):
        reasons.append("csuite_change")

    vendor = triggers.get("vendor_change")
    if isinstance(vendor, dict) and vendor.get("recent"):
        reasons.append("vendor_change")

    hiring = triggers.get("hiring")
    if isinstance(hiring, dict) and (hiring.get("open_roles_60d") or 0) >= HIGH_INTENT_HIRING_ROLES:
        reasons.append("hiring_velocity")

    news = triggers.get("news")
    if isinstance(news, dict) and news.get("strong"):
        reasons.append("strong_news")

    return bool(reasons), reasons


def _strong_categories(triggers: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Strong categories mapped to the evidence value that identifies them."""
    triggers = triggers or {}
    found: Dict[str, Any] = {}
    for key, identity in STRONG_SIGNAL_IDENTITY.items():
        evidence = triggers.get(key)
        if not evidence:
            continue
        found[key] = evidence.get(identity) if isinstance(evidence, dict) else evidence
    hiring = triggers.get("hiring")
    roles = hiring.get("open_roles_60d") if isinstance(hiring, dict) else None
    if isinstance(roles, int) and roles >= HIGH_INTENT_HIRING_ROLES:
        found["hiring"] = roles
    return found


def new_strong_signals(fresh: Optional[Dict[str, Any]], stored: Optional[Dict[str, Any]]) -> List[str]:
    """Strong categories in ``fresh`` that ``stored`` lacks or records differently.

    Only these lift a repeat candidate out of suppression; evidence already on
    the account does not.
    """
    previous = _strong_categories(stored)
    return [
        key for key, value in _strong_categories(fresh).items()
        if key not in previous or previous[key] != value
    ]
