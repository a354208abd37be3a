"""
Fit / timing / reachability scoring and star rating for one account.

Pure functions over plain snapshots: nothing here touches the database, and
malformed attributes (text employee counts, odd trigger shapes) resolve to a
zero contribution rather than an exception.
"""

import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from lead_engine.core.tables import (
    DEPRIORITIZED_INDUSTRIES,
    INDUSTRY_LABELS,
    INDUSTRY_SCORES,
    ROLE_CHANGE_KEYWORD_PATTERN,
    PatternTables,
)
from lead_engine.services.geography import region_bucket
from lead_engine.utils.url_canonicalizer import derive_domain

FIT_MAX = 40
TIMING_MAX = 60
REACHABILITY_MAX = 10
RAW_MAX = FIT_MAX + TIMING_MAX + REACHABILITY_MAX

TARGET_EMPLOYEE_MIDPOINT = 150

# (inclusive upper bound, points); counts above the last bound score SIZE_POINTS_OVER
SIZE_BANDS = ((19, 3), (49, 8), (250, 15), (500, 10), (1000, 6))
SIZE_POINTS_OVER = 3

HIRING_BANDS = ((10, 20), (6, 14), (3, 8), (1, 3))
ROLE_CHANGE_DECAY = ((14, 15), (30, 12), (60, 8), (90, 4), (180, 2))
FUNDING_DECAY = ((3, 10), (6, 7), (12, 4))
FUNDING_UNDATED_POINTS = 7

CSUITE_ROLE_WEIGHTS = {"CFO": 15, "CHRO": 15, "CPO": 15, "CEO": 12, "COO": 10}
CSUITE_OTHER_WEIGHT = 6

REACH_EMAIL = 3
REACH_PHONE = 2
REACH_PROFILES = 2
REACH_SENIOR = 3
REACH_READY_THRESHOLD = 6

SIZE_LARGE = "large"
SIZE_MEDIUM = "medium"
SIZE_SMALL = "small"

SENIOR_CONTACT_PATTERN = re.compile(
    r"\b(cfo|chro|chief (financial|people|human resources) officer|controller|treasurer"
    r"|(vp|vice president|director|head)\W+(of\s+)?(finance|hr|human resources|people|benefits|total rewards))\b",
    re.IGNORECASE,
)

ROLE_CHANGE_KEYWORDS = re.compile(ROLE_CHANGE_KEYWORD_PATTERN, re.IGNORECASE)

_RANGE = re.compile(r"^\s*(\d[\d,]*)\s*(?:-|to|–)\s*(\d[\d,]*)\s*$")
_PLUS = re.compile(r"^\s*(\d[\d,]*)\s*\+\s*$")


@dataclass(frozen=True)
class ContactSnapshot:
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of an account as seen by one scoring run."""

    id: Any
    name: str
    domain: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    employee_count: Any = None
    hq_state: Optional[str] = None
    region_bucket: Optional[str] = None
    disposition: str = "active"
    triggers: Dict[str, Any] = field(default_factory=dict)
    notes: Optional[str] = None

    @property
    def resolved_region(self) -> str:
        return self.region_bucket or region_bucket(self.hq_state)


@dataclass(frozen=True)
class SignalSizes:
    role_change: Optional[str] = None
    hiring: Optional[str] = None
    funding: Optional[str] = None
    csuite: Optional[str] = None

    def values(self) -> List[str]:
        return [s for s in (self.role_change, self.hiring, self.funding, self.csuite) if s]


@dataclass(frozen=True)
class ScoreBreakdown:
    industry_key: Optional[str]
    industry: int
    size: int
    fit: int
    hiring: int
    csuite: int
    role_change: int
    funding: int
    timing: int
    reachability: int
    raw_total: int
    score: float
    stars: int
    reach_stars: int
    signals: SignalSizes
    guardrail: Optional[str] = None
    lead_signals: Dict[str, Any] = field(default_factory=dict)
    reason_line: str = ""

    def to_reason(self) -> Dict[str, Any]:
        """JSON-ready breakdown stored with each lead queue entry."""
        return asdict(self)


@dataclass(frozen=True)
class ScoredAccount:
    account: AccountSnapshot
    breakdown: ScoreBreakdown

    @property
    def region(self) -> str:
        return self.account.resolved_region


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value.replace(",", "").strip()))
        except ValueError:
            return None
    return None


def parse_employee_count(value: Any) -> Optional[int]:
    """Numeric headcount from an int or a textual range ("51-200", "500+")."""
    if isinstance(value, str):
        match = _RANGE.match(value)
        if match:
            low, high = (int(g.replace(",", "")) for g in match.groups())
            return (low + high) // 2
        match = _PLUS.match(value)
        if match:
            return int(match.group(1).replace(",", ""))
    count = _as_int(value)
    if count is None or count <= 0:
        return None
    return count


def _band(value: Optional[int], bands, descending: bool = True) -> int:
    """Points for the first band reached. ``descending`` bands are minimums, otherwise maximums."""
    if value is None:
        return 0
    for bound, points in bands:
        if (value >= bound) if descending else (value <= bound):
            return points
    return 0


# ---------------------------------------------------------------------------
# Trigger accessors
# ---------------------------------------------------------------------------

def hiring_roles(triggers: Dict[str, Any]) -> int:
    hiring = triggers.get("hiring")
    if isinstance(hiring, dict):
        return _as_int(hiring.get("open_roles_60d")) or 0
    return _as_int(hiring) or 0


def role_changes(triggers: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Leadership change items whose title or department names an HR or finance role."""
    change = triggers.get("leadership_change")
    items = change if isinstance(change, list) else [change]
    return [
        item for item in items
        if isinstance(item, dict)
        and ROLE_CHANGE_KEYWORDS.search(f"{item.get('title') or ''} {item.get('department') or ''}")
    ]


def _change_days(item: Dict[str, Any]) -> Optional[int]:
    days = _as_int(item.get("days_ago"))
    return days if days is not None and days >= 0 else None


def role_change_days(triggers: Dict[str, Any]) -> Optional[int]:
    """Most recent HR / finance leadership change, in days. None when absent."""
    days = [d for d in (_change_days(item) for item in role_changes(triggers)) if d is not None]
    return min(days) if days else None


def funding_months(triggers: Dict[str, Any]) -> Optional[int]:
    """Months since funding; -1 marks funding present without a date."""
    funding = triggers.get("funding")
    if funding is True:
        return -1
    if isinstance(funding, dict):
        months = _as_int(funding.get("months_ago"))
        return -1 if months is None else max(months, 0)
    return None


def csuite_change(triggers: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    change = triggers.get("csuite_change")
    if change is True:
        return {"role": None, "months_ago": None}
    if isinstance(change, dict) and change:
        return change
    return None


# ---------------------------------------------------------------------------
# Fit
# ---------------------------------------------------------------------------

def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", value.lower().replace("&", "and")).strip("_")


_LABEL_KEYS = {_slug(label): key for key, label in INDUSTRY_LABELS.items()}


def resolve_industry_key(industry: Optional[str], tables: PatternTables) -> Optional[str]:
    """Map a stored industry value (key, label or free text) onto the closed key set."""
    if not industry or not str(industry).strip():
        return None
    slug = _slug(str(industry))
    if slug in INDUSTRY_LABELS:
        return slug
    if slug in _LABEL_KEYS:
        return _LABEL_KEYS[slug]
    for pattern, key in tables.industry_patterns:
        if pattern.search(str(industry)):
            return key
    return None


def industry_points(industry_key: Optional[str], config) -> int:
    if industry_key in DEPRIORITIZED_INDUSTRIES:
        return config.deprioritized_industry_score
    if industry_key in INDUSTRY_SCORES:
        return INDUSTRY_SCORES[industry_key]
    return config.unknown_industry_score


def size_points(employee_count: Optional[int]) -> int:
    if employee_count is None:
        return 0
    for upper, points in SIZE_BANDS:
        if employee_count <= upper:
            return points
    return SIZE_POINTS_OVER


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

def hiring_points(triggers: Dict[str, Any]) -> int:
    return _band(hiring_roles(triggers), HIRING_BANDS)


def csuite_points(triggers: Dict[str, Any]) -> int:
    change = csuite_change(triggers)
    if change is None:
        return 0
    role = str(change.get("role") or "").upper()
    weight = CSUITE_ROLE_WEIGHTS.get(role, CSUITE_OTHER_WEIGHT)
    months = _as_int(change.get("months_ago"))
    if months is None or months <= 3:
        return weight
    if months <= 6:
        return weight // 2
    return 0


def role_change_points(triggers: Dict[str, Any]) -> int:
    return _band(role_change_days(triggers), ROLE_CHANGE_DECAY, descending=False)


def funding_points(triggers: Dict[str, Any]) -> int:
    months = funding_months(triggers)
    if months is None:
        return 0
    if months < 0:
        return FUNDING_UNDATED_POINTS
    return _band(months, FUNDING_DECAY, descending=False)


# ---------------------------------------------------------------------------
# Reachability
# ---------------------------------------------------------------------------

def is_senior_contact(title: Optional[str]) -> bool:
    return bool(title) and SENIOR_CONTACT_PATTERN.search(title) is not None


def reachability_points(contacts: Sequence[ContactSnapshot]) -> int:
    points = 0
    if any(c.email for c in contacts):
        points += REACH_EMAIL
    if any(c.phone for c in contacts):
        points += REACH_PHONE
    if sum(1 for c in contacts if c.linkedin_url) >= 2:
        points += REACH_PROFILES
    if any(is_senior_contact(c.title) for c in contacts):
        points += REACH_SENIOR
    return min(points, REACHABILITY_MAX)


def reach_stars(contacts: Sequence[ContactSnapshot]) -> int:
    """How many of {email, phone, profile link} are present across contacts (0-3)."""
    return sum(
        1
        for present in (
            any(c.email for c in contacts),
            any(c.phone for c in contacts),
            any(c.linkedin_url for c in contacts),
        )
        if present
    )


# ---------------------------------------------------------------------------
# Signal sizes and stars
# ---------------------------------------------------------------------------

def classify_signals(triggers: Optional[Dict[str, Any]]) -> SignalSizes:
    """Large / medium / small per signal, from recency or magnitude thresholds."""
    triggers = triggers or {}

    days = role_change_days(triggers)
    role_size = None
    if days is not None:
        role_size = SIZE_LARGE if days <= 14 else SIZE_MEDIUM if days <= 60 else SIZE_SMALL if days <= 180 else None

    roles = hiring_roles(triggers)
    hiring_size = SIZE_LARGE if roles >= 10 else SIZE_MEDIUM if roles >= 6 else SIZE_SMALL if roles >= 3 else None

    months = funding_months(triggers)
    funding_size = None
    if months is not None:
        if months < 0:
            funding_size = SIZE_MEDIUM
        else:
            funding_size = SIZE_LARGE if months <= 3 else SIZE_MEDIUM if months <= 6 else SIZE_SMALL if months <= 12 else None

    change = csuite_change(triggers)
    csuite_size = None
    if change is not None:
        cs_months = _as_int(change.get("months_ago"))
        if cs_months is None or cs_months <= 3:
            csuite_size = SIZE_MEDIUM
        elif cs_months <= 6:
            csuite_size = SIZE_SMALL

    return SignalSizes(role_size, hiring_size, funding_size, csuite_size)


def compute_stars(signals: SignalSizes, reachability: int) -> int:
    sizes = signals.values()
    large = sizes.count(SIZE_LARGE)
    medium = sizes.count(SIZE_MEDIUM)
    small = sizes.count(SIZE_SMALL)
    if large >= 1 or medium >= 2:
        return 3
    if medium == 1 and reachability >= REACH_READY_THRESHOLD:
        return 3
    if medium == 1 or small >= 2:
        return 2
    return 1


# ---------------------------------------------------------------------------
# Lead signals view and reason line
# ---------------------------------------------------------------------------

def lead_signals(triggers: Dict[str, Any], employee_count: Optional[int]) -> Dict[str, Any]:
    """Normalized signal view for display and outreach generation."""
    view: Dict[str, Any] = {}

    months = funding_months(triggers)
    if months is not None:
        funding = triggers.get("funding")
        stage = funding.get("stage") if isinstance(funding, dict) else None
        view["funding"] = {"stage": stage or "Funding round", "days_ago": 90 if months < 0 else months * 30}

    changes = role_changes(triggers)
    if changes:
        best = min(changes, key=lambda item: (_change_days(item) is None, _change_days(item) or 0))
        view["hr_change"] = {"title": best.get("title") or "HR leader", "days_ago": _change_days(best)}

    cs = csuite_change(triggers)
    if cs is not None:
        cs_months = _as_int(cs.get("months_ago"))
        view["csuite"] = {"role": cs.get("role") or "Other", "days_ago": 90 if cs_months is None else cs_months * 30}

    roles = hiring_roles(triggers)
    if roles >= 3:
        intensity = "Large" if roles >= 10 else "Medium" if roles >= 6 else "Small"
        view["hiring"] = {"jobs_60d": roles, "intensity": intensity}

    if employee_count is not None:
        milestones = {f"hit_{n}": True for n in (50, 75, 100, 150) if employee_count >= n}
        if milestones:
            view["milestones"] = milestones

    news = triggers.get("news")
    if isinstance(news, dict):
        keywords = list(news.get("keywords") or []) + list(news.get("events") or [])
        if keywords:
            view["news"] = {"keywords": keywords, "last_mention_days_ago": news.get("days_ago")}

    vendor = triggers.get("vendor_change")
    if isinstance(vendor, dict):
        view["carrier_change"] = {"vendor": vendor.get("vendor"), "phrase": vendor.get("phrase")}

    return view


def reason_line(view: Dict[str, Any]) -> str:
    """Short human explanation from the two strongest signals."""
    parts: List[str] = []
    funding = view.get("funding")
    if funding and funding["days_ago"] <= 90:
        parts.append(f"recent {funding['stage']} round")
    hr = view.get("hr_change")
    if hr and hr["days_ago"] is not None and hr["days_ago"] <= 60:
        parts.append(f"new {hr['title']}")
    carrier = view.get("carrier_change")
    if carrier:
        parts.append(f"benefits carrier change ({carrier['vendor']})")
    hiring = view.get("hiring")
    if hiring:
        parts.append(f"{hiring['jobs_60d']} open roles")
    cs = view.get("csuite")
    if cs and cs["days_ago"] <= 90:
        parts.append(f"new {cs['role']}")
    return ", ".join(parts[:2])


# ---------------------------------------------------------------------------
# Account score
# ---------------------------------------------------------------------------

def guardrail_reason(account: AccountSnapshot) -> Optional[str]:
    disposition = account.disposition or "active"
    if disposition.startswith("rejected_"):
        return f"disposition_{disposition}"
    if disposition == "suppressed":
        return "suppressed"
    if not derive_domain(account.domain, account.website) and not account.website:
        return "missing_domain_and_website"
    return None


def score_account(
    account: AccountSnapshot,
    contacts: Sequence[ContactSnapshot],
    config,
    tables: PatternTables,
    triggers: Optional[Dict[str, Any]] = None,
) -> ScoreBreakdown:
    """Score one account. ``triggers`` overrides the stored trigger map for this run."""
    triggers = account.triggers if triggers is None else triggers
    triggers = triggers if isinstance(triggers, dict) else {}
    contacts = list(contacts or [])
    industry_key = resolve_industry_key(account.industry, tables)
    employees = parse_employee_count(account.employee_count)
    view = lead_signals(triggers, employees)

    guardrail = guardrail_reason(account)
    if guardrail:
        return ScoreBreakdown(
            industry_key=industry_key,
            industry=0,
            size=0,
            fit=0,
            hiring=0,
            csuite=0,
            role_change=0,
            funding=0,
            timing=0,
            reachability=0,
            raw_total=0,
            score=0.0,
            stars=1,
            reach_stars=0,
            signals=SignalSizes(),
            guardrail=guardrail,
            lead_signals=view,
            reason_line="",
        )

    industry = industry_points(industry_key, config)
    size = size_points(employees)
    fit = min(industry + size, FIT_MAX)

    hiring = hiring_points(triggers)
    csuite = csuite_points(triggers)
    role_change = role_change_points(triggers)
    funding = funding_points(triggers)
    timing = min(hiring + csuite + role_change + funding, TIMING_MAX)

    reachability = reachability_points(contacts)
    raw_total = fit + timing + reachability
    signals = classify_signals(triggers)

    return ScoreBreakdown(
        industry_key=industry_key,
        industry=industry,
        size=size,
        fit=fit,
        hiring=hiring,
        csuite=csuite,
        role_change=role_change,
        funding=funding,
        timing=timing,
        reachability=reachability,
        raw_total=raw_total,
        score=round(raw_total * 100.0 / RAW_MAX, 1),
        stars=compute_stars(signals, reachability),
        reach_stars=reach_stars(contacts),
        signals=signals,
        lead_signals=view,
        reason_line=reason_line(view),
    )


def employee_distance(account: AccountSnapshot) -> Optional[int]:
    count = parse_employee_count(account.employee_count)
    return None if count is None else abs(count - TARGET_EMPLOYEE_MIDPOINT)
