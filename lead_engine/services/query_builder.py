"""Bounded, randomized search-query generation for discovery runs."""

import random
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence

from lead_engine.core.discovery_themes import (
    DAY_THEMES,
    FILL_QUERY_TEMPLATES,
    PANEL_INDUSTRIES,
    PRIMARY_GEO_TERMS,
    QUERY_TEMPLATES,
    SECONDARY_GEO_TERMS,
    TRIGGER_KEYWORDS,
)

GEO_SAMPLE = 3
SUBSECTOR_SAMPLE = 3
TRIGGER_SAMPLE = 2


@dataclass
class QueryPlan:
    """Resolved query-building inputs plus the generated queries."""

    theme_key: str
    target_industries: List[str]
    geo_terms: List[str]
    industry_terms: List[str]
    sub_sectors: List[str]
    trigger_terms: List[str]
    queries: List[str] = field(default_factory=list)


def pick_random(items: Sequence[str], n: int, rng: random.Random) -> List[str]:
    if not items:
        return []
    return rng.sample(list(items), min(n, len(items)))


def geo_terms_for_states(states: Optional[Sequence[str]]) -> List[str]:
    """Search geography vocabulary for a set of state codes (primary market by default)."""
    if not states:
        return list(PRIMARY_GEO_TERMS)
    terms: List[str] = []
    for state in states:
        code = (state or "").strip().upper()
        if code == "MA":
            terms.extend(PRIMARY_GEO_TERMS)
        elif code in SECONDARY_GEO_TERMS:
            terms.extend(SECONDARY_GEO_TERMS[code])
        elif code:
            terms.append(code)
    return terms


def _dedupe(queries: List[str], cap: int) -> List[str]:
    seen = set()
    out: List[str] = []
    for query in queries:
        normalized = " ".join(query.split())
        key = normalized.lower()
        if not normalized or key in seen:
            continue
        seen.add(key)
        out.append(normalized)
        if len(out) >= cap:
            break
    return out


def fill_templates(
    templates: Sequence[str],
    geo_terms: Sequence[str],
    industry_terms: Sequence[str],
    sub_sectors: Sequence[str],
    trigger_terms: Sequence[str],
    rng: random.Random,
    cap: int,
) -> List[str]:
    queries: List[str] = []
    for template in templates:
        queries.append(
            template.format(
                geo=rng.choice(geo_terms) if geo_terms else "",
                industry=rng.choice(industry_terms) if industry_terms else "",
                subsector=rng.choice(sub_sectors) if sub_sectors else "",
                trigger=rng.choice(trigger_terms) if trigger_terms else "",
            )
        )
    return _dedupe(queries, cap)


def build_auto_plan(run_day: date, rng: random.Random, max_queries: int) -> QueryPlan:
    """Thematic plan for the day of week."""
    theme = DAY_THEMES[run_day.weekday()]
    trigger_pool = [kw for kws in TRIGGER_KEYWORDS.values() for kw in kws]
    plan = QueryPlan(
        theme_key=theme["key"],
        target_industries=[theme["key"]] if theme["key"] in PANEL_INDUSTRIES else [],
        geo_terms=pick_random(PRIMARY_GEO_TERMS, GEO_SAMPLE, rng),
        industry_terms=list(theme["industries"]),
        sub_sectors=pick_random(theme["sub_sectors"], SUBSECTOR_SAMPLE, rng),
        trigger_terms=pick_random(trigger_pool, TRIGGER_SAMPLE, rng),
    )
    plan.queries = fill_templates(
        QUERY_TEMPLATES, plan.geo_terms, plan.industry_terms, plan.sub_sectors, plan.trigger_terms, rng, max_queries
    )
    return plan


def build_manual_plan(
    industries: Sequence[str],
    triggers: Sequence[str],
    states: Sequence[str],
    rng: random.Random,
    max_queries: int,
) -> QueryPlan:
    """Operator-specified plan: industry keys, trigger keys and state codes."""
    targets = [key for key in industries if key in PANEL_INDUSTRIES]
    industry_terms = [term for key in targets for term in PANEL_INDUSTRIES[key]] or ["company"]
    trigger_pool = [kw for key in triggers for kw in TRIGGER_KEYWORDS.get(key, [])]
    plan = QueryPlan(
        theme_key="manual",
        target_industries=targets,
        geo_terms=pick_random(geo_terms_for_states(states), GEO_SAMPLE, rng),
        industry_terms=industry_terms,
        sub_sectors=pick_random(industry_terms, SUBSECTOR_SAMPLE, rng),
        trigger_terms=pick_random(trigger_pool, TRIGGER_SAMPLE, rng),
    )
    plan.queries = fill_templates(
        QUERY_TEMPLATES, plan.geo_terms, plan.industry_terms, plan.sub_sectors, plan.trigger_terms, rng, max_queries
    )
    return plan


def build_fill_queries(industry_key: str, geo_terms: Sequence[str], rng: random.Random, limit: int) -> List[str]:
    """Follow-up queries aimed at an under-represented target industry."""
    terms = PANEL_INDUSTRIES.get(industry_key) or [industry_key.replace("_", " ")]
    return fill_templates(FILL_QUERY_TEMPLATES, geo_terms or PRIMARY_GEO_TERMS, terms, [], [], rng, limit)
