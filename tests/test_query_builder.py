"""Unit tests for discovery query generation."""

import random
from datetime import date

import pytest

from lead_engine.core.discovery_themes import PRIMARY_GEO_TERMS
from lead_engine.services.query_builder import (
    build_auto_plan,
    build_fill_queries,
    build_manual_plan,
    geo_terms_for_states,
)


pytestmark = pytest.mark.unit

WEDNESDAY = date(2025, 6, 4)


def test_auto_plan_is_seeded_and_deterministic():
    first = build_auto_plan(WEDNESDAY, random.Random(7), 12)
    second = build_auto_plan(WEDNESDAY, random.Random(7), 12)
    assert first.queries == second.queries
    assert first.theme_key == "advanced_mfg_med_devices"
    assert first.target_industries == ["advanced_mfg_med_devices"]


def test_sweep_days_have_no_target_industry():
    sunday = build_auto_plan(date(2025, 6, 8), random.Random(1), 12)
    assert sunday.target_industries == []
    assert sunday.queries


def test_queries_are_capped_and_unique():
    plan = build_auto_plan(WEDNESDAY, random.Random(3), 4)
    assert 0 < len(plan.queries) <= 4
    lowered = [q.lower() for q in plan.queries]
    assert len(set(lowered)) == len(lowered)
    assert all(q == " ".join(q.split()) for q in plan.queries)


def test_manual_plan_uses_requested_keys():
    plan = build_manual_plan(["tech_pst", "not_a_key"], ["funding"], ["NH"], random.Random(2), 10)
    assert plan.theme_key == "manual"
    assert plan.target_industries == ["tech_pst"]
    assert set(plan.geo_terms) <= set(geo_terms_for_states(["NH"]))
    assert plan.queries


def test_manual_plan_without_industries_falls_back():
    plan = build_manual_plan([], [], [], random.Random(2), 10)
    assert plan.industry_terms == ["company"]
    assert set(plan.geo_terms) <= set(PRIMARY_GEO_TERMS)


def test_fill_queries_respect_limit():
    queries = build_fill_queries("construction", ["Worcester MA"], random.Random(5), 2)
    assert len(queries) == 2
    assert all("Worcester MA" in q for q in queries)
