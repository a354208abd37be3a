"""Unit tests for account scoring and star rating."""

import uuid

import pytest

from lead_engine.services.scoring import (
    AccountSnapshot,
    ContactSnapshot,
    SignalSizes,
    compute_stars,
    funding_points,
    parse_employee_count,
    resolve_industry_key,
    role_change_points,
    score_account,
)


pytestmark = pytest.mark.unit


def snapshot(**overrides):
    fields = dict(
        id=uuid.uuid4(),
        name="Cedar Family Health",
        domain="cedarfamilyhealth.org",
        industry="healthcare and social assistance",
        employee_count=120,
        hq_state="MA",
        region_bucket="primary",
        triggers={},
    )
    fields.update(overrides)
    return AccountSnapshot(**fields)


def test_strong_fit_with_hiring_and_cfo(tables, engine_config):
    account = snapshot(triggers={"hiring": {"open_roles_60d": 12}})
    contacts = [ContactSnapshot(title="CFO", email="cfo@cedarfamilyhealth.org")]

    b = score_account(account, contacts, engine_config, tables)

    assert b.industry_key == "healthcare_social_assistance"
    assert b.fit == 40
    assert b.hiring == 20
    assert b.reachability == 6
    assert b.stars == 3
    assert b.reach_stars == 1
    assert b.raw_total == 66
    assert b.score == 60.0
    assert b.guardrail is None
    assert b.reason_line == "12 open roles"


@pytest.mark.parametrize(
    "overrides,reason",
    [
        ({"disposition": "rejected_vendor"}, "disposition_rejected_vendor"),
        ({"disposition": "suppressed"}, "suppressed"),
        ({"domain": None, "website": None}, "missing_domain_and_website"),
    ],
)
def test_guardrails_zero_the_score(tables, engine_config, overrides, reason):
    account = snapshot(triggers={"hiring": {"open_roles_60d": 12}}, **overrides)
    b = score_account(account, [ContactSnapshot(email="x@y.com")], engine_config, tables)
    assert b.guardrail == reason
    assert (b.fit, b.timing, b.reachability, b.score) == (0, 0, 0, 0.0)
    assert b.stars == 1
    assert b.reach_stars == 0


def test_recency_never_increases_points():
    days = [0, 10, 14, 15, 30, 45, 60, 90, 120, 180, 181, 400]
    role_points = [role_change_points({"leadership_change": {"title": "Director of HR", "days_ago": d}}) for d in days]
    assert role_points == sorted(role_points, reverse=True)
    assert role_points[0] == 15 and role_points[-1] == 0

    months = [0, 3, 4, 6, 9, 12, 13]
    fund = [funding_points({"funding": {"months_ago": m}}) for m in months]
    assert fund == sorted(fund, reverse=True)
    assert funding_points({"funding": True}) == 7


def test_timing_is_capped(tables, engine_config):
    triggers = {
        "hiring": {"open_roles_60d": 40},
        "csuite_change": {"role": "CFO", "months_ago": 1},
        "leadership_change": {"title": "VP Finance", "days_ago": 3},
        "funding": {"stage": "Series C", "months_ago": 1},
    }
    b = score_account(snapshot(triggers=triggers), [], engine_config, tables)
    assert b.hiring + b.csuite + b.role_change + b.funding == 60
    assert b.timing == 60


def test_unknown_and_deprioritized_industries(tables, engine_config):
    unknown = score_account(snapshot(industry="Widgets", employee_count=None), [], engine_config, tables)
    assert unknown.industry_key is None
    assert unknown.industry == 5
    cannabis = score_account(snapshot(industry="cannabis", employee_count=None), [], engine_config, tables)
    assert cannabis.industry == 1


def test_malformed_inputs_score_zero(tables, engine_config):
    account = snapshot(employee_count="lots", triggers={"hiring": "many", "funding": "yes"})
    b = score_account(account, [], engine_config, tables)
    assert b.size == 0
    assert b.hiring == 0
    assert b.funding == 0


def test_employee_count_parsing():
    assert parse_employee_count("51-200") == 125
    assert parse_employee_count("500+") == 500
    assert parse_employee_count("1,200") == 1200
    assert parse_employee_count(0) is None
    assert parse_employee_count(None) is None


def test_industry_key_resolution(tables):
    assert resolve_industry_key("tech_pst", tables) == "tech_pst"
    assert resolve_industry_key("Biotech & Life Sciences", tables) == "biotech_life_sciences"
    assert resolve_industry_key("home health agency", tables) == "healthcare_social_assistance"
    assert resolve_industry_key("", tables) is None


def test_star_rules():
    assert compute_stars(SignalSizes(hiring="large"), 0) == 3
    assert compute_stars(SignalSizes(hiring="medium", funding="medium"), 0) == 3
    assert compute_stars(SignalSizes(hiring="medium"), 6) == 3
    assert compute_stars(SignalSizes(hiring="medium"), 5) == 2
    assert compute_stars(SignalSizes(hiring="small", csuite="small"), 0) == 2
    assert compute_stars(SignalSizes(hiring="small"), 10) == 1
    assert compute_stars(SignalSizes(), 0) == 1


def test_only_hr_and_finance_role_changes_count(tables, engine_config):
    marketing = snapshot(employee_count=None, triggers={"leadership_change": {"title": "VP Marketing", "days_ago": 5}})
    b = score_account(marketing, [], engine_config, tables)
    assert b.role_change == 0
    assert b.signals.role_change is None
    assert "hr_change" not in b.lead_signals
    assert b.reason_line == ""

    payroll = snapshot(
        employee_count=None,
        triggers={"leadership_change": [
            {"title": "VP Marketing", "days_ago": 2},
            {"title": "Manager", "department": "Payroll", "days_ago": 20},
        ]},
    )
    b = score_account(payroll, [], engine_config, tables)
    assert b.role_change == 12
    assert b.lead_signals["hr_change"] == {"title": "Manager", "days_ago": 20}
