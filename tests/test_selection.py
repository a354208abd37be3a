"""Unit tests for deterministic ranking and quota selection."""

import uuid

import pytest

from lead_engine.services.scoring import AccountSnapshot, ScoredAccount, SignalSizes, ScoreBreakdown
from lead_engine.services.selection import QuotaPolicy, rank, region_tallies, select_top


pytestmark = pytest.mark.unit


def scored(region, score, stars=2, domain=None, employees=150, disposition="active", guardrail=None, hiring=0):
    account = AccountSnapshot(
        id=uuid.uuid4(),
        name=domain or "acct",
        domain=domain or f"{uuid.uuid4().hex[:8]}.com",
        employee_count=employees,
        region_bucket=region,
        disposition=disposition,
    )
    breakdown = ScoreBreakdown(
        industry_key=None, industry=0, size=0, fit=0, hiring=hiring, csuite=0, role_change=0, funding=0,
        timing=0, reachability=0, raw_total=0, score=score, stars=stars, reach_stars=0,
        signals=SignalSizes(), guardrail=guardrail,
    )
    return ScoredAccount(account, breakdown)


def test_quotas_with_full_primary_pool():
    pool = [scored("primary", 50 + i % 30) for i in range(60)]
    pool += [scored("secondary", 88) for _ in range(6)] + [scored("secondary", 70) for _ in range(3)]
    pool += [scored("other", 95), scored("other", 92)]

    picked = select_top(pool)

    tallies = region_tallies(picked)
    assert len(picked) == 50
    assert tallies == {"primary": 45, "secondary": 4, "other": 1}
    assert all(p.breakdown.score >= 85 for p in picked if p.region == "secondary")


def test_backfill_when_primary_is_short():
    pool = [scored("primary", 60) for _ in range(10)]
    pool += [scored("secondary", 40) for _ in range(20)]
    pool += [scored("other", 30) for _ in range(30)]

    picked = select_top(pool, QuotaPolicy(total=25))

    assert len(picked) == 25
    assert region_tallies(picked)["primary"] == 10
    # Backfill walks the global ranking, so secondary outranks other here
    assert region_tallies(picked)["secondary"] == 15


def test_ineligible_accounts_are_never_selected():
    pool = [
        scored("primary", 99, disposition="suppressed"),
        scored("primary", 98, disposition="rejected_vendor"),
        scored("primary", 97, guardrail="missing_domain_and_website"),
        scored("primary", 10, disposition="needs_review"),
    ]
    picked = select_top(pool)
    assert [p.account.disposition for p in picked] == ["needs_review"]


def test_ranking_is_deterministic_and_tie_broken():
    a = scored("primary", 70, stars=2, domain="alpha.com", employees=150)
    b = scored("primary", 70, stars=2, domain="beta.com", employees=150)
    near = scored("primary", 70, stars=2, domain="zeta.com", employees=140)
    far = scored("primary", 70, stars=2, domain="gamma.com", employees=None)
    starred = scored("primary", 40, stars=3, domain="omega.com")
    hiring = scored("primary", 70, stars=2, domain="yak.com", employees=900, hiring=14)

    order = [s.account.domain for s in rank([far, b, near, a, starred, hiring])]
    assert order == ["omega.com", "yak.com", "alpha.com", "beta.com", "zeta.com", "gamma.com"]
    assert rank([a, b, far]) == rank([far, b, a])


def test_empty_pool():
    assert select_top([]) == []
    assert region_tallies([]) == {"primary": 0, "secondary": 0, "other": 0}
