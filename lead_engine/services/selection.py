"""
Deterministic ranking and quota-constrained top-N selection.

Ordering: stars, score, hiring, C-suite and reachability sub-scores (all
descending), then distance of headcount from the target midpoint (unknown
counts last), then domain so identical snapshots always rank identically.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple

from lead_engine.services.geography import REGION_OTHER, REGION_PRIMARY, REGION_SECONDARY
from lead_engine.services.scoring import ScoredAccount, employee_distance

ELIGIBLE_DISPOSITIONS = ("active", "needs_review")

_MAX_DISTANCE = 10 ** 9


@dataclass(frozen=True)
class QuotaPolicy:
    total: int = 50
    primary_cap: int = 45
    secondary_cap: int = 4
    secondary_min_score: float = 85.0
    other_cap: int = 1
    other_min_score: float = 90.0


def is_eligible(item: ScoredAccount) -> bool:
    return (item.account.disposition or "active") in ELIGIBLE_DISPOSITIONS and item.breakdown.guardrail is None


def sort_key(item: ScoredAccount) -> Tuple:
    b = item.breakdown
    distance = employee_distance(item.account)
    return (
        -b.stars,
        -b.score,
        -b.hiring,
        -b.csuite,
        -b.reachability,
        _MAX_DISTANCE if distance is None else distance,
        (item.account.domain or "").lower(),
        str(item.account.id),
    )


def rank(items: Iterable[ScoredAccount]) -> List[ScoredAccount]:
    return sorted((i for i in items if is_eligible(i)), key=sort_key)


def select_top(items: Sequence[ScoredAccount], policy: QuotaPolicy = QuotaPolicy()) -> List[ScoredAccount]:
    """Fill the queue: primary, high-scoring secondary, exceptional other, then backfill."""
    ranked = rank(items)
    picked: List[ScoredAccount] = []
    taken = set()

    def take(pool: Iterable[ScoredAccount], limit: int) -> None:
        for item in pool:
            if len(picked) >= policy.total or limit <= 0:
                return
            if id(item) in taken:
                continue
            picked.append(item)
            taken.add(id(item))
            limit -= 1

    primary = [i for i in ranked if i.region == REGION_PRIMARY]
    secondary = [i for i in ranked if i.region == REGION_SECONDARY and i.breakdown.score >= policy.secondary_min_score]
    other = [i for i in ranked if i.region == REGION_OTHER and i.breakdown.score >= policy.other_min_score]

    take(primary, policy.primary_cap)
    take(secondary, policy.secondary_cap)
    take(other, policy.other_cap)
    take(primary, policy.total)
    take(ranked, policy.total)
    return picked


def region_tallies(items: Iterable[ScoredAccount]) -> Dict[str, int]:
    tallies = {REGION_PRIMARY: 0, REGION_SECONDARY: 0, REGION_OTHER: 0}
    for item in items:
        tallies[item.region] = tallies.get(item.region, 0) + 1
    return tallies
