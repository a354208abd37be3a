"""
Daily scoring run: score the full account pool, select the ranked queue and
persist it once per run date.

The pool is read once per invocation. Notes and textual news evidence are
scanned for carrier changes and HR/benefits keywords; those findings feed this
run's trigger view only and are never written back to accounts.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from lead_engine.core.tables import PatternTables, load_pattern_tables
from lead_engine.errors import LeadQueueConflictError
from lead_engine.models.account import Account
from lead_engine.schemas.engine_config import EngineConfig
from lead_engine.schemas.lead_queue import LeadQueueItem, ScoringRunResult
from lead_engine.services.scoring import AccountSnapshot, ContactSnapshot, ScoredAccount, score_account
from lead_engine.services.selection import QuotaPolicy, region_tallies, select_top
from lead_engine.services.signals import detect_vendor_change, scan_keywords
from lead_engine.utils.time import utc_today
from lead_engine.utils.url_canonicalizer import derive_domain

logger = logging.getLogger(__name__)


def news_text(triggers: Optional[Dict[str, Any]]) -> str:
    """Flatten whatever textual news evidence an account carries."""
    news = (triggers or {}).get("news")
    if isinstance(news, str):
        return news
    if isinstance(news, list):
        return " ".join(str(item) for item in news)
    if isinstance(news, dict):
        if news.get("text"):
            return str(news["text"])
        return " ".join(str(k) for k in (news.get("keywords") or []))
    return ""


def scan_account_text(account: AccountSnapshot, config: EngineConfig) -> Dict[str, Any]:
    """Per-run trigger view: stored triggers plus carrier change / HR keywords found in notes and news."""
    triggers = dict(account.triggers or {})
    text = f"{news_text(triggers)} {account.notes or ''}".strip()
    if not text:
        return triggers

    if "vendor_change" not in triggers:
        vendor = detect_vendor_change(text, config.carrier_names, config.carrier_change_phrases, source="news")
        if vendor:
            triggers["vendor_change"] = vendor

    found = scan_keywords(text, config.benefits_hr_keywords)
    if found:
        news = triggers.get("news")
        news = dict(news) if isinstance(news, dict) else {}
        keywords = list(news.get("keywords") or [])
        news["keywords"] = keywords + [kw for kw in found if kw not in keywords]
        triggers["news"] = news
    return triggers


def to_snapshot(account: Account) -> AccountSnapshot:
    return AccountSnapshot(
        id=account.id,
        name=account.name,
        domain=derive_domain(account.domain, account.website),
        website=account.website,
        industry=account.industry,
        employee_count=account.employee_count,
        hq_state=account.hq_state,
        region_bucket=account.region_bucket,
        disposition=account.disposition or "active",
        triggers=account.triggers if isinstance(account.triggers, dict) else {},
        notes=account.notes,
    )


def to_contact_snapshot(contact) -> ContactSnapshot:
    return ContactSnapshot(
        title=contact.title, email=contact.email, phone=contact.phone, linkedin_url=contact.linkedin_url
    )


class ScoringService:
    def __init__(
        self,
        *,
        accounts,
        lead_queue,
        audit,
        config: EngineConfig,
        tables: Optional[PatternTables] = None,
        policy: Optional[QuotaPolicy] = None,
    ):
        self.accounts = accounts
        self.lead_queue = lead_queue
        self.audit = audit
        self.config = config
        self.tables = tables or load_pattern_tables()
        self.policy = policy or QuotaPolicy()

    async def score_pool(self) -> List[ScoredAccount]:
        rows = await self.accounts.list_all()
        contacts = await self.accounts.contacts_by_account([row.id for row in rows])
        scored: List[ScoredAccount] = []
        for row in rows:
            snapshot = to_snapshot(row)
            breakdown = score_account(
                snapshot,
                [to_contact_snapshot(c) for c in contacts.get(row.id, [])],
                self.config,
                self.tables,
                triggers=scan_account_text(snapshot, self.config),
            )
            scored.append(ScoredAccount(snapshot, breakdown))
        return scored

    async def run(self, run_date: Optional[date] = None, dry_run: bool = False) -> ScoringRunResult:
        run_date = run_date or utc_today()
        logger.info("Scoring run started: run_date=%s dry_run=%s", run_date, dry_run)

        if not dry_run and await self.lead_queue.run_exists(run_date):
            logger.warning("Lead queue already exists for %s; refusing to re-run", run_date)
            raise LeadQueueConflictError(run_date)

        scored = await self.score_pool()
        selected = select_top(scored, self.policy)
        stats = region_tallies(selected)
        stats.update(total=len(selected), total_candidates=len(scored))

        if not dry_run:
            entries = [
                {
                    "account_id": item.account.id,
                    "priority_rank": rank,
                    "score": item.breakdown.score,
                    "stars": item.breakdown.stars,
                    "reach_stars": item.breakdown.reach_stars,
                    "reason": item.breakdown.to_reason(),
                }
                for rank, item in enumerate(selected, start=1)
            ]
            run = await self.lead_queue.create_run(run_date=run_date, stats=stats, entries=entries)
            await self.audit.record(
                "daily_lead_run",
                "lead_queue",
                {"run_date": run_date.isoformat(), **stats},
                entity_id=getattr(run, "id", None),
            )

        logger.info("Scoring run finished: run_date=%s selected=%s of %s", run_date, len(selected), len(scored))
        return ScoringRunResult(
            run_date=run_date,
            dry_run=dry_run,
            total=len(selected),
            stats=stats,
            leads=[
                LeadQueueItem(
                    rank=rank,
                    account_id=item.account.id,
                    name=item.account.name,
                    domain=item.account.domain,
                    industry=item.account.industry,
                    employee_count=None if item.account.employee_count is None else str(item.account.employee_count),
                    region=item.region,
                    state=item.account.hq_state,
                    disposition=item.account.disposition,
                    score=item.breakdown.score,
                    stars=item.breakdown.stars,
                    reach_stars=item.breakdown.reach_stars,
                    reason=item.breakdown.to_reason(),
                )
                for rank, item in enumerate(selected, start=1)
            ],
        )
