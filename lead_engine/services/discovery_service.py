"""
Discovery orchestrator.

One run walks build_queries -> search -> fetch_candidates -> classify_and_extract
-> dedup_and_suppress -> diversity_check -> persist -> summarize. Only the
fetch/classify stage is concurrent (semaphore-bounded, per-candidate timeout);
its results are merged after the batch completes, so the later stages work on
plain lists. A candidate that fails is counted and skipped, never retried.

Without a usable search or fetch provider the run degrades to an enrichment
sweep over existing accounts.
"""

import asyncio
import logging
import math
import random
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from lead_engine.core.config import Settings
from lead_engine.core.tables import PatternTables, load_pattern_tables
from lead_engine.errors import ProviderConfigError, ProviderError
from lead_engine.models.account import Account
from lead_engine.schemas.discovery import DiscoveryRunRequest, DiscoveryRunSummary
from lead_engine.schemas.engine_config import EngineConfig
from lead_engine.services.classifier import (
    classify_entity,
    extract_display_name,
    infer_industry,
    is_article_url,
    is_document_url,
    is_generic_domain,
    is_news_domain,
    page_text,
)
from lead_engine.services.geography import REGION_OTHER, GeoResult, region_bucket, resolve_page_geography
from lead_engine.services.providers import (
    FetchedPage,
    FetchProvider,
    SearchProvider,
    SearchResult,
    build_fetch_provider,
    build_search_provider,
)
from lead_engine.services.query_builder import QueryPlan, build_auto_plan, build_fill_queries, build_manual_plan
from lead_engine.services.scoring import AccountSnapshot, score_account
from lead_engine.services.signals import detect_signals, high_intent, merge_triggers, new_strong_signals
from lead_engine.utils.company_names import canonical_company_name, fuzzy_match, normalize_title
from lead_engine.utils.time import days_since, utc_now
from lead_engine.utils.url_canonicalizer import canonicalize_url, normalize_domain

logger = logging.getLogger(__name__)

FUZZY_NAME_THRESHOLD = 0.9
SUBTYPE_NEW = "new"
SUBTYPE_REFRESHED = "refreshed"
SUBTYPE_HIGH_INTENT = "high_intent"


@dataclass
class Candidate:
    url: str
    domain: str
    title: str = ""
    description: str = ""
    query: str = ""


@dataclass
class Evaluation:
    """Outcome of fetch + classify + extract for one candidate."""

    candidate: Candidate
    kept: bool
    reason: Optional[str] = None
    name: str = ""
    canonical_name: str = ""
    website: Optional[str] = None
    geo: GeoResult = field(default_factory=GeoResult)
    region: str = REGION_OTHER
    industry: Optional[str] = None
    triggers: Dict[str, Any] = field(default_factory=dict)
    high_intent: bool = False
    high_intent_reasons: List[str] = field(default_factory=list)
    error: Optional[str] = None


class AccountIndex:
    """In-memory dedup keys over existing accounts plus accounts added this run."""

    def __init__(self, accounts: Iterable[Account] = ()):
        self.by_domain: Dict[str, Account] = {}
        self.by_canonical: Dict[str, Account] = {}
        self.by_title: Dict[str, Account] = {}
        for account in accounts:
            self.add(account)

    def add(self, account: Account) -> None:
        domain = normalize_domain(account.domain)
        if domain:
            self.by_domain.setdefault(domain, account)
        if account.canonical_name:
            self.by_canonical.setdefault(account.canonical_name, account)
        title = normalize_title(account.name or "")
        if title:
            self.by_title.setdefault(title, account)

    def match(self, domain: Optional[str], canonical: str, title: str = "") -> Optional[Account]:
        if domain and domain in self.by_domain:
            return self.by_domain[domain]
        if canonical and canonical in self.by_canonical:
            return self.by_canonical[canonical]
        if title and title in self.by_title:
            return self.by_title[title]
        if canonical and len(canonical) >= 4:
            for existing, account in self.by_canonical.items():
                if fuzzy_match(canonical, existing) >= FUZZY_NAME_THRESHOLD:
                    return account
        return None


def is_closed_disposition(disposition: Optional[str]) -> bool:
    return disposition == "suppressed" or (disposition or "").startswith("rejected_")


def diversity_cap_limit(cap_share: float, others: int) -> int:
    """Largest count of the capped industry keeping its share at or under ``cap_share``."""
    if others <= 0:
        return 1
    if cap_share >= 1:
        return 10 ** 9
    return max(1, math.floor(cap_share * others / (1 - cap_share)))


class DiscoveryService:
    """Runs discovery against injected repositories and providers."""

    def __init__(
        self,
        *,
        accounts,
        audit,
        config: EngineConfig,
        search_provider: Optional[SearchProvider] = None,
        fetch_provider: Optional[FetchProvider] = None,
        tables: Optional[PatternTables] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.accounts = accounts
        self.audit = audit
        self.config = config
        self.search_provider = search_provider
        self.fetch_provider = fetch_provider
        self.tables = tables or load_pattern_tables()
        self.rng = rng
        self.clock = clock

    @classmethod
    def with_configured_providers(cls, *, accounts, audit, config: EngineConfig, settings: Settings, **kwargs):
        """Build providers from settings; missing credentials leave a provider unset."""
        search_provider = fetch_provider = None
        try:
            search_provider = build_search_provider(settings)
        except ProviderConfigError as exc:
            logger.info("Search provider unavailable (%s)", ", ".join(exc.missing))
        try:
            fetch_provider = build_fetch_provider(settings)
        except ProviderConfigError as exc:
            logger.info("Fetch provider unavailable (%s)", ", ".join(exc.missing))
        return cls(
            accounts=accounts,
            audit=audit,
            config=config,
            search_provider=search_provider,
            fetch_provider=fetch_provider,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self, request: Optional[DiscoveryRunRequest] = None) -> DiscoveryRunSummary:
        request = request or DiscoveryRunRequest()
        rng = self.rng or random.Random(request.seed)
        summary = DiscoveryRunSummary(mode=request.mode, tables_version=self.tables.version, started_at=self.clock())
        self._errors: List[str] = []
        self._rejected: Counter = Counter()
        self._prefiltered: Counter = Counter()

        if self.search_provider is None or self.fetch_provider is None:
            logger.info("Discovery running in enrichment-only mode")
            summary.enrichment_only = True
            await self._enrich_existing(summary)
        else:
            logger.info("Discovery run started: mode=%s", request.mode)
            await self._discover(request, rng, summary)

        summary.rejected = dict(self._rejected)
        summary.prefiltered = dict(self._prefiltered)
        summary.errors = self._errors[: self.config.error_sample_size]
        summary.finished_at = self.clock()
        await self.audit.record(
            "run_discovery",
            "accounts",
            summary.model_dump(mode="json", exclude={"queries", "fill_queries"}),
        )
        logger.info(
            "Discovery run finished: kept=%s inserted=%s updated=%s suppressed_repeat=%s errors=%s",
            summary.kept,
            summary.inserted,
            summary.updated,
            summary.suppressed_repeat,
            len(self._errors),
        )
        return summary

    def _record_error(self, message: str) -> None:
        self._errors.append(message)

    # ------------------------------------------------------------------
    # Discovery pipeline
    # ------------------------------------------------------------------

    def _build_plan(self, request: DiscoveryRunRequest, rng: random.Random) -> QueryPlan:
        if request.mode == "manual":
            return build_manual_plan(
                request.industries, request.triggers, request.states, rng, self.config.max_queries
            )
        run_day: date = request.run_day or self.clock().date()
        return build_auto_plan(run_day, rng, self.config.max_queries)

    async def _discover(self, request: DiscoveryRunRequest, rng: random.Random, summary: DiscoveryRunSummary) -> None:
        cap = request.result_count or self.config.sweep_size
        plan = self._build_plan(request, rng)
        summary.theme = plan.theme_key
        summary.queries = plan.queries

        existing = await self.accounts.list_all()
        index = AccountIndex(existing)
        seen_domains: set = set()

        candidates = await self._search(plan.queries, index, seen_domains, cap, summary)
        evaluations = await self._evaluate_all(candidates, request.override_geography, summary)
        kept = [e for e in evaluations if e.kept]

        below_min = self._industries_below_min(kept, plan.target_industries)
        if below_min and self.config.diversity_fill_queries > 0:
            fill_queries: List[str] = []
            for industry_key in below_min:
                fill_queries.extend(
                    build_fill_queries(industry_key, plan.geo_terms, rng, self.config.diversity_fill_queries)
                )
            summary.fill_queries = fill_queries
            fill_cap = max(cap - len(candidates), 0) or self.config.search_limit
            fill_candidates = await self._search(fill_queries, index, seen_domains, fill_cap, summary)
            kept.extend(e for e in await self._evaluate_all(fill_candidates, request.override_geography, summary) if e.kept)

        kept, capped = self._apply_diversity_cap(kept)
        summary.diversity = self._diversity_metrics(kept, plan.target_industries, below_min, capped)

        await self._dedup_and_persist(kept, index, plan, summary)

    async def _search(
        self,
        queries: List[str],
        index: AccountIndex,
        seen_domains: set,
        cap: int,
        summary: DiscoveryRunSummary,
    ) -> List[Candidate]:
        candidates: List[Candidate] = []
        for query in queries:
            if len(candidates) >= cap:
                break
            try:
                results = await self.search_provider.search(
                    query, self.config.search_limit, self.config.fetch_timeout_seconds
                )
            except ProviderError as exc:
                logger.warning("Search failed for query %r: %s", query, exc)
                self._record_error(f"search {query!r}: {exc}")
                continue
            summary.search_results += len(results)
            for result in results:
                candidate = self._prefilter(result, query, index, seen_domains)
                if candidate is not None:
                    candidates.append(candidate)
                    if len(candidates) >= cap:
                        break
        summary.candidates_considered += len(candidates)
        return candidates

    def _prefilter(
        self, result: SearchResult, query: str, index: AccountIndex, seen_domains: set
    ) -> Optional[Candidate]:
        """Cheap URL-level drops before any fetch."""
        domain = normalize_domain(result.url)
        if not domain:
            self._prefiltered["invalid_url"] += 1
            return None
        if domain in seen_domains:
            self._prefiltered["duplicate_domain"] += 1
            return None
        seen_domains.add(domain)
        if is_generic_domain(domain, self.tables):
            self._prefiltered["generic_domain"] += 1
            return None
        if is_news_domain(domain, self.tables):
            self._prefiltered["news_domain"] += 1
            return None
        if is_document_url(result.url, self.tables):
            self._prefiltered["document_url"] += 1
            return None
        if is_article_url(result.url, self.tables):
            self._prefiltered["article_path"] += 1
            return None
        # Known active accounts go on to fetch so dedup can refresh or suppress them.
        # Only closed accounts drop here.
        known = index.by_domain.get(domain)
        if known is not None and is_closed_disposition(known.disposition):
            self._prefiltered["known_closed_account"] += 1
            return None
        return Candidate(
            url=result.url, domain=domain, title=result.title, description=result.description, query=query
        )

    async def _evaluate_all(
        self, candidates: List[Candidate], override_geography: bool, summary: DiscoveryRunSummary
    ) -> List[Evaluation]:
        semaphore = asyncio.Semaphore(self.config.fetch_concurrency)

        async def bounded(candidate: Candidate) -> Evaluation:
            async with semaphore:
                return await self._evaluate(candidate, override_geography)

        evaluations = await asyncio.gather(*(bounded(c) for c in candidates))
        for evaluation in evaluations:
            if evaluation.error:
                summary.fetch_failed += 1
                self._record_error(evaluation.error)
            elif not evaluation.kept:
                summary.fetched += 1
                self._rejected[evaluation.reason] += 1
            else:
                summary.fetched += 1
        return list(evaluations)

    async def _fetch(self, url: str) -> FetchedPage:
        timeout = self.config.fetch_timeout_seconds
        return await asyncio.wait_for(self.fetch_provider.fetch(url, timeout), timeout=timeout)

    async def _evaluate(self, candidate: Candidate, override_geography: bool) -> Evaluation:
        try:
            page = await self._fetch(candidate.url)
        except asyncio.TimeoutError:
            logger.warning("Fetch timed out: %s", candidate.url)
            return Evaluation(candidate, kept=False, error=f"fetch {candidate.url}: timeout")
        except (ProviderError, ValueError) as exc:
            logger.warning("Fetch failed: %s (%s)", candidate.url, exc)
            return Evaluation(candidate, kept=False, error=f"fetch {candidate.url}: {exc}")
        try:
            return self._classify_and_extract(candidate, page, override_geography)
        except Exception as exc:  # noqa: BLE001 - one bad page must not abort the run
            logger.warning("Classification failed: %s", candidate.url, exc_info=True)
            return Evaluation(candidate, kept=False, error=f"classify {candidate.url}: {exc.__class__.__name__}")

    def _classify_and_extract(self, candidate: Candidate, page: FetchedPage, override_geography: bool) -> Evaluation:
        raw = page.content or ""
        text = page_text(raw)
        name = extract_display_name(raw, page.title or candidate.title) or candidate.domain
        result = classify_entity(name, candidate.domain, raw, self.config, self.tables, text=text)
        if not result.is_employer:
            logger.debug("Rejected %s: %s (%s)", candidate.domain, result.outcome, result.reason)
            return Evaluation(candidate, kept=False, reason=result.outcome, name=name)

        geo = resolve_page_geography(raw, text)
        if not geo.in_operating_country:
            return Evaluation(candidate, kept=False, reason="foreign_hq", name=name, geo=geo)
        if not geo.resolved:
            return Evaluation(candidate, kept=False, reason="unknown_hq", name=name)
        region = region_bucket(geo.state)
        if region == REGION_OTHER and not override_geography:
            return Evaluation(candidate, kept=False, reason="out_of_region", name=name, geo=geo, region=region)

        triggers = detect_signals(text, self.config, self.tables)
        intent, reasons = high_intent(triggers)
        try:
            website = canonicalize_url(page.url or candidate.url)
        except ValueError:
            website = None
        return Evaluation(
            candidate,
            kept=True,
            name=name,
            canonical_name=canonical_company_name(name) or candidate.domain,
            website=website,
            geo=geo,
            region=region,
            industry=infer_industry(name, candidate.domain, text, self.tables),
            triggers=triggers,
            high_intent=intent,
            high_intent_reasons=reasons,
        )

    # ------------------------------------------------------------------
    # Diversity
    # ------------------------------------------------------------------

    def _industries_below_min(self, kept: List[Evaluation], targets: List[str]) -> List[str]:
        if not targets:
            return []
        counts = Counter(e.industry for e in kept)
        total = len(kept)
        return [key for key in targets if total == 0 or counts[key] / total < self.config.diversity_min_share]

    def _apply_diversity_cap(self, kept: List[Evaluation]) -> tuple:
        cap_industry = self.config.diversity_cap_industry
        if not cap_industry:
            return kept, 0
        capped_group = [e for e in kept if e.industry == cap_industry]
        others = len(kept) - len(capped_group)
        limit = diversity_cap_limit(self.config.diversity_cap_share, others)
        if len(capped_group) <= limit:
            return kept, 0
        # Keep the strongest: high intent first, then discovery order
        ranked = sorted(capped_group, key=lambda e: not e.high_intent)
        allowed = {id(e) for e in ranked[:limit]}
        result = [e for e in kept if e.industry != cap_industry or id(e) in allowed]
        dropped = len(kept) - len(result)
        self._rejected["diversity_cap"] += dropped
        return result, dropped

    def _diversity_metrics(
        self, kept: List[Evaluation], targets: List[str], below_min: List[str], capped: int
    ) -> Dict[str, Any]:
        total = len(kept)
        counts = Counter(e.industry or "unknown" for e in kept)
        return {
            "shares": {key: round(count / total, 3) for key, count in counts.items()} if total else {},
            "cap_industry": self.config.diversity_cap_industry,
            "cap_share": self.config.diversity_cap_share,
            "capped": capped,
            "min_share": self.config.diversity_min_share,
            "targets": targets,
            "below_min_before_fill": below_min,
        }

    # ------------------------------------------------------------------
    # Dedup, repeat suppression, persistence
    # ------------------------------------------------------------------

    def _fit_score(self, evaluation: Evaluation, domain: Optional[str], website: Optional[str], triggers) -> int:
        snapshot = AccountSnapshot(
            id=None,
            name=evaluation.name,
            domain=domain,
            website=website,
            industry=evaluation.industry,
            hq_state=evaluation.geo.state,
            region_bucket=evaluation.region,
            triggers=triggers,
        )
        return score_account(snapshot, [], self.config, self.tables).fit

    async def _dedup_and_persist(
        self, kept: List[Evaluation], index: AccountIndex, plan: QueryPlan, summary: DiscoveryRunSummary
    ) -> None:
        now = self.clock()
        touched: set = set()
        subtypes: Counter = Counter()
        regions: Counter = Counter()
        industries: Counter = Counter()

        for evaluation in kept:
            candidate = evaluation.candidate
            match = index.match(candidate.domain, evaluation.canonical_name, normalize_title(evaluation.name))

            if match is not None:
                if id(match) in touched:
                    self._rejected["duplicate_in_run"] += 1
                    continue
                if is_closed_disposition(match.disposition):
                    self._rejected["known_closed_account"] += 1
                    continue
                age = days_since(match.created_at, now)
                recent = age is not None and age < self.config.repeat_window_days
                if recent and not new_strong_signals(evaluation.triggers, match.triggers):
                    summary.suppressed_repeat += 1
                    continue
                await self._update_existing(match, evaluation)
                touched.add(id(match))
                summary.updated += 1
                subtypes[SUBTYPE_REFRESHED] += 1
            else:
                account = await self._insert_new(evaluation, plan)
                if account is None:
                    self._rejected["dedup_conflict"] += 1
                    continue
                index.add(account)
                touched.add(id(account))
                summary.inserted += 1
                subtypes[SUBTYPE_NEW] += 1

            if evaluation.high_intent:
                subtypes[SUBTYPE_HIGH_INTENT] += 1
            regions[evaluation.region] += 1
            industries[evaluation.industry or "unknown"] += 1

        summary.kept = summary.inserted + summary.updated
        summary.kept_by_subtype = dict(subtypes)
        summary.kept_by_region = dict(regions)
        summary.kept_by_industry = dict(industries)

    async def _insert_new(self, evaluation: Evaluation, plan: QueryPlan) -> Optional[Account]:
        candidate = evaluation.candidate
        return await self.accounts.create(
            name=evaluation.name,
            canonical_name=evaluation.canonical_name,
            domain=candidate.domain,
            website=evaluation.website,
            hq_city=evaluation.geo.city,
            hq_state=evaluation.geo.state,
            hq_country=evaluation.geo.country,
            region_bucket=evaluation.region,
            industry=evaluation.industry,
            triggers=evaluation.triggers,
            classification="employer",
            high_intent=evaluation.high_intent,
            high_intent_reasons=evaluation.high_intent_reasons,
            disposition="active",
            fit_score=self._fit_score(evaluation, candidate.domain, evaluation.website, evaluation.triggers),
            source=f"discovery:{plan.theme_key}",
        )

    async def _update_existing(self, account: Account, evaluation: Evaluation) -> None:
        triggers = merge_triggers(account.triggers, evaluation.triggers)
        intent, reasons = high_intent(triggers)
        fields: Dict[str, Any] = {
            "triggers": triggers,
            "high_intent": intent,
            "high_intent_reasons": reasons,
            "hq_city": evaluation.geo.city or account.hq_city,
            "hq_state": evaluation.geo.state,
            "hq_country": evaluation.geo.country,
            "region_bucket": evaluation.region,
        }
        if not account.industry and evaluation.industry:
            fields["industry"] = evaluation.industry
        if not account.website and evaluation.website:
            fields["website"] = evaluation.website
        if not account.domain:
            fields["domain"] = evaluation.candidate.domain
        fields["fit_score"] = self._fit_score(
            evaluation, fields.get("domain", account.domain), fields.get("website", account.website), triggers
        )
        await self.accounts.update(account, fields)

    # ------------------------------------------------------------------
    # Enrichment-only sweep
    # ------------------------------------------------------------------

    async def _enrich_existing(self, summary: DiscoveryRunSummary) -> None:
        """Refresh HQ and triggers for accounts missing them, then recompute region buckets."""
        accounts = await self.accounts.list_needing_enrichment(limit=self.config.sweep_size)
        summary.candidates_considered = len(accounts)
        regions: Counter = Counter()

        pages: List[Optional[FetchedPage]] = [None] * len(accounts)
        if self.fetch_provider is not None:
            semaphore = asyncio.Semaphore(self.config.fetch_concurrency)

            async def bounded(account: Account) -> Optional[FetchedPage]:
                target = account.website or account.domain
                if not target:
                    return None
                async with semaphore:
                    try:
                        return await self._fetch(target)
                    except asyncio.TimeoutError:
                        self._record_error(f"enrich {account.name}: timeout")
                    except (ProviderError, ValueError) as exc:
                        self._record_error(f"enrich {account.name}: {exc}")
                    logger.warning("Enrichment fetch failed for %s", account.name)
                    summary.enrich_failed += 1
                    return None

            pages = list(await asyncio.gather(*(bounded(a) for a in accounts)))

        for account, page in zip(accounts, pages):
            fields: Dict[str, Any] = {}
            if page is not None and page.content:
                summary.fetched += 1
                text = page_text(page.content)
                if not account.hq_state:
                    geo = resolve_page_geography(page.content, text)
                    if geo.resolved and geo.in_operating_country:
                        fields.update(hq_state=geo.state, hq_city=geo.city or account.hq_city, hq_country=geo.country)
                fresh = detect_signals(text, self.config, self.tables)
                if fresh:
                    triggers = merge_triggers(account.triggers, fresh)
                    intent, reasons = high_intent(triggers)
                    fields.update(triggers=triggers, high_intent=intent, high_intent_reasons=reasons)
            bucket = region_bucket(fields.get("hq_state") or account.hq_state)
            if bucket != account.region_bucket:
                fields["region_bucket"] = bucket
            regions[bucket] += 1
            if fields:
                await self.accounts.update(account, fields)
                if page is not None:
                    summary.enriched += 1
                else:
                    summary.updated += 1

        summary.kept_by_region = dict(regions)
