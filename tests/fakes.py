"""In-memory stand-ins for repositories and providers used by service tests."""

import asyncio
import json
import uuid
from collections import defaultdict
from datetime import timedelta
from typing import Dict, List, Optional

from lead_engine.errors import LeadQueueConflictError, ProviderError
from lead_engine.models.account import Account
from lead_engine.models.contact import Contact
from lead_engine.services.providers import FetchedPage, SearchResult
from lead_engine.utils.company_names import canonical_company_name
from lead_engine.utils.time import utc_now


FILLER = (
    "We design and build precision components for industrial manufacturing customers across the region. "
    "Our engineers work closely with every client from first prototype through volume production, and our "
    "quality team inspects each part before it ships. "
)


def employer_page(name, city="Waltham", state="MA", body="") -> str:
    """A small company homepage with organization metadata and an about section."""
    org = {
        "@context": "https://schema.org",
        "@type": "Organization",
        "name": name,
        "address": {
            "@type": "PostalAddress",
            "addressLocality": city,
            "addressRegion": state,
            "addressCountry": "US",
        },
    }
    return (
        f"<html><head><title>{name} | Home</title>"
        f'<script type="application/ld+json">{json.dumps(org)}</script></head>'
        f"<body><h1>About us</h1><p>{FILLER * 2}</p><p>{body}</p></body></html>"
    )


def plain_page(title, body="", head="") -> str:
    """A homepage with no address metadata; headquarters only appear in visible text."""
    return (
        f"<html><head><title>{title}</title>{head}</head>"
        f"<body><h1>About us</h1><p>{FILLER * 2}</p><p>{body}</p></body></html>"
    )


def make_account(name, domain=None, days_old=0, **fields) -> Account:
    account = Account(
        id=uuid.uuid4(),
        name=name,
        canonical_name=canonical_company_name(name),
        domain=domain,
        website=fields.pop("website", f"https://{domain}" if domain else None),
        region_bucket=fields.pop("region_bucket", "primary"),
        triggers=fields.pop("triggers", {}),
        disposition=fields.pop("disposition", "active"),
        high_intent=False,
        high_intent_reasons=[],
        **fields,
    )
    account.created_at = utc_now() - timedelta(days=days_old)
    return account


def make_contact(account, **fields) -> Contact:
    return Contact(id=uuid.uuid4(), account_id=account.id, **fields)


class FakeAccountRepository:
    def __init__(self, accounts: Optional[List[Account]] = None, contacts: Optional[List[Contact]] = None):
        self.accounts: List[Account] = list(accounts or [])
        self.contacts: List[Contact] = list(contacts or [])
        self.created: List[Account] = []
        self.updated: List[Account] = []

    async def list_all(self):
        return list(self.accounts)

    async def list_needing_enrichment(self, limit=None):
        rows = [
            a for a in self.accounts
            if a.disposition in ("active", "needs_review") and (not a.hq_state or not a.triggers)
        ]
        return rows[:limit] if limit else rows

    async def create(self, **fields):
        if any(a.canonical_name == fields["canonical_name"] for a in self.accounts):
            return None
        if fields.get("domain") and any(a.domain == fields["domain"] for a in self.accounts):
            return None
        account = Account(id=uuid.uuid4(), **fields)
        account.created_at = utc_now()
        self.accounts.append(account)
        self.created.append(account)
        return account

    async def update(self, account, fields):
        for key, value in fields.items():
            setattr(account, key, value)
        self.updated.append(account)
        return account

    async def contacts_by_account(self, account_ids=None):
        grouped: Dict = defaultdict(list)
        for contact in self.contacts:
            grouped[contact.account_id].append(contact)
        return grouped


class FakeAuditLog:
    def __init__(self):
        self.rows = []

    async def record(self, action, entity_type, details, entity_id=None, actor="system"):
        self.rows.append({"action": action, "entity_type": entity_type, "details": details})
        return self.rows[-1]


class FakeLeadQueueRepository:
    def __init__(self):
        self.runs: Dict = {}

    async def run_exists(self, run_date):
        return run_date in self.runs

    async def create_run(self, *, run_date, stats, entries):
        if run_date in self.runs:
            raise LeadQueueConflictError(run_date)
        self.runs[run_date] = {"stats": stats, "entries": entries}
        return None


class FakeSearchProvider:
    key = "fake_search"

    def __init__(self, urls=None, fail_queries=(), routes=None):
        self.urls = list(urls or [])
        self.fail_queries = set(fail_queries)
        # query substring -> urls served instead of the default list
        self.routes: Dict[str, List[str]] = dict(routes or {})
        self.queries: List[str] = []

    async def search(self, query, limit, timeout):
        self.queries.append(query)
        if query in self.fail_queries:
            raise ProviderError(self.key, "HTTP 503", status_code=503)
        urls = next((u for key, u in self.routes.items() if key in query), self.urls)
        return [SearchResult(url=u, title="") for u in urls][:limit]


class FakeFetchProvider:
    """Serves pages by domain substring; listed domains fail or hang past any timeout."""

    key = "fake_fetch"

    def __init__(self, pages: Dict[str, str], failing=(), slow=()):
        self.pages = pages
        self.failing = set(failing)
        self.slow = set(slow)
        self.fetched: List[str] = []

    async def fetch(self, url, timeout):
        self.fetched.append(url)
        for key, content in self.pages.items():
            if key in url:
                if key in self.slow:
                    await asyncio.sleep(timeout * 20)
                if key in self.failing:
                    raise ProviderError(self.key, "HTTP 500", status_code=500)
                return FetchedPage(url=url, content=content)
        raise ProviderError(self.key, "HTTP 404", status_code=404)
