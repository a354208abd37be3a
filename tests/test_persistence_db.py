"""
Integration tests against a migrated Postgres database.

Run with RUN_DB_TESTS=1 after `alembic upgrade head`. Every test works inside
an outer transaction that is rolled back, so the database is left untouched.
"""

import asyncio
import uuid
from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from lead_engine.db.session import engine
from lead_engine.errors import LeadQueueConflictError
from lead_engine.repositories.account_repository import AccountRepository
from lead_engine.repositories.lead_queue_repository import LeadQueueRepository


pytestmark = pytest.mark.db


async def in_rolled_back_session(body):
    async with engine.connect() as conn:
        outer = await conn.begin()
        session = AsyncSession(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
        try:
            return await body(session)
        finally:
            await session.close()
            await outer.rollback()
            await engine.dispose()


def account_fields(name, domain):
    return dict(name=name, canonical_name=name.lower(), domain=domain, region_bucket="primary", triggers={})


def test_duplicate_domain_insert_returns_none():
    suffix = uuid.uuid4().hex[:8]

    async def body(session):
        repo = AccountRepository(session)
        first = await repo.create(**account_fields(f"Alpha {suffix}", f"alpha-{suffix}.com"))
        second = await repo.create(**account_fields(f"Other {suffix}", f"alpha-{suffix}.com"))
        # The savepoint keeps the session usable after the collision
        third = await repo.create(**account_fields(f"Gamma {suffix}", None))
        return first, second, third

    first, second, third = asyncio.run(in_rolled_back_session(body))
    assert first is not None
    assert second is None
    assert third is not None


def test_lead_queue_run_date_is_unique():
    suffix = uuid.uuid4().hex[:8]
    run_date = date(2001, 1, 1)

    async def body(session):
        account = await AccountRepository(session).create(**account_fields(f"Queue {suffix}", f"queue-{suffix}.com"))
        repo = LeadQueueRepository(session)
        entry = {"account_id": account.id, "priority_rank": 1, "score": 50.0, "stars": 2, "reach_stars": 0, "reason": {}}
        await repo.create_run(run_date=run_date, stats={"total": 1}, entries=[entry])
        with pytest.raises(LeadQueueConflictError):
            await repo.create_run(run_date=run_date, stats={"total": 1}, entries=[entry])
        return await repo.list_entries(run_date)

    entries = asyncio.run(in_rolled_back_session(body))
    assert [e.priority_rank for e in entries] == [1]
