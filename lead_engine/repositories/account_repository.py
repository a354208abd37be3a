"""Repository for account and contact reads/writes used by the engine."""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import Text, cast, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lead_engine.models.account import Account
from lead_engine.models.contact import Contact

logger = logging.getLogger(__name__)


class AccountRepository:
    """Account persistence. Inserts run inside a SAVEPOINT so a dedup-key collision stays local."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> List[Account]:
        result = await self.db.execute(select(Account).order_by(Account.created_at, Account.id))
        return list(result.scalars().all())

    async def list_needing_enrichment(self, limit: Optional[int] = None) -> List[Account]:
        """Active accounts missing a headquarters state or any detected triggers."""
        stmt = (
            select(Account)
            .where(Account.disposition.in_(("active", "needs_review")))
            .where(
                or_(
                    Account.hq_state.is_(None),
                    Account.triggers.is_(None),
                    func.jsonb_typeof(Account.triggers) != "object",
                    cast(Account.triggers, Text) == "{}",
                )
            )
            .order_by(Account.created_at, Account.id)
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, **fields: Any) -> Optional[Account]:
        """Insert a new account; returns None when a unique dedup key already exists."""
        account = Account(**fields)
        try:
            async with self.db.begin_nested():
                self.db.add(account)
                await self.db.flush()
        except IntegrityError:
            logger.warning("Account insert collided on dedup key: %s", fields.get("domain") or fields.get("name"))
            return None
        return account

    async def update(self, account: Account, fields: Dict[str, Any]) -> Account:
        for key, value in fields.items():
            setattr(account, key, value)
        await self.db.flush()
        return account

    async def contacts_by_account(self, account_ids: Optional[List[UUID]] = None) -> Dict[UUID, List[Contact]]:
        stmt = select(Contact)
        if account_ids is not None:
            stmt = stmt.where(Contact.account_id.in_(account_ids))
        result = await self.db.execute(stmt)
        grouped: Dict[UUID, List[Contact]] = defaultdict(list)
        for contact in result.scalars().all():
            grouped[contact.account_id].append(contact)
        return grouped
