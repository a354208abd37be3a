"""Repository for lead queue runs and entries."""

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from lead_engine.errors import LeadQueueConflictError
from lead_engine.models.lead_queue import LeadQueueEntry, LeadQueueRun


class LeadQueueRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def run_exists(self, run_date: date) -> bool:
        result = await self.db.execute(select(LeadQueueRun.id).where(LeadQueueRun.run_date == run_date))
        return result.scalar_one_or_none() is not None

    async def get_run(self, run_date: date) -> Optional[LeadQueueRun]:
        result = await self.db.execute(select(LeadQueueRun).where(LeadQueueRun.run_date == run_date))
        return result.scalar_one_or_none()

    async def list_entries(self, run_date: date) -> List[LeadQueueEntry]:
        result = await self.db.execute(
            select(LeadQueueEntry)
            .where(LeadQueueEntry.run_date == run_date)
            .order_by(LeadQueueEntry.priority_rank)
        )
        return list(result.scalars().all())

    async def create_run(
        self,
        *,
        run_date: date,
        stats: Dict[str, Any],
        entries: List[Dict[str, Any]],
    ) -> LeadQueueRun:
        """
        Persist one run and its ranked entries atomically.

        The UNIQUE constraint on run_date is the authority: a concurrent run that
        slipped past ``run_exists`` fails here and nothing from it is kept.
        """
        run = LeadQueueRun(run_date=run_date, total=len(entries), stats=stats)
        try:
            async with self.db.begin_nested():
                self.db.add(run)
                await self.db.flush()
                self.db.add_all(
                    LeadQueueEntry(run_id=run.id, run_date=run_date, status="pending", **entry) for entry in entries
                )
                await self.db.flush()
        except IntegrityError as exc:
            raise LeadQueueConflictError(run_date) from exc
        return run
