"""Scoring run and lead queue endpoints."""

from datetime import date
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lead_engine.core.config import settings
from lead_engine.db.session import get_db
from lead_engine.errors import AppError
from lead_engine.repositories.account_repository import AccountRepository
from lead_engine.repositories.audit_log_repository import AuditLogRepository
from lead_engine.repositories.engine_config_repository import EngineConfigRepository
from lead_engine.repositories.lead_queue_repository import LeadQueueRepository
from lead_engine.schemas.lead_queue import LeadQueueEntryRead, ScoringRunRequest, ScoringRunResult
from lead_engine.services.scoring_service import ScoringService
from lead_engine.services.selection import QuotaPolicy

router = APIRouter(prefix="/lead-queue", tags=["lead-queue"])


@router.post("/runs", response_model=ScoringRunResult)
async def run_scoring(
    payload: ScoringRunRequest,
    db: AsyncSession = Depends(get_db),
) -> ScoringRunResult:
    """
    Score every account and build the ranked queue for ``run_date``.

    Returns 409 ``lead_queue_exists`` when that date already has a queue,
    unless ``dry_run`` is set.
    """
    config = await EngineConfigRepository(db).load(settings)
    service = ScoringService(
        accounts=AccountRepository(db),
        lead_queue=LeadQueueRepository(db),
        audit=AuditLogRepository(db),
        config=config,
        policy=QuotaPolicy(total=settings.LEAD_QUEUE_SIZE),
    )
    return await service.run(run_date=payload.run_date, dry_run=payload.dry_run)


@router.get("/{run_date}", response_model=List[LeadQueueEntryRead])
async def get_lead_queue(run_date: date, db: AsyncSession = Depends(get_db)):
    repo = LeadQueueRepository(db)
    if not await repo.run_exists(run_date):
        raise AppError(404, "lead_queue_not_found", f"No lead queue for {run_date.isoformat()}")
    return await repo.list_entries(run_date)
