"""Discovery run endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lead_engine.core.config import settings
from lead_engine.db.session import get_db
from lead_engine.repositories.account_repository import AccountRepository
from lead_engine.repositories.audit_log_repository import AuditLogRepository
from lead_engine.repositories.engine_config_repository import EngineConfigRepository
from lead_engine.schemas.discovery import DiscoveryRunRequest, DiscoveryRunSummary
from lead_engine.services.discovery_service import DiscoveryService

router = APIRouter(prefix="/discovery", tags=["discovery"])


@router.post("/runs", response_model=DiscoveryRunSummary)
async def run_discovery(
    payload: DiscoveryRunRequest,
    db: AsyncSession = Depends(get_db),
) -> DiscoveryRunSummary:
    """Run one discovery batch and return its summary."""
    config = await EngineConfigRepository(db).load(settings)
    service = DiscoveryService.with_configured_providers(
        accounts=AccountRepository(db),
        audit=AuditLogRepository(db),
        config=config,
        settings=settings,
    )
    return await service.run(payload)
