"""Append-only audit log writes."""

from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lead_engine.models.audit_log import AuditLog


class AuditLogRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self,
        action: str,
        entity_type: str,
        details: Dict[str, Any],
        entity_id: Optional[UUID] = None,
        actor: str = "system",
    ) -> AuditLog:
        entry = AuditLog(actor=actor, action=action, entity_type=entity_type, entity_id=entity_id, details=details)
        self.db.add(entry)
        await self.db.flush()
        return entry
