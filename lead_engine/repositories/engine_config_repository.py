"""Loads operator-tunable keyword lists and discovery settings."""

from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lead_engine.core.config import Settings
from lead_engine.models.engine_config import DiscoverySetting, SignalKeywordList
from lead_engine.schemas.engine_config import EngineConfig


class EngineConfigRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def keyword_rows(self) -> Dict[str, List[str]]:
        result = await self.db.execute(select(SignalKeywordList))
        return {row.category: list(row.keywords or []) for row in result.scalars().all()}

    async def setting_rows(self) -> Dict[str, Any]:
        result = await self.db.execute(select(DiscoverySetting))
        return {row.key: row.value for row in result.scalars().all()}

    async def load(self, settings: Settings) -> EngineConfig:
        """One immutable config per run invocation."""
        return EngineConfig.from_sources(settings, await self.keyword_rows(), await self.setting_rows())
