"""Health endpoint: database reachability, migration head and provider readiness."""

import logging
from pathlib import Path
from typing import Optional

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lead_engine.core.config import settings
from lead_engine.core.tables import TABLES_VERSION
from lead_engine.db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def migration_head() -> Optional[str]:
    ini_path = PROJECT_ROOT / "alembic.ini"
    if not ini_path.exists():
        return None
    config = Config(str(ini_path))
    config.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return ScriptDirectory.from_config(config).get_current_head()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    db_ok = False
    migration_current: Optional[str] = None
    try:
        await db.execute(text("SELECT 1"))
        db_ok = True
        result = await db.execute(text("SELECT version_num FROM alembic_version"))
        migration_current = result.scalar_one_or_none()
    except SQLAlchemyError:
        logger.warning("Health check database query failed", exc_info=True)

    head = migration_head()
    return {
        "api_ok": True,
        "db_ok": db_ok,
        "migrations_current": bool(head and migration_current == head),
        "migration_head": head,
        "tables_version": TABLES_VERSION,
        "search_configured": bool(settings.FIRECRAWL_API_KEY or (settings.GOOGLE_CSE_API_KEY and settings.GOOGLE_CSE_CX)),
        "fetch_configured": bool(settings.FIRECRAWL_API_KEY or settings.DISCOVERY_DIRECT_FETCH),
    }
