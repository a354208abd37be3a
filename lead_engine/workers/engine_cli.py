"""Batch entry point for an external scheduler: ``discover`` and ``score`` subcommands."""

import argparse
import asyncio
import json
import logging
from datetime import date
from typing import List, Optional

from lead_engine.core.config import settings
from lead_engine.db.session import session_scope
from lead_engine.errors import LeadQueueConflictError
from lead_engine.repositories.account_repository import AccountRepository
from lead_engine.repositories.audit_log_repository import AuditLogRepository
from lead_engine.repositories.engine_config_repository import EngineConfigRepository
from lead_engine.repositories.lead_queue_repository import LeadQueueRepository
from lead_engine.schemas.discovery import DiscoveryRunRequest
from lead_engine.services.discovery_service import DiscoveryService
from lead_engine.services.scoring_service import ScoringService
from lead_engine.services.selection import QuotaPolicy

logger = logging.getLogger(__name__)


async def run_discover(request: DiscoveryRunRequest) -> dict:
    async with session_scope() as session:
        config = await EngineConfigRepository(session).load(settings)
        service = DiscoveryService.with_configured_providers(
            accounts=AccountRepository(session),
            audit=AuditLogRepository(session),
            config=config,
            settings=settings,
        )
        summary = await service.run(request)
    return summary.model_dump(mode="json")


async def run_score(run_date: Optional[date], dry_run: bool) -> dict:
    async with session_scope() as session:
        config = await EngineConfigRepository(session).load(settings)
        service = ScoringService(
            accounts=AccountRepository(session),
            lead_queue=LeadQueueRepository(session),
            audit=AuditLogRepository(session),
            config=config,
            policy=QuotaPolicy(total=settings.LEAD_QUEUE_SIZE),
        )
        result = await service.run(run_date=run_date, dry_run=dry_run)
    return result.model_dump(mode="json", exclude={"leads"})


def _csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lead discovery and scoring batch runner")
    sub = parser.add_subparsers(dest="command", required=True)

    discover = sub.add_parser("discover", help="Run one discovery batch")
    discover.add_argument("--mode", choices=["auto", "manual"], default="auto")
    discover.add_argument("--industries", type=_csv, default=[], help="Comma-separated industry keys")
    discover.add_argument("--triggers", type=_csv, default=[], help="Comma-separated trigger keys")
    discover.add_argument("--states", type=_csv, default=[], help="Comma-separated state codes")
    discover.add_argument("--result-count", type=int, default=None)
    discover.add_argument("--override-geography", action="store_true")
    discover.add_argument("--seed", type=int, default=None)

    score = sub.add_parser("score", help="Score accounts and build the daily lead queue")
    score.add_argument("--run-date", type=date.fromisoformat, default=None, help="YYYY-MM-DD (default: today UTC)")
    score.add_argument("--dry-run", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)

    if args.command == "discover":
        request = DiscoveryRunRequest(
            mode=args.mode,
            industries=args.industries,
            triggers=args.triggers,
            states=args.states,
            result_count=args.result_count,
            override_geography=args.override_geography,
            seed=args.seed,
        )
        output = asyncio.run(run_discover(request))
    else:
        try:
            output = asyncio.run(run_score(args.run_date, args.dry_run))
        except LeadQueueConflictError as exc:
            logger.error("%s", exc)
            return 2

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
