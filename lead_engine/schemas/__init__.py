"""
Schemas package.

Import all schemas here for easy access.
"""

from lead_engine.schemas.discovery import DiscoveryRunRequest, DiscoveryRunSummary
from lead_engine.schemas.engine_config import EngineConfig
from lead_engine.schemas.lead_queue import (
    LeadQueueEntryRead,
    LeadQueueItem,
    ScoringRunRequest,
    ScoringRunResult,
)

__all__ = [
    "DiscoveryRunRequest",
    "DiscoveryRunSummary",
    "EngineConfig",
    "LeadQueueEntryRead",
    "LeadQueueItem",
    "ScoringRunRequest",
    "ScoringRunResult",
]
