"""
Models package.

Importing this package registers every table on Base.metadata (alembic and
the repositories rely on that).
"""

from lead_engine.models.account import Account
from lead_engine.models.contact import Contact
from lead_engine.models.lead_queue import LeadQueueRun, LeadQueueEntry
from lead_engine.models.engine_config import SignalKeywordList, DiscoverySetting
from lead_engine.models.audit_log import AuditLog

__all__ = [
    "Account",
    "Contact",
    "LeadQueueRun",
    "LeadQueueEntry",
    "SignalKeywordList",
    "DiscoverySetting",
    "AuditLog",
]
