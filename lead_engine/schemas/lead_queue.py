"""
Schemas for scoring runs and the persisted lead queue.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ScoringRunRequest(BaseModel):
    run_date: Optional[date] = None
    dry_run: bool = False


class LeadQueueItem(BaseModel):
    rank: int
    account_id: UUID
    name: str
    domain: Optional[str] = None
    industry: Optional[str] = None
    employee_count: Optional[str] = None
    region: str
    state: Optional[str] = None
    disposition: str
    score: float
    stars: int
    reach_stars: int
    reason: Dict[str, Any] = Field(default_factory=dict)


class ScoringRunResult(BaseModel):
    run_date: date
    dry_run: bool
    total: int
    stats: Dict[str, int] = Field(default_factory=dict)
    leads: List[LeadQueueItem] = Field(default_factory=list)


class LeadQueueEntryRead(BaseModel):
    id: UUID
    run_date: date
    account_id: UUID
    priority_rank: int
    score: float
    stars: int
    reach_stars: int
    reason: Dict[str, Any]
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
