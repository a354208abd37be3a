"""
Schemas for discovery runs: the invocation request and the run summary.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class DiscoveryRunRequest(BaseModel):
    mode: Literal["auto", "manual"] = "auto"
    industries: List[str] = Field(default_factory=list)
    triggers: List[str] = Field(default_factory=list)
    states: List[str] = Field(default_factory=list)
    # Overrides the configured candidate cap for this run
    result_count: Optional[int] = Field(None, ge=1, le=500)
    # Keep candidates headquartered outside the primary/secondary regions
    override_geography: bool = False
    seed: Optional[int] = None
    run_day: Optional[date] = None

    @field_validator("states")
    @classmethod
    def _upper_states(cls, value: List[str]) -> List[str]:
        return [s.strip().upper() for s in value if s and s.strip()]

    @field_validator("industries", "triggers")
    @classmethod
    def _strip_keys(cls, value: List[str]) -> List[str]:
        return [s.strip() for s in value if s and s.strip()]


class DiscoveryRunSummary(BaseModel):
    mode: str
    theme: Optional[str] = None
    enrichment_only: bool = False
    tables_version: str
    queries: List[str] = Field(default_factory=list)
    fill_queries: List[str] = Field(default_factory=list)
    search_results: int = 0
    candidates_considered: int = 0
    prefiltered: Dict[str, int] = Field(default_factory=dict)
    fetched: int = 0
    fetch_failed: int = 0
    rejected: Dict[str, int] = Field(default_factory=dict)
    suppressed_repeat: int = 0
    inserted: int = 0
    updated: int = 0
    kept: int = 0
    kept_by_subtype: Dict[str, int] = Field(default_factory=dict)
    kept_by_region: Dict[str, int] = Field(default_factory=dict)
    kept_by_industry: Dict[str, int] = Field(default_factory=dict)
    diversity: Dict[str, Any] = Field(default_factory=dict)
    enriched: int = 0
    enrich_failed: int = 0
    errors: List[str] = Field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
