"""
Engine configuration object.

Loaded once per run invocation from the signal_keywords / discovery_settings
tables layered over Settings defaults, then passed explicitly into the
detector, classifier and orchestrator. Frozen so a run cannot mutate it.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class EngineConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Keyword lists (signal_keywords)
    carrier_names: List[str] = Field(default_factory=list)
    carrier_change_phrases: List[str] = Field(default_factory=list)
    benefits_hr_keywords: List[str] = Field(default_factory=list)

    # Exclusion lists and toggles (discovery_settings)
    blacklist_domains: List[str] = Field(default_factory=list)
    blacklist_names: List[str] = Field(default_factory=list)
    allow_edu: bool = True
    allow_gov: bool = False
    allow_hospital_systems: bool = False
    allow_university_research: bool = False

    # Limits and tuning
    sweep_size: int = Field(60, ge=1, le=500)
    search_limit: int = Field(8, ge=1, le=50)
    max_queries: int = Field(12, ge=1, le=50)
    fetch_concurrency: int = Field(4, ge=1, le=16)
    fetch_timeout_seconds: float = Field(20.0, gt=0)
    error_sample_size: int = Field(10, ge=0)
    repeat_window_days: int = Field(30, ge=0)
    diversity_cap_industry: Optional[str] = "healthcare_social_assistance"
    diversity_cap_share: float = Field(0.40, gt=0, le=1)
    diversity_min_share: float = Field(0.10, ge=0, lt=1)
    diversity_fill_queries: int = Field(2, ge=0, le=10)

    # Scoring weights
    unknown_industry_score: int = Field(5, ge=0)
    deprioritized_industry_score: int = Field(1, ge=0)

    @field_validator(
        "carrier_names",
        "carrier_change_phrases",
        "benefits_hr_keywords",
        "blacklist_domains",
        "blacklist_names",
        mode="before",
    )
    @classmethod
    def _clean_list(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.splitlines()
        seen: List[str] = []
        for item in value:
            text = str(item or "").strip()
            if text and text not in seen:
                seen.append(text)
        return seen

    @classmethod
    def from_sources(
        cls,
        settings,
        keyword_rows: Optional[Dict[str, List[str]]] = None,
        setting_rows: Optional[Dict[str, Any]] = None,
    ) -> "EngineConfig":
        """Layer stored keyword lists and discovery settings over Settings defaults."""
        data: Dict[str, Any] = {
            "sweep_size": settings.DISCOVERY_CANDIDATE_CAP,
            "search_limit": settings.DISCOVERY_SEARCH_LIMIT,
            "max_queries": settings.DISCOVERY_MAX_QUERIES,
            "fetch_concurrency": settings.DISCOVERY_FETCH_CONCURRENCY,
            "fetch_timeout_seconds": settings.DISCOVERY_FETCH_TIMEOUT_SECONDS,
            "error_sample_size": settings.DISCOVERY_ERROR_SAMPLE_SIZE,
            "repeat_window_days": settings.REPEAT_SUPPRESSION_DAYS,
            "diversity_cap_industry": settings.DIVERSITY_CAP_INDUSTRY,
            "diversity_cap_share": settings.DIVERSITY_CAP_SHARE,
            "diversity_min_share": settings.DIVERSITY_MIN_SHARE,
            "diversity_fill_queries": settings.DIVERSITY_FILL_QUERIES,
            "unknown_industry_score": settings.UNKNOWN_INDUSTRY_SCORE,
            "deprioritized_industry_score": settings.DEPRIORITIZED_INDUSTRY_SCORE,
        }
        for category, keywords in (keyword_rows or {}).items():
            if category in cls.model_fields:
                data[category] = keywords
        defaults = dict(data)
        stored = set()
        for key, value in (setting_rows or {}).items():
            if key in cls.model_fields and value is not None:
                data[key] = value
                stored.add(key)
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            invalid = {err["loc"][0] for err in exc.errors() if err.get("loc")} & stored
            if not invalid:
                raise
            logger.warning("Ignoring invalid discovery settings: %s", ", ".join(sorted(invalid)))
        for key in invalid:
            if key in defaults:
                data[key] = defaults[key]
            else:
                data.pop(key)
        return cls.model_validate(data)
