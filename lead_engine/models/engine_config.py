"""
Operator-tunable configuration rows.

signal_keywords holds one keyword list per category (carrier_names,
carrier_change_phrases, benefits_hr_keywords); discovery_settings holds one
JSON value per key (blacklists, allow_* toggles, limits, diversity tuning).
"""

from typing import Any, List

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from lead_engine.models.base_model import TimestampedModel


class SignalKeywordList(TimestampedModel):
    __tablename__ = "signal_keywords"

    category: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    keywords: Mapped[List[str]] = mapped_column(JSONB, nullable=False, default=list)


class DiscoverySetting(TimestampedModel):
    __tablename__ = "discovery_settings"

    key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    value: Mapped[Any] = mapped_column(JSONB, nullable=True)
