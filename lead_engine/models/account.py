"""
Account model.

A candidate or confirmed employer organization discovered from the open web.
canonical_name and domain are the dedup keys; both carry unique indexes so an
update path can never produce two colliding rows.
"""

from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import Boolean, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lead_engine.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from lead_engine.models.contact import Contact


class Account(TimestampedModel):
    __tablename__ = "accounts"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    canonical_name: Mapped[str] = mapped_column(String(255), nullable=False)
    domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Headquarters
    hq_city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    hq_state: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    hq_country: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    region_bucket: Mapped[str] = mapped_column(String(20), nullable=False, default="other")

    industry: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # Numeric or a textual range such as "51-200"
    employee_count: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    triggers: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    classification: Mapped[str] = mapped_column(String(50), nullable=False, default="employer")
    high_intent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    high_intent_reasons: Mapped[List[str]] = mapped_column(JSONB, nullable=False, default=list)

    # active | needs_review | suppressed | rejected_<reason>
    disposition: Mapped[str] = mapped_column(String(50), nullable=False, default="active", index=True)
    fit_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    contacts: Mapped[List["Contact"]] = relationship(back_populates="account", lazy="noload")

    __table_args__ = (
        Index("uq_accounts_canonical_name", "canonical_name", unique=True),
        Index("uq_accounts_domain", "domain", unique=True, postgresql_where=text("domain IS NOT NULL")),
        Index("ix_accounts_region_bucket", "region_bucket"),
    )
