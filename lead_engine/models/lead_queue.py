"""
Lead queue models.

One LeadQueueRun per run date (UNIQUE run_date is the guard against two
scoring runs producing overlapping queues) and its immutable ranked entries.
"""

import uuid
from datetime import date
from typing import List

from sqlalchemy import Date, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lead_engine.models.base_model import TimestampedModel


class LeadQueueRun(TimestampedModel):
    __tablename__ = "lead_queue_runs"

    run_date: Mapped[date] = mapped_column(Date, nullable=False)
    total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    stats: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)

    entries: Mapped[List["LeadQueueEntry"]] = relationship(
        back_populates="run",
        order_by="LeadQueueEntry.priority_rank",
        lazy="selectin",
    )

    __table_args__ = (UniqueConstraint("run_date", name="uq_lead_queue_runs_run_date"),)


class LeadQueueEntry(TimestampedModel):
    __tablename__ = "lead_queue_entries"

    run_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("lead_queue_runs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    run_date: Mapped[date] = mapped_column(Date, nullable=False)
    account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("accounts.id"),
        nullable=False,
    )
    priority_rank: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    stars: Mapped[int] = mapped_column(Integer, nullable=False)
    reach_stars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reason: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    # Transitions after "pending" belong to the claim workflow
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="pending")

    run: Mapped[LeadQueueRun] = relationship(back_populates="entries")

    __table_args__ = (
        UniqueConstraint("run_date", "priority_rank", name="uq_lead_queue_entries_rank"),
        UniqueConstraint("run_date", "account_id", name="uq_lead_queue_entries_account"),
    )
