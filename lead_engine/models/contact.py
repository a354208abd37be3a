"""
Contact model.

People at an account. Maintained by the contact-management side of the
application; the engine only reads title and reachability fields.
"""

import uuid
from typing import Optional, TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lead_engine.models.base_model import TimestampedModel

if TYPE_CHECKING:
    from lead_engine.models.account import Account


class Contact(TimestampedModel):
    __tablename__ = "contacts"

    account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    linkedin_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    account: Mapped["Account"] = relationship(back_populates="contacts")
