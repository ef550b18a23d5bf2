"""
SQLAlchemy models for the call-log trail.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
    inspect,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from outreach.contacts.models import ContactOutcome, enum_values, new_id, utcnow
from outreach.shared.database import Base

if TYPE_CHECKING:
    from outreach.contacts.models import Contact


class CallLog(Base):
    """One completed call attempt. Rows are appended, never updated."""

    __tablename__ = "call_logs"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=new_id,
    )
    contact_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("contacts.id"),
        nullable=False,
        index=True,
    )
    outcome: Mapped[ContactOutcome] = mapped_column(
        SQLEnum(
            ContactOutcome,
            name="call_log_outcome",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    transcript: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    duration_seconds: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        index=True,
    )

    # Relationships
    contact: Mapped["Contact"] = relationship(
        "Contact",
        back_populates="call_logs",
    )

    @property
    def contact_name(self) -> str | None:
        """Contact name when the relationship was eager-loaded, else None."""
        if "contact" in inspect(self).unloaded or self.contact is None:
            return None
        return self.contact.name

    def __repr__(self) -> str:
        return f"<CallLog(id={self.id}, contact_id={self.contact_id}, outcome={self.outcome})>"
