"""
SQLAlchemy models for contacts.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING
from uuid import uuid4

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from outreach.shared.database import Base

if TYPE_CHECKING:
    from outreach.calls.models import CallLog


class ContactOutcome(str, Enum):
    """Canonical outcome of the last call placed to a contact."""

    PENDING = "Pending"
    CALLING = "Calling"
    COMPLETED = "Completed"
    VOICEMAIL = "Voicemail"
    NO_ANSWER = "NoAnswer"
    PAID = "Paid"
    SCHEDULED = "Scheduled"
    CALLBACK = "Callback"
    FAILED = "Failed"


def enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contact(Base):
    """A person or business to be called."""

    __tablename__ = "contacts"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=new_id,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    phone_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    services_offered: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    bill_or_payment: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    last_outcome: Mapped[ContactOutcome] = mapped_column(
        SQLEnum(
            ContactOutcome,
            name="contact_outcome",
            native_enum=False,
            values_callable=enum_values,
        ),
        nullable=False,
        default=ContactOutcome.PENDING,
    )
    next_call_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )
    transcript: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    # Relationships
    call_logs: Mapped[list["CallLog"]] = relationship(
        "CallLog",
        back_populates="contact",
        order_by="CallLog.created_at.desc()",
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, phone={self.phone_number}, outcome={self.last_outcome})>"
