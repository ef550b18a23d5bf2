"""
Pydantic schemas for contact management.

The dashboard speaks camelCase; snake_case field names are accepted too.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from outreach.contacts.models import ContactOutcome


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ContactCreate(CamelModel):
    """Schema for creating a contact.

    ``name`` and ``phone_number`` are optional here so a bulk import can
    skip incomplete rows instead of rejecting the whole request.
    """

    name: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=50)
    services_offered: str | None = None
    bill_or_payment: str | None = Field(default=None, max_length=255)
    next_call_date: datetime | None = None
    last_outcome: ContactOutcome = Field(default=ContactOutcome.PENDING)

    @property
    def is_complete(self) -> bool:
        return bool(self.name and self.name.strip() and self.phone_number and self.phone_number.strip())


class ContactUpdate(CamelModel):
    """Schema for partial contact updates (omit a field to leave it unchanged).

    Operators may reset ``last_outcome`` to any canonical value.
    """

    name: str | None = Field(default=None, max_length=255)
    phone_number: str | None = Field(default=None, max_length=50)
    services_offered: str | None = None
    bill_or_payment: str | None = Field(default=None, max_length=255)
    next_call_date: datetime | None = None
    last_outcome: ContactOutcome | None = None
    transcript: str | None = None


class ContactResponse(CamelModel):
    """Schema for contact response."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    name: str
    phone_number: str
    services_offered: str | None
    bill_or_payment: str | None
    last_outcome: ContactOutcome
    next_call_date: datetime | None
    transcript: str | None
    created_at: datetime
    updated_at: datetime


class ContactCreateResult(BaseModel):
    """Result of a (bulk) contact creation."""

    count: int
    message: str
    ids: list[str] = Field(default_factory=list)
