"""
Pydantic schemas for call logs and the call trigger.
"""

from datetime import datetime

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from outreach.contacts.models import ContactOutcome
from outreach.contacts.schemas import CamelModel, ContactResponse


class CallLogResponse(CamelModel):
    """Schema for one call-log entry."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    contact_id: str
    contact_name: str | None = None
    outcome: ContactOutcome
    transcript: str
    duration_seconds: int | None
    created_at: datetime


class CallLogReportEntry(CallLogResponse):
    """Call-log entry with the full contact, as shown in the daily report."""

    contact: ContactResponse | None = None


class TriggerCallRequest(CamelModel):
    """Request to place an outbound call to a contact."""

    contact_id: str = Field(..., min_length=1)


class TriggerCallResponse(CamelModel):
    """Response after the provider accepted the call."""

    success: bool = True
    call_id: str
