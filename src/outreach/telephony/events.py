"""
Domain event models for call-outcome webhooks.

Provider payloads are translated by an adapter (see ``telephony.adapters``)
into ``CallEvent``, the internal schema the normalizer consumes. When the
provider changes its payload shape, only the adapter changes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from outreach.contacts.models import ContactOutcome
from outreach.shared.exceptions import DateParseWarning

CALL_EVENT_SCHEMA_VERSION = 1


class CallEventKind(str, Enum):
    """Event kinds that carry a call outcome."""

    CALL_ENDED = "call_ended"
    CALL_ANALYZED = "call_analyzed"


class CallAnalysis(BaseModel):
    """Post-call analysis fields extracted by the provider."""

    model_config = ConfigDict(frozen=True)

    outcome: str | None = Field(
        default=None,
        description="Raw outcome label in provider vocabulary",
    )
    summary: str | None = Field(
        default=None,
        description="Free-text call summary",
    )
    user_sentiment: str | None = Field(
        default=None,
        description="Provider sentiment classification (Positive/Negative/Neutral)",
    )
    agreed_payment_date: str | None = None
    agreed_payment_amount: str | None = None
    payment_method: str | None = None
    callback_date: str | None = Field(
        default=None,
        description="Date the contact asked to be called back, as sent",
    )

    def header_parts(self) -> list[str]:
        """Labelled analysis fields, in display order, skipping empty ones."""
        labelled = (
            ("Summary", self.summary),
            ("Payment Date", self.agreed_payment_date),
            ("Payment Amount", self.agreed_payment_amount),
            ("Method", self.payment_method),
            ("Callback", self.callback_date),
        )
        return [f"{label}: {value}" for label, value in labelled if value]


class CallEvent(BaseModel):
    """Provider-independent representation of one webhook event."""

    model_config = ConfigDict(frozen=True)

    schema_version: int = Field(default=CALL_EVENT_SCHEMA_VERSION)
    kind: str = Field(
        ...,
        description="Event kind as sent by the provider",
    )
    provider: str = Field(
        ...,
        description="Name of the adapter that produced this event",
    )
    provider_call_id: str | None = None
    contact_id: str | None = Field(
        default=None,
        description="Contact identifier from call metadata",
    )
    transcript: str | None = None
    disconnection_reason: str | None = None
    start_timestamp: float | None = None
    end_timestamp: float | None = None
    analysis: CallAnalysis = Field(default_factory=CallAnalysis)


@dataclass(frozen=True)
class OutcomeDecision:
    """Normalized result of one terminal event, ready to persist."""

    contact_id: str
    outcome: ContactOutcome
    transcript: str
    event_kind: str
    duration_seconds: int | None = None
    reschedule_to: datetime | None = None
    callback_date: str | None = None
    warnings: tuple[DateParseWarning, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class IgnoredEvent:
    """An event kind that carries no outcome; nothing is persisted."""

    event_kind: str
