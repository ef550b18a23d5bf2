"""
Adapter for the simplified direct outcome form.

Operators and test harnesses post ``{"contactId", "outcome", "transcript"}``
without a provider envelope. The result is treated as an analyzed call so
the explicit outcome goes through the same normalization map.
"""

from collections.abc import Mapping
from typing import Any

from outreach.telephony.adapters.fields import first_text
from outreach.telephony.events import CallAnalysis, CallEvent, CallEventKind

PROVIDER_NAME = "direct"


def parse_direct_event(payload: Mapping[str, Any]) -> CallEvent:
    """Translate a direct outcome payload into a CallEvent."""
    return CallEvent(
        kind=CallEventKind.CALL_ANALYZED.value,
        provider=PROVIDER_NAME,
        contact_id=first_text(payload, "contactId", "contact_id"),
        transcript=first_text(payload, "transcript"),
        analysis=CallAnalysis(outcome=first_text(payload, "outcome")),
    )
