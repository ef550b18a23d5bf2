"""
Provider payload adapters.

Every inbound webhook shape is translated into ``CallEvent`` here and
nowhere else.
"""

from collections.abc import Mapping
from typing import Any

from outreach.shared.exceptions import MalformedPayload
from outreach.telephony.adapters.direct import parse_direct_event
from outreach.telephony.adapters.retell import parse_retell_event
from outreach.telephony.events import CallEvent


def parse_provider_payload(payload: Any) -> CallEvent:
    """Pick the adapter for ``payload`` by shape and translate it.

    Raises:
        MalformedPayload: If the payload is not a JSON object.
    """
    if not isinstance(payload, Mapping):
        raise MalformedPayload(
            "Webhook body must be a JSON object",
            details={"received_type": type(payload).__name__},
        )

    if "event" in payload:
        return parse_retell_event(payload)
    return parse_direct_event(payload)


__all__ = ["parse_direct_event", "parse_provider_payload", "parse_retell_event"]
