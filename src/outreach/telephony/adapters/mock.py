"""
In-memory telephony provider for local development and tests.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from outreach.telephony.adapters.retell import parse_retell_event
from outreach.telephony.config import TelephonyConfig
from outreach.telephony.events import CallEvent
from outreach.telephony.interface import (
    CallInitiationError,
    CallInitiationRequest,
    CallInitiationResponse,
    TelephonyProvider,
)


class MockTelephonyProvider(TelephonyProvider):
    """Records initiated calls instead of dialing; webhooks use the Retell shape."""

    name = "mock"

    def __init__(self, config: TelephonyConfig | None = None, fail_with: str | None = None) -> None:
        self._config = config
        self._fail_with = fail_with
        self.requests: list[CallInitiationRequest] = []

    async def initiate_call(self, request: CallInitiationRequest) -> CallInitiationResponse:
        if self._fail_with is not None:
            raise CallInitiationError(self._fail_with, error_code="MOCK_FAILURE")

        self.requests.append(request)
        return CallInitiationResponse(
            provider_call_id=f"mock_{uuid4().hex[:12]}",
            created_at=datetime.now(timezone.utc),
        )

    def parse_webhook_event(self, payload: dict[str, Any]) -> CallEvent:
        return parse_retell_event(payload, provider=self.name)
