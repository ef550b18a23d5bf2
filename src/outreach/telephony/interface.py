"""
Telephony provider interface definition.

A provider places outbound calls and translates its own webhook payloads
into ``CallEvent``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from outreach.telephony.events import CallEvent


@dataclass(frozen=True)
class CallInitiationRequest:
    """Request to initiate an outbound call."""

    to_number: str
    contact_id: str
    dynamic_variables: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CallInitiationResponse:
    """Response from call initiation."""

    provider_call_id: str
    created_at: datetime
    raw_response: dict[str, Any] = field(default_factory=dict)


class TelephonyProviderError(Exception):
    """Base exception for telephony provider errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        provider_response: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.provider_response = provider_response or {}


class CallInitiationError(TelephonyProviderError):
    """Error during call initiation."""


class TelephonyProvider(ABC):
    """Abstract interface for telephony providers."""

    name: str = "abstract"

    @abstractmethod
    async def initiate_call(
        self,
        request: CallInitiationRequest,
    ) -> CallInitiationResponse:
        """Initiate an outbound call."""
        ...

    @abstractmethod
    def parse_webhook_event(
        self,
        payload: dict[str, Any],
    ) -> CallEvent:
        """Translate a provider webhook payload into a CallEvent."""
        ...

    async def aclose(self) -> None:
        """Release provider resources (HTTP clients etc.)."""
        return None
