"""
Retell AI telephony provider adapter.

Places calls through the Retell REST API and translates Retell webhook
envelopes (``{"event": ..., "call": {...}}``) into ``CallEvent``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

import httpx

from outreach.telephony.adapters.fields import as_mapping, as_number, first_text
from outreach.telephony.config import TelephonyConfig
from outreach.telephony.events import CallAnalysis, CallEvent
from outreach.telephony.interface import (
    CallInitiationError,
    CallInitiationRequest,
    CallInitiationResponse,
    TelephonyProvider,
)

logger = logging.getLogger(__name__)

# Custom analysis keys are configured per agent as "output variables" and
# have been sent both Title_Case and snake_case.
CUSTOM_ANALYSIS_KEYS: dict[str, tuple[str, ...]] = {
    "outcome": ("Outcome", "outcome"),
    "agreed_payment_date": ("Agreed_Payment_Date", "agreed_payment_date"),
    "agreed_payment_amount": ("Agreed_Payment_Amount", "agreed_payment_amount"),
    "payment_method": ("Payment_Method", "payment_method"),
    "callback_date": ("Callback_Date", "callback_date"),
    "summary": ("Call_Summary", "call_summary"),
}


class RetellAdapter(TelephonyProvider):
    """Retell telephony provider adapter using ``httpx.AsyncClient``."""

    name = "retell"

    def __init__(
        self,
        config: TelephonyConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.request_timeout_seconds),
            )
        return self._http_client

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._config.retell_api_key}",
            "Content-Type": "application/json",
        }

    def build_call_payload(self, request: CallInitiationRequest) -> dict[str, Any]:
        """Build the ``create-phone-call`` request body."""
        return {
            "from_number": self._config.retell_from_number,
            "to_number": request.to_number,
            "override_agent_id": self._config.retell_agent_id,
            "retell_llm_dynamic_variables": dict(request.dynamic_variables),
            "metadata": {"contact_id": request.contact_id, **request.metadata},
        }

    async def initiate_call(
        self,
        request: CallInitiationRequest,
    ) -> CallInitiationResponse:
        """Initiate an outbound call via Retell."""
        client = self._get_client()
        payload = self.build_call_payload(request)

        logger.info(
            "Initiating Retell call",
            extra={
                "to": request.to_number,
                "contact_id": request.contact_id,
                "agent_id": self._config.retell_agent_id,
            },
        )

        try:
            response = await client.post(
                self._config.get_api_url("/v2/create-phone-call"),
                json=payload,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.exception(
                "HTTP error during Retell call initiation",
                extra={"contact_id": request.contact_id},
            )
            raise CallInitiationError(
                f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        if response.status_code >= 400:
            logger.error(
                "Retell call initiation failed",
                extra={
                    "status_code": response.status_code,
                    "error": response.text,
                    "contact_id": request.contact_id,
                },
            )
            raise CallInitiationError(
                f"Retell API error ({response.status_code}): {response.text}",
                error_code=str(response.status_code),
                provider_response={"body": response.text},
            )

        data = response.json()
        call_id = data.get("call_id")
        if not call_id:
            raise CallInitiationError(
                "Retell response missing call_id",
                error_code="MISSING_CALL_ID",
                provider_response=data,
            )

        logger.info("Retell call initiated", extra={"provider_call_id": call_id})
        return CallInitiationResponse(
            provider_call_id=call_id,
            created_at=datetime.now(timezone.utc),
            raw_response=data,
        )

    def parse_webhook_event(self, payload: dict[str, Any]) -> CallEvent:
        return parse_retell_event(payload, provider=self.name)


def parse_retell_event(payload: Mapping[str, Any], provider: str = "retell") -> CallEvent:
    """Translate a Retell webhook envelope into a CallEvent.

    The call object has been sent under ``call`` and under ``data``;
    ``transcript`` and ``call_analysis`` are also accepted at the top
    level of the envelope.
    """
    kind = str(payload.get("event") or "")
    call = as_mapping(payload.get("call")) or as_mapping(payload.get("data"))
    metadata = as_mapping(call.get("metadata"))

    call_analysis = as_mapping(call.get("call_analysis")) or as_mapping(
        payload.get("call_analysis")
    )
    custom = as_mapping(call_analysis.get("custom_analysis_data"))

    analysis = CallAnalysis(
        outcome=first_text(custom, *CUSTOM_ANALYSIS_KEYS["outcome"]),
        summary=first_text(call_analysis, "call_summary")
        or first_text(custom, *CUSTOM_ANALYSIS_KEYS["summary"]),
        user_sentiment=first_text(call_analysis, "user_sentiment"),
        agreed_payment_date=first_text(custom, *CUSTOM_ANALYSIS_KEYS["agreed_payment_date"]),
        agreed_payment_amount=first_text(custom, *CUSTOM_ANALYSIS_KEYS["agreed_payment_amount"]),
        payment_method=first_text(custom, *CUSTOM_ANALYSIS_KEYS["payment_method"]),
        callback_date=first_text(custom, *CUSTOM_ANALYSIS_KEYS["callback_date"]),
    )

    return CallEvent(
        kind=kind,
        provider=provider,
        provider_call_id=first_text(call, "call_id"),
        contact_id=first_text(metadata, "contact_id"),
        transcript=first_text(call, "transcript") or first_text(payload, "transcript"),
        disconnection_reason=first_text(call, "disconnection_reason"),
        start_timestamp=as_number(call.get("start_timestamp")),
        end_timestamp=as_number(call.get("end_timestamp")),
        analysis=analysis,
    )
