"""
API tests for the call-outcome webhook.
"""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from outreach.calls.models import CallLog
from outreach.contacts.models import Contact, ContactOutcome
from outreach.main import app
from outreach.shared.database import get_db_session
from outreach.shared.logging import CORRELATION_ID_HEADER

WEBHOOK_URL = "/api/webhooks/outcome"


async def logs_for(
    session_factory: async_sessionmaker[AsyncSession],
    contact_id: str,
) -> list[CallLog]:
    async with session_factory() as session:
        result = await session.execute(select(CallLog).where(CallLog.contact_id == contact_id))
        return list(result.scalars().all())


class TestOutcomeWebhook:
    """Tests for POST /api/webhooks/outcome."""

    @pytest.mark.asyncio
    async def test_analyzed_call_reschedules_contact(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        payload = {
            "event": "call_analyzed",
            "call": {
                "metadata": {"contact_id": "c1"},
                "transcript": "Agent: When can we call you back? User: May first.",
                "call_analysis": {
                    "custom_analysis_data": {
                        "Outcome": "Scheduled",
                        "Callback_Date": "2024-05-01",
                    }
                },
            },
        }

        response = await async_client.post(WEBHOOK_URL, json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["event"] == "call_analyzed"
        assert body["contactId"] == "c1"
        assert body["outcome"] == "Scheduled"
        assert body["callbackDate"] == "2024-05-01"
        assert body["nextCallDate"].startswith("2024-05-01")

        stored = await load_contact("c1")
        assert stored.last_outcome == ContactOutcome.SCHEDULED
        assert stored.next_call_date.date().isoformat() == "2024-05-01"
        assert stored.transcript.startswith("Callback: 2024-05-01")

        logs = await logs_for(session_factory, "c1")
        assert len(logs) == 1
        assert logs[0].outcome == ContactOutcome.SCHEDULED

    @pytest.mark.asyncio
    async def test_call_ended_records_duration(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
    ) -> None:
        payload = {
            "event": "call_ended",
            "call": {
                "metadata": {"contact_id": "c1"},
                "disconnection_reason": "voicemail_reached",
                "start_timestamp": 1714000000000,
                "end_timestamp": 1714000045000,
            },
        }

        response = await async_client.post(WEBHOOK_URL, json=payload)

        assert response.status_code == 200
        assert response.json()["outcome"] == "Voicemail"
        assert response.json()["nextCallDate"] is None

        logs = await logs_for(session_factory, "c1")
        assert [log.duration_seconds for log in logs] == [45]
        assert logs[0].transcript == "No transcript available"

    @pytest.mark.asyncio
    async def test_ignored_event(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        response = await async_client.post(
            WEBHOOK_URL,
            json={"event": "call_started", "call": {"metadata": {"contact_id": "c1"}}},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "ignored": True, "event": "call_started"}
        assert (await load_contact("c1")).last_outcome == ContactOutcome.PENDING
        assert await logs_for(session_factory, "c1") == []

    @pytest.mark.asyncio
    async def test_direct_form(
        self,
        async_client: AsyncClient,
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        response = await async_client.post(
            WEBHOOK_URL,
            json={"contactId": "c1", "outcome": "success", "transcript": "Paid in full."},
        )

        assert response.status_code == 200
        assert response.json()["outcome"] == "Paid"
        stored = await load_contact("c1")
        assert stored.last_outcome == ContactOutcome.PAID
        assert stored.transcript == "Paid in full."

    @pytest.mark.asyncio
    async def test_unparseable_callback_date_is_reported(
        self,
        async_client: AsyncClient,
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        payload = {
            "event": "call_analyzed",
            "call": {
                "metadata": {"contact_id": "c1"},
                "call_analysis": {
                    "custom_analysis_data": {"Outcome": "Callback", "Callback_Date": "after lunch"}
                },
            },
        }

        response = await async_client.post(WEBHOOK_URL, json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "Callback"
        assert body["nextCallDate"] is None
        assert len(body["warnings"]) == 1
        assert (await load_contact("c1")).last_outcome == ContactOutcome.CALLBACK

    @pytest.mark.asyncio
    async def test_missing_contact_reference(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            WEBHOOK_URL,
            json={"event": "call_analyzed", "call": {"metadata": {}}},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "contact_id" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_unknown_contact(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        response = await async_client.post(
            WEBHOOK_URL,
            json={"contactId": "nobody", "outcome": "Paid"},
        )

        assert response.status_code == 404
        assert response.json()["success"] is False
        assert await logs_for(session_factory, "nobody") == []

    @pytest.mark.asyncio
    async def test_invalid_json(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            WEBHOOK_URL,
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid JSON payload"}

    @pytest.mark.asyncio
    async def test_non_object_json(self, async_client: AsyncClient) -> None:
        response = await async_client.post(WEBHOOK_URL, json=["call_ended"])

        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_correlation_id_is_echoed(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            WEBHOOK_URL,
            json={"event": "call_started"},
            headers={CORRELATION_ID_HEADER: "corr-123"},
        )

        assert response.status_code == 200
        assert response.headers[CORRELATION_ID_HEADER] == "corr-123"

    @pytest.mark.asyncio
    async def test_non_finite_timestamp_is_dropped(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
    ) -> None:
        body = (
            b'{"event": "call_ended", "call": {"metadata": {"contact_id": "c1"},'
            b' "start_timestamp": NaN, "end_timestamp": 1045}}'
        )

        response = await async_client.post(
            WEBHOOK_URL,
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["outcome"] == "NoAnswer"
        logs = await logs_for(session_factory, "c1")
        assert [log.duration_seconds for log in logs] == [None]

    @pytest.mark.asyncio
    async def test_oversized_timestamp_is_dropped(
        self,
        async_client: AsyncClient,
        contact_c1: Contact,
    ) -> None:
        huge = "1" + "0" * 400
        body = (
            '{"event": "call_ended", "call": {"metadata": {"contact_id": "c1"},'
            f' "start_timestamp": {huge}, "end_timestamp": 1045}}}}'
        ).encode()

        response = await async_client.post(
            WEBHOOK_URL,
            content=body,
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        assert response.json()["outcome"] == "NoAnswer"

    @pytest.mark.asyncio
    async def test_empty_event_kind_is_ignored(
        self,
        async_client: AsyncClient,
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        response = await async_client.post(
            WEBHOOK_URL,
            json={"event": None, "contactId": "c1", "outcome": "Paid"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "ignored": True, "event": ""}
        assert (await load_contact("c1")).last_outcome == ContactOutcome.PENDING

    @pytest.mark.asyncio
    async def test_commit_failure_returns_500(
        self,
        async_client: AsyncClient,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        async def failing_commit() -> None:
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        async def _failing_session() -> AsyncGenerator[AsyncSession, None]:
            async with session_factory() as session:
                session.commit = failing_commit  # type: ignore[method-assign]
                yield session

        app.dependency_overrides[get_db_session] = _failing_session

        response = await async_client.post(
            WEBHOOK_URL,
            json={"contactId": "c1", "outcome": "Paid", "transcript": "Paid in full."},
        )

        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "Failed to persist call outcome"}
        assert (await load_contact("c1")).last_outcome == ContactOutcome.PENDING
        assert await logs_for(session_factory, "c1") == []
