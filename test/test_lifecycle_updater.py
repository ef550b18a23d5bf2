"""Tests for LifecycleUpdater against an in-memory database."""

from datetime import datetime, timezone
from typing import Any

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from outreach.calls.models import CallLog
from outreach.contacts.models import Contact, ContactOutcome
from outreach.shared.exceptions import ContactNotFound, PersistenceFailure
from outreach.telephony.events import OutcomeDecision
from outreach.telephony.webhooks.handler import LifecycleUpdater


def decision_for(contact_id: str = "c1", **overrides: Any) -> OutcomeDecision:
    values: dict[str, Any] = {
        "contact_id": contact_id,
        "outcome": ContactOutcome.SCHEDULED,
        "transcript": "Callback: 2024-05-01",
        "event_kind": "call_analyzed",
        "duration_seconds": 45,
        "reschedule_to": datetime(2024, 5, 1, tzinfo=timezone.utc),
        "callback_date": "2024-05-01",
    }
    values.update(overrides)
    return OutcomeDecision(**values)


async def count_logs(session_factory: async_sessionmaker[AsyncSession], contact_id: str) -> int:
    async with session_factory() as session:
        result = await session.execute(
            select(func.count()).select_from(CallLog).where(CallLog.contact_id == contact_id)
        )
        return result.scalar_one()


class TestApply:
    @pytest.mark.asyncio
    async def test_updates_contact_and_appends_log(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        updated = await LifecycleUpdater(db_session).apply(decision_for())

        assert updated.last_outcome == ContactOutcome.SCHEDULED

        stored = await load_contact("c1")
        assert stored.last_outcome == ContactOutcome.SCHEDULED
        assert stored.transcript == "Callback: 2024-05-01"
        assert stored.next_call_date.replace(tzinfo=None) == datetime(2024, 5, 1)

        async with session_factory() as session:
            logs = (await session.execute(select(CallLog))).scalars().all()
        assert len(logs) == 1
        assert logs[0].contact_id == "c1"
        assert logs[0].outcome == ContactOutcome.SCHEDULED
        assert logs[0].transcript == "Callback: 2024-05-01"
        assert logs[0].duration_seconds == 45

    @pytest.mark.asyncio
    async def test_next_call_date_untouched_without_reschedule(
        self,
        db_session: AsyncSession,
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        contact_c1.next_call_date = datetime(2024, 6, 15, tzinfo=timezone.utc)
        await db_session.commit()

        await LifecycleUpdater(db_session).apply(
            decision_for(outcome=ContactOutcome.FAILED, reschedule_to=None)
        )

        stored = await load_contact("c1")
        assert stored.last_outcome == ContactOutcome.FAILED
        assert stored.next_call_date.replace(tzinfo=None) == datetime(2024, 6, 15)

    @pytest.mark.asyncio
    async def test_unknown_contact_writes_nothing(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
    ) -> None:
        with pytest.raises(ContactNotFound):
            await LifecycleUpdater(db_session).apply(decision_for("missing"))

        assert await count_logs(session_factory, "missing") == 0

    @pytest.mark.asyncio
    async def test_commit_failure_rolls_back_both_writes(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
        load_contact: Any,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def failing_commit() -> None:
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", failing_commit)

        with pytest.raises(PersistenceFailure):
            await LifecycleUpdater(db_session).apply(decision_for())

        stored = await load_contact("c1")
        assert stored.last_outcome == ContactOutcome.PENDING
        assert stored.next_call_date is None
        assert await count_logs(session_factory, "c1") == 0

    @pytest.mark.asyncio
    async def test_replay_appends_second_log_with_same_state(
        self,
        db_session: AsyncSession,
        session_factory: async_sessionmaker[AsyncSession],
        contact_c1: Contact,
        load_contact: Any,
    ) -> None:
        updater = LifecycleUpdater(db_session)
        decision = decision_for()

        await updater.apply(decision)
        first = await load_contact("c1")
        await updater.apply(decision)
        second = await load_contact("c1")

        assert await count_logs(session_factory, "c1") == 2
        assert first.last_outcome == second.last_outcome == ContactOutcome.SCHEDULED
        assert first.transcript == second.transcript
        assert first.next_call_date == second.next_call_date
