"""
Repository for the append-only call-log trail.

Entries are never updated or deleted; only append and read operations exist.
"""

from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession

from outreach.calls.models import CallLog
from outreach.contacts.models import ContactOutcome


class CallLogRepositoryProtocol(Protocol):
    """Protocol for call-log repository operations."""

    async def append(
        self,
        contact_id: str,
        outcome: ContactOutcome,
        transcript: str,
        duration_seconds: int | None = None,
    ) -> CallLog:
        """Append a call-log entry."""
        ...

    async def get_by_contact(
        self,
        contact_id: str,
        limit: int = 50,
    ) -> Sequence[CallLog]:
        """Get call-log entries for a contact."""
        ...


class CallLogRepository:
    """Repository for call-log database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    async def append(
        self,
        contact_id: str,
        outcome: ContactOutcome,
        transcript: str,
        duration_seconds: int | None = None,
    ) -> CallLog:
        """Stage a new call-log entry in the current transaction.

        The entry is flushed but not committed; the caller owns the
        transaction boundary.

        Args:
            contact_id: Contact identifier.
            outcome: Canonical call outcome.
            transcript: Stored summary/transcript text.
            duration_seconds: Call duration, when known.

        Returns:
            The pending CallLog instance.
        """
        entry = CallLog(
            contact_id=contact_id,
            outcome=outcome,
            transcript=transcript,
            duration_seconds=duration_seconds,
        )
        self._session.add(entry)
        await self._session.flush()
        return entry

    async def get_by_contact(
        self,
        contact_id: str,
        limit: int = 50,
    ) -> Sequence[CallLog]:
        """Get call-log entries for a contact, newest first.

        Args:
            contact_id: Contact identifier.
            limit: Maximum number of entries to return.

        Returns:
            List of CallLog instances.
        """
        stmt = (
            select(CallLog)
            .options(selectinload(CallLog.contact))
            .where(CallLog.contact_id == contact_id)
            .order_by(CallLog.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def get_recent(self, limit: int = 10) -> Sequence[CallLog]:
        """Get the most recent call-log entries across all contacts, with their contact."""
        stmt = (
            select(CallLog)
            .options(selectinload(CallLog.contact))
            .order_by(CallLog.created_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def get_all_with_contact(self) -> Sequence[CallLog]:
        """Every call-log entry with its contact loaded, newest first."""
        stmt = (
            select(CallLog)
            .options(selectinload(CallLog.contact))
            .order_by(CallLog.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()
