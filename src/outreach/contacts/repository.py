"""
Contact repository for database operations.
"""

from datetime import datetime
from typing import Any, Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from outreach.contacts.models import Contact


class ContactRepositoryProtocol(Protocol):
    """Protocol for contact repository operations."""

    async def get_by_id(self, contact_id: str) -> Contact | None:
        """Get a contact by ID."""
        ...

    async def create_bulk(self, contacts: list[Contact]) -> list[Contact]:
        """Create multiple contacts in bulk."""
        ...

    async def update(self, contact: Contact, changes: dict[str, Any]) -> Contact:
        """Apply field changes to a contact."""
        ...


class ContactRepository:
    """Repository for contact database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    async def create(self, contact: Contact) -> Contact:
        """Create a single contact.

        Args:
            contact: Contact to create.

        Returns:
            Created contact with ID.
        """
        self._session.add(contact)
        await self._session.flush()
        await self._session.refresh(contact)
        return contact

    async def create_bulk(self, contacts: list[Contact]) -> list[Contact]:
        """Create multiple contacts in bulk.

        Args:
            contacts: List of contacts to create.

        Returns:
            List of created contacts with IDs.
        """
        if not contacts:
            return []

        self._session.add_all(contacts)
        await self._session.flush()

        for contact in contacts:
            await self._session.refresh(contact)

        return contacts

    async def get_by_id(self, contact_id: str) -> Contact | None:
        """Get a contact by ID.

        Args:
            contact_id: Contact identifier.

        Returns:
            Contact if found, None otherwise.
        """
        stmt = select(Contact).where(Contact.id == contact_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_contacts(
        self,
        next_call_from: datetime | None = None,
        next_call_until: datetime | None = None,
    ) -> Sequence[Contact]:
        """List contacts, newest first.

        Args:
            next_call_from: Inclusive lower bound on ``next_call_date``.
            next_call_until: Exclusive upper bound on ``next_call_date``.

        Returns:
            Matching contacts.
        """
        stmt = select(Contact)
        if next_call_from is not None:
            stmt = stmt.where(Contact.next_call_date >= next_call_from)
        if next_call_until is not None:
            stmt = stmt.where(Contact.next_call_date < next_call_until)

        result = await self._session.execute(stmt.order_by(Contact.created_at.desc()))
        return result.scalars().all()

    async def update(self, contact: Contact, changes: dict[str, Any]) -> Contact:
        """Apply field changes to a contact.

        Args:
            contact: ORM contact instance (must be attached to session).
            changes: Mapping of attribute name to new value.

        Returns:
            Updated contact.
        """
        for field, value in changes.items():
            setattr(contact, field, value)

        await self._session.flush()
        await self._session.refresh(contact)
        return contact
