"""
Contact service: create, read and operator updates.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from outreach.contacts.models import Contact
from outreach.contacts.repository import ContactRepository
from outreach.contacts.schemas import ContactCreate, ContactCreateResult, ContactUpdate
from outreach.shared.exceptions import NotFoundError, ValidationError
from outreach.shared.logging import get_logger

logger = get_logger(__name__)


class ContactService:
    """Service for contact management operations."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = ContactRepository(session)

    async def create_contacts(self, items: list[ContactCreate]) -> ContactCreateResult:
        """Create contacts, skipping entries without a name or phone number.

        Raises:
            ValidationError: If no entry is complete.
        """
        if not items:
            raise ValidationError("No data provided")

        complete = [item for item in items if item.is_complete]
        if not complete:
            raise ValidationError("No valid contacts found (missing name or phone)")

        contacts = [
            Contact(
                name=item.name.strip(),
                phone_number=item.phone_number.strip(),
                services_offered=item.services_offered,
                bill_or_payment=item.bill_or_payment,
                next_call_date=item.next_call_date,
                last_outcome=item.last_outcome,
            )
            for item in complete
        ]
        created = await self._repository.create_bulk(contacts)
        await self._session.commit()

        logger.info(
            "Contacts created",
            extra={"created": len(created), "skipped": len(items) - len(created)},
        )
        return ContactCreateResult(
            count=len(created),
            message=f"Successfully created {len(created)} contacts",
            ids=[contact.id for contact in created],
        )

    async def get_contact(self, contact_id: str) -> Contact:
        contact = await self._repository.get_by_id(contact_id)
        if contact is None:
            raise NotFoundError(f"Contact not found: {contact_id}")
        return contact

    async def list_contacts(self, due_on: date | None = None) -> Sequence[Contact]:
        """List contacts, optionally only those due for a call on ``due_on`` (UTC day)."""
        if due_on is None:
            return await self._repository.list_contacts()

        start = datetime.combine(due_on, time.min, tzinfo=timezone.utc)
        return await self._repository.list_contacts(
            next_call_from=start,
            next_call_until=start + timedelta(days=1),
        )

    async def update_contact(self, contact_id: str, update: ContactUpdate) -> Contact:
        """Apply an operator update; only fields present in the request change."""
        contact = await self.get_contact(contact_id)
        changes = update.model_dump(exclude_unset=True)

        for required in ("name", "phone_number"):
            if required in changes and not (changes[required] or "").strip():
                raise ValidationError(f"{required} cannot be empty")
        if "last_outcome" in changes and changes["last_outcome"] is None:
            raise ValidationError("last_outcome cannot be null")

        contact = await self._repository.update(contact, changes)
        await self._session.commit()

        logger.info(
            "Contact updated",
            extra={"contact_id": contact_id, "fields": sorted(changes)},
        )
        return contact
