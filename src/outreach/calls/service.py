"""
Outbound call trigger.

Builds the provider request from a contact and marks the contact as
``Calling``; the outcome arrives later through the webhook.
"""

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from outreach.contacts.models import Contact, ContactOutcome
from outreach.contacts.repository import ContactRepository
from outreach.shared.exceptions import NotFoundError
from outreach.shared.logging import get_logger
from outreach.telephony.interface import (
    CallInitiationRequest,
    CallInitiationResponse,
    TelephonyProvider,
)

logger = get_logger(__name__)

NOT_AVAILABLE = "N/A"


def format_invoice_date(created_at: datetime | None) -> str:
    """Human-readable date for the voice agent, e.g. ``May 1, 2024``."""
    if created_at is None:
        return NOT_AVAILABLE
    return f"{created_at:%B} {created_at.day}, {created_at.year}"


def build_dynamic_variables(contact: Contact) -> dict[str, str]:
    """Prompt variables; names must match the agent's {{Variable}} placeholders."""
    return {
        "Client_Name": contact.name,
        "Invoice_Amount": contact.bill_or_payment or NOT_AVAILABLE,
        "Invoice_Date": format_invoice_date(contact.created_at),
        "Services_Rendered": contact.services_offered or NOT_AVAILABLE,
        "Phone_Number": contact.phone_number,
    }


class CallTriggerService:
    """Place a call through the telephony provider and mark the contact."""

    def __init__(self, session: AsyncSession, provider: TelephonyProvider) -> None:
        self._session = session
        self._provider = provider
        self._contacts = ContactRepository(session)

    async def trigger_call(self, contact_id: str) -> CallInitiationResponse:
        """Initiate a call to ``contact_id``.

        Raises:
            NotFoundError: If the contact does not exist.
            CallInitiationError: If the provider rejects the call; the
                contact is left unchanged.
        """
        contact = await self._contacts.get_by_id(contact_id)
        if contact is None:
            raise NotFoundError(f"Contact not found: {contact_id}")

        request = CallInitiationRequest(
            to_number=contact.phone_number,
            contact_id=contact.id,
            dynamic_variables=build_dynamic_variables(contact),
        )
        response = await self._provider.initiate_call(request)

        await self._contacts.update(contact, {"last_outcome": ContactOutcome.CALLING})
        await self._session.commit()

        logger.info(
            "Call triggered",
            extra={
                "contact_id": contact_id,
                "provider": self._provider.name,
                "provider_call_id": response.provider_call_id,
            },
        )
        return response
