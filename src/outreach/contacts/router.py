"""
Contact API router.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from outreach.calls.repository import CallLogRepository
from outreach.calls.schemas import CallLogResponse
from outreach.contacts.schemas import (
    ContactCreate,
    ContactCreateResult,
    ContactResponse,
    ContactUpdate,
)
from outreach.contacts.service import ContactService
from outreach.shared.database import get_db_session

router = APIRouter(prefix="/api/contacts", tags=["contacts"])


def get_contact_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> ContactService:
    """Dependency for contact service."""
    return ContactService(session=session)


@router.post(
    "",
    response_model=ContactCreateResult,
    status_code=status.HTTP_201_CREATED,
    summary="Create contacts",
    description="Create one contact or a list of contacts. Entries without name or phone are skipped.",
)
async def create_contacts(
    payload: ContactCreate | list[ContactCreate],
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> ContactCreateResult:
    items = payload if isinstance(payload, list) else [payload]
    return await service.create_contacts(items)


@router.get(
    "",
    response_model=list[ContactResponse],
    summary="List contacts",
)
async def list_contacts(
    service: Annotated[ContactService, Depends(get_contact_service)],
    due_on: Annotated[date | None, Query(alias="date")] = None,
) -> list[ContactResponse]:
    """List contacts newest first.

    Args:
        service: Contact service.
        due_on: Only contacts whose next call falls on this day (YYYY-MM-DD).
    """
    contacts = await service.list_contacts(due_on=due_on)
    return [ContactResponse.model_validate(contact) for contact in contacts]


@router.get(
    "/{contact_id}",
    response_model=ContactResponse,
    summary="Get contact",
)
async def get_contact(
    contact_id: str,
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> ContactResponse:
    contact = await service.get_contact(contact_id)
    return ContactResponse.model_validate(contact)


@router.patch(
    "/{contact_id}",
    response_model=ContactResponse,
    summary="Update contact",
    description="Partial update. Setting lastOutcome is the operator override (e.g. reset to Pending).",
)
async def update_contact(
    contact_id: str,
    update: ContactUpdate,
    service: Annotated[ContactService, Depends(get_contact_service)],
) -> ContactResponse:
    contact = await service.update_contact(contact_id, update)
    return ContactResponse.model_validate(contact)


@router.get(
    "/{contact_id}/logs",
    response_model=list[CallLogResponse],
    summary="Call history for a contact",
)
async def list_contact_logs(
    contact_id: str,
    service: Annotated[ContactService, Depends(get_contact_service)],
    session: Annotated[AsyncSession, Depends(get_db_session)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[CallLogResponse]:
    await service.get_contact(contact_id)
    logs = await CallLogRepository(session).get_by_contact(contact_id, limit=limit)
    return [CallLogResponse.model_validate(entry) for entry in logs]
