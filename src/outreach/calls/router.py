"""
Call trigger and call-log API router.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from outreach.calls.repository import CallLogRepository
from outreach.calls.reports import group_logs_by_day
from outreach.calls.schemas import (
    CallLogReportEntry,
    CallLogResponse,
    TriggerCallRequest,
    TriggerCallResponse,
)
from outreach.calls.service import CallTriggerService
from outreach.shared.database import get_db_session
from outreach.shared.logging import get_logger
from outreach.telephony.config import get_telephony_config
from outreach.telephony.factory import create_telephony_provider
from outreach.telephony.interface import CallInitiationError, TelephonyProvider

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["calls"])


def get_telephony_provider(request: Request) -> TelephonyProvider:
    """Dependency returning the provider built at startup."""
    provider = getattr(request.app.state, "telephony_provider", None)
    if provider is None:
        provider = create_telephony_provider(get_telephony_config())
        request.app.state.telephony_provider = provider
    return provider


def get_call_trigger_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    provider: Annotated[TelephonyProvider, Depends(get_telephony_provider)],
) -> CallTriggerService:
    return CallTriggerService(session=session, provider=provider)


@router.post(
    "/trigger-call",
    response_model=TriggerCallResponse,
    summary="Trigger an outbound call",
)
async def trigger_call(
    payload: TriggerCallRequest,
    service: Annotated[CallTriggerService, Depends(get_call_trigger_service)],
) -> TriggerCallResponse:
    try:
        response = await service.trigger_call(payload.contact_id)
    except CallInitiationError as e:
        logger.error(
            "Trigger call failed",
            extra={"contact_id": payload.contact_id, "error_code": e.error_code},
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        ) from e

    return TriggerCallResponse(call_id=response.provider_call_id)


@router.get(
    "/logs",
    response_model=list[CallLogResponse],
    summary="Most recent call-log entries",
)
async def list_recent_logs(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    limit: Annotated[int, Query(ge=1, le=200)] = 10,
) -> list[CallLogResponse]:
    logs = await CallLogRepository(session).get_recent(limit=limit)
    return [CallLogResponse.model_validate(entry) for entry in logs]


@router.get(
    "/reports",
    response_model=dict[str, list[CallLogReportEntry]],
    summary="Call-log entries grouped by day",
    description="Keys are UTC dates (YYYY-MM-DD), newest first; each entry carries its contact.",
)
async def daily_report(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> dict[str, list[CallLogReportEntry]]:
    logs = await CallLogRepository(session).get_all_with_contact()
    return group_logs_by_day(logs)
