"""
FastAPI router for the call-outcome webhook.

The provider calls this after each call ends and again once post-call
analysis is ready.
"""

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from outreach.shared.database import get_db_session
from outreach.shared.exceptions import MalformedPayload
from outreach.shared.logging import get_logger
from outreach.telephony.config import get_outcome_config
from outreach.telephony.normalizer import OutcomeNormalizer
from outreach.telephony.webhooks.handler import WebhookHandler

logger = get_logger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["webhooks"])


def get_outcome_normalizer(request: Request) -> OutcomeNormalizer:
    """Dependency returning the normalizer built at startup."""
    normalizer = getattr(request.app.state, "outcome_normalizer", None)
    if normalizer is None:
        normalizer = OutcomeNormalizer(get_outcome_config())
        request.app.state.outcome_normalizer = normalizer
    return normalizer


def get_webhook_handler(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    normalizer: Annotated[OutcomeNormalizer, Depends(get_outcome_normalizer)],
) -> WebhookHandler:
    """Dependency to get webhook handler."""
    return WebhookHandler(session=session, normalizer=normalizer)


@router.post(
    "/outcome",
    status_code=status.HTTP_200_OK,
    summary="Receive call outcome webhooks",
    description="""
    Receives call_ended and call_analyzed events from the voice provider,
    or the simplified {contactId, outcome, transcript} form.

    Other event kinds are acknowledged and ignored.
    """,
)
async def receive_outcome_webhook(
    request: Request,
    handler: Annotated[WebhookHandler, Depends(get_webhook_handler)],
) -> dict[str, Any]:
    """Receive and process one outcome webhook.

    Args:
        request: FastAPI request object.
        handler: Webhook handler dependency.

    Returns:
        Acknowledgement with the derived outcome.

    Raises:
        MalformedPayload: If the body is not valid JSON.
    """
    body = await request.body()
    try:
        payload = json.loads(body)
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Malformed webhook body", extra={"error": str(e), "size": len(body)})
        raise MalformedPayload("Invalid JSON payload") from e

    event_kind = payload.get("event") if isinstance(payload, dict) else None
    logger.info(
        "Received outcome webhook",
        extra={"event": event_kind or "direct"},
    )

    result = await handler.handle_payload(payload)
    return result.to_response()
