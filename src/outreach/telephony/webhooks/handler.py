"""
Call-outcome webhook processing.

``WebhookHandler`` runs one delivery through the adapter layer and the
normalizer, then hands the decision to ``LifecycleUpdater``, which applies
it to the contact and the call-log trail in a single transaction.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from outreach.calls.repository import CallLogRepository
from outreach.contacts.models import Contact
from outreach.contacts.repository import ContactRepository
from outreach.shared.exceptions import ContactNotFound, PersistenceFailure
from outreach.shared.logging import get_logger
from outreach.telephony.events import IgnoredEvent, OutcomeDecision
from outreach.telephony.normalizer import OutcomeNormalizer

logger = get_logger(__name__)


class LifecycleUpdater:
    """Apply an OutcomeDecision as one atomic state transition.

    Writes the contact's outcome, stored text and (when rescheduled) next
    call date, and appends one call-log entry. Both writes commit together
    or not at all. Concurrent decisions for the same contact are not
    ordered: the last commit wins.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize updater.

        Args:
            session: Async database session; this class owns its commit.
        """
        self._session = session
        self._contacts = ContactRepository(session)
        self._call_logs = CallLogRepository(session)

    async def apply(self, decision: OutcomeDecision) -> Contact:
        """Persist one decision.

        Args:
            decision: Normalized outcome for a single terminal event.

        Returns:
            The updated contact.

        Raises:
            ContactNotFound: If the contact does not exist. Nothing is written.
            PersistenceFailure: If the transaction fails. Nothing is written.
        """
        try:
            contact = await self._contacts.get_by_id(decision.contact_id)
            if contact is None:
                raise ContactNotFound(
                    f"Contact not found: {decision.contact_id}",
                    details={"contact_id": decision.contact_id},
                )

            changes: dict[str, Any] = {
                "last_outcome": decision.outcome,
                "transcript": decision.transcript,
            }
            if decision.reschedule_to is not None:
                changes["next_call_date"] = decision.reschedule_to

            contact = await self._contacts.update(contact, changes)
            await self._call_logs.append(
                contact_id=decision.contact_id,
                outcome=decision.outcome,
                transcript=decision.transcript,
                duration_seconds=decision.duration_seconds,
            )
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.exception(
                "Outcome transaction failed",
                extra={"contact_id": decision.contact_id, "outcome": decision.outcome.value},
            )
            raise PersistenceFailure(
                "Failed to persist call outcome",
                details={"contact_id": decision.contact_id},
            ) from e

        logger.info(
            "Contact outcome updated",
            extra={
                "contact_id": decision.contact_id,
                "outcome": decision.outcome.value,
                "next_call_date": decision.reschedule_to,
                "duration_seconds": decision.duration_seconds,
            },
        )
        return contact


@dataclass(frozen=True)
class WebhookResult:
    """Outcome of one webhook delivery, shaped for the HTTP response."""

    event: str
    ignored: bool = False
    contact_id: str | None = None
    outcome: str | None = None
    callback_date: str | None = None
    next_call_date: datetime | None = None
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def to_response(self) -> dict[str, Any]:
        if self.ignored:
            return {"success": True, "ignored": True, "event": self.event}

        body: dict[str, Any] = {
            "success": True,
            "event": self.event,
            "contactId": self.contact_id,
            "outcome": self.outcome,
            "callbackDate": self.callback_date,
            "nextCallDate": self.next_call_date.isoformat() if self.next_call_date else None,
        }
        if self.warnings:
            body["warnings"] = list(self.warnings)
        return body


class WebhookHandler:
    """Handler for call-outcome webhook deliveries.

    Each delivery is independent; the handler holds no state between calls.
    """

    def __init__(
        self,
        session: AsyncSession,
        normalizer: OutcomeNormalizer | None = None,
    ) -> None:
        """Initialize webhook handler.

        Args:
            session: Async database session.
            normalizer: Outcome normalizer built from startup configuration.
        """
        self._normalizer = normalizer or OutcomeNormalizer()
        self._updater = LifecycleUpdater(session)

    async def handle_payload(self, payload: Any) -> WebhookResult:
        """Process one parsed JSON webhook body.

        Raises:
            MalformedPayload: If the body is not a JSON object.
            MissingContactReference: If a terminal event names no contact.
            ContactNotFound: If the named contact does not exist.
            PersistenceFailure: If the database transaction fails.
        """
        result = self._normalizer.normalize_payload(payload)

        if isinstance(result, IgnoredEvent):
            return WebhookResult(event=result.event_kind, ignored=True)

        contact = await self._updater.apply(result)

        return WebhookResult(
            event=result.event_kind,
            contact_id=result.contact_id,
            outcome=result.outcome.value,
            callback_date=result.callback_date,
            next_call_date=contact.next_call_date,
            warnings=tuple(str(w) for w in result.warnings),
        )
