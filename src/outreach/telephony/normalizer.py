"""
Outcome normalizer: one CallEvent in, one OutcomeDecision (or IgnoredEvent) out.

Pure and deterministic; performs no I/O beyond logging.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any

from outreach.contacts.models import ContactOutcome
from outreach.shared.exceptions import DateParseWarning, MissingContactReference
from outreach.shared.logging import get_logger
from outreach.telephony.adapters import parse_provider_payload
from outreach.telephony.config import OutcomeConfig
from outreach.telephony.events import (
    CallEvent,
    CallEventKind,
    IgnoredEvent,
    OutcomeDecision,
)

logger = get_logger(__name__)

# Provider vocabulary -> canonical outcome. Keys are trimmed, lower-case.
OUTCOME_ALIASES: dict[str, ContactOutcome] = {
    "paid": ContactOutcome.PAID,
    "success": ContactOutcome.PAID,
    "scheduled": ContactOutcome.SCHEDULED,
    "callback": ContactOutcome.CALLBACK,
    "dispute": ContactOutcome.FAILED,
    "no answer": ContactOutcome.FAILED,
    "no_answer": ContactOutcome.FAILED,
    "failed": ContactOutcome.FAILED,
    "voicemail": ContactOutcome.VOICEMAIL,
    "completed": ContactOutcome.COMPLETED,
    "noanswer": ContactOutcome.NO_ANSWER,
}

SENTIMENT_OUTCOMES: dict[str, ContactOutcome] = {
    "positive": ContactOutcome.PAID,
    "negative": ContactOutcome.FAILED,
}

VOICEMAIL_REASONS = frozenset({"voicemail_reached"})
NO_ANSWER_REASONS = frozenset({"dial_no_answer"})

RESCHEDULING_OUTCOMES = frozenset({ContactOutcome.CALLBACK, ContactOutcome.SCHEDULED})

TRANSCRIPT_SEPARATOR = "\n\n--- Transcript ---\n"

# Epoch values at or above this are milliseconds (1e11 s is year ~5138).
_EPOCH_MILLIS_THRESHOLD = 1e11


def normalize_outcome_label(raw: str | None) -> ContactOutcome | None:
    """Map a provider outcome label to the canonical set, or None if unknown."""
    if raw is None:
        return None
    return OUTCOME_ALIASES.get(raw.strip().lower())


def compute_duration_seconds(start: float | None, end: float | None) -> int | None:
    """Whole seconds between ``start`` and ``end``, or None if either is missing."""
    if start is None or end is None:
        return None
    if start >= _EPOCH_MILLIS_THRESHOLD or end >= _EPOCH_MILLIS_THRESHOLD:
        start, end = start / 1000.0, end / 1000.0
    elapsed = end - start
    if not math.isfinite(elapsed):
        return None
    return max(0, round(elapsed))


def parse_callback_date(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC.

    Raises:
        ValueError: If ``value`` is not a recognizable date.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class OutcomeNormalizer:
    """Derive the canonical outcome, stored text, duration and reschedule date."""

    def __init__(self, config: OutcomeConfig | None = None) -> None:
        self._config = config or OutcomeConfig()

    @property
    def config(self) -> OutcomeConfig:
        return self._config

    def normalize_payload(self, payload: Any) -> OutcomeDecision | IgnoredEvent:
        """Translate a raw webhook body and normalize it."""
        return self.normalize(parse_provider_payload(payload))

    def normalize(self, event: CallEvent) -> OutcomeDecision | IgnoredEvent:
        """Normalize one event.

        Raises:
            MissingContactReference: If a terminal event has no contact id.
        """
        try:
            kind = CallEventKind(event.kind)
        except ValueError:
            logger.info("Ignoring webhook event", extra={"event": event.kind})
            return IgnoredEvent(event_kind=event.kind)

        if not event.contact_id:
            raise MissingContactReference(
                "Missing contact_id in webhook metadata",
                details={"event": event.kind, "provider_call_id": event.provider_call_id},
            )

        duration = compute_duration_seconds(event.start_timestamp, event.end_timestamp)
        header_extra: list[str] = []

        if kind == CallEventKind.CALL_ENDED:
            outcome = self._outcome_for_ended_call(event, duration)
        else:
            outcome = self._outcome_for_analyzed_call(event, header_extra)

        warnings: list[DateParseWarning] = []
        reschedule_to = self._reschedule_date(event, outcome, warnings)

        decision = OutcomeDecision(
            contact_id=event.contact_id,
            outcome=outcome,
            transcript=self._build_stored_text(event, header_extra),
            event_kind=kind.value,
            duration_seconds=duration,
            reschedule_to=reschedule_to,
            callback_date=event.analysis.callback_date,
            warnings=tuple(warnings),
        )

        logger.info(
            "Call outcome normalized",
            extra={
                "contact_id": decision.contact_id,
                "event": decision.event_kind,
                "provider": event.provider,
                "outcome": decision.outcome.value,
                "duration_seconds": decision.duration_seconds,
                "reschedule_to": decision.reschedule_to,
            },
        )
        return decision

    def conversation_occurred(self, transcript: str | None, duration: int | None) -> bool:
        """True when the transcript or the duration shows a real exchange."""
        if transcript and len(transcript.strip()) > self._config.min_transcript_chars:
            return True
        return duration is not None and duration > self._config.min_duration_seconds

    def _outcome_for_ended_call(self, event: CallEvent, duration: int | None) -> ContactOutcome:
        reason = (event.disconnection_reason or "").strip().lower()
        if reason in VOICEMAIL_REASONS:
            return ContactOutcome.VOICEMAIL
        if reason in NO_ANSWER_REASONS:
            return ContactOutcome.NO_ANSWER
        if self.conversation_occurred(event.transcript, duration):
            # Provisional; the call_analyzed event that follows is authoritative.
            return ContactOutcome.COMPLETED
        return ContactOutcome.NO_ANSWER

    def _outcome_for_analyzed_call(
        self,
        event: CallEvent,
        header_extra: list[str],
    ) -> ContactOutcome:
        raw = event.analysis.outcome
        if raw is not None and raw.strip():
            outcome = normalize_outcome_label(raw)
            if outcome is not None:
                return outcome
            logger.warning(
                "Unrecognized provider outcome; storing as Completed",
                extra={"contact_id": event.contact_id, "raw_outcome": raw},
            )
            header_extra.append(f"Reported Outcome: {raw.strip()}")
            return ContactOutcome.COMPLETED

        sentiment = (event.analysis.user_sentiment or "").strip().lower()
        return SENTIMENT_OUTCOMES.get(sentiment, ContactOutcome.COMPLETED)

    def _reschedule_date(
        self,
        event: CallEvent,
        outcome: ContactOutcome,
        warnings: list[DateParseWarning],
    ) -> datetime | None:
        callback_date = event.analysis.callback_date
        if not callback_date or outcome not in RESCHEDULING_OUTCOMES:
            return None

        try:
            return parse_callback_date(callback_date)
        except ValueError:
            warning = DateParseWarning(f"Could not parse callback date: {callback_date!r}")
            warnings.append(warning)
            logger.warning(
                str(warning),
                extra={"contact_id": event.contact_id, "callback_date": callback_date},
            )
            return None

    def _build_stored_text(self, event: CallEvent, header_extra: list[str]) -> str:
        header = " | ".join(event.analysis.header_parts() + header_extra)
        transcript = (event.transcript or "").strip()

        if header and transcript:
            return f"{header}{TRANSCRIPT_SEPARATOR}{transcript}"
        if header:
            return header
        if transcript:
            return transcript
        return self._config.no_transcript_marker
