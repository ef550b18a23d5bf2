"""
Shared exceptions.

Webhook processing errors carry the HTTP status they map to, so the
application exception handler can render them without a lookup table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional


@dataclass
class AppError(Exception):
    message: str = "Application error"
    details: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message


class NotFoundError(AppError):
    pass


class ValidationError(AppError):
    pass


class OutcomeProcessingError(AppError):
    """Base class for failures while ingesting a call-outcome webhook."""

    status_code: ClassVar[int] = 400


class MalformedPayload(OutcomeProcessingError):
    status_code: ClassVar[int] = 400


class MissingContactReference(OutcomeProcessingError):
    status_code: ClassVar[int] = 400


class ContactNotFound(OutcomeProcessingError):
    status_code: ClassVar[int] = 404


class PersistenceFailure(OutcomeProcessingError):
    status_code: ClassVar[int] = 500


class DateParseWarning(UserWarning):
    """Non-fatal: a provider date string could not be parsed."""
