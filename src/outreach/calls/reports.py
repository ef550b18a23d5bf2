"""
Daily call report: call-log entries grouped by UTC calendar day.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from outreach.calls.models import CallLog
from outreach.calls.schemas import CallLogReportEntry


def report_day(created_at: datetime) -> str:
    """``YYYY-MM-DD`` of ``created_at`` in UTC; naive values are already UTC."""
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(timezone.utc)
    return created_at.date().isoformat()


def group_logs_by_day(logs: Iterable[CallLog]) -> dict[str, list[CallLogReportEntry]]:
    """Group entries by day, keeping the input order inside each day.

    Fed newest-first, the days come out newest first too.
    """
    grouped: dict[str, list[CallLogReportEntry]] = {}
    for entry in logs:
        grouped.setdefault(report_day(entry.created_at), []).append(
            CallLogReportEntry.model_validate(entry)
        )
    return grouped
