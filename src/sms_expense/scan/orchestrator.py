"""Run one inbox scan: fetch a batch, extract expenses, and record each step."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import tzinfo

from sms_expense import get_logger
from sms_expense.integrations.inbox import (
    InboxPermissionError,
    InboxReadError,
    InboxReader,
)
from sms_expense.models import Expense, InboxFilter, ScanResult
from sms_expense.parsing.expense import DEFAULT_DATE_FORMAT, extract_from_message

LOGGER = get_logger("scan.orchestrator")


def scan_inbox(
    reader: InboxReader,
    inbox_filter: InboxFilter | None = None,
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    tz: tzinfo | None = None,
) -> ScanResult:
    """Fetch messages from ``reader`` and return the detected expenses.

    Collaborator failures do not raise; they produce a ``failed`` result whose
    ``error`` carries the reason and whose debug log shows how far the scan got.
    """

    active_filter = inbox_filter or InboxFilter()
    result = ScanResult()
    _log(result, f"Starting SMS scan with filter: {json.dumps(active_filter.as_query())}")

    try:
        messages = reader.fetch_messages(active_filter)
    except InboxPermissionError as exc:
        _log(result, f"SMS permission denied: {exc}")
        result.status = "failed"
        result.permission_denied = True
        result.error = str(exc)
        return result
    except InboxReadError as exc:
        _log(result, f"Failed to load SMS: {exc}")
        result.status = "failed"
        result.error = str(exc)
        return result

    result.messages_received = len(messages)
    _log(result, f"Received {len(messages)} messages")

    expenses: list[Expense] = []
    try:
        for message in messages:
            expense = extract_from_message(message, date_format=date_format, tz=tz)
            if expense is None:
                continue
            _log(result, f"Found expense: {json.dumps(expense.to_dict(), ensure_ascii=False)}")
            expenses.append(expense)
    except ValueError as exc:
        _log(result, f"Error parsing SMS list: {exc}")
        result.status = "failed"
        result.error = f"Failed to parse SMS messages: {exc}"
        return result

    _log(result, f"Detected {len(expenses)} expenses")
    result.expenses = expenses
    result.status = "completed"
    return result


def summarize(result: ScanResult) -> dict[str, object]:
    """Return a JSON-friendly snapshot of a scan result."""

    payload = asdict(result)
    payload["expenses"] = [expense.to_dict() for expense in result.expenses]
    return payload


def _log(result: ScanResult, message: str) -> None:
    LOGGER.info(message)
    result.log(message)


__all__ = ["scan_inbox", "summarize"]
