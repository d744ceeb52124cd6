"""SMS body expense extraction."""

from __future__ import annotations

from datetime import datetime, tzinfo
from decimal import Decimal, InvalidOperation
import re
from typing import Iterable

from sms_expense.models import ELLIPSIS, MAX_DESCRIPTION_LENGTH, Expense, RawMessage

DEFAULT_DATE_FORMAT = "%x"

_AMOUNT_PATTERN = re.compile(
    r"""
    (?:RS|INR|₹)                        # currency marker
    \s?                                 # at most one separating whitespace
    (?P<amount>[0-9]+(?:\.[0-9]{1,2})?) # integer part with optional 1-2 decimals
    """,
    re.IGNORECASE | re.VERBOSE,
)


def extract_expense(
    body: str,
    timestamp_millis: int | str,
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    tz: tzinfo | None = None,
) -> Expense | None:
    """Return the expense mentioned in an SMS body, or None when there is none.

    Only the leftmost currency amount is considered. The description is the body
    without that amount, cut to 50 characters and always suffixed with ``...``.
    """

    match = _AMOUNT_PATTERN.search(body)
    if not match:
        return None

    amount = _parse_amount(match.group("amount"))
    if amount is None:
        return None

    remainder = body[: match.start()] + body[match.end() :]
    description = remainder[:MAX_DESCRIPTION_LENGTH] + ELLIPSIS

    return Expense(
        amount=amount,
        description=description,
        date=format_timestamp(timestamp_millis, date_format=date_format, tz=tz),
    )


def extract_from_message(
    message: RawMessage,
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    tz: tzinfo | None = None,
) -> Expense | None:
    """Convenience wrapper around :func:`extract_expense` for a RawMessage."""

    return extract_expense(
        message.body, message.timestamp_millis, date_format=date_format, tz=tz
    )


def collect_expenses(
    messages: Iterable[RawMessage],
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    tz: tzinfo | None = None,
) -> list[Expense]:
    """Extract expenses from a batch, dropping non-matches and keeping order."""

    expenses: list[Expense] = []
    for message in messages:
        expense = extract_from_message(message, date_format=date_format, tz=tz)
        if expense is not None:
            expenses.append(expense)
    return expenses


def format_timestamp(
    timestamp_millis: int | str,
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    tz: tzinfo | None = None,
) -> str:
    """Render epoch milliseconds as a short calendar date.

    Without ``tz`` the date is computed in the machine's local timezone.
    """

    millis = coerce_timestamp(timestamp_millis)
    try:
        moment = datetime.fromtimestamp(millis / 1000, tz=tz)
    except (OverflowError, OSError, ValueError) as exc:
        raise ValueError(f"Timestamp out of range: {timestamp_millis!r}") from exc
    return moment.strftime(date_format)


def coerce_timestamp(value: int | str) -> int:
    """Accept integer millis or their decimal string form (as device exports send)."""

    if isinstance(value, bool):
        raise ValueError("Timestamp must be an integer number of milliseconds.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        cleaned = value.strip()
        try:
            return int(cleaned)
        except ValueError as exc:
            raise ValueError(f"Timestamp is not an integer: {value!r}") from exc
    raise ValueError(f"Unsupported timestamp type: {type(value)!r}")


def _parse_amount(raw_amount: str) -> Decimal | None:
    try:
        amount = Decimal(raw_amount)
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount < 0:
        return None
    return amount


__all__ = [
    "DEFAULT_DATE_FORMAT",
    "coerce_timestamp",
    "collect_expenses",
    "extract_expense",
    "extract_from_message",
    "format_timestamp",
]
