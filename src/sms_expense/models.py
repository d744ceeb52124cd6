"""Message, expense, and scan state models for the SMS expense scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal

MAX_DESCRIPTION_LENGTH = 50
ELLIPSIS = "..."
DEFAULT_BOX = "inbox"


@dataclass(slots=True, frozen=True)
class RawMessage:
    """One SMS as read from the device inbox."""

    body: str
    timestamp_millis: int


@dataclass(slots=True, frozen=True)
class Expense:
    """Monetary transaction mention detected in a single SMS body.

    ``amount`` is a ``Decimal``; compare it with ``Decimal`` values or strings,
    not floats (``Decimal("123.45") != 123.45``).
    """

    amount: Decimal
    description: str
    date: str

    def __post_init__(self) -> None:
        if not self.amount.is_finite():
            raise ValueError("Expense amount must be a finite number.")
        if self.amount < 0:
            raise ValueError("Expense amount cannot be negative.")
        if len(self.description) > MAX_DESCRIPTION_LENGTH + len(ELLIPSIS):
            raise ValueError(
                f"Description cannot exceed {MAX_DESCRIPTION_LENGTH + len(ELLIPSIS)} characters."
            )

    def to_dict(self) -> dict[str, str]:
        """Return a JSON-friendly mapping with the amount kept as a string."""
        return {
            "amount": str(self.amount),
            "description": self.description,
            "date": self.date,
        }


@dataclass(slots=True, frozen=True)
class InboxFilter:
    """Selection of messages requested from an inbox reader."""

    box: str = DEFAULT_BOX
    index_from: int = 0
    max_count: int = 100

    def __post_init__(self) -> None:
        if not self.box:
            raise ValueError("InboxFilter box cannot be blank.")
        if self.index_from < 0:
            raise ValueError("InboxFilter index_from cannot be negative.")
        if self.max_count < 1:
            raise ValueError("InboxFilter max_count must be at least 1.")

    def as_query(self) -> dict[str, str | int]:
        """Return the filter using the device export's camelCase keys."""
        return {
            "box": self.box,
            "indexFrom": self.index_from,
            "maxCount": self.max_count,
        }


@dataclass(slots=True)
class ScanResult:
    """Outcome of one inbox scan, including its step-by-step debug log."""

    status: Literal["pending", "completed", "failed"] = "pending"
    expenses: list[Expense] = field(default_factory=list)
    messages_received: int = 0
    debug_log: list[str] = field(default_factory=list)
    error: str | None = None
    permission_denied: bool = False

    @property
    def succeeded(self) -> bool:
        return self.status == "completed"

    def log(self, message: str) -> None:
        """Add a human-readable debug entry."""
        if message:
            self.debug_log.append(message)


__all__ = [
    "DEFAULT_BOX",
    "ELLIPSIS",
    "Expense",
    "InboxFilter",
    "MAX_DESCRIPTION_LENGTH",
    "RawMessage",
    "ScanResult",
]
