"""Inbox reader contract and the JSON export reader."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from sms_expense import get_logger
from sms_expense.models import InboxFilter, RawMessage

LOGGER = get_logger("integrations.inbox")


class InboxReadError(RuntimeError):
    """Raised when the inbox cannot be read or its payload cannot be parsed."""


class InboxPermissionError(InboxReadError):
    """Raised when access to the inbox is denied."""


@runtime_checkable
class InboxReader(Protocol):
    """Collaborator that delivers a finite batch of SMS records."""

    def fetch_messages(self, inbox_filter: InboxFilter) -> list[RawMessage]:
        """Return up to ``inbox_filter.max_count`` messages or raise InboxReadError."""


class InboxRecord(BaseModel):
    """Single SMS row as exported by Android SMS backup/list tools."""

    model_config = ConfigDict(extra="ignore")

    body: str
    date: int = Field(description="Epoch milliseconds; numeric strings are accepted.")

    def to_message(self) -> RawMessage:
        return RawMessage(body=self.body, timestamp_millis=self.date)


def parse_inbox_records(records: Iterable[Any]) -> list[RawMessage]:
    """Validate raw JSON rows and convert them into RawMessage records."""

    messages: list[RawMessage] = []
    for index, record in enumerate(records):
        try:
            parsed = InboxRecord.model_validate(record)
        except ValidationError as exc:
            raise InboxReadError(
                f"Failed to parse SMS messages: record {index} is invalid ({exc.error_count()} errors)"
            ) from exc
        messages.append(parsed.to_message())
    return messages


def apply_filter(messages: list[RawMessage], inbox_filter: InboxFilter) -> list[RawMessage]:
    """Slice an ordered message list to the requested window."""

    start = inbox_filter.index_from
    return messages[start : start + inbox_filter.max_count]


class JsonInboxReader:
    """Read messages from a JSON (array) or JSON Lines inbox export."""

    def __init__(self, path: str | Path, *, encoding: str = "utf-8-sig") -> None:
        self._path = Path(path)
        self._encoding = encoding

    @property
    def path(self) -> Path:
        return self._path

    def fetch_messages(self, inbox_filter: InboxFilter) -> list[RawMessage]:
        text = self._read_text()
        records = self._decode(text)
        messages = parse_inbox_records(records)
        window = apply_filter(messages, inbox_filter)
        LOGGER.debug(
            "Read %d of %d messages from %s (index_from=%d, max_count=%d)",
            len(window),
            len(messages),
            self._path,
            inbox_filter.index_from,
            inbox_filter.max_count,
        )
        return window

    def _read_text(self) -> str:
        try:
            return self._path.read_text(encoding=self._encoding)
        except PermissionError as exc:
            raise InboxPermissionError(
                f"Permission denied reading SMS export {self._path}"
            ) from exc
        except FileNotFoundError as exc:
            raise InboxReadError(f"SMS export not found: {self._path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise InboxReadError(f"Failed to load SMS export {self._path}: {exc}") from exc

    def _decode(self, text: str) -> list[Any]:
        stripped = text.strip()
        if not stripped:
            return []
        if stripped.startswith("["):
            try:
                payload = json.loads(stripped)
            except json.JSONDecodeError as exc:
                raise InboxReadError(f"Failed to parse SMS messages: {exc}") from exc
            return list(payload)

        rows: list[Any] = []
        for line_no, line in enumerate(stripped.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError as exc:
                raise InboxReadError(
                    f"Failed to parse SMS messages: line {line_no} is not valid JSON"
                ) from exc
        return rows


__all__ = [
    "InboxPermissionError",
    "InboxReadError",
    "InboxReader",
    "InboxRecord",
    "JsonInboxReader",
    "apply_filter",
    "parse_inbox_records",
]
