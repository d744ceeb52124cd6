"""Inbox collaborators: JSON exports and HTTP SMS gateways."""

from .gateway import SmsGatewayReader
from .inbox import (
    InboxPermissionError,
    InboxReadError,
    InboxReader,
    InboxRecord,
    JsonInboxReader,
    parse_inbox_records,
)

__all__ = [
    "InboxPermissionError",
    "InboxReadError",
    "InboxReader",
    "InboxRecord",
    "JsonInboxReader",
    "SmsGatewayReader",
    "parse_inbox_records",
]
