"""CLI entrypoint for the SMS expense scanner."""

from __future__ import annotations

import argparse
import json
import locale
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import Sequence, TextIO

from sms_expense import get_logger, set_log_level
from sms_expense.config import Settings, get_settings
from sms_expense.integrations import JsonInboxReader, SmsGatewayReader
from sms_expense.integrations.inbox import InboxReader
from sms_expense.models import Expense, InboxFilter, ScanResult
from sms_expense.scan import scan_inbox, summarize

LOGGER = get_logger("app")

HEADER = "SMS Expense Scanner"
EMPTY_TEXT = "No expenses found."
PERMISSION_DENIED_TEXT = "Permission Denied: the app cannot function without SMS access."

EXIT_OK = 0
EXIT_SCAN_FAILED = 1
EXIT_PERMISSION_DENIED = 2


class _OutputFormat:
    LIST = "list"
    JSON = "json"


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Scan an SMS inbox export or gateway for expense messages."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--inbox-file",
        type=Path,
        help="JSON or JSON Lines export of SMS records with 'body' and 'date' fields.",
    )
    source.add_argument(
        "--gateway-url",
        help="Base URL of an SMS gateway exposing GET /messages.",
    )
    parser.add_argument(
        "--box",
        help=(
            "Message box to request from the gateway (default: inbox). "
            "Exports read with --inbox-file hold a single box, so this is not applied to them."
        ),
    )
    parser.add_argument(
        "--index-from",
        type=int,
        help="Offset of the first message to read (default: 0).",
    )
    parser.add_argument(
        "--max-count",
        type=int,
        help="Maximum number of messages to read (default: 100).",
    )
    parser.add_argument(
        "--date-format",
        help="strftime pattern for expense dates (default: locale short date).",
    )
    parser.add_argument(
        "--format",
        choices=(_OutputFormat.LIST, _OutputFormat.JSON),
        default=_OutputFormat.LIST,
        help="Output format (default: list).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print the scan's debug log after the results.",
    )
    parser.add_argument(
        "--log-level",
        help="Override LOG_LEVEL for this run.",
    )
    args = parser.parse_args(argv)
    if args.max_count is not None and args.max_count < 1:
        parser.error("--max-count must be at least 1")
    if args.index_from is not None and args.index_from < 0:
        parser.error("--index-from cannot be negative")
    return args


def _build_filter(args: argparse.Namespace, settings: Settings) -> InboxFilter:
    return InboxFilter(
        box=args.box or settings.box,
        index_from=args.index_from if args.index_from is not None else settings.index_from,
        max_count=args.max_count if args.max_count is not None else settings.max_count,
    )


def _build_reader(
    args: argparse.Namespace, settings: Settings, stack: ExitStack
) -> InboxReader | None:
    if args.inbox_file:
        return JsonInboxReader(args.inbox_file)
    if args.gateway_url:
        return stack.enter_context(
            SmsGatewayReader(
                base_url=args.gateway_url,
                token=settings.gateway_token,
                timeout=settings.gateway_timeout,
            )
        )
    if settings.inbox_file:
        return JsonInboxReader(settings.inbox_file)
    if settings.gateway_url:
        return stack.enter_context(SmsGatewayReader.from_settings(settings))
    return None


def _apply_time_locale() -> None:
    """Use the environment's LC_TIME so the default %x date follows the user's locale."""
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as exc:
        LOGGER.warning("Could not apply the environment locale (%s); dates use the C locale", exc)


def format_expense(expense: Expense) -> str:
    """Render one expense the way the list view shows it."""
    return f"₹{expense.amount:.2f}  {expense.description}  {expense.date}"


def render_result(result: ScanResult, output_format: str, *, debug: bool = False) -> str:
    if output_format == _OutputFormat.JSON:
        payload = summarize(result)
        if not debug:
            payload.pop("debug_log", None)
        return json.dumps(payload, ensure_ascii=False, indent=2)

    lines = [HEADER, ""]
    if result.expenses:
        lines.extend(format_expense(expense) for expense in result.expenses)
    else:
        lines.append(EMPTY_TEXT)
    if debug:
        lines.extend(["", "Debug log:"])
        lines.extend(f"  {entry}" for entry in result.debug_log)
    return "\n".join(lines)


def main(
    argv: Sequence[str] | None = None,
    *,
    settings: Settings | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    args = _parse_args(argv)
    resolved_settings = settings or get_settings()
    out = stdout or sys.stdout
    err = stderr or sys.stderr
    set_log_level(args.log_level or resolved_settings.log_level)
    _apply_time_locale()

    inbox_filter = _build_filter(args, resolved_settings)
    date_format = args.date_format or resolved_settings.date_format

    with ExitStack() as stack:
        reader = _build_reader(args, resolved_settings, stack)
        if reader is None:
            print(
                "Error: no SMS source configured (use --inbox-file, --gateway-url, "
                "SMS_INBOX_FILE or SMS_GATEWAY_URL).",
                file=err,
            )
            return EXIT_SCAN_FAILED
        result = scan_inbox(reader, inbox_filter, date_format=date_format)

    if result.permission_denied:
        print(PERMISSION_DENIED_TEXT, file=err)
        if args.debug:
            print(render_result(result, args.format, debug=True), file=out)
        return EXIT_PERMISSION_DENIED
    if not result.succeeded:
        print(f"Error: {result.error}", file=err)
        if args.debug:
            print(render_result(result, args.format, debug=True), file=out)
        return EXIT_SCAN_FAILED

    print(render_result(result, args.format, debug=args.debug), file=out)
    LOGGER.debug("Rendered %d expenses", len(result.expenses))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
