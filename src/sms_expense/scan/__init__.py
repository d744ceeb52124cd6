"""Scan orchestration for the SMS expense scanner."""

from sms_expense.parsing.expense import collect_expenses

from .orchestrator import scan_inbox, summarize

__all__ = ["collect_expenses", "scan_inbox", "summarize"]
