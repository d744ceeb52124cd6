"""Parsing helpers for the SMS expense scanner."""

from .expense import collect_expenses, extract_expense, extract_from_message, format_timestamp

__all__ = ["collect_expenses", "extract_expense", "extract_from_message", "format_timestamp"]
