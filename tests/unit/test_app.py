"""Tests for the command-line scanner."""

from __future__ import annotations

import io
import json
import locale
from pathlib import Path

import pytest

from sms_expense.app import (
    EMPTY_TEXT,
    EXIT_OK,
    EXIT_PERMISSION_DENIED,
    EXIT_SCAN_FAILED,
    HEADER,
    PERMISSION_DENIED_TEXT,
    main,
)
from sms_expense.config import Settings


@pytest.fixture(autouse=True)
def _restore_time_locale():
    original = locale.setlocale(locale.LC_TIME)
    yield
    locale.setlocale(locale.LC_TIME, original)


@pytest.fixture
def settings() -> Settings:
    return Settings.model_validate({"SMS_DATE_FORMAT": "%Y-%m-%d"})


@pytest.fixture
def inbox_file(tmp_path: Path) -> Path:
    path = tmp_path / "inbox.json"
    path.write_text(
        json.dumps(
            [
                {"_id": 3, "address": "AMAZON", "body": "Rs 250 paid to Amazon", "date": "1700000000000"},
                {"_id": 2, "address": "BANK", "body": "Your OTP is 482913", "date": "1700000100000"},
                {"_id": 1, "address": "BANK", "body": "INR 1500.00 credited", "date": 1700000200000},
            ]
        ),
        encoding="utf-8",
    )
    return path


def _run(argv: list[str], settings: Settings) -> tuple[int, str, str]:
    out, err = io.StringIO(), io.StringIO()
    code = main(argv, settings=settings, stdout=out, stderr=err)
    return code, out.getvalue(), err.getvalue()


def test_main_lists_expenses(inbox_file: Path, settings: Settings) -> None:
    code, out, err = _run(["--inbox-file", str(inbox_file)], settings)

    assert code == EXIT_OK
    assert err == ""
    lines = out.splitlines()
    assert lines[0] == HEADER
    assert lines[2].startswith("₹250.00") and "paid to Amazon..." in lines[2]
    assert lines[3].startswith("₹1500.00") and "credited..." in lines[3]
    assert len(lines) == 4


def test_main_emits_json(inbox_file: Path, settings: Settings) -> None:
    code, out, _ = _run(["--inbox-file", str(inbox_file), "--format", "json"], settings)

    payload = json.loads(out)
    assert code == EXIT_OK
    assert payload["status"] == "completed"
    assert payload["messages_received"] == 3
    assert [item["amount"] for item in payload["expenses"]] == ["250", "1500.00"]
    assert "debug_log" not in payload


def test_main_respects_max_count(inbox_file: Path, settings: Settings) -> None:
    code, out, _ = _run(
        ["--inbox-file", str(inbox_file), "--max-count", "2", "--format", "json"], settings
    )

    payload = json.loads(out)
    assert code == EXIT_OK
    assert payload["messages_received"] == 2
    assert len(payload["expenses"]) == 1


def test_main_prints_empty_state_and_debug_log(tmp_path: Path, settings: Settings) -> None:
    path = tmp_path / "inbox.json"
    path.write_text(json.dumps([{"body": "See you at 5", "date": 1}]), encoding="utf-8")

    code, out, _ = _run(["--inbox-file", str(path), "--debug"], settings)

    assert code == EXIT_OK
    assert EMPTY_TEXT in out
    assert "Debug log:" in out
    assert "Detected 0 expenses" in out


def test_main_reports_missing_export(tmp_path: Path, settings: Settings) -> None:
    code, out, err = _run(["--inbox-file", str(tmp_path / "missing.json")], settings)

    assert code == EXIT_SCAN_FAILED
    assert out == ""
    assert "SMS export not found" in err


def test_main_reports_permission_denied(
    inbox_file: Path, settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    def deny(self: Path, *args: object, **kwargs: object) -> str:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_text", deny)

    code, out, err = _run(["--inbox-file", str(inbox_file)], settings)

    assert code == EXIT_PERMISSION_DENIED
    assert out == ""
    assert PERMISSION_DENIED_TEXT in err


def test_main_requires_a_source(settings: Settings) -> None:
    code, _, err = _run([], settings)

    assert code == EXIT_SCAN_FAILED
    assert "no SMS source configured" in err


def test_main_falls_back_to_configured_inbox_file(inbox_file: Path) -> None:
    settings = Settings.model_validate(
        {"SMS_INBOX_FILE": str(inbox_file), "SMS_DATE_FORMAT": "%Y-%m-%d"}
    )

    code, out, _ = _run(["--format", "json"], settings)

    assert code == EXIT_OK
    assert len(json.loads(out)["expenses"]) == 2


def test_main_rejects_invalid_max_count(settings: Settings) -> None:
    with pytest.raises(SystemExit):
        _run(["--max-count", "0"], settings)


def test_main_applies_environment_time_locale(
    inbox_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls: list[tuple[int, str | None]] = []
    real_setlocale = locale.setlocale

    def recording_setlocale(category: int, value: str | None = None) -> str:
        calls.append((category, value))
        return real_setlocale(category, "C" if value == "" else value)

    monkeypatch.setattr(locale, "setlocale", recording_setlocale)

    code, _, _ = _run(["--inbox-file", str(inbox_file)], Settings.model_validate({}))

    assert code == EXIT_OK
    assert (locale.LC_TIME, "") in calls


def test_main_keeps_scanning_when_locale_is_unavailable(
    inbox_file: Path, settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    def broken_setlocale(category: int, value: str | None = None) -> str:
        raise locale.Error("unsupported locale setting")

    monkeypatch.setattr(locale, "setlocale", broken_setlocale)

    code, out, _ = _run(["--inbox-file", str(inbox_file)], settings)

    assert code == EXIT_OK
    assert "2023-11-14" in out or "2023-11-15" in out


def test_box_option_is_not_applied_to_exports(inbox_file: Path, settings: Settings) -> None:
    code, out, _ = _run(
        ["--inbox-file", str(inbox_file), "--box", "sent", "--format", "json"], settings
    )

    assert code == EXIT_OK
    assert json.loads(out)["messages_received"] == 3
