"""Unit tests for the CLI entrypoint."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

from tester_bug_reporter import cli
from tester_bug_reporter.logging import JsonFormatter
from tester_bug_reporter.webhook.apps_script import SHEET_COLUMNS


@pytest.fixture
def state_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[Path]:
    state = tmp_path / "state"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BUG_REPORTER_STORAGE_PATH", str(state))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    yield state

    # cli.main installs a root handler bound to the captured stderr of this test.
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)


def _report(*extra: str) -> int:
    return cli.main(
        ["report", "--title", "Login button unresponsive", "--description", "No reaction", *extra]
    )


def _list_json(capsys: pytest.CaptureFixture[str], *args: str) -> list[dict[str, object]]:
    capsys.readouterr()
    assert cli.main(["list", "--json", *args]) == 0
    return json.loads(capsys.readouterr().out)


def test_report_and_list(state_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _report("--severity", "Critical") == 0
    assert "Reported bug" in capsys.readouterr().out

    bugs = _list_json(capsys)
    assert len(bugs) == 1
    assert bugs[0]["title"] == "Login button unresponsive"
    assert bugs[0]["severity"] == "Critical"
    assert bugs[0]["status"] == "Open"
    assert (state_dir / "tester-bugs.json").exists()


def test_report_empty_description_is_rejected(
    state_dir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["report", "--title", "Login button unresponsive", "--description", ""])

    assert code == 2
    assert "description" in capsys.readouterr().err
    assert _list_json(capsys) == []


def test_list_filters(state_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _report("--severity", "Critical")
    cli.main(["report", "--title", "Typo", "--description", "footer", "--severity", "Low"])

    titles = [b["title"] for b in _list_json(capsys, "--severity", "Low")]
    assert titles == ["Typo"]

    titles = [b["title"] for b in _list_json(capsys, "--search", "LOGIN")]
    assert titles == ["Login button unresponsive"]


def test_edit_keeps_unspecified_fields(
    state_dir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _report("--steps", "1. click")
    bug = _list_json(capsys)[0]

    assert cli.main(["edit", str(bug["id"]), "--status", "Resolved"]) == 0

    edited = _list_json(capsys)[0]
    assert edited["status"] == "Resolved"
    assert edited["steps"] == "1. click"
    assert edited["title"] == bug["title"]
    assert edited["createdAt"] == bug["createdAt"]


def test_edit_empty_optional_field_clears_it(
    state_dir: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _report("--url", "https://example.com/login", "--browser", "Firefox 128")
    bug_id = str(_list_json(capsys)[0]["id"])

    assert cli.main(["edit", bug_id, "--url", ""]) == 0

    edited = _list_json(capsys)[0]
    assert edited["url"] is None
    assert edited["browser"] == "Firefox 128"


def test_show_and_delete(state_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _report()
    bug_id = str(_list_json(capsys)[0]["id"])

    assert cli.main(["show", bug_id]) == 0
    assert "Login button unresponsive" in capsys.readouterr().out

    assert cli.main(["delete", bug_id]) == 0
    assert cli.main(["delete", bug_id]) == 0
    assert cli.main(["show", bug_id]) == 1
    assert cli.main(["edit", bug_id, "--status", "Closed"]) == 1


def test_summary(state_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _report("--severity", "High")
    capsys.readouterr()

    assert cli.main(["summary"]) == 0
    out = capsys.readouterr().out
    assert "Total bugs: 1" in out
    assert "High: 1" in out
    assert "Login button unresponsive" in out


def test_webhook_lifecycle(state_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["webhook", "show"]) == 0
    assert "Not connected" in capsys.readouterr().out

    assert cli.main(["webhook", "set", "https://script.google.com/macros/s/x/exec"]) == 0
    assert cli.main(["webhook", "show"]) == 0
    assert "https://script.google.com/macros/s/x/exec" in capsys.readouterr().out

    assert cli.main(["webhook", "clear"]) == 0
    assert cli.main(["webhook", "show"]) == 0
    assert capsys.readouterr().out.strip().endswith("Not connected")


def test_webhook_set_empty_is_rejected(state_dir: Path) -> None:
    assert cli.main(["webhook", "set", ""]) == 2
    assert not (state_dir / "google-sheets-config.json").exists()


def test_webhook_test_reports_auth_rejection(
    state_dir: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    rejected = requests.Response()
    rejected.status_code = 401
    post = Mock(return_value=rejected)
    monkeypatch.setattr(requests.Session, "post", post)

    code = cli.main(["webhook", "test", "https://script.google.com/macros/s/x/exec"])

    assert code == 1
    assert "401" in capsys.readouterr().out
    post.assert_called_once()


def test_report_survives_unreachable_webhook(
    state_dir: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(
        requests.Session, "post", Mock(side_effect=requests.ConnectionError("unreachable"))
    )
    cli.main(["webhook", "set", "https://script.google.com/macros/s/x/exec"])

    assert _report() == 0
    assert len(_list_json(capsys)) == 1


def test_webhook_script(state_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["webhook", "script"]) == 0
    out = capsys.readouterr().out
    assert "function doPost(e)" in out
    for column in SHEET_COLUMNS:
        assert f"'{column}'" in out


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--version"])
    assert exc_info.value.code == 0
    assert "tester-bug-reporter" in capsys.readouterr().out


def test_configuration_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BUG_REPORTER_WEBHOOK_TIMEOUT_SECONDS", "-1")

    assert cli.main(["summary"]) == 2
    assert "Configuration error" in capsys.readouterr().err
