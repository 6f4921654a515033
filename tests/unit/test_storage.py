"""Unit tests for the file-backed key-value storage."""

from __future__ import annotations

from pathlib import Path

import pytest

from tester_bug_reporter.storage import LocalStorage


def test_missing_key_reads_as_none(storage: LocalStorage) -> None:
    assert storage.get_item("tester-bugs") is None


def test_set_get_remove(storage: LocalStorage) -> None:
    storage.set_item("google-sheets-config", '{"webhookUrl": "https://example.com"}')
    assert storage.get_item("google-sheets-config") == '{"webhookUrl": "https://example.com"}'

    storage.set_item("google-sheets-config", "{}")
    assert storage.get_item("google-sheets-config") == "{}"

    storage.remove_item("google-sheets-config")
    assert storage.get_item("google-sheets-config") is None

    # Removing an absent key is a no-op.
    storage.remove_item("google-sheets-config")


def test_write_leaves_no_temp_files(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path / "state")
    storage.set_item("tester-bugs", "[]")
    storage.set_item("tester-bugs", "[1]")

    assert sorted(p.name for p in (tmp_path / "state").iterdir()) == ["tester-bugs.json"]


@pytest.mark.parametrize("key", ["", "../escape", "a/b", ".hidden"])
def test_rejects_unsafe_keys(storage: LocalStorage, key: str) -> None:
    with pytest.raises(ValueError):
        storage.get_item(key)
