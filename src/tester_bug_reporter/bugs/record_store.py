"""Bug record collection persisted in local storage.

The whole collection is one JSON array under a fixed key. Every mutation
reads the collection, changes it in memory and writes it back in a single
whole-value write; there are no partial updates.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Sequence

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from tester_bug_reporter.bugs.models import BugRecord
from tester_bug_reporter.errors import StorageCorruptError
from tester_bug_reporter.storage import LocalStorage

logger = logging.getLogger(__name__)

BUGS_STORAGE_KEY = "tester-bugs"

_RECORDS = TypeAdapter(list[BugRecord])


def decode_records(raw: str, *, key: str = BUGS_STORAGE_KEY) -> list[BugRecord]:
    """Decode a stored collection, raising StorageCorruptError on any mismatch."""

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageCorruptError(key, f"not valid JSON ({e.msg})") from e
    except RecursionError as e:
        raise StorageCorruptError(key, "nested too deeply") from e

    if data is None:
        return []

    try:
        return _RECORDS.validate_python(data)
    except SchemaError as e:
        raise StorageCorruptError(key, f"unexpected shape ({e.error_count()} errors)") from e


class RecordStore:
    """Local-storage backed store for bug records, in insertion order."""

    def __init__(self, storage: LocalStorage, *, key: str = BUGS_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._lock = threading.RLock()

    def load_all(self) -> list[BugRecord]:
        with self._lock:
            try:
                raw = self._storage.get_item(self._key)
                if raw is None:
                    return []
                return decode_records(raw, key=self._key)
            except StorageCorruptError as e:
                logger.warning(
                    "Bug collection is unreadable; treating as empty",
                    extra={"key": e.key, "reason": e.reason},
                )
                return []

    def save_all(self, records: Sequence[BugRecord]) -> None:
        payload = [r.model_dump(mode="json") for r in records]
        with self._lock:
            self._storage.set_item(self._key, json.dumps(payload, indent=2, ensure_ascii=False))

    def get(self, bug_id: str) -> BugRecord | None:
        for record in self.load_all():
            if record.id == bug_id:
                return record
        return None

    def append(self, record: BugRecord) -> list[BugRecord]:
        with self._lock:
            records = self.load_all()
            records.append(record)
            self.save_all(records)
            return records

    def replace(self, bug_id: str, new_record: BugRecord) -> list[BugRecord]:
        with self._lock:
            records = self.load_all()
            for idx, existing in enumerate(records):
                if existing.id == bug_id:
                    records[idx] = new_record
                    self.save_all(records)
                    return records
            logger.info("Replace skipped; bug not found", extra={"bug_id": bug_id})
            return records

    def remove(self, bug_id: str) -> list[BugRecord]:
        with self._lock:
            records = self.load_all()
            kept = [r for r in records if r.id != bug_id]
            if len(kept) != len(records):
                self.save_all(kept)
            return kept
