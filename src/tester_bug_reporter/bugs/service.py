"""Bug reporting service: local persistence plus webhook mirroring."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from tester_bug_reporter.bugs.models import BugDraft, BugFilter, BugRecord, BugSummary
from tester_bug_reporter.bugs.query import list_bugs, summarize
from tester_bug_reporter.bugs.record_store import RecordStore
from tester_bug_reporter.errors import ValidationError
from tester_bug_reporter.webhook.mirror import WebhookMirror

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def _new_bug_id() -> str:
    return uuid.uuid4().hex


def _validate(draft: BugDraft) -> None:
    if not draft.title.strip():
        raise ValidationError("title", "Bug title is required")
    if not draft.description.strip():
        raise ValidationError("description", "Bug description is required")


class BugService:
    """High-level, testable bug operations for the CLI and the REST API.

    Status is a label, not a workflow: any status may be set to any other.
    """

    def __init__(
        self,
        *,
        store: RecordStore,
        mirror: WebhookMirror,
        clock: Callable[[], str] = _utc_now_iso,
        id_factory: Callable[[], str] = _new_bug_id,
    ) -> None:
        self._store = store
        self._mirror = mirror
        self._clock = clock
        self._id_factory = id_factory

    def report_bug(self, draft: BugDraft) -> BugRecord:
        """Persist a new bug, then hand it to the mirror.

        The local append is complete before the mirror is invoked and is never
        rolled back; the mirror swallows its own failures.
        """

        _validate(draft)
        record = BugRecord.from_draft(draft, id=self._id_factory(), createdAt=self._clock())
        self._store.append(record)

        logger.info(
            "Bug reported",
            extra={"bug_id": record.id, "title": record.title, "severity": record.severity},
        )

        self._mirror.mirror(record)
        return record

    def edit_bug(self, bug_id: str, draft: BugDraft) -> BugRecord | None:
        """Replace the editable fields of a bug.

        Returns:
            The updated record, or None if no bug has this id (nothing is written),
            including when it is deleted while the edit is in flight.
        """

        _validate(draft)
        existing = self._store.get(bug_id)
        if existing is None:
            logger.info("Edit skipped; bug not found", extra={"bug_id": bug_id})
            return None

        updated = BugRecord.from_draft(draft, id=existing.id, createdAt=existing.createdAt)
        records = self._store.replace(bug_id, updated)
        if not any(r.id == bug_id for r in records):
            # Deleted between the lookup and the write; replace did not store anything.
            logger.info("Edit skipped; bug was deleted", extra={"bug_id": bug_id})
            return None
        logger.info("Bug updated", extra={"bug_id": bug_id, "status": updated.status})
        return updated

    def delete_bug(self, bug_id: str) -> list[BugRecord]:
        remaining = self._store.remove(bug_id)
        logger.info("Bug deleted", extra={"bug_id": bug_id})
        return remaining

    def get_bug(self, bug_id: str) -> BugRecord | None:
        return self._store.get(bug_id)

    def list_bugs(self, flt: BugFilter | None = None) -> list[BugRecord]:
        return list_bugs(self._store.load_all(), flt)

    def summarize(self, bugs: list[BugRecord] | None = None) -> BugSummary:
        return summarize(self._store.load_all() if bugs is None else bugs)

    def is_connected(self) -> bool:
        return self._mirror.is_connected()
