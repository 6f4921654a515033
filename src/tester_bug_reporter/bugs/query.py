"""Read-side projections over a bug collection: filtering and dashboard stats."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime

from tester_bug_reporter.bugs.models import (
    SEVERITIES,
    STATUSES,
    BugFilter,
    BugRecord,
    BugSummary,
)

RECENT_LIMIT = 5


def _matches(bug: BugRecord, flt: BugFilter) -> bool:
    if flt.search:
        needle = flt.search.lower()
        if needle not in bug.title.lower() and needle not in bug.description.lower():
            return False
    if flt.status is not None and bug.status != flt.status:
        return False
    if flt.severity is not None and bug.severity != flt.severity:
        return False
    return True


def list_bugs(bugs: Sequence[BugRecord], flt: BugFilter | None = None) -> list[BugRecord]:
    """Return the bugs matching every set axis of `flt`, in stored order."""

    if flt is None:
        return list(bugs)
    return [b for b in bugs if _matches(b, flt)]


def _created_at(bug: BugRecord) -> datetime:
    # Unparseable timestamps sort as oldest.
    try:
        parsed = datetime.fromisoformat(bug.createdAt.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=UTC)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def summarize(bugs: Sequence[BugRecord], *, recent_limit: int = RECENT_LIMIT) -> BugSummary:
    """Count bugs per status and severity and pick the most recently created.

    `recent` is newest first; bugs with equal timestamps keep their stored order.
    """

    by_status = {status: 0 for status in STATUSES}
    by_severity = {severity: 0 for severity in SEVERITIES}
    for bug in bugs:
        by_status[bug.status] += 1
        by_severity[bug.severity] += 1

    # sorted() is stable under reverse=True, so ties keep insertion order.
    recent = sorted(bugs, key=_created_at, reverse=True)[:recent_limit]

    return BugSummary(
        total=len(bugs),
        by_status=by_status,
        by_severity=by_severity,
        recent=recent,
    )
