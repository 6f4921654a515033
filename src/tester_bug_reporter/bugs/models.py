"""Bug record models.

Field names follow the persisted JSON document (`createdAt` rather than
`created_at`) so stored collections stay readable by earlier versions.
"""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, Field, field_validator

Severity = Literal["Low", "Medium", "High", "Critical"]
Status = Literal["Open", "In Progress", "Resolved", "Closed"]

SEVERITIES: tuple[Severity, ...] = get_args(Severity)
STATUSES: tuple[Status, ...] = get_args(Status)


class BugDraft(BaseModel):
    """The user-editable part of a bug record."""

    title: str = ""
    description: str = ""
    severity: Severity = "Medium"
    status: Status = "Open"
    url: str | None = None
    browser: str | None = None
    steps: str | None = None


class BugRecord(BugDraft):
    """A persisted bug record.

    `id` and `createdAt` are assigned once at creation and never change.
    """

    id: str
    createdAt: str
    title: str
    description: str

    @field_validator("title", "description")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @classmethod
    def from_draft(cls, draft: BugDraft, *, id: str, createdAt: str) -> BugRecord:  # noqa: A002
        return cls(id=id, createdAt=createdAt, **draft.model_dump())

    def to_draft(self) -> BugDraft:
        return BugDraft.model_validate(self.model_dump(exclude={"id", "createdAt"}))


class BugFilter(BaseModel):
    """Read-side filter; unset axes match every record."""

    search: str | None = None
    status: Status | None = None
    severity: Severity | None = None


class BugSummary(BaseModel):
    total: int
    by_status: dict[str, int]
    by_severity: dict[str, int]
    recent: list[BugRecord] = Field(default_factory=list)
