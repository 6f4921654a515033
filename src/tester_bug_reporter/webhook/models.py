"""Webhook configuration and wire payload models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel

from tester_bug_reporter.bugs.models import BugRecord, Severity, Status


class WebhookConfig(BaseModel):
    """Persisted webhook configuration; its presence turns mirroring on."""

    webhookUrl: str


class WebhookPayload(BaseModel):
    """JSON body POSTed to the spreadsheet webhook.

    Deployed spreadsheet scripts map these fields, in this order, onto the
    columns Timestamp, Title, Description, Severity, Status, URL, Browser, Steps.
    """

    timestamp: str
    title: str
    description: str
    severity: Severity
    status: Status
    url: str | None = None
    browser: str | None = None
    steps: str | None = None

    @classmethod
    def from_record(cls, record: BugRecord) -> WebhookPayload:
        return cls(
            timestamp=record.createdAt,
            title=record.title,
            description=record.description,
            severity=record.severity,
            status=record.status,
            url=record.url,
            browser=record.browser,
            steps=record.steps,
        )

    @classmethod
    def connection_test(cls) -> WebhookPayload:
        return cls(
            timestamp=datetime.now(tz=UTC).isoformat(),
            title="Connection test",
            description="Test data sent by Tester Bug Reporter",
            severity="Medium",
            status="Open",
            url="https://example.com",
            browser="Connection Test",
            steps="1. Open the bug reporter\n2. Test the connection\n3. Check the spreadsheet",
        )

    def to_json(self) -> dict[str, object]:
        # Absent optional fields are omitted; the script substitutes "".
        return self.model_dump(mode="json", exclude_none=True)


class ConnectionOutcome(str, Enum):
    LIKELY_SUCCESS = "likely-success"
    AUTHORIZATION_REJECTED = "authorization-rejected"
    NETWORK_FAILURE = "network-failure"

    @property
    def message(self) -> str:
        return _OUTCOME_MESSAGES[self]


_OUTCOME_MESSAGES: dict[ConnectionOutcome, str] = {
    ConnectionOutcome.LIKELY_SUCCESS: (
        "Test data sent. Check the spreadsheet to confirm that a row was added."
    ),
    ConnectionOutcome.AUTHORIZATION_REJECTED: (
        "The webhook rejected the request (HTTP 401). Redeploy the script as a web app "
        "with 'Execute as: Me' and 'Who has access: Anyone'."
    ),
    ConnectionOutcome.NETWORK_FAILURE: (
        "Could not reach the webhook. Check the URL and your network connection."
    ),
}
