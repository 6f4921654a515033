"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel

from tester_bug_reporter.webhook.models import ConnectionOutcome


class HealthResponse(BaseModel):
    status: str
    version: str
    connected: bool


class WebhookStatus(BaseModel):
    connected: bool
    webhookUrl: str | None = None


class WebhookUpdate(BaseModel):
    webhookUrl: str


class WebhookTestRequest(BaseModel):
    # Defaults to the saved URL when omitted.
    webhookUrl: str | None = None


class WebhookTestResult(BaseModel):
    outcome: ConnectionOutcome
    message: str


class WebhookScript(BaseModel):
    columns: list[str]
    instructions: str
    source: str
