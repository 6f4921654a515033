"""Spreadsheet webhook mirroring."""

from tester_bug_reporter.webhook.mirror import WEBHOOK_STORAGE_KEY, WebhookMirror
from tester_bug_reporter.webhook.models import ConnectionOutcome, WebhookConfig, WebhookPayload

__all__ = [
    "WEBHOOK_STORAGE_KEY",
    "ConnectionOutcome",
    "WebhookConfig",
    "WebhookMirror",
    "WebhookPayload",
]
