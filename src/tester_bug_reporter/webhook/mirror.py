"""Best-effort mirroring of new bug records to a spreadsheet webhook.

The mirror owns the persisted webhook configuration. Sends are
fire-and-forget: `mirror` runs the POST on a detached daemon thread and
discards its outcome, so a broken endpoint can never fail or delay a local
write. Nothing is retried.
"""

from __future__ import annotations

import json
import logging
import threading

import requests
from pydantic import ValidationError as SchemaError

from tester_bug_reporter.bugs.models import BugRecord
from tester_bug_reporter.errors import StorageCorruptError, TransportError, ValidationError
from tester_bug_reporter.storage import LocalStorage
from tester_bug_reporter.webhook.models import ConnectionOutcome, WebhookConfig, WebhookPayload

logger = logging.getLogger(__name__)

WEBHOOK_STORAGE_KEY = "google-sheets-config"


def decode_config(raw: str, *, key: str = WEBHOOK_STORAGE_KEY) -> WebhookConfig:
    try:
        return WebhookConfig.model_validate_json(raw)
    except SchemaError as e:
        raise StorageCorruptError(key, f"unexpected shape ({e.error_count()} errors)") from e
    except RecursionError as e:
        raise StorageCorruptError(key, "nested too deeply") from e


class WebhookMirror:
    """Webhook configuration plus the fire-and-forget sender."""

    def __init__(
        self,
        storage: LocalStorage,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = 30.0,
        background: bool = True,
    ) -> None:
        self._storage = storage
        self._session = session or requests.Session()
        self._timeout = timeout_seconds
        self._background = background

    def get_config(self) -> WebhookConfig | None:
        try:
            raw = self._storage.get_item(WEBHOOK_STORAGE_KEY)
            if raw is None:
                return None
            return decode_config(raw)
        except StorageCorruptError as e:
            logger.warning(
                "Webhook config is unreadable; treating as disconnected",
                extra={"key": e.key, "reason": e.reason},
            )
            return None

    def is_connected(self) -> bool:
        """Whether a webhook URL is saved. The URL is not verified."""

        return self.get_config() is not None

    def set_config(self, url: str) -> WebhookConfig:
        if not url or not url.strip():
            raise ValidationError("webhookUrl", "Webhook URL is required")
        config = WebhookConfig(webhookUrl=url.strip())
        self._storage.set_item(WEBHOOK_STORAGE_KEY, json.dumps(config.model_dump()))
        logger.info("Webhook configured", extra={"webhook_url": config.webhookUrl})
        return config

    def clear_config(self) -> None:
        self._storage.remove_item(WEBHOOK_STORAGE_KEY)
        logger.info("Webhook disconnected")

    def _post(self, url: str, payload: WebhookPayload) -> requests.Response:
        try:
            resp = self._session.post(url, json=payload.to_json(), timeout=self._timeout)
        except requests.RequestException as e:
            raise TransportError(url, str(e)) from e
        return resp

    def test_connection(self, url: str) -> ConnectionOutcome:
        """Send a synthetic bug to `url` and categorize the transport result.

        Only an explicit 401 counts as a rejection: the spreadsheet endpoint
        does not report anything more useful, so every other response is
        treated as a probable success.
        """

        if not url or not url.strip():
            raise ValidationError("webhookUrl", "Webhook URL is required")
        url = url.strip()

        try:
            resp = self._post(url, WebhookPayload.connection_test())
        except TransportError as e:
            logger.warning(
                "Webhook connection test failed", extra={"webhook_url": url, "reason": e.reason}
            )
            return ConnectionOutcome.NETWORK_FAILURE

        if resp.status_code == 401:
            logger.warning(
                "Webhook connection test rejected",
                extra={"webhook_url": url, "status_code": resp.status_code},
            )
            return ConnectionOutcome.AUTHORIZATION_REJECTED

        logger.info(
            "Webhook connection test sent",
            extra={"webhook_url": url, "status_code": resp.status_code},
        )
        return ConnectionOutcome.LIKELY_SUCCESS

    def mirror(self, record: BugRecord) -> threading.Thread | None:
        """Forward `record` to the configured webhook, if any.

        Returns the sender thread so callers that care (tests, shutdown)
        can join it. In foreground mode the send completes before returning
        and None is returned.
        """

        config = self.get_config()
        if config is None:
            return None

        payload = WebhookPayload.from_record(record)
        if not self._background:
            self._send_quietly(config.webhookUrl, payload, record.id)
            return None

        thread = threading.Thread(
            target=self._send_quietly,
            name=f"webhook-mirror-{record.id}",
            daemon=True,
            args=(config.webhookUrl, payload, record.id),
        )
        thread.start()
        return thread

    def _send_quietly(self, url: str, payload: WebhookPayload, bug_id: str) -> None:
        try:
            resp = self._post(url, payload)
            if not resp.ok:
                raise TransportError(url, resp.reason or "", status_code=resp.status_code)
        except TransportError as e:
            logger.warning(
                "Failed to mirror bug to webhook",
                extra={"bug_id": bug_id, "webhook_url": url, "error": str(e)},
            )
            return
        except Exception:
            # Anything else is still a mirror-only failure and must not escape the thread.
            logger.exception(
                "Unexpected error while mirroring bug", extra={"bug_id": bug_id, "webhook_url": url}
            )
            return

        logger.info("Bug mirrored to webhook", extra={"bug_id": bug_id, "title": payload.title})

    def close(self) -> None:
        self._session.close()
