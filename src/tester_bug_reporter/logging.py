"""JSON-lines logging for the CLI and the API server.

Log lines go to stderr so `bug-reporter list --json` and friends can be
piped without filtering. Context passed through `extra=` (bug ids, webhook
URLs, status codes) is kept as a nested "extra" object.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

# Everything a bare LogRecord carries, so only caller-supplied `extra` keys remain.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = {
            name: value
            for name, value in vars(record).items()
            if name not in _STANDARD_ATTRS and not name.startswith("_")
        }
        if context:
            entry["extra"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Paths and other non-JSON values in `extra` are logged via str().
        return json.dumps(entry, ensure_ascii=False, default=str)


def configure_logging(level: str) -> None:
    """Install a single JSON handler on the root logger.

    Safe to call more than once: earlier handlers are dropped first.
    """

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    # urllib3 logs each webhook connection at DEBUG.
    logging.getLogger("urllib3").setLevel(max(root.level, logging.INFO))
