"""File-backed key-value storage.

Each key maps to one file under a directory and holds a raw string value,
usually a JSON document. Writes replace the whole value in one step: the
new content goes to a temporary sibling which is then renamed over the
target, so a reader never observes a half-written value.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

from tester_bug_reporter.errors import StorageCorruptError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class LocalStorage:
    """Directory-backed string store addressed by fixed keys."""

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key was never written.

        Raises:
            StorageCorruptError: the file exists but is not UTF-8 text.
        """

        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StorageCorruptError(key, "not UTF-8 text") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("Storage item written", extra={"key": key, "bytes": len(value)})

    def remove_item(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)
        logger.debug("Storage item removed", extra={"key": key})
