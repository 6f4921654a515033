"""Test configuration and fixtures."""

from collections.abc import Callable, Iterator
from itertools import count
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

from tester_bug_reporter.bugs.record_store import RecordStore
from tester_bug_reporter.bugs.service import BugService
from tester_bug_reporter.storage import LocalStorage
from tester_bug_reporter.webhook.mirror import WebhookMirror


def make_response(status_code: int) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    return resp


@pytest.fixture
def response_factory() -> Callable[[int], requests.Response]:
    """Build bare requests responses with a given status code."""
    return make_response


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    """Provide a local store in a temporary directory."""
    return LocalStorage(tmp_path / "bug_reporter_state")


@pytest.fixture
def record_store(storage: LocalStorage) -> RecordStore:
    return RecordStore(storage)


@pytest.fixture
def http_session() -> Mock:
    """Provide a mocked requests session that answers 200 by default."""
    session = Mock(spec=requests.Session)
    session.post.return_value = make_response(200)
    return session


@pytest.fixture
def mirror(storage: LocalStorage, http_session: Mock) -> WebhookMirror:
    """Provide a mirror that sends inline so tests can assert on the session."""
    return WebhookMirror(storage, session=http_session, timeout_seconds=5.0, background=False)


@pytest.fixture
def clock() -> Callable[[], str]:
    """Provide a clock that advances one minute per call."""
    minutes = count()

    def _now() -> str:
        n = next(minutes)
        return f"2025-01-01T{n // 60:02d}:{n % 60:02d}:00+00:00"

    return _now


@pytest.fixture
def bug_ids() -> Iterator[str]:
    return (f"bug-{n}" for n in count(1))


@pytest.fixture
def service(
    record_store: RecordStore,
    mirror: WebhookMirror,
    clock: Callable[[], str],
    bug_ids: Iterator[str],
) -> BugService:
    return BugService(
        store=record_store,
        mirror=mirror,
        clock=clock,
        id_factory=lambda: next(bug_ids),
    )
