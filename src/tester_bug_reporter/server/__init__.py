"""FastAPI server adapter for tester-bug-reporter.

This module exposes a REST API over the bug service.

Design intent:
- Keep business logic in `tester_bug_reporter.bugs.*` and `tester_bug_reporter.webhook.*`
- Keep server-specific concerns (routing, CORS, HTTP status mapping) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from tester_bug_reporter.server.app import create_app
