"""Tester Bug Reporter.

A local-first bug tracker for testers:
- bug records persisted in a local key-value store
- configuration loaded from `.env`
- structured logging
- optional mirroring of new bugs to a spreadsheet webhook
"""

__version__ = "0.1.0"

from tester_bug_reporter.config import BugReporterSettings

__all__ = ["__version__", "BugReporterSettings"]
