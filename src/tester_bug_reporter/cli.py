"""CLI entrypoint for the bug reporter."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError as SettingsError

from tester_bug_reporter import __version__
from tester_bug_reporter.bugs.models import (
    SEVERITIES,
    STATUSES,
    BugDraft,
    BugFilter,
    BugRecord,
    BugSummary,
)
from tester_bug_reporter.bugs.record_store import RecordStore
from tester_bug_reporter.bugs.service import BugService
from tester_bug_reporter.config import BugReporterSettings
from tester_bug_reporter.errors import ValidationError
from tester_bug_reporter.logging import configure_logging
from tester_bug_reporter.storage import LocalStorage
from tester_bug_reporter.webhook.apps_script import setup_instructions
from tester_bug_reporter.webhook.mirror import WebhookMirror
from tester_bug_reporter.webhook.models import ConnectionOutcome

logger = logging.getLogger(__name__)

_OPTIONAL_FIELDS = ("url", "browser", "steps")


def _add_bug_fields(parser: argparse.ArgumentParser, *, required: bool) -> None:
    parser.add_argument("--title", required=required, help="Bug title")
    parser.add_argument("--description", required=required, help="What went wrong")
    parser.add_argument(
        "--severity",
        choices=SEVERITIES,
        default=None if not required else "Medium",
        help="Severity (default: Medium)" if required else "Severity",
    )
    parser.add_argument(
        "--status",
        choices=STATUSES,
        default=None if not required else "Open",
        help="Status (default: Open)" if required else "Status",
    )
    parser.add_argument(
        "--url", default=None, help="Page where the bug was found (empty clears it)"
    )
    parser.add_argument("--browser", default=None, help="Browser and version (empty clears it)")
    parser.add_argument("--steps", default=None, help="Steps to reproduce (empty clears it)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bug-reporter",
        description="Local-first bug reporter with optional spreadsheet mirroring",
    )
    parser.add_argument("--version", action="version", version=f"tester-bug-reporter {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser("report", help="Report a new bug")
    _add_bug_fields(report, required=True)

    list_cmd = subparsers.add_parser("list", help="List bugs, optionally filtered")
    list_cmd.add_argument("--search", default=None, help="Substring of title or description")
    list_cmd.add_argument("--status", choices=STATUSES, default=None)
    list_cmd.add_argument("--severity", choices=SEVERITIES, default=None)
    list_cmd.add_argument("--json", action="store_true", help="Print records as JSON")

    show = subparsers.add_parser("show", help="Show a single bug")
    show.add_argument("bug_id", help="Bug id")

    edit = subparsers.add_parser(
        "edit", help="Edit a bug; fields not given keep their current values"
    )
    edit.add_argument("bug_id", help="Bug id")
    _add_bug_fields(edit, required=False)

    delete = subparsers.add_parser("delete", help="Delete a bug (irreversible)")
    delete.add_argument("bug_id", help="Bug id")

    subparsers.add_parser("summary", help="Counts per status/severity and recent bugs")

    webhook = subparsers.add_parser("webhook", help="Manage the spreadsheet webhook")
    webhook_sub = webhook.add_subparsers(dest="webhook_command", required=True)
    webhook_sub.add_parser("show", help="Show the saved webhook URL")
    webhook_set = webhook_sub.add_parser("set", help="Save the webhook URL")
    webhook_set.add_argument("url", help="Web app URL of the deployed spreadsheet script")
    webhook_sub.add_parser("clear", help="Disconnect the webhook")
    webhook_test = webhook_sub.add_parser("test", help="Send a test row to the webhook")
    webhook_test.add_argument(
        "url", nargs="?", default=None, help="URL to test (defaults to the saved URL)"
    )
    webhook_sub.add_parser("script", help="Print setup steps and the spreadsheet script")

    serve = subparsers.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser


def _format_bug(bug: BugRecord) -> str:
    lines = [
        f"{bug.id}  [{bug.severity}] [{bug.status}] {bug.title}",
        f"  created: {bug.createdAt}",
        f"  {bug.description}",
    ]
    if bug.url:
        lines.append(f"  url: {bug.url}")
    if bug.browser:
        lines.append(f"  browser: {bug.browser}")
    if bug.steps:
        lines.append("  steps:")
        lines.extend(f"    {line}" for line in bug.steps.splitlines())
    return "\n".join(lines)


def _format_summary(summary: BugSummary) -> str:
    lines = [f"Total bugs: {summary.total}", "", "By status:"]
    lines.extend(f"  {name}: {count}" for name, count in summary.by_status.items())
    lines.append("")
    lines.append("By severity:")
    lines.extend(f"  {name}: {count}" for name, count in summary.by_severity.items())
    lines.append("")
    lines.append("Recent:")
    if not summary.recent:
        lines.append("  (none)")
    lines.extend(f"  {b.createdAt}  [{b.severity}] {b.title}" for b in summary.recent)
    return "\n".join(lines)


def _draft_updates(args: argparse.Namespace) -> dict[str, object]:
    """Collect the bug fields given on the command line.

    An empty value for an optional field clears it.
    """

    updates: dict[str, object] = {}
    for field in ("title", "description", "severity", "status", *_OPTIONAL_FIELDS):
        value = getattr(args, field)
        if value is None:
            continue
        if field in _OPTIONAL_FIELDS and not value.strip():
            value = None
        updates[field] = value
    return updates


def _run_webhook(args: argparse.Namespace, mirror: WebhookMirror) -> int:
    if args.webhook_command == "show":
        config = mirror.get_config()
        if config is None:
            print("Not connected")
        else:
            print(f"Connected: {config.webhookUrl}")
        return 0

    if args.webhook_command == "set":
        config = mirror.set_config(args.url)
        print(f"Saved webhook URL: {config.webhookUrl}")
        return 0

    if args.webhook_command == "clear":
        mirror.clear_config()
        print("Webhook disconnected")
        return 0

    if args.webhook_command == "test":
        url = args.url
        if url is None:
            config = mirror.get_config()
            url = config.webhookUrl if config is not None else ""
        outcome = mirror.test_connection(url)
        print(outcome.message)
        return 0 if outcome is ConnectionOutcome.LIKELY_SUCCESS else 1

    if args.webhook_command == "script":
        print(setup_instructions())
        return 0

    raise AssertionError(f"Unhandled webhook command: {args.webhook_command}")


def _serve(args: argparse.Namespace, settings: BugReporterSettings) -> int:
    import uvicorn

    from tester_bug_reporter.server.app import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_config=None)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = BugReporterSettings()
    except SettingsError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    if args.command == "serve":
        return _serve(args, settings)

    storage = LocalStorage(settings.storage_path)
    # A short-lived process would kill a detached sender; send inline after the append.
    mirror = WebhookMirror(
        storage, timeout_seconds=settings.webhook_timeout_seconds, background=False
    )
    service = BugService(store=RecordStore(storage), mirror=mirror)

    try:
        if args.command == "report":
            record = service.report_bug(BugDraft.model_validate(_draft_updates(args)))
            print(f"Reported bug {record.id}: {record.title}")
            return 0

        if args.command == "list":
            flt = BugFilter(search=args.search, status=args.status, severity=args.severity)
            bugs = service.list_bugs(flt)
            if args.json:
                print(json.dumps([b.model_dump(mode="json") for b in bugs], indent=2))
                return 0
            total = len(service.list_bugs())
            print(f"Found {len(bugs)} of {total} bugs")
            for bug in bugs:
                print(_format_bug(bug))
            return 0

        if args.command == "show":
            bug = service.get_bug(args.bug_id)
            if bug is None:
                print(f"Bug not found: {args.bug_id}", file=sys.stderr)
                return 1
            print(_format_bug(bug))
            return 0

        if args.command == "edit":
            existing = service.get_bug(args.bug_id)
            if existing is None:
                print(f"Bug not found: {args.bug_id}", file=sys.stderr)
                return 1
            draft = existing.to_draft().model_copy(update=_draft_updates(args))
            updated = service.edit_bug(args.bug_id, draft)
            if updated is None:
                print(f"Bug not found: {args.bug_id}", file=sys.stderr)
                return 1
            print(f"Updated bug {updated.id}: {updated.title}")
            return 0

        if args.command == "delete":
            service.delete_bug(args.bug_id)
            print(f"Deleted bug {args.bug_id}")
            return 0

        if args.command == "summary":
            print(_format_summary(service.summarize()))
            return 0

        if args.command == "webhook":
            return _run_webhook(args, mirror)

        raise AssertionError(f"Unhandled command: {args.command}")

    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    finally:
        mirror.close()


if __name__ == "__main__":
    raise SystemExit(main())
