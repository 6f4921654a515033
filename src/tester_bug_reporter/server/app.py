"""FastAPI app factory.

Endpoints are intentionally thin wrappers over `BugService` and `WebhookMirror`.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware

from tester_bug_reporter import __version__
from tester_bug_reporter.bugs.models import (
    BugDraft,
    BugFilter,
    BugRecord,
    BugSummary,
    Severity,
    Status,
)
from tester_bug_reporter.bugs.record_store import RecordStore
from tester_bug_reporter.bugs.service import BugService
from tester_bug_reporter.config import BugReporterSettings
from tester_bug_reporter.errors import ValidationError
from tester_bug_reporter.server.models import (
    HealthResponse,
    WebhookScript,
    WebhookStatus,
    WebhookTestRequest,
    WebhookTestResult,
    WebhookUpdate,
)
from tester_bug_reporter.storage import LocalStorage
from tester_bug_reporter.webhook.apps_script import (
    APPS_SCRIPT_SOURCE,
    SHEET_COLUMNS,
    setup_instructions,
)
from tester_bug_reporter.webhook.mirror import WebhookMirror

logger = logging.getLogger(__name__)


def _unprocessable(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail={"field": e.field, "message": e.message})


def create_app(
    settings: BugReporterSettings | None = None,
    *,
    mirror: WebhookMirror | None = None,
) -> FastAPI:
    settings = settings or BugReporterSettings()

    app = FastAPI(
        title="Tester Bug Reporter",
        version=__version__,
        description="REST API over the local-first bug store and its webhook mirror.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    # Expose settings for request handlers that want to read it.
    app.state.settings = settings

    # Minimal dev-friendly CORS so a Vite dev server can call the API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    storage = LocalStorage(settings.storage_path)
    if mirror is None:
        mirror = WebhookMirror(storage, timeout_seconds=settings.webhook_timeout_seconds)
    service = BugService(store=RecordStore(storage), mirror=mirror)

    @app.get("/api/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__, connected=service.is_connected())

    @app.get("/api/bugs", response_model=list[BugRecord])
    def list_bugs(
        search: str | None = Query(default=None),
        status: Status | None = Query(default=None),
        severity: Severity | None = Query(default=None),
    ) -> list[BugRecord]:
        return service.list_bugs(BugFilter(search=search, status=status, severity=severity))

    @app.post("/api/bugs", response_model=BugRecord, status_code=201)
    def report_bug(draft: BugDraft) -> BugRecord:
        try:
            return service.report_bug(draft)
        except ValidationError as e:
            raise _unprocessable(e) from e

    @app.get("/api/bugs/{bug_id}", response_model=BugRecord)
    def get_bug(bug_id: str) -> BugRecord:
        record = service.get_bug(bug_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Bug not found")
        return record

    @app.put("/api/bugs/{bug_id}", response_model=BugRecord)
    def edit_bug(bug_id: str, draft: BugDraft) -> BugRecord:
        try:
            updated = service.edit_bug(bug_id, draft)
        except ValidationError as e:
            raise _unprocessable(e) from e
        if updated is None:
            raise HTTPException(status_code=404, detail="Bug not found")
        return updated

    @app.delete("/api/bugs/{bug_id}", status_code=204)
    def delete_bug(bug_id: str) -> Response:
        service.delete_bug(bug_id)
        return Response(status_code=204)

    @app.get("/api/summary", response_model=BugSummary)
    def summary() -> BugSummary:
        return service.summarize()

    @app.get("/api/webhook", response_model=WebhookStatus)
    def get_webhook() -> WebhookStatus:
        config = mirror.get_config()
        if config is None:
            return WebhookStatus(connected=False)
        return WebhookStatus(connected=True, webhookUrl=config.webhookUrl)

    @app.put("/api/webhook", response_model=WebhookStatus)
    def set_webhook(body: WebhookUpdate) -> WebhookStatus:
        try:
            config = mirror.set_config(body.webhookUrl)
        except ValidationError as e:
            raise _unprocessable(e) from e
        return WebhookStatus(connected=True, webhookUrl=config.webhookUrl)

    @app.delete("/api/webhook", response_model=WebhookStatus)
    def clear_webhook() -> WebhookStatus:
        mirror.clear_config()
        return WebhookStatus(connected=False)

    @app.post("/api/webhook/test", response_model=WebhookTestResult)
    def test_webhook(body: WebhookTestRequest | None = None) -> WebhookTestResult:
        url = body.webhookUrl if body is not None else None
        if not url:
            config = mirror.get_config()
            url = config.webhookUrl if config is not None else ""
        try:
            outcome = mirror.test_connection(url)
        except ValidationError as e:
            raise _unprocessable(e) from e
        return WebhookTestResult(outcome=outcome, message=outcome.message)

    @app.get("/api/webhook/script", response_model=WebhookScript)
    def webhook_script() -> WebhookScript:
        return WebhookScript(
            columns=list(SHEET_COLUMNS),
            instructions=setup_instructions(),
            source=APPS_SCRIPT_SOURCE,
        )

    logger.info("App created", extra={"storage_path": str(settings.storage_path)})
    return app
