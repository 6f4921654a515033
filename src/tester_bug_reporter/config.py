"""Configuration for the bug reporter.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing here is required: the tool starts against an empty local store with
mirroring disabled. The webhook URL itself is not a setting; it is persisted
in the local store by explicit user action.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BugReporterSettings(BaseSettings):
    """Settings for the CLI and the REST server.

    Environment variables:
    - BUG_REPORTER_STORAGE_PATH             (optional)
    - LOG_LEVEL                             (optional)
    - BUG_REPORTER_WEBHOOK_TIMEOUT_SECONDS  (optional)
    - BUG_REPORTER_CORS_ORIGINS             (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `BugReporterSettings(_env_file=path_to_env)`.
    """

    storage_path: Path = Field(
        default=Path("bug_reporter_state"),
        validation_alias="BUG_REPORTER_STORAGE_PATH",
        description="Directory backing the local key-value store",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    webhook_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias="BUG_REPORTER_WEBHOOK_TIMEOUT_SECONDS",
        description="Timeout applied to every webhook POST",
    )

    # Dev-friendly CORS (Vite). Override via BUG_REPORTER_CORS_ORIGINS=...
    cors_origins: str = Field(
        default="http://localhost:5173,http://127.0.0.1:5173",
        validation_alias="BUG_REPORTER_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins.",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    def parsed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
