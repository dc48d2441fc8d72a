"""Service configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars.
A single :class:`Settings` instance is built at startup and injected into
the store client, pipeline and app; nothing reads the environment later.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SheetsConfig(BaseSettings):
    """Google Sheets record store settings."""

    model_config = SettingsConfigDict(env_prefix="SHEETS_")

    spreadsheet_id: str = Field(description="ID of the target spreadsheet (from its URL)")
    sheet_name: str | None = Field(
        default=None,
        description="Tab to read and append to (first tab when unset)",
    )
    credentials_file: str = Field(
        default="credentials.json",
        description="Path to the service-account key file",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="Socket timeout for a single Sheets API call",
    )


class RetryConfig(BaseSettings):
    """Retry / backoff settings for transient Sheets API failures."""

    model_config = SettingsConfigDict(env_prefix="RETRY_")

    max_attempts: int = Field(default=3, description="Maximum attempts per store call")
    initial_wait_seconds: float = Field(
        default=0.5,
        description="Initial backoff wait in seconds",
    )
    max_wait_seconds: float = Field(
        default=10.0,
        description="Maximum backoff wait in seconds",
    )
    multiplier: float = Field(default=2.0, description="Exponential backoff multiplier")


class Settings(BaseSettings):
    """Top-level settings.

    Env vars are prefixed with ``CRM_SYNC_``; the listening port is also
    read from a plain ``PORT`` as most PaaS platforms set it.
    """

    model_config = SettingsConfigDict(env_prefix="CRM_SYNC_", populate_by_name=True)

    # --- Server -------------------------------------------------------------
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("port", "crm_sync_port"),
        description="Bind port",
    )
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(
        default=True,
        description="Use JSON log output (True for prod, False for dev)",
    )

    # --- Ingestion ----------------------------------------------------------
    date_timezone: str | None = Field(
        default=None,
        description="IANA timezone for the ingestion date column (server local time when unset)",
    )
    shutdown_timeout_seconds: float = Field(
        default=10.0,
        description="How long to wait for queued webhook batches on shutdown",
    )
    queue_maxsize: int = Field(
        default=1000,
        ge=0,
        description="Webhook payloads held for processing before new ones are dropped (0 = unbounded)",
    )

    sheets: SheetsConfig = Field(default_factory=SheetsConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
