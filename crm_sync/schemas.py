"""Request and response bodies for the HTTP routes."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator


class WebhookAck(BaseModel):
    status: str = "ok"
    message: str


class AddEmailRequest(BaseModel):
    email: str | None = None

    @field_validator("email", mode="before")
    @classmethod
    def _non_string_is_absent(cls, v: Any) -> str | None:
        return v if isinstance(v, str) else None


class AddEmailResponse(BaseModel):
    status: str
    message: str


class StoreStatus(BaseModel):
    status: str = "ok"
    message: str
    spreadsheet_id: str
    total_emails: int


class HealthResponse(BaseModel):
    service: str
    batches_processed: int
    batches_failed: int
    emails_added: int
    emails_skipped: int
    emails_failed: int
    queue_size: int
    payloads_dropped: int
