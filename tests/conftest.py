"""Shared test fixtures for the crm_sync test suite."""

from __future__ import annotations

from datetime import date

import pytest
import structlog

from crm_sync.config import RetryConfig, Settings, SheetsConfig
from crm_sync.models import Contact, Record
from crm_sync.pipeline import IngestionPipeline
from crm_sync.store import RecordStoreError


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog configuration a test installed (e.g. setup_logging)."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def sheets_config() -> SheetsConfig:
    return SheetsConfig(
        spreadsheet_id="sheet-123",
        credentials_file="/nonexistent/credentials.json",
        timeout_seconds=5.0,
    )


@pytest.fixture
def retry_config() -> RetryConfig:
    return RetryConfig(
        max_attempts=3,
        initial_wait_seconds=0.01,
        max_wait_seconds=0.05,
        multiplier=2.0,
    )


@pytest.fixture
def settings(sheets_config: SheetsConfig, retry_config: RetryConfig) -> Settings:
    return Settings(
        port=13000,
        log_json=False,
        shutdown_timeout_seconds=2.0,
        sheets=sheets_config,
        retry=retry_config,
    )


# ------------------------------------------------------------------
# In-memory record store
# ------------------------------------------------------------------


class FakeRecordStore:
    """Stands in for SheetsRecordStore; appended rows become readable at once."""

    def __init__(
        self,
        records: list[Record] | None = None,
        *,
        fail_on: tuple[str, ...] = (),
        read_error: bool = False,
    ) -> None:
        self.records = list(records or [])
        self.fail_on = set(fail_on)
        self.read_error = read_error
        self.append_calls: list[tuple[str, str]] = []
        self.read_calls = 0
        self.spreadsheet_id = "sheet-123"
        self.started = False

    @property
    def is_started(self) -> bool:
        return self.started

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.started = False

    async def read_records(self) -> list[Record]:
        self.read_calls += 1
        if self.read_error:
            raise RecordStoreError("spreadsheet unavailable")
        return list(self.records)

    async def read_all(self) -> list[Record]:
        try:
            return await self.read_records()
        except RecordStoreError:
            return []

    async def append(self, email: str, date: str) -> bool:
        self.append_calls.append((email, date))
        if email in self.fail_on:
            return False
        self.records.append(Record(email=email, date=date))
        return True


@pytest.fixture
def store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def pipeline(store: FakeRecordStore) -> IngestionPipeline:
    return IngestionPipeline(store, today=lambda: date(2024, 1, 15))


# ------------------------------------------------------------------
# Sample amoCRM payloads
# ------------------------------------------------------------------


def email_field(*values: str | None, code: str | None = "EMAIL", name: str | None = "Email") -> dict:
    """Build a custom field dict as amoCRM sends it."""
    return {
        "code": code,
        "name": name,
        "values": [{"value": v} for v in values],
    }


def make_contact_dict(*fields: dict, contact_id: int = 1) -> dict:
    return {"id": contact_id, "custom_fields": list(fields)}


def make_contact(*fields: dict, contact_id: int = 1) -> Contact:
    return Contact.model_validate(make_contact_dict(*fields, contact_id=contact_id))
