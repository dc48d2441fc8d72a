"""IngestionPipeline: extract emails from contacts, skip known ones, append the rest."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from datetime import date, datetime
from enum import Enum
from typing import Any, Protocol
from zoneinfo import ZoneInfo

import structlog
from pydantic import BaseModel, ValidationError

from .dedup import DedupSnapshot
from .extractor import extract_emails
from .models import Contact, Record, WebhookPayload

logger = structlog.get_logger()

DATE_FORMAT = "%d.%m.%Y"


class RecordStore(Protocol):
    async def read_all(self) -> list[Record]: ...

    async def append(self, email: str, date: str) -> bool: ...


class AddStatus(str, Enum):
    DUPLICATE = "duplicate"
    SUCCESS = "success"
    FAILURE = "failure"


class IngestionSummary(BaseModel):
    """Outcome of one ingestion call.

    ``considered`` counts candidate emails examined, ``added`` the rows
    actually appended.
    """

    considered: int = 0
    added: int = 0
    duplicates: int = 0
    failed: int = 0
    invalid_contacts: int = 0


def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def parse_contacts(payload: Any) -> tuple[list[Contact], int]:
    """Validate a raw webhook body into contacts.

    Returns the valid contacts and the number of malformed ones, which are
    logged and dropped.  A body that is not an object reads as no contacts.
    """
    try:
        envelope = WebhookPayload.model_validate(payload)
    except ValidationError as exc:
        logger.warning("webhook_payload_invalid", error_count=exc.error_count())
        return [], 0

    contacts: list[Contact] = []
    invalid = 0
    for index, raw in enumerate(envelope.contacts):
        try:
            contacts.append(Contact.model_validate(raw))
        except ValidationError as exc:
            invalid += 1
            logger.warning("contact_invalid", index=index, error_count=exc.error_count())
    return contacts, invalid


class IngestionPipeline:
    """Append previously unseen contact emails to the record store.

    Every call builds its own :class:`DedupSnapshot` from a fresh read of
    the store.  Calls are serialized by a lock, so within this process no
    two calls can race on the same email; several processes writing to one
    spreadsheet can still produce duplicates.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        timezone: str | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._store = store
        self._tz = ZoneInfo(timezone) if timezone else None
        self._today = today or self._local_today
        self._lock = asyncio.Lock()

        self._batches_processed: int = 0
        self._batches_failed: int = 0
        self._emails_added: int = 0
        self._emails_skipped: int = 0
        self._emails_failed: int = 0

    # ------------------------------------------------------------------
    # Public properties (used by health checks)
    # ------------------------------------------------------------------

    @property
    def batches_processed(self) -> int:
        return self._batches_processed

    @property
    def batches_failed(self) -> int:
        return self._batches_failed

    @property
    def emails_added(self) -> int:
        return self._emails_added

    @property
    def emails_skipped(self) -> int:
        return self._emails_skipped

    @property
    def emails_failed(self) -> int:
        return self._emails_failed

    def today(self) -> str:
        """Ingestion date as written to the date column, e.g. ``16.10.2026``."""
        return format_date(self._today())

    def _local_today(self) -> date:
        return datetime.now(self._tz).date()

    # ------------------------------------------------------------------
    # Batch ingestion
    # ------------------------------------------------------------------

    async def ingest_payload(self, payload: Any) -> IngestionSummary:
        """Ingest a raw ``/webhook/amocrm`` body."""
        contacts, invalid = parse_contacts(payload)
        summary = await self.ingest(contacts)
        summary.invalid_contacts = invalid
        return summary

    async def ingest(self, contacts: Sequence[Contact]) -> IngestionSummary:
        """Process one webhook batch in order and return its counts.

        Never raises: an unexpected error ends the batch early and is
        logged, and the counts gathered so far are returned.
        """
        summary = IngestionSummary()
        async with self._lock:
            try:
                await self._ingest(contacts, summary)
            except Exception:
                self._batches_failed += 1
                logger.exception(
                    "ingestion_failed",
                    considered=summary.considered,
                    added=summary.added,
                )
                return summary

        self._batches_processed += 1
        logger.info("ingestion_completed", contacts=len(contacts), **summary.model_dump())
        return summary

    async def _ingest(self, contacts: Sequence[Contact], summary: IngestionSummary) -> None:
        snapshot = DedupSnapshot.build(await self._store.read_all())
        logger.info("ingestion_started", contacts=len(contacts), known_emails=len(snapshot))

        for contact in contacts:
            for email in extract_emails(contact):
                summary.considered += 1
                if snapshot.contains(email):
                    summary.duplicates += 1
                    self._emails_skipped += 1
                    logger.info("email_already_present", email=email, contact_id=contact.id)
                    continue

                if await self._store.append(email, self.today()):
                    # Later candidates in this batch see the new row without a re-read
                    snapshot.add(email)
                    summary.added += 1
                    self._emails_added += 1
                else:
                    summary.failed += 1
                    self._emails_failed += 1
                    logger.warning("email_append_skipped", email=email, contact_id=contact.id)

    # ------------------------------------------------------------------
    # Single email
    # ------------------------------------------------------------------

    async def add_one(self, email: str) -> AddStatus:
        """Append one email unless it is already stored.

        Used for manual verification; unlike :meth:`ingest`, unexpected
        errors propagate to the caller.
        """
        email = email.strip()
        async with self._lock:
            snapshot = DedupSnapshot.build(await self._store.read_all())
            if snapshot.contains(email):
                self._emails_skipped += 1
                logger.info("email_already_present", email=email)
                return AddStatus.DUPLICATE

            if await self._store.append(email, self.today()):
                self._emails_added += 1
                return AddStatus.SUCCESS

            self._emails_failed += 1
            return AddStatus.FAILURE
