"""Google Sheets record store.

Column A holds the email, column B the ingestion date; row 1 is a header.
The Sheets client library is synchronous, so every request is executed with
``asyncio.to_thread()``.  ``httplib2`` is not thread-safe, hence each call
gets its own authorized transport.
"""

from __future__ import annotations

import asyncio

import google_auth_httplib2
import httplib2
import structlog
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError
from googleapiclient.http import HttpRequest

from .config import RetryConfig, SheetsConfig
from .models import Record
from .retry import with_retry

logger = structlog.get_logger()

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
DATA_RANGE = "A2:B"
APPEND_RANGE = "A:B"
TRANSIENT_STATUSES = frozenset({429, 500, 502, 503, 504})

_API_ERRORS = (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError)


class RecordStoreError(Exception):
    """The spreadsheet could not be reached, authorized or read."""


def is_transient(exc: BaseException) -> bool:
    """Whether a failed Sheets call is worth another attempt."""
    if isinstance(exc, HttpError):
        return exc.resp.status in TRANSIENT_STATUSES
    return isinstance(exc, (TimeoutError, ConnectionError))


class SheetsRecordStore:
    """Read-all and append access to the email spreadsheet."""

    def __init__(self, config: SheetsConfig, retry_config: RetryConfig) -> None:
        self._config = config
        self._retry = with_retry(retry_config, retry_on=is_transient)
        self._credentials: service_account.Credentials | None = None
        self._service: Resource | None = None

    @property
    def spreadsheet_id(self) -> str:
        return self._config.spreadsheet_id

    @property
    def is_started(self) -> bool:
        return self._service is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load credentials and build the Sheets API resource.

        Raises :class:`RecordStoreError` if the key file is missing or
        invalid.  Store calls retry the setup lazily, so a failed start is
        not fatal.
        """
        await self._ensure_service()
        logger.info("record_store_started", spreadsheet_id=self.spreadsheet_id)

    async def stop(self) -> None:
        self._service = None
        self._credentials = None
        logger.info("record_store_stopped")

    async def _ensure_service(self) -> Resource:
        if self._service is not None:
            return self._service
        try:
            self._credentials = await asyncio.to_thread(
                service_account.Credentials.from_service_account_file,
                self._config.credentials_file,
                scopes=SCOPES,
            )
            self._service = await asyncio.to_thread(
                build,
                "sheets",
                "v4",
                credentials=self._credentials,
                cache_discovery=False,
            )
        except (OSError, ValueError, GoogleAuthError) as exc:
            raise RecordStoreError(
                f"cannot load credentials from {self._config.credentials_file}: {exc}"
            ) from exc
        return self._service

    # ------------------------------------------------------------------
    # Request execution
    # ------------------------------------------------------------------

    def _range(self, cells: str) -> str:
        if not self._config.sheet_name:
            return cells
        quoted = self._config.sheet_name.replace("'", "''")
        return f"'{quoted}'!{cells}"

    def _execute(self, request: HttpRequest) -> dict:
        http = google_auth_httplib2.AuthorizedHttp(
            self._credentials,
            http=httplib2.Http(timeout=self._config.timeout_seconds),
        )
        return request.execute(http=http)

    async def _call(self, request: HttpRequest) -> dict:
        @self._retry
        async def _attempt() -> dict:
            return await asyncio.to_thread(self._execute, request)

        return await _attempt()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def read_records(self) -> list[Record]:
        """Return every stored row whose email cell contains ``@``.

        Raises :class:`RecordStoreError` on any failure.
        """
        service = await self._ensure_service()
        request = service.spreadsheets().values().get(
            spreadsheetId=self.spreadsheet_id,
            range=self._range(DATA_RANGE),
        )
        try:
            response = await self._call(request)
        except _API_ERRORS as exc:
            raise RecordStoreError(f"failed to read spreadsheet: {exc}") from exc

        records: list[Record] = []
        for row in response.get("values", []):
            if not row or not row[0] or "@" not in str(row[0]):
                continue
            date = str(row[1]) if len(row) > 1 else ""
            records.append(Record(email=str(row[0]), date=date))

        logger.info("records_read", count=len(records))
        return records

    async def read_all(self) -> list[Record]:
        """Like :meth:`read_records`, but an unreadable store reads as empty.

        Ingestion keeps going when the spreadsheet is unavailable; the price
        is possible duplicate rows after a transient read failure.
        """
        try:
            return await self.read_records()
        except RecordStoreError as exc:
            logger.error(
                "record_read_failed",
                spreadsheet_id=self.spreadsheet_id,
                error=str(exc),
            )
            return []

    async def append(self, email: str, date: str) -> bool:
        """Append ``[email, date]`` as a new row.

        Returns ``False`` (after logging) on any failure; never raises, so a
        bad row does not abort the rest of a batch.
        """
        try:
            service = await self._ensure_service()
            request = service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(APPEND_RANGE),
                valueInputOption="USER_ENTERED",
                body={"values": [[email, date]]},
            )
            await self._call(request)
        except Exception as exc:
            logger.error("record_append_failed", email=email, error=str(exc))
            return False

        logger.info("record_appended", email=email, date=date)
        return True
