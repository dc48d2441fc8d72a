"""Collect amoCRM contact emails into a Google Sheets spreadsheet."""

from .dedup import DedupSnapshot, normalize
from .extractor import extract_emails, is_email_field
from .pipeline import AddStatus, IngestionPipeline, IngestionSummary
from .store import RecordStoreError, SheetsRecordStore
from .worker import IngestionWorker

__all__ = [
    "AddStatus",
    "DedupSnapshot",
    "IngestionPipeline",
    "IngestionSummary",
    "IngestionWorker",
    "RecordStoreError",
    "SheetsRecordStore",
    "extract_emails",
    "is_email_field",
    "normalize",
]
