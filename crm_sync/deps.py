"""FastAPI dependency-injection helpers for the service components."""

from __future__ import annotations

from fastapi import Request

from crm_sync.config import Settings
from crm_sync.pipeline import IngestionPipeline
from crm_sync.store import SheetsRecordStore
from crm_sync.worker import IngestionWorker


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> SheetsRecordStore:
    return request.app.state.store


def get_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.pipeline


def get_worker(request: Request) -> IngestionWorker:
    return request.app.state.worker
