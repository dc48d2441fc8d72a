"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from crm_sync.config import Settings
from crm_sync.pipeline import IngestionPipeline
from crm_sync.store import RecordStoreError, SheetsRecordStore
from crm_sync.worker import IngestionWorker

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: connect the store, start the worker. Shutdown: drain and stop."""
    settings: Settings = app.state.settings
    store = app.state.store
    worker: IngestionWorker = app.state.worker

    try:
        await store.start()
    except RecordStoreError as exc:
        # Store calls retry the connection on demand
        logger.error("record_store_start_failed", error=str(exc))

    await worker.start()
    logger.info(
        "service_started",
        spreadsheet_id=settings.sheets.spreadsheet_id,
        port=settings.port,
    )
    yield
    await worker.stop()
    await store.stop()
    logger.info("shutdown_complete")


def create_app(
    settings: Settings | None = None,
    store: SheetsRecordStore | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    *store* replaces the Google Sheets client, e.g. with an in-memory fake.
    """
    if settings is None:
        settings = Settings()  # type: ignore[call-arg]
    if store is None:
        store = SheetsRecordStore(settings.sheets, settings.retry)

    pipeline = IngestionPipeline(store, timezone=settings.date_timezone)
    worker = IngestionWorker(
        pipeline,
        shutdown_timeout=settings.shutdown_timeout_seconds,
        maxsize=settings.queue_maxsize,
    )

    app = FastAPI(
        title="amoCRM to Google Sheets sync",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.pipeline = pipeline
    app.state.worker = worker

    from crm_sync.routers.diagnostics import router as diagnostics_router
    from crm_sync.routers.health import router as health_router
    from crm_sync.routers.pages import router as pages_router
    from crm_sync.routers.webhook import router as webhook_router

    app.include_router(webhook_router)
    app.include_router(diagnostics_router)
    app.include_router(health_router)
    app.include_router(pages_router)

    return app
