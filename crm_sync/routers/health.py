"""Health and readiness probes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from crm_sync.deps import get_pipeline, get_store, get_worker
from crm_sync.pipeline import IngestionPipeline
from crm_sync.schemas import HealthResponse
from crm_sync.store import SheetsRecordStore
from crm_sync.worker import IngestionWorker

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(
    pipeline: Annotated[IngestionPipeline, Depends(get_pipeline)],
    worker: Annotated[IngestionWorker, Depends(get_worker)],
):
    return HealthResponse(
        service="crm-sync",
        batches_processed=pipeline.batches_processed,
        batches_failed=pipeline.batches_failed,
        emails_added=pipeline.emails_added,
        emails_skipped=pipeline.emails_skipped,
        emails_failed=pipeline.emails_failed,
        queue_size=worker.queue_size,
        payloads_dropped=worker.payloads_dropped,
    )


@router.get("/ready")
async def ready(
    store: Annotated[SheetsRecordStore, Depends(get_store)],
    worker: Annotated[IngestionWorker, Depends(get_worker)],
) -> JSONResponse:
    is_ready = store.is_started and worker.is_running
    return JSONResponse(
        {"ready": is_ready},
        status_code=200 if is_ready else 503,
    )
