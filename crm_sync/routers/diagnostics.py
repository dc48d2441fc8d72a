"""Manual endpoints for checking the spreadsheet connection by hand."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from crm_sync.dedup import DedupSnapshot
from crm_sync.deps import get_pipeline, get_store
from crm_sync.pipeline import AddStatus, IngestionPipeline
from crm_sync.schemas import AddEmailRequest, AddEmailResponse, StoreStatus
from crm_sync.store import RecordStoreError, SheetsRecordStore

logger = structlog.get_logger()

router = APIRouter(tags=["diagnostics"])


@router.get("/test", response_model=StoreStatus)
async def store_status(store: Annotated[SheetsRecordStore, Depends(get_store)]):
    try:
        records = await store.read_records()
    except RecordStoreError as exc:
        return JSONResponse(
            {"status": "error", "error": str(exc)},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return StoreStatus(
        message="service is running",
        spreadsheet_id=store.spreadsheet_id,
        total_emails=len(DedupSnapshot.build(records)),
    )


@router.post("/add-test-email", response_model=AddEmailResponse)
async def add_test_email(
    request: Request,
    pipeline: Annotated[IngestionPipeline, Depends(get_pipeline)],
):
    """Add one email by hand. Any body without a usable ``email`` is a 400."""
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    try:
        body = AddEmailRequest.model_validate(payload)
    except ValidationError:
        body = AddEmailRequest()

    email = (body.email or "").strip()
    if "@" not in email:
        return JSONResponse(
            {"status": "error", "message": "invalid email"},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    try:
        result = await pipeline.add_one(email)
    except Exception as exc:
        logger.exception("manual_add_failed", email=email)
        return JSONResponse(
            {"status": "error", "error": str(exc)},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if result is AddStatus.DUPLICATE:
        return AddEmailResponse(status="info", message="already exists")
    if result is AddStatus.SUCCESS:
        return AddEmailResponse(status="success", message="email added")
    return JSONResponse(
        {"status": "error", "message": "failed to add email"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
