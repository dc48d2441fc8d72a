"""amoCRM webhook endpoint."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request

from crm_sync.deps import get_worker
from crm_sync.schemas import WebhookAck
from crm_sync.worker import IngestionWorker

logger = structlog.get_logger()

router = APIRouter(tags=["webhook"])


@router.post("/webhook/amocrm", response_model=WebhookAck)
async def amocrm_webhook(
    request: Request,
    worker: Annotated[IngestionWorker, Depends(get_worker)],
):
    """Acknowledge at once and leave the processing to the worker.

    amoCRM drops deliveries that are not answered within its webhook
    timeout, so the response never waits on the spreadsheet and is a
    success even for a body that cannot be parsed.
    """
    logger.info("webhook_received")
    try:
        payload = await request.json()
    except ValueError:
        logger.warning(
            "webhook_body_not_json",
            content_type=request.headers.get("content-type"),
        )
        payload = {}

    worker.submit(payload)
    return WebhookAck(message="accepted for processing")
