"""Background worker that drains webhook payloads into the pipeline.

The webhook route only enqueues; this worker processes one payload at a
time, so batches from overlapping deliveries never interleave.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

import structlog

from .pipeline import IngestionPipeline

logger = structlog.get_logger()


class IngestionWorker:
    """Bounded FIFO queue of webhook payloads with a single consumer task.

    ``maxsize=0`` leaves the queue unbounded.
    """

    def __init__(
        self,
        pipeline: IngestionPipeline,
        *,
        shutdown_timeout: float = 10.0,
        maxsize: int = 1000,
    ) -> None:
        self._pipeline = pipeline
        self._shutdown_timeout = shutdown_timeout
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._task: asyncio.Task | None = None
        self._dropped: int = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def queue_size(self) -> int:
        return self._queue.qsize()

    @property
    def payloads_dropped(self) -> int:
        return self._dropped

    def submit(self, payload: Any) -> bool:
        """Queue a payload without waiting for it to be processed.

        Returns ``False`` when the queue is full; the payload is logged and
        dropped.
        """
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull:
            self._dropped += 1
            logger.error(
                "webhook_payload_dropped",
                queue_size=self._queue.qsize(),
                dropped_total=self._dropped,
            )
            return False
        logger.info("webhook_payload_queued", queue_size=self._queue.qsize())
        return True

    async def start(self) -> None:
        self._task = asyncio.create_task(self.run(), name="ingestion-worker")
        logger.info("ingestion_worker_started")

    async def stop(self) -> None:
        """Wait for queued payloads (up to the shutdown timeout), then cancel."""
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=self._shutdown_timeout)
        except TimeoutError:
            logger.warning("ingestion_queue_not_drained", remaining=self._queue.qsize())
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("ingestion_worker_stopped")

    async def join(self) -> None:
        """Block until every queued payload has been processed."""
        await self._queue.join()

    async def run(self) -> None:
        while True:
            payload = await self._queue.get()
            try:
                await self._pipeline.ingest_payload(payload)
            except Exception:
                logger.exception("ingestion_worker_error")
            finally:
                self._queue.task_done()
