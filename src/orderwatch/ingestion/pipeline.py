"""
Ingestion Pipeline - sequential processing of detected order files.

`OrderProcessor` runs the per-file stages (read, fingerprint, dedupe,
parse, validate, persist). `PipelineWorker` is the single consumer of the
transfer queue: it handles one path end to end before taking the next,
which makes it the only writer to the order store and keeps the
check-then-insert on the fingerprint ledger race-free.
"""

import asyncio
import hashlib
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.order_store import OrderStore
from ..models.order_models import InvalidOrder
from .file_reader import FileLockedError, RetryingFileReader, ShutdownRequested
from .order_parser import FILE_LOCKED, OrderParser
from .outcomes import Duplicate, Invalid, ProcessingOutcome, Valid
from .transfer_queue import TransferQueue

logger = logging.getLogger(__name__)


def compute_fingerprint(raw: bytes) -> str:
    """SHA-256 of the raw file bytes, hex encoded."""
    return hashlib.sha256(raw).hexdigest()


@dataclass
class ProcessingFailure:
    """A file whose processing raised instead of reaching an outcome."""
    path: str
    error: Exception
    failed_at: datetime = field(default_factory=datetime.now)


@dataclass
class PipelineStatistics:
    """Counters for the pipeline worker."""

    files_processed: int = 0
    valid_orders: int = 0
    invalid_orders: int = 0
    duplicates_skipped: int = 0
    failures: int = 0
    total_processing_time: float = 0.0
    invalid_reasons: Dict[str, int] = field(default_factory=dict)

    start_time: Optional[datetime] = None
    last_activity: Optional[datetime] = None

    def record(self, outcome: ProcessingOutcome, processing_time: float) -> None:
        """Update counters from a terminal outcome."""
        self.files_processed += 1
        self.total_processing_time += processing_time
        self.last_activity = datetime.now()

        if isinstance(outcome, Valid):
            self.valid_orders += 1
        elif isinstance(outcome, Invalid):
            self.invalid_orders += 1
            self.invalid_reasons[outcome.reason] = (
                self.invalid_reasons.get(outcome.reason, 0) + 1
            )
        elif isinstance(outcome, Duplicate):
            self.duplicates_skipped += 1

    def record_failure(self) -> None:
        self.files_processed += 1
        self.failures += 1
        self.last_activity = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to dictionary."""
        return {
            'files_processed': self.files_processed,
            'valid_orders': self.valid_orders,
            'invalid_orders': self.invalid_orders,
            'duplicates_skipped': self.duplicates_skipped,
            'failures': self.failures,
            'invalid_reasons': dict(self.invalid_reasons),
            'avg_processing_time': (
                self.total_processing_time / max(1, self.files_processed - self.failures)
            ),
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'last_activity': self.last_activity.isoformat() if self.last_activity else None
        }


class OrderProcessor:
    """
    Runs the ingestion stages for a single file.

    Every file ends as exactly one of: a valid order plus ledger entry,
    an invalid order, or a duplicate skip with nothing written. Storage
    failures are not converted; they propagate as StorageError.
    """

    def __init__(
        self,
        store: OrderStore,
        reader: Optional[RetryingFileReader] = None,
        parser: Optional[OrderParser] = None
    ):
        self.store = store
        self.reader = reader or RetryingFileReader()
        self.parser = parser or OrderParser()

    async def process(self, path: Union[str, Path]) -> ProcessingOutcome:
        """
        Process one order file.

        Raises:
            ShutdownRequested: If shutdown interrupted a read retry
            StorageError: If a store read or commit failed
        """
        try:
            raw = await self.reader.read(path)
        except FileLockedError as e:
            logger.warning(f"Giving up on {path}: {e}")
            return await self._save_invalid(Invalid(reason=FILE_LOCKED, raw_content=""))

        fingerprint = compute_fingerprint(raw)

        if await self.store.has_fingerprint(fingerprint):
            logger.info(f"Duplicate file skipped: {path}")
            return Duplicate(fingerprint=fingerprint)

        outcome = self.parser.classify(raw, fingerprint)

        if isinstance(outcome, Invalid):
            return await self._save_invalid(outcome)

        saved = await self.store.save_valid_order(outcome.order, fingerprint)
        logger.info(
            f"Order saved: {saved.order_id} "
            f"(amount: {saved.total_amount}, high value: {saved.is_high_value})"
        )
        return Valid(order=saved, fingerprint=fingerprint)

    async def _save_invalid(self, outcome: Invalid) -> Invalid:
        await self.store.save_invalid_order(
            InvalidOrder(raw_json=outcome.raw_content, reason=outcome.reason)
        )
        logger.warning(f"Invalid order saved: {outcome.reason}")
        return outcome


class PipelineWorker:
    """
    Single long-lived consumer of the transfer queue.

    Shutdown is cooperative: the shutdown event is checked between
    dequeues and interrupts read retry delays. Paths still queued at
    shutdown are left in the queue.
    """

    def __init__(
        self,
        queue: TransferQueue,
        processor: OrderProcessor,
        shutdown_event: Optional[asyncio.Event] = None,
        poll_interval: float = 0.5
    ):
        """
        Initialize the worker.

        Args:
            queue: Queue to consume paths from
            processor: Per-file stage runner
            shutdown_event: Shared event that stops the loop when set
            poll_interval: How often an idle worker rechecks for shutdown
        """
        self.queue = queue
        self.processor = processor
        self.poll_interval = poll_interval

        self.statistics = PipelineStatistics()
        self.failures: List[ProcessingFailure] = []
        self.current_path: Optional[str] = None

        self._shutdown_event = shutdown_event or asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def shutdown_event(self) -> asyncio.Event:
        return self._shutdown_event

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the consumer task."""
        if self.is_running:
            logger.warning("Pipeline worker already running")
            return

        self._shutdown_event.clear()
        self.statistics.start_time = datetime.now()
        self._task = asyncio.create_task(self._run(), name="orderwatch-pipeline-worker")
        logger.info("Pipeline worker started")

    async def stop(self, timeout: float = 30.0) -> None:
        """Signal shutdown and wait for the consumer task to finish."""
        logger.info("Stopping pipeline worker")
        self._shutdown_event.set()

        if self._task:
            try:
                await asyncio.wait_for(self._task, timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("Pipeline worker shutdown timeout, cancelled")
            self._task = None

        remaining = self.queue.qsize()
        if remaining:
            logger.info(f"{remaining} queued files left unconsumed")
        logger.info("Pipeline worker stopped")

    async def wait_idle(self) -> None:
        """Wait until every queued path has been handled."""
        await self.queue.join()

    async def _run(self) -> None:
        """Consumer loop: one path at a time, in queue order."""
        while not self._shutdown_event.is_set():
            try:
                path = await asyncio.wait_for(self.queue.get(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                continue

            try:
                await self.process_path(path)
            except ShutdownRequested:
                logger.warning(f"Shutdown while reading {path}, left unprocessed")
                break
            finally:
                self.queue.task_done()

    async def process_path(self, path: str) -> Optional[ProcessingOutcome]:
        """
        Process one path, containing every per-file error.

        Returns the outcome, or None if processing raised. Only
        ShutdownRequested escapes.
        """
        self.current_path = path
        start_time = time.time()

        try:
            outcome = await self.processor.process(path)
        except ShutdownRequested:
            raise
        except Exception as e:
            logger.exception(f"Failed to process {path}: {e}")
            self.statistics.record_failure()
            self.failures.append(ProcessingFailure(path=path, error=e))
            return None
        finally:
            self.current_path = None

        self.statistics.record(outcome, time.time() - start_time)
        return outcome
