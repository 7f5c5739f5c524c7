"""
Ingestion Service - wires the watcher, queue, worker and store together.
"""

import asyncio
import logging
import signal
from typing import Optional

from ..core.order_store import OrderStore
from ..models.config_models import OrderWatchConfig
from .directory_watcher import DirectoryWatcher
from .file_reader import RetryingFileReader
from .pipeline import OrderProcessor, PipelineWorker
from .transfer_queue import TransferQueue

logger = logging.getLogger(__name__)


class IngestionService:
    """
    Hosts the ingestion pipeline for one watched directory.

    Start order is store, worker, watcher, so no detected file is queued
    before something can consume it. A failure to establish the watch
    is fatal and propagates as WatchError.
    """

    def __init__(self, config: Optional[OrderWatchConfig] = None):
        self.config = config or OrderWatchConfig()
        self._shutdown_event = asyncio.Event()

        self.queue = TransferQueue()
        self.store = OrderStore(
            database_path=self.config.storage.database_path,
            enable_wal_mode=self.config.storage.enable_wal_mode
        )
        self.reader = RetryingFileReader(
            max_attempts=self.config.retry.max_attempts,
            delay_seconds=self.config.retry.delay_seconds,
            shutdown_event=self._shutdown_event
        )
        self.processor = OrderProcessor(store=self.store, reader=self.reader)
        self.worker = PipelineWorker(
            queue=self.queue,
            processor=self.processor,
            shutdown_event=self._shutdown_event
        )
        self.watcher = DirectoryWatcher(
            directory=self.config.watcher.directory,
            queue=self.queue,
            pattern=self.config.watcher.pattern,
            create_directory=self.config.watcher.create_directory
        )
        self._started = False

    async def start(self) -> None:
        """Open the store and start consuming and watching."""
        if self._started:
            return

        logger.info("Starting ingestion service")
        await self.store.initialize()
        self.queue.bind(asyncio.get_running_loop())
        await self.worker.start()

        try:
            self.watcher.start()
        except Exception:
            await self.worker.stop()
            await self.store.close()
            raise

        if self.config.watcher.process_existing:
            self.watcher.enqueue_existing()

        self._started = True
        logger.info("Ingestion service started")

    async def stop(self) -> None:
        """Stop watching, let the worker finish its current file, close the store."""
        if not self._started:
            return

        logger.info("Stopping ingestion service")
        self.watcher.stop()
        await self.worker.stop()
        await self.store.close()
        self._started = False

        logger.info(f"Ingestion service stopped: {self.worker.statistics.to_dict()}")

    async def run_forever(self) -> None:
        """Run until SIGINT or SIGTERM."""
        stop_requested = asyncio.Event()
        loop = asyncio.get_running_loop()

        installed = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop_requested.set)
                installed.append(sig)
            except NotImplementedError:
                # Windows event loops have no signal handler support
                pass

        try:
            await self.start()
            await stop_requested.wait()
            logger.info("Shutdown signal received")
        finally:
            await self.stop()
            for sig in installed:
                loop.remove_signal_handler(sig)

    async def __aenter__(self) -> "IngestionService":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
