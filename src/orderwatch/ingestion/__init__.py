"""
Order Ingestion Pipeline

Watches a directory for dropped order files and records each distinct
file content exactly once.

Key Components:
- Directory watcher (watchdog) that detects new *.json files
- Unbounded transfer queue from the observer thread to the event loop
- Single pipeline worker: retrying read, fingerprint, dedupe, parse,
  validate, persist
"""

from .directory_watcher import DirectoryWatcher, OrderFileHandler, WatchError
from .file_reader import FileLockedError, RetryingFileReader, ShutdownRequested
from .order_parser import OrderParser, OrderParsingError
from .outcomes import Duplicate, Invalid, ProcessingOutcome, Valid
from .pipeline import (
    OrderProcessor,
    PipelineStatistics,
    PipelineWorker,
    compute_fingerprint,
)
from .service import IngestionService
from .transfer_queue import TransferQueue

__all__ = [
    # Service
    'IngestionService',

    # Event source and queue
    'DirectoryWatcher',
    'OrderFileHandler',
    'WatchError',
    'TransferQueue',

    # Pipeline
    'OrderProcessor',
    'PipelineWorker',
    'PipelineStatistics',
    'compute_fingerprint',
    'RetryingFileReader',
    'FileLockedError',
    'ShutdownRequested',
    'OrderParser',
    'OrderParsingError',

    # Outcomes
    'Valid',
    'Invalid',
    'Duplicate',
    'ProcessingOutcome',
]
