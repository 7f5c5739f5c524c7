"""
Retrying file reader.

Files are often detected while the producer still has them open. Reads
that fail with an OSError are retried on a fixed budget; the delay
between attempts is cut short when shutdown is requested.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Union

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_DELAY_SECONDS = 0.5


class FileLockedError(Exception):
    """Raised when a file could not be read within the retry budget."""

    def __init__(self, path: Union[str, Path], attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f"File locked after {attempts} attempts: {path}")
        self.path = str(path)
        self.attempts = attempts
        self.last_error = last_error


class ShutdownRequested(Exception):
    """Raised when shutdown interrupts a retry delay."""
    pass


class RetryingFileReader:
    """Reads whole files, retrying transient I/O failures."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        shutdown_event: Optional[asyncio.Event] = None
    ):
        """
        Initialize the reader.

        Args:
            max_attempts: Total read attempts before giving up
            delay_seconds: Fixed delay between attempts
            shutdown_event: Event that interrupts the delay when set
        """
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self.shutdown_event = shutdown_event

    async def read(self, path: Union[str, Path]) -> bytes:
        """
        Read the full file content.

        Raises:
            FileLockedError: If every attempt failed
            ShutdownRequested: If shutdown was requested during a retry delay
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.delay_seconds),
            retry=retry_if_exception_type(OSError),
            sleep=self._sleep,
            before_sleep=self._log_retry,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    return await self._read_once(Path(path))
        except RetryError as e:
            last_error = e.last_attempt.exception()
            raise FileLockedError(path, self.max_attempts, last_error) from last_error

    async def _read_once(self, path: Path) -> bytes:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, path.read_bytes)

    async def _sleep(self, seconds: float) -> None:
        if self.shutdown_event is None:
            await asyncio.sleep(seconds)
            return

        try:
            await asyncio.wait_for(self.shutdown_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return

        raise ShutdownRequested("Shutdown requested during read retry")

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.debug(
            f"Read attempt {retry_state.attempt_number}/{self.max_attempts} failed: {error}"
        )
