"""
Directory Watcher - watchdog event source for dropped order files.

Watches one directory (non-recursive) and forwards the path of every new
file whose name matches the pattern into the transfer queue. The handler
runs on the observer thread and does nothing but log and enqueue.

Where the platform reports close-after-write (inotify), a file is forwarded
when its writer closes it rather than when it is created, so a file still
being written is never read half-done. Renames into the directory are
forwarded on every platform.
"""

import fnmatch
import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.utils import UnsupportedLibcError, platform

from .transfer_queue import TransferQueue

logger = logging.getLogger(__name__)


class WatchError(Exception):
    """Raised when the directory watch cannot be established."""
    pass


class OrderFileHandler(FileSystemEventHandler):
    """File system event handler that forwards matching new files."""

    def __init__(
        self,
        queue: TransferQueue,
        pattern: str,
        watch_path: str,
        forward_on_close: bool = False
    ):
        self.queue = queue
        self.pattern = pattern
        self.watch_path = watch_path
        self.forward_on_close = forward_on_close

    def on_created(self, event: Any) -> None:
        """Handle file creation events."""
        if event.is_directory or self.forward_on_close:
            return
        self._forward(os.fsdecode(event.src_path))

    def on_closed(self, event: Any) -> None:
        """Handle a writer closing a file it wrote to."""
        if event.is_directory or not self.forward_on_close:
            return
        self._forward(os.fsdecode(event.src_path))

    def on_moved(self, event: Any) -> None:
        """Handle files renamed into the directory (atomic writes)."""
        if event.is_directory or not event.dest_path:
            return
        dest_path = os.fsdecode(event.dest_path)
        if os.path.dirname(dest_path) == self.watch_path:
            self._forward(dest_path)

    def matches(self, path: str) -> bool:
        return fnmatch.fnmatch(os.path.basename(path), self.pattern)

    def _forward(self, path: str) -> None:
        if not self.matches(path):
            return

        logger.info(f"New file detected: {path}")
        try:
            self.queue.put_threadsafe(path)
        except RuntimeError as e:
            # Loop already closed; only happens while the host is shutting down
            logger.warning(f"Could not enqueue {path}: {e}")


class DirectoryWatcher:
    """Owns the watchdog observer for the incoming-orders directory."""

    def __init__(
        self,
        directory: Union[str, Path],
        queue: TransferQueue,
        pattern: str = "*.json",
        create_directory: bool = True
    ):
        self.directory = Path(directory).expanduser()
        self.queue = queue
        self.pattern = pattern
        self.create_directory = create_directory
        self.observer: Optional[Any] = None
        self.handler: Optional[OrderFileHandler] = None

    @property
    def is_running(self) -> bool:
        return self.observer is not None

    @staticmethod
    def _create_observer() -> Tuple[Any, bool]:
        """Return an observer and whether it reports close-after-write."""
        if platform.is_linux():
            try:
                from watchdog.observers.inotify import InotifyObserver
            except UnsupportedLibcError:
                logger.warning("inotify unavailable, falling back to creation events")
            else:
                # Full events report renames from outside the directory as moves
                return InotifyObserver(generate_full_events=True), True
        return Observer(), False

    def start(self) -> None:
        """
        Start watching the directory.

        Raises:
            WatchError: If the watch cannot be established
        """
        if self.observer is not None:
            logger.warning("Directory watcher already running")
            return

        try:
            if self.create_directory:
                self.directory.mkdir(parents=True, exist_ok=True)

            watch_path = str(self.directory.resolve())
            observer, forward_on_close = self._create_observer()
            self.handler = OrderFileHandler(
                self.queue, self.pattern, watch_path, forward_on_close=forward_on_close
            )

            observer.schedule(self.handler, watch_path, recursive=False)
            observer.start()
        except OSError as e:
            logger.error(f"Failed to watch {self.directory}: {e}")
            raise WatchError(f"Cannot watch directory {self.directory}: {e}") from e

        self.observer = observer
        logger.info(f"Watching {watch_path} for {self.pattern}")

    def stop(self) -> None:
        """Stop watching."""
        if self.observer:
            self.observer.stop()
            self.observer.join()
            self.observer = None
            logger.info(f"Stopped watching {self.directory}")

    def enqueue_existing(self) -> int:
        """
        Queue matching files already in the directory, oldest first.

        Must be called on the loop thread that consumes the queue.
        """
        existing: List[Path] = [
            p for p in self.directory.iterdir()
            if p.is_file() and fnmatch.fnmatch(p.name, self.pattern)
        ]
        existing.sort(key=lambda p: (p.stat().st_mtime, p.name))

        for path in existing:
            self.queue.put_nowait(str(path.resolve()))

        if existing:
            logger.info(f"Queued {len(existing)} existing files from {self.directory}")
        return len(existing)
