"""
Unit tests for the directory watcher event source.
"""

import os
import sys
from unittest.mock import Mock

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileMovedEvent,
)

from orderwatch.ingestion.directory_watcher import (
    DirectoryWatcher,
    OrderFileHandler,
    WatchError,
)


@pytest.fixture
def queue():
    return Mock()


@pytest.fixture
def handler(queue, tmp_path):
    return OrderFileHandler(queue, "*.json", str(tmp_path))


class TestOrderFileHandler:
    """The handler only logs and enqueues matching paths."""

    def test_created_json_file_is_enqueued(self, handler, queue, tmp_path, caplog):
        path = str(tmp_path / "order-1.json")

        with caplog.at_level("INFO"):
            handler.on_created(FileCreatedEvent(path))

        queue.put_threadsafe.assert_called_once_with(path)
        assert "New file detected" in caplog.text

    def test_non_matching_file_is_ignored(self, handler, queue, tmp_path):
        handler.on_created(FileCreatedEvent(str(tmp_path / "order-1.txt")))
        handler.on_created(FileCreatedEvent(str(tmp_path / "order-1.json.tmp")))

        queue.put_threadsafe.assert_not_called()

    def test_directory_creation_is_ignored(self, handler, queue, tmp_path):
        handler.on_created(DirCreatedEvent(str(tmp_path / "nested.json")))

        queue.put_threadsafe.assert_not_called()

    def test_rename_into_directory_is_enqueued(self, handler, queue, tmp_path):
        src = str(tmp_path / "order-2.tmp")
        dest = str(tmp_path / "order-2.json")

        handler.on_moved(FileMovedEvent(src, dest))

        queue.put_threadsafe.assert_called_once_with(dest)

    def test_rename_out_of_directory_is_ignored(self, handler, queue, tmp_path):
        src = str(tmp_path / "order-3.json")
        dest = os.path.join(str(tmp_path), "archive", "order-3.json")

        handler.on_moved(FileMovedEvent(src, dest))

        queue.put_threadsafe.assert_not_called()

    def test_closed_loop_does_not_raise_in_observer_thread(self, handler, queue, tmp_path):
        queue.put_threadsafe.side_effect = RuntimeError("Event loop is closed")

        handler.on_created(FileCreatedEvent(str(tmp_path / "late.json")))

    def test_closed_event_ignored_when_forwarding_on_create(self, handler, queue, tmp_path):
        handler.on_closed(FileClosedEvent(str(tmp_path / "order-4.json")))

        queue.put_threadsafe.assert_not_called()


class TestCloseAfterWriteHandler:
    """With close-after-write events a file is forwarded only once its writer is done."""

    @pytest.fixture
    def handler(self, queue, tmp_path):
        return OrderFileHandler(queue, "*.json", str(tmp_path), forward_on_close=True)

    def test_creation_alone_is_not_forwarded(self, handler, queue, tmp_path):
        handler.on_created(FileCreatedEvent(str(tmp_path / "order-5.json")))

        queue.put_threadsafe.assert_not_called()

    def test_create_then_close_forwards_once(self, handler, queue, tmp_path):
        path = str(tmp_path / "order-5.json")

        handler.on_created(FileCreatedEvent(path))
        handler.on_closed(FileClosedEvent(path))

        queue.put_threadsafe.assert_called_once_with(path)

    def test_rename_from_outside_is_forwarded(self, handler, queue, tmp_path):
        dest = str(tmp_path / "order-6.json")

        handler.on_moved(FileMovedEvent("", dest))

        queue.put_threadsafe.assert_called_once_with(dest)

    def test_rename_out_of_directory_is_ignored(self, handler, queue, tmp_path):
        handler.on_moved(FileMovedEvent(str(tmp_path / "order-7.json"), ""))

        queue.put_threadsafe.assert_not_called()


class TestDirectoryWatcher:
    """Observer lifecycle."""

    def test_missing_directory_without_create_is_fatal(self, queue, tmp_path):
        watcher = DirectoryWatcher(
            tmp_path / "does-not-exist", queue, create_directory=False
        )

        with pytest.raises(WatchError):
            watcher.start()
        assert not watcher.is_running

    def test_start_creates_directory_and_stop(self, queue, tmp_path):
        directory = tmp_path / "IncomingOrders"
        watcher = DirectoryWatcher(directory, queue)

        watcher.start()
        try:
            assert directory.is_dir()
            assert watcher.is_running
        finally:
            watcher.stop()

        assert not watcher.is_running

    @pytest.mark.skipif(not sys.platform.startswith("linux"), reason="inotify only")
    def test_linux_watch_forwards_on_close(self, queue, tmp_path):
        watcher = DirectoryWatcher(tmp_path, queue)
        watcher.start()
        try:
            assert watcher.handler.forward_on_close is True
        finally:
            watcher.stop()

    def test_enqueue_existing_only_matching_files(self, queue, tmp_path):
        (tmp_path / "a.json").write_text("{}")
        (tmp_path / "b.json").write_text("{}")
        (tmp_path / "notes.txt").write_text("ignore me")
        (tmp_path / "sub.json").mkdir()

        watcher = DirectoryWatcher(tmp_path, queue)
        count = watcher.enqueue_existing()

        assert count == 2
        queued = {call.args[0] for call in queue.put_nowait.call_args_list}
        assert queued == {
            str((tmp_path / "a.json").resolve()),
            str((tmp_path / "b.json").resolve()),
        }
