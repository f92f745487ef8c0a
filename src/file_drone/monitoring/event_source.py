"""
Low-level change signal for a single directory.

Wraps a watchdog observer scheduled on one directory level and fires a
zero-argument callback whenever the OS reports that the directory's direct
contents changed. It does not say what changed; finding out is the job of
the snapshot engine.
"""

import logging
import os
from collections.abc import Callable
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_OPENED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

logger = logging.getLogger(__name__)

# Access-only events that never change a directory listing or timestamps
_IGNORED_EVENT_TYPES = frozenset({EVENT_TYPE_OPENED, EVENT_TYPE_CLOSED, EVENT_TYPE_CLOSED_NO_WRITE})


class DirectoryEventSource(FileSystemEventHandler):
    """
    Watches the immediate contents of one directory.

    Subdirectories are not watched. Signals arrive on the observer thread,
    possibly in bursts, and are passed on without debouncing.
    """

    def __init__(
        self,
        directory_path: Path,
        callback: Callable[[], None] | None = None,
        use_polling: bool = False,
        poll_interval: float = 1.0,
        join_timeout: float = 5.0,
    ):
        """
        Initialize the event source.

        Args:
            directory_path: Directory whose direct contents are watched
            callback: Zero-argument callable invoked on every change signal
            use_polling: Use a polling observer instead of native OS events
            poll_interval: Polling interval in seconds when polling
            join_timeout: Seconds to wait for the observer thread on stop
        """
        super().__init__()
        self.directory_path = Path(directory_path)
        self.use_polling = use_polling
        self.poll_interval = poll_interval
        self.join_timeout = join_timeout

        self._callback = callback
        self._observer: Observer | None = None
        self._watched_path: str | None = None

    def observe_changes(self, callback: Callable[[], None] | None) -> None:
        """
        Set the target notified when changes are detected.

        Args:
            callback: Zero-argument callable, or None to drop the current target
        """
        self._callback = callback

    @property
    def callback(self) -> Callable[[], None] | None:
        return self._callback

    def start(self) -> bool:
        """
        Start watching the directory.

        Returns:
            True if the watch is active, False if it could not be acquired
        """
        if self.is_running:
            return True

        directory_str = os.fspath(self.directory_path)
        if not self.directory_path.is_dir():
            logger.error("Cannot watch %s: not an existing directory", directory_str)
            return False

        observer = PollingObserver(timeout=self.poll_interval) if self.use_polling else Observer()
        try:
            observer.schedule(self, directory_str, recursive=False)
            observer.start()
        except Exception as e:
            logger.error("Failed to start watching %s: %s", directory_str, e)
            return False

        self._observer = observer
        self._watched_path = os.path.abspath(directory_str)
        logger.info("Started watching %s (polling: %s)", directory_str, self.use_polling)
        return True

    def stop(self) -> None:
        """Stop watching the directory. Calling it again is a no-op."""
        observer, self._observer = self._observer, None
        self._watched_path = None
        if observer is None:
            return

        try:
            observer.stop()
            if observer.is_alive():
                observer.join(timeout=self.join_timeout)
            logger.info("Stopped watching %s", self.directory_path)
        except Exception as e:
            logger.error("Error stopping watch on %s: %s", self.directory_path, e)

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Forward every content-affecting event as a bare change signal."""
        if event.event_type in _IGNORED_EVENT_TYPES:
            return

        callback = self._callback
        if callback is None:
            return

        logger.debug("Change signal from %s: %s", self.directory_path, event.event_type)
        try:
            callback()
        except Exception as e:
            logger.error("Error in change callback for %s: %s", self.directory_path, e)

    @property
    def is_running(self) -> bool:
        """Check if the directory is currently being watched."""
        return self._observer is not None and self._observer.is_alive()

    @property
    def watched_path(self) -> str | None:
        """Absolute path of the watched directory while running."""
        return self._watched_path
