"""File watching with debounced change notifications."""

import queue
import threading
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from logseq_graph.events import ChangeEvent
from logseq_graph.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0

# How often pending paths are checked against the debounce window
POLL_INTERVAL = 0.1


class DebounceHandler(FileSystemEventHandler):
    """
    Collects changed Markdown files until they have been quiet for a while.

    Logseq saves while the user types, so a file usually changes many times
    in a row. Each path is reported once no event for it arrived within
    ``debounce_seconds``.
    """

    def __init__(self, debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS):
        super().__init__()
        self.debounce_seconds = debounce_seconds
        self._pending: dict[Path, float] = {}
        self._lock = threading.Lock()

    def _should_skip(self, path: Path) -> bool:
        name = path.name

        if name.startswith("."):
            return True

        if name.endswith("~") or name.endswith(".swp") or name.startswith(".#"):
            return True

        return not name.endswith(".md")

    def _record(self, raw_path) -> None:
        path = Path(str(raw_path))
        if self._should_skip(path):
            return

        with self._lock:
            self._pending[path] = time.monotonic()

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._record(event.src_path)
            self._record(event.dest_path)

    @property
    def pending(self) -> list[Path]:
        with self._lock:
            return list(self._pending)

    def check_and_flush(self, now: Optional[float] = None) -> list[Path]:
        """Return, and forget, the paths that have been quiet long enough."""
        if now is None:
            now = time.monotonic()

        with self._lock:
            due = [
                path for path, seen in self._pending.items()
                if now - seen >= self.debounce_seconds
            ]
            for path in due:
                del self._pending[path]
        return due

    def flush(self) -> list[Path]:
        """Return, and forget, every pending path."""
        with self._lock:
            paths = list(self._pending)
            self._pending.clear()
        return paths


class ChangeWatcher:
    """
    Watches directories and calls ``on_change`` for each debounced path.

    The callback runs on a background thread. Errors raised by it are
    logged and do not stop the watcher.
    """

    def __init__(
        self,
        directories: list[Path],
        on_change: Callable[[Path], None],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self.directories = directories
        self.on_change = on_change
        self.handler = DebounceHandler(debounce_seconds)
        self._observer: Optional[Observer] = None
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return

        observer = Observer()
        for directory in self.directories:
            if not directory.is_dir():
                logger.warning("watch_directory_missing", directory=str(directory))
                continue
            observer.schedule(self.handler, str(directory), recursive=False)

        self._stop.clear()
        observer.start()
        self._observer = observer

        self._thread = threading.Thread(
            target=self._run, name="logseq-graph-watcher", daemon=True
        )
        self._thread.start()

        logger.info(
            "watch_started",
            directories=[str(d) for d in self.directories],
            debounce_seconds=self.handler.debounce_seconds,
        )

    def stop(self) -> None:
        if self._observer is None:
            return

        self._stop.set()
        self._observer.stop()
        self._observer.join()
        self._observer = None

        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()
        self._thread = None

        logger.info("watch_stopped")

    def _run(self) -> None:
        while not self._stop.wait(POLL_INTERVAL):
            for path in self.handler.check_and_flush():
                self._dispatch(path)

    def _dispatch(self, path: Path) -> None:
        logger.debug("watch_flush", path=str(path))
        try:
            self.on_change(path)
        except Exception as e:
            logger.error("watch_change_failed", path=str(path), error=str(e), exc_info=True)


_CLOSED = object()


class Watcher:
    """
    Subscription to the changes of a graph.

    Obtained from ``Graph.watch()``. Events are queued until read with
    ``events()``. Use the watcher as a context manager or call ``close()``
    to unsubscribe.

    Example:
        >>> with graph.watch() as watcher:
        ...     for event in watcher.events(timeout=5):
        ...         print(event)
    """

    def __init__(self, closer: Optional[Callable[["Watcher"], None]] = None):
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._closer = closer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: ChangeEvent) -> None:
        if not self._closed:
            self._queue.put(event)

    def events(self, timeout: Optional[float] = None) -> Iterator[ChangeEvent]:
        """
        Yield events as they arrive.

        Args:
            timeout: Stop after waiting this many seconds without an
                event, None waits until the watcher is closed
        """
        while True:
            try:
                event = self._queue.get(timeout=timeout)
            except queue.Empty:
                return

            if event is _CLOSED:
                return
            yield event

    def close(self) -> None:
        if self._closed:
            return

        self._closed = True
        self._queue.put(_CLOSED)
        if self._closer is not None:
            self._closer(self)

    def __enter__(self) -> "Watcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
