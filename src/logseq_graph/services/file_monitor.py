"""File modification monitoring for concurrent edit detection."""

from pathlib import Path
from typing import Dict, Optional

from logseq_graph.services.exceptions import FileModifiedError


def _mtime(path: Path) -> Optional[float]:
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return None


class FileMonitor:
    """
    Track file modification times to detect external changes.

    Pages record their file when opened; before saving, the file must still
    be in the recorded state. A file that did not exist when recorded must
    still not exist.

    Example:
        >>> monitor = FileMonitor()
        >>> monitor.record(Path("pages/Books.md"))
        >>> # Later, before write:
        >>> monitor.check(Path("pages/Books.md"))
    """

    def __init__(self) -> None:
        self._mtimes: Dict[Path, Optional[float]] = {}

    def record(self, path: Path) -> None:
        """
        Record the current modification time of a file.

        Args:
            path: File path to track, which does not have to exist
        """
        self._mtimes[path] = _mtime(path)

    def recorded(self, path: Path) -> Optional[float]:
        """Recorded modification time, None for untracked or missing files."""
        return self._mtimes.get(path)

    def is_tracked(self, path: Path) -> bool:
        return path in self._mtimes

    def is_modified(self, path: Path) -> bool:
        """
        Check if file has been modified since last record.

        Args:
            path: File path to check

        Returns:
            True if the file was created, deleted or changed since it was
            recorded, or if it is not tracked
        """
        if path not in self._mtimes:
            return True
        return _mtime(path) != self._mtimes[path]

    def check(self, path: Path) -> None:
        """
        Verify that a tracked file can be overwritten.

        Raises:
            FileModifiedError: If the file was deleted, replaced by a
                directory or modified since it was recorded
        """
        recorded = self._mtimes.get(path)
        if path.is_dir():
            raise FileModifiedError(str(path), "File was replaced by a directory")
        if recorded is not None and not path.exists():
            raise FileModifiedError(str(path), "File was deleted since it was opened")
        if self.is_modified(path):
            raise FileModifiedError(str(path), "File was modified since it was opened")

    def refresh(self, path: Path) -> None:
        """
        Update recorded modification time after a successful write.

        Args:
            path: File path to refresh
        """
        self._mtimes[path] = _mtime(path)

    def forget(self, path: Path) -> None:
        self._mtimes.pop(path, None)
