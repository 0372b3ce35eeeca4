"""Atomic page writes guarded by modification checks."""

import os
from pathlib import Path
from typing import Optional

from logseq_graph.services.exceptions import FileModifiedError
from logseq_graph.services.file_monitor import FileMonitor
from logseq_graph.utils.logging import get_logger

logger = get_logger(__name__)


def _verify(path: Path, file_monitor: Optional[FileMonitor], stage: str) -> None:
    if file_monitor is None or not file_monitor.is_tracked(path):
        return
    try:
        file_monitor.check(path)
    except FileModifiedError as e:
        raise FileModifiedError(str(path), f"{e.message} ({stage} check)") from e


def temp_path_for(path: Path) -> Path:
    """Hidden temporary file next to ``path``, on the same filesystem."""
    return path.parent / f".{path.name}.tmp.{os.getpid()}"


def atomic_write(
    path: Path,
    content: str,
    file_monitor: Optional[FileMonitor] = None
) -> None:
    """
    Replace ``path`` with ``content`` in one step.

    The text goes to a temporary file that is synced and then renamed over
    the target. A tracked file is checked against ``file_monitor`` twice:
    before anything is written and again right before the rename. Missing
    parent directories are created, so new pages can be written into a
    fresh graph. Content is written as UTF-8 without newline translation.

    Args:
        path: Target file path
        content: Text of the page
        file_monitor: Records the state the file had when it was opened

    Raises:
        FileModifiedError: If the file changed on disk since it was recorded
        OSError: On file I/O errors
    """
    _verify(path, file_monitor, "early")

    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = temp_path_for(path)

    try:
        with open(temp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        _verify(path, file_monitor, "late")
        temp_path.replace(path)
    except BaseException as e:
        temp_path.unlink(missing_ok=True)
        if not isinstance(e, FileModifiedError):
            logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise

    if file_monitor is not None:
        file_monitor.refresh(path)

    logger.debug("atomic_write_success", path=str(path), size=len(content))
