"""Unit tests for atomic_write function."""

import os

import pytest

from logseq_graph.services import file_operations
from logseq_graph.services.exceptions import FileModifiedError
from logseq_graph.services.file_monitor import FileMonitor
from logseq_graph.services.file_operations import atomic_write


def touch_later(path, seconds=10):
    stat = path.stat()
    os.utime(path, (stat.st_atime + seconds, stat.st_mtime + seconds))


class TestAtomicWrite:
    """Test atomic_write function with concurrent modification detection."""

    def test_atomic_write_creates_new_file(self, tmp_path):
        """Test that atomic_write creates a new file successfully."""
        target = tmp_path / "Books.md"
        content = "- Dune\n- Solaris"

        atomic_write(target, content)

        assert target.read_text(encoding="utf-8") == content

    def test_atomic_write_creates_parent_directories(self, tmp_path):
        """Test that a page can be written into a missing pages directory."""
        target = tmp_path / "graph" / "pages" / "Books.md"

        atomic_write(target, "- Dune")

        assert target.read_text(encoding="utf-8") == "- Dune"

    def test_atomic_write_overwrites_existing_file(self, tmp_path):
        """Test that atomic_write overwrites existing file."""
        target = tmp_path / "Books.md"
        target.write_text("Old content")

        atomic_write(target, "New content")

        assert target.read_text(encoding="utf-8") == "New content"

    def test_atomic_write_with_file_monitor(self, tmp_path):
        """Test atomic_write updates file monitor after successful write."""
        target = tmp_path / "Books.md"
        target.write_text("Initial content")
        monitor = FileMonitor()
        monitor.record(target)

        atomic_write(target, "Updated content", monitor)

        assert target.read_text(encoding="utf-8") == "Updated content"
        assert not monitor.is_modified(target)

    def test_atomic_write_detects_early_modification(self, tmp_path):
        """Test that atomic_write detects file modification before write (early check)."""
        target = tmp_path / "Books.md"
        target.write_text("Initial content")
        monitor = FileMonitor()
        monitor.record(target)

        target.write_text("Modified by external process")
        touch_later(target)

        with pytest.raises(FileModifiedError, match="early check"):
            atomic_write(target, "New content", monitor)

        assert target.read_text() == "Modified by external process"
        assert list(tmp_path.glob(".*.tmp.*")) == []

    def test_atomic_write_detects_late_modification(self, tmp_path, monkeypatch):
        """Test that atomic_write detects file modification during write (late check)."""
        target = tmp_path / "Books.md"
        target.write_text("Initial content")
        monitor = FileMonitor()
        monitor.record(target)

        original_fsync = os.fsync

        def fsync_with_concurrent_edit(fd):
            original_fsync(fd)
            target.write_text("Modified during write")
            touch_later(target)

        monkeypatch.setattr(file_operations.os, "fsync", fsync_with_concurrent_edit)

        with pytest.raises(FileModifiedError, match="late check"):
            atomic_write(target, "New content", monitor)

        assert target.read_text() == "Modified during write"
        assert list(tmp_path.glob(".*.tmp.*")) == []

    def test_atomic_write_cleans_up_temp_file_on_error(self, tmp_path, monkeypatch):
        """Test that atomic_write cleans up temporary file on error."""
        target = tmp_path / "Books.md"

        def failing_fsync(fd):
            raise OSError("Simulated write error")

        monkeypatch.setattr(file_operations.os, "fsync", failing_fsync)

        with pytest.raises(OSError, match="Simulated write error"):
            atomic_write(target, "Content")

        assert not target.exists()
        assert list(tmp_path.glob(".*.tmp.*")) == []

    def test_untracked_file_is_not_checked(self, tmp_path):
        """Test that a monitor only guards files it has recorded."""
        target = tmp_path / "Books.md"
        target.write_text("Unrelated content")

        atomic_write(target, "New content", FileMonitor())

        assert target.read_text() == "New content"

    def test_atomic_write_with_unicode_content(self, tmp_path):
        """Test that atomic_write handles Unicode content correctly."""
        target = tmp_path / "unicode.md"
        content = "- 日本語\n- Emoji: 🤖✅\n- Special: €£¥"

        atomic_write(target, content)

        assert target.read_text(encoding="utf-8") == content
