"""Unit tests for structured logging setup."""

import json

import pytest

from logseq_graph.utils.logging import LOG_LEVEL_ENV, configure_logging, default_log_file, get_logger


def read_entries(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


class TestConfigureLogging:
    """Test JSON logging to a file."""

    def test_writes_json_lines(self, tmp_path, monkeypatch):
        """Test that events are written as one JSON object per line."""
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        log_file = tmp_path / "logs" / "logseq-graph.log"

        configure_logging(log_file=log_file)
        get_logger("tests").info("page_saved", path="pages/Books.md")

        entries = read_entries(log_file)
        assert len(entries) == 1
        assert entries[0]["event"] == "page_saved"
        assert entries[0]["path"] == "pages/Books.md"
        assert entries[0]["level"] == "info"
        assert "timestamp" in entries[0]

    def test_debug_filtered_by_default(self, tmp_path, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        log_file = tmp_path / "graph.log"

        configure_logging(log_file=log_file)
        logger = get_logger("tests")
        logger.debug("watcher_flush")
        logger.warning("index_page_skipped")

        assert [entry["event"] for entry in read_entries(log_file)] == ["index_page_skipped"]

    @pytest.mark.parametrize("level, expected", [
        ("debug", ["watcher_flush", "index_page_skipped"]),
        ("ERROR", []),
        ("verbose", ["index_page_skipped"]),
    ])
    def test_level_from_environment(self, tmp_path, monkeypatch, level, expected):
        """Test that unknown levels fall back to INFO."""
        monkeypatch.setenv(LOG_LEVEL_ENV, level)
        log_file = tmp_path / "graph.log"

        configure_logging(log_file=log_file)
        logger = get_logger("tests")
        logger.debug("watcher_flush")
        logger.warning("index_page_skipped")

        assert [entry["event"] for entry in read_entries(log_file)] == expected

    def test_default_location(self, isolated_home):
        configure_logging()

        assert default_log_file() == isolated_home / ".cache" / "logseq-graph" / "logs" / "logseq-graph.log"
        assert default_log_file().parent.is_dir()
