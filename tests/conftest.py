"""Shared test fixtures for all test modules."""

from pathlib import Path

import pytest
import structlog

DEFAULT_CONFIG_EDN = """{:meta/version 1
 ;; Journal files follow the default formats
 :journal/page-title-format "MMM do, yyyy"
 :journal/file-name-format "yyyy_MM_dd"
 :file/name-format :triple-lowbar}
"""


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep logs, settings and index files out of the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo logging configuration done by CLI commands."""
    yield
    structlog.reset_defaults()


def make_graph(root: Path, config: str = DEFAULT_CONFIG_EDN) -> Path:
    """Create an empty graph directory with a config.edn."""
    (root / "logseq").mkdir(parents=True)
    (root / "logseq" / "config.edn").write_text(config, encoding="utf-8")
    (root / "journals").mkdir()
    (root / "pages").mkdir()
    return root


@pytest.fixture
def graph_dir(tmp_path):
    """
    Small graph with two pages and two journals.

    - pages/Books.md: page properties and a nested outline
    - pages/Reading___Fiction.md: namespaced page with a tag
    - journals/2024_01_30.md and journals/2024_01_31.md
    """
    root = make_graph(tmp_path / "notes")

    (root / "pages" / "Books.md").write_text(
        "type:: [[Collection]]\n"
        "\n"
        "- Dune by Frank Herbert\n"
        "  id:: 65b8f5a2-0000-4000-8000-000000000001\n"
        "  - Borrowed from the library\n"
        "- The Left Hand of Darkness #scifi",
        encoding="utf-8",
    )
    (root / "pages" / "Reading___Fiction.md").write_text(
        "- Novels I want to read #scifi\n"
        "- Ask about [[Books]] at the club",
        encoding="utf-8",
    )
    (root / "journals" / "2024_01_30.md").write_text(
        "- Called the plumber about the kitchen sink",
        encoding="utf-8",
    )
    (root / "journals" / "2024_01_31.md").write_text(
        "- **09:00** Standup\n"
        "- **14:30** Review [[Books]] list",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def empty_graph(tmp_path):
    """Factory creating an empty graph, optionally with its own config.edn."""
    def factory(config: str = DEFAULT_CONFIG_EDN) -> Path:
        return make_graph(tmp_path / "empty", config)
    return factory
