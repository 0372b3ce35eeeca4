"""Integration tests for opening, syncing and searching graphs."""

import os
from datetime import date

import pytest

from logseq_graph import ConfigError, IndexingDisabledError, PageNotFoundError
from logseq_graph.content import PageLink, is_of_type
from logseq_graph.events import PageDeleted, PageUpdated
from logseq_graph.graph import Graph
from logseq_graph.indexing import PageType, content_matches, references, title_matches
from logseq_graph.search import SearchOptions

ALL_PAGES = [
    "journals/2024_01_30.md",
    "journals/2024_01_31.md",
    "pages/Books.md",
    "pages/Reading___Fiction.md",
]


def touch_later(path, seconds=10):
    stat = path.stat()
    os.utime(path, (stat.st_atime + seconds, stat.st_mtime + seconds))


@pytest.fixture
def indexed_graph(graph_dir):
    """Graph opened with an in-memory index and no watcher."""
    graph = Graph.open(graph_dir, index=True, watch_changes=False)
    yield graph
    graph.close()


class TestOpen:
    """Test opening graphs."""

    def test_open_without_index(self, graph_dir):
        with Graph.open(graph_dir) as graph:
            assert graph.directory == graph_dir.resolve()
            assert graph.index is None
            assert graph.config.journal_page_title_format == "MMM do, yyyy"

    def test_missing_config(self, tmp_path):
        """Test that a directory without logseq/config.edn is not a graph."""
        with pytest.raises(ConfigError, match="not found"):
            Graph.open(tmp_path)

    def test_invalid_config(self, empty_graph):
        root = empty_graph(config="{:journals-directory")

        with pytest.raises(ConfigError, match="invalid"):
            Graph.open(root)

    def test_listener_sees_every_indexed_page(self, graph_dir):
        events = []

        with Graph.open(graph_dir, index=True, listener=events.append, watch_changes=False):
            pass

        assert sorted(event.sub_path for event in events) == ALL_PAGES

    def test_search_requires_index(self, graph_dir):
        with Graph.open(graph_dir) as graph:
            with pytest.raises(IndexingDisabledError):
                graph.search_pages()


class TestSync:
    """Test keeping the index in line with the files."""

    def test_unchanged_files_are_skipped(self, indexed_graph, graph_dir):
        assert indexed_graph.sync() == 0

        touch_later(graph_dir / "pages" / "Books.md")

        assert indexed_graph.sync() == 1

    def test_removed_files_leave_the_index(self, graph_dir, tmp_path):
        """Test that pages deleted while the graph was closed are dropped."""
        index_path = tmp_path / "index.sqlite"
        Graph.open(graph_dir, index=True, index_path=index_path, watch_changes=False).close()

        (graph_dir / "pages" / "Books.md").unlink()

        with Graph.open(graph_dir, index=True, index_path=index_path, watch_changes=False) as graph:
            assert "pages/Books.md" not in graph.index.page_sub_paths()
            assert graph.search_pages(SearchOptions().with_query(title_matches("books"))).count == 0

    def test_stored_index_is_reused(self, graph_dir, tmp_path):
        index_path = tmp_path / "index.sqlite"
        Graph.open(graph_dir, index=True, index_path=index_path, watch_changes=False).close()

        events = []
        with Graph.open(graph_dir, index=True, index_path=index_path,
                        listener=events.append, watch_changes=False) as graph:
            assert graph.index.page_sub_paths() == ALL_PAGES

        assert events == []

    def test_unparsable_and_foreign_files_are_skipped(self, graph_dir):
        """Test that broken pages do not stop indexing."""
        (graph_dir / "pages" / "Broken.md").write_bytes(b"- \xff\xfe")
        (graph_dir / "journals" / "notes.md").write_text("- not a journal day")
        (graph_dir / "pages" / "image.png").write_bytes(b"\x89PNG")

        with Graph.open(graph_dir, index=True, watch_changes=False) as graph:
            assert graph.index.page_sub_paths() == ALL_PAGES

    def test_rebuild_index(self, indexed_graph):
        assert indexed_graph.rebuild_index() == 4
        assert indexed_graph.index.page_sub_paths() == ALL_PAGES


class TestPages:
    """Test opening pages and journals."""

    def test_open_page(self, graph_dir):
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Reading/Fiction")

            assert page.path == graph.directory / "pages" / "Reading___Fiction.md"
            assert page.type is PageType.DEDICATED
            assert not page.is_new
            assert len(page.blocks) == 2

    def test_open_missing_page(self, graph_dir):
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Someday")

            assert page.is_new
            assert len(page.blocks) == 0

            with pytest.raises(PageNotFoundError, match="Someday"):
                graph.open_page("Someday", must_exist=True)

    def test_open_journal(self, graph_dir):
        with Graph.open(graph_dir) as graph:
            journal = graph.open_journal(date(2024, 1, 31))

            assert journal.title == "Jan 31st, 2024"
            assert journal.date == date(2024, 1, 31)
            assert journal.type is PageType.JOURNAL
            assert len(journal.blocks) == 2

    def test_new_journal_from_template(self, graph_dir):
        """Test that new journals start from the configured template."""
        config = (graph_dir / "logseq" / "config.edn").read_text()
        (graph_dir / "logseq" / "config.edn").write_text(
            config.replace("{:meta/version 1", '{:meta/version 1 :default-templates {:journals "templates/daily.md"}')
        )
        (graph_dir / "templates").mkdir()
        (graph_dir / "templates" / "daily.md").write_text("- Morning\n- Evening")

        with Graph.open(graph_dir) as graph:
            journal = graph.open_journal(date(2024, 2, 1))

            assert journal.is_new
            assert journal.render() == "- Morning\n- Evening"

    def test_page_properties(self, graph_dir):
        """Test that text before the first bullet holds page properties."""
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Books")

            assert page.properties.get("type")[0].to == "Collection"
            assert isinstance(page.properties.get("type")[0], PageLink)


class TestSearch:
    """Test searching through the graph."""

    def test_search_pages(self, indexed_graph):
        results = indexed_graph.search_pages(SearchOptions().with_query(title_matches("books")))

        assert results.count == 1
        result = results.results[0]
        assert result.title == "Books"
        assert result.type is PageType.DEDICATED
        assert result.open().title == "Books"

    def test_search_journals(self, indexed_graph):
        results = indexed_graph.search_pages(SearchOptions().with_query(content_matches("plumber")))

        result = results.results[0]
        assert result.type is PageType.JOURNAL
        assert result.title == "Jan 30th, 2024"
        assert result.date == date(2024, 1, 30)
        assert result.open().path.name == "2024_01_30.md"

    def test_search_blocks(self, indexed_graph):
        """Test that block results open the block they point at."""
        results = indexed_graph.search_blocks(SearchOptions().with_query(references("Books")))

        assert results.count == 2
        titles = sorted(result.page_title for result in results)
        assert titles == ["Jan 31st, 2024", "Reading/Fiction"]

        for result in results:
            block, page = result.open()
            links = block.content().filter_deep(is_of_type(PageLink))
            assert "books" in [link.to.lower() for link in links]

    def test_search_block_by_id(self, indexed_graph):
        results = indexed_graph.search_blocks(SearchOptions().with_query(content_matches("dune")))

        result = results.results[0]
        assert result.id == "65b8f5a2-0000-4000-8000-000000000001"
        block, _ = result.open()
        assert block.id == result.id


@pytest.mark.slow
class TestWatch:
    """Test change notifications from disk."""

    def test_updated_and_deleted(self, graph_dir):
        with Graph.open(graph_dir, index=True, debounce_seconds=0.2) as graph:
            with graph.watch() as watcher:
                (graph_dir / "pages" / "Solaris.md").write_text("- by Stanislaw Lem")

                updated = next(watcher.events(timeout=10))
                assert isinstance(updated, PageUpdated)
                assert updated.page.title == "Solaris"

                results = graph.search_pages(SearchOptions().with_query(content_matches("lem")))
                assert [r.title for r in results] == ["Solaris"]

                (graph_dir / "pages" / "Solaris.md").unlink()

                deleted = next(watcher.events(timeout=10))
                assert isinstance(deleted, PageDeleted)
                assert deleted.title == "Solaris"
