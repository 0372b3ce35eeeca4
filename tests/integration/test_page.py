"""Integration tests for loading, rendering and saving pages."""

import os
from datetime import date

import pytest

from logseq_graph.content import Block, PageLink, Paragraph, Text
from logseq_graph.graph import Graph
from logseq_graph.page import load_root_block
from logseq_graph.services.exceptions import FileModifiedError


def touch_later(path, seconds=10):
    stat = path.stat()
    os.utime(path, (stat.st_atime + seconds, stat.st_mtime + seconds))


class TestLoadRootBlock:
    """Test turning page files into blocks."""

    def test_leading_content_becomes_first_block(self, tmp_path):
        path = tmp_path / "Books.md"
        path.write_text("title:: Books\n\n- first")

        root, pre_block = load_root_block(path)

        assert pre_block is not None
        assert root.blocks()[0] is pre_block
        assert len(root.blocks()) == 2
        assert root.content() == []

    def test_page_starting_with_bullet(self, tmp_path):
        path = tmp_path / "Books.md"
        path.write_text("- first\n- second")

        root, pre_block = load_root_block(path)

        assert pre_block is None
        assert len(root.blocks()) == 2

    def test_empty_file(self, tmp_path):
        path = tmp_path / "Empty.md"
        path.write_text("")

        root, pre_block = load_root_block(path)

        assert pre_block is None
        assert root.blocks() == []


class TestRender:
    """Test writing pages back as Markdown."""

    def test_unchanged_pages_round_trip(self, graph_dir):
        """Test that opening and rendering a page keeps its text."""
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Reading/Fiction")
            assert page.render() == page.path.read_text()

            journal = graph.open_journal(date(2024, 1, 31))
            assert journal.render() == journal.path.read_text()

    def test_nested_blocks_are_normalised(self, graph_dir):
        """Test that nested bullets are written after a blank line."""
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Books")

            assert page.render() == (
                "type:: [[Collection]]\n"
                "\n"
                "- Dune by Frank Herbert\n"
                "  id:: 65b8f5a2-0000-4000-8000-000000000001\n"
                "\n"
                "  - Borrowed from the library\n"
                "- The Left Hand of Darkness #scifi"
            )

    def test_leading_properties_stay_unbulleted(self, graph_dir):
        (graph_dir / "pages" / "Shelf.md").write_text("title:: Shelf\n\n- first")

        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Shelf")

            assert page.render() == "title:: Shelf\n\n- first"

    def test_leading_block_with_children_gets_a_bullet(self, graph_dir):
        """Test that leading content with nested blocks is written as a block."""
        (graph_dir / "pages" / "Shelf.md").write_text("title:: Shelf\n\n- first")

        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Shelf")
            page.blocks[0].add_child(Block(Paragraph(Text("child"))))

            assert page.render() == "- title:: Shelf\n\n  - child\n- first"

    def test_leading_block_moved_gets_a_bullet(self, graph_dir):
        (graph_dir / "pages" / "Shelf.md").write_text("title:: Shelf\n\n- first")

        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Shelf")
            page.prepend_block(Block(Paragraph(Text("zero"))))

            assert page.render() == "- zero\n- title:: Shelf\n- first"

    def test_insert_and_remove_blocks(self, graph_dir):
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Reading/Fiction")
            first, second = page.blocks

            page.insert_block_before(Block(Paragraph(Text("Shelf"))), second)
            page.insert_block_after(Block(Paragraph(Text("Done"))), second)
            assert page.remove_block(first)
            assert not page.remove_block(first)

            assert page.render() == "- Shelf\n- Ask about [[Books]] at the club\n- Done"


class TestSave:
    """Test writing pages to disk."""

    def test_new_page_with_properties(self, graph_dir):
        """Test that properties of a new page go on its first block."""
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Dune")
            page.properties.set("type", PageLink("Book"))
            page.add_block(Block(Paragraph(Text("Hello"))))

            page.save()

            assert not page.is_new
            assert page.last_modified == page.path.stat().st_mtime

        assert (graph_dir / "pages" / "Dune.md").read_text() == "- type:: [[Book]]\n- Hello"

    def test_namespaced_page_file_name(self, graph_dir):
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Reading/Essays")
            page.add_block(Block(Paragraph(Text("Hello"))))
            page.save()

        assert (graph_dir / "pages" / "Reading___Essays.md").read_text() == "- Hello"

    def test_changed_on_disk(self, graph_dir):
        """Test that a page modified by someone else is not overwritten."""
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Books")
            page.add_block(Block(Paragraph(Text("Solaris"))))

            touch_later(page.path)
            before = page.path.read_text()

            with pytest.raises(FileModifiedError) as exc_info:
                page.save()

            assert exc_info.value.path == str(page.path)
            assert page.path.read_text() == before

    def test_created_on_disk(self, graph_dir):
        """Test that a new page is not written over a file created meanwhile."""
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Dune")
            page.path.write_text("- written elsewhere")

            with pytest.raises(FileModifiedError):
                page.save()

        assert (graph_dir / "pages" / "Dune.md").read_text() == "- written elsewhere"

    def test_save_twice(self, graph_dir):
        """Test that saving records the new state of the file."""
        with Graph.open(graph_dir) as graph:
            page = graph.open_page("Books")
            page.add_block(Block(Paragraph(Text("Solaris"))))
            page.save()
            page.add_block(Block(Paragraph(Text("Hyperion"))))
            page.save()

        assert (graph_dir / "pages" / "Books.md").read_text().endswith("- Solaris\n- Hyperion")
