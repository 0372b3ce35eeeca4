"""Pages and journals loaded from the Markdown files of a graph."""

import io
import time
from datetime import date
from pathlib import Path
from typing import Optional

from logseq_graph.content import Block, BlockList, Properties
from logseq_graph.indexing import PageType
from logseq_graph.markdown import MarkdownWriter, parse
from logseq_graph.services.file_monitor import FileMonitor
from logseq_graph.services.file_operations import atomic_write
from logseq_graph.utils.logging import get_logger

logger = get_logger(__name__)

__all__ = ["Page", "PageType", "load_root_block", "open_or_create_page"]


def load_root_block(path: Path) -> tuple[Block, Optional[Block]]:
    """
    Parse a page file into its root block.

    Content written before the first bullet, usually page properties, is
    moved into a new first block so that a page is always a list of blocks.

    Returns:
        The root block and the block created for leading content, if any

    Raises:
        ParseError: If the file is not valid Markdown
        OSError: If the file cannot be read
    """
    root = parse(path.read_bytes())

    content = root.content()
    if not content:
        return root, None

    pre_block = Block(*content)
    root.prepend_child(pre_block)
    return root, pre_block


class Page:
    """
    A dedicated page or a journal day.

    Pages are opened through a ``Graph`` or a ``Transaction``. A page whose
    file does not exist yet is new; saving it creates the file.

    Attributes:
        path: Markdown file of the page
        type: Dedicated page or journal
        title: Title of the page
        date: Day of a journal page, None for dedicated pages
        is_new: True until the page exists on disk
        last_modified: Modification time of the file when loaded, or the
            time the page was created in memory
    """

    def __init__(
        self,
        path: Path,
        root: Block,
        type: PageType,
        title: str,
        date: Optional[date] = None,
        is_new: bool = False,
        last_modified: Optional[float] = None,
        pre_block: Optional[Block] = None,
        file_monitor: Optional[FileMonitor] = None,
    ):
        self.path = path
        self.root = root
        self.type = type
        self.title = title
        self.date = date
        self.is_new = is_new
        self.last_modified = last_modified if last_modified is not None else time.time()
        self._pre_block = pre_block
        self._file_monitor = file_monitor

    def __repr__(self) -> str:
        return f"Page(type={self.type.name}, title={self.title!r}, path={str(self.path)!r})"

    @property
    def properties(self) -> Properties:
        """Properties of the page, stored on its first block.

        A first block is added to empty pages.
        """
        blocks = self.root.blocks()
        if not blocks:
            block = Block()
            self.root.add_child(block)
            return block.properties
        return blocks[0].properties

    @property
    def blocks(self) -> BlockList:
        return self.root.blocks()

    def add_block(self, block: Block) -> None:
        self.root.add_child(block)

    def prepend_block(self, block: Block) -> None:
        self.root.prepend_child(block)

    def insert_block_after(self, block: Block, after: Block) -> bool:
        return self.root.insert_child_after(block, after)

    def insert_block_before(self, block: Block, before: Block) -> bool:
        return self.root.insert_child_before(block, before)

    def remove_block(self, block: Block) -> bool:
        return self.root.remove_child(block)

    def _writes_pre_block(self) -> bool:
        pre = self._pre_block
        return (
            pre is not None
            and self.root.first_child is pre
            and not pre.blocks()
            and bool(pre.content())
        )

    def render(self) -> str:
        """
        Return the Markdown text of the page.

        Leading content that had no bullet when the page was loaded is
        written without one again.

        Raises:
            EmitError: If the page contains nodes that cannot be written
        """
        buffer = io.StringIO()
        writer = MarkdownWriter(buffer)

        if self._writes_pre_block():
            for node in self._pre_block.content():
                writer.write(node)
            writer.write_blocks(self.root.blocks()[1:])
        else:
            writer.write(self.root)

        return buffer.getvalue()

    def save(self) -> None:
        """
        Write the page to disk atomically.

        Raises:
            FileModifiedError: If the file changed on disk since it was opened
            EmitError: If the page cannot be written as Markdown
            OSError: On file I/O errors
        """
        text = self.render()
        atomic_write(self.path, text, self._file_monitor)

        self.is_new = False
        self.last_modified = self.path.stat().st_mtime
        logger.info("page_saved", path=str(self.path), title=self.title)


def open_or_create_page(
    path: Path,
    type: PageType,
    title: str,
    date: Optional[date] = None,
    template_path: Optional[Path] = None,
    file_monitor: Optional[FileMonitor] = None,
) -> Page:
    """
    Open the page stored at ``path``, or start a new one if it is missing.

    New pages start from ``template_path`` when given, otherwise empty.

    Raises:
        ParseError: If the page or template is not valid Markdown
        OSError: If the file exists but cannot be read
    """
    if file_monitor is not None:
        file_monitor.record(path)

    try:
        stat = path.stat()
    except FileNotFoundError:
        stat = None

    if stat is None:
        pre_block = None
        if template_path is not None:
            root, pre_block = load_root_block(template_path)
            logger.debug("page_from_template", path=str(path), template=str(template_path))
        else:
            root = Block()

        return Page(
            path, root, type, title, date,
            is_new=True, pre_block=pre_block, file_monitor=file_monitor,
        )

    root, pre_block = load_root_block(path)
    return Page(
        path, root, type, title, date,
        last_modified=stat.st_mtime, pre_block=pre_block, file_monitor=file_monitor,
    )
