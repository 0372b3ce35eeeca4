"""Transactions: edit several pages and save them together."""

from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from logseq_graph.content import Block, Paragraph, Properties, Text
from logseq_graph.page import Page
from logseq_graph.search import BlockResult, PageResult, SearchOptions, SearchResults
from logseq_graph.services.exceptions import FileModifiedError
from logseq_graph.services.file_monitor import FileMonitor
from logseq_graph.utils.dates import DateFormat
from logseq_graph.utils.logging import get_logger

if TYPE_CHECKING:
    from logseq_graph.graph import Graph

logger = get_logger(__name__)


def _local(when: datetime) -> datetime:
    """Naive local time of ``when``."""
    if when.tzinfo is None:
        return when
    return when.astimezone().replace(tzinfo=None)


def parse_block_time(
    time_format: Optional[DateFormat], reference: datetime, block: Block
) -> Optional[datetime]:
    """
    Read the time stamp leading a block.

    The first text of the first paragraph of the block is read with
    ``time_format`` and combined with the day of ``reference``.

    Returns:
        The time stamp, or None when the block does not start with one
    """
    if time_format is None:
        return None

    paragraph = block.children.find_deep(lambda n: isinstance(n, Paragraph))
    if paragraph is None:
        return None

    text = paragraph.children.find_deep(lambda n: isinstance(n, Text))
    if text is None:
        return None

    try:
        parsed = time_format.parse(text.value.strip())
    except ValueError:
        return None

    return reference.replace(hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0)


class Transaction:
    """
    A set of pages opened for editing and saved together.

    Pages are cached, so opening the same page twice returns the same
    object. ``save()`` checks every page for changes made on disk since it
    was opened before writing any of them.

    Example:
        >>> tx = graph.new_transaction()
        >>> tx.add_journal_block(datetime.now(), Block(Text("Called the plumber")))
        >>> tx.save()
    """

    def __init__(self, graph: "Graph"):
        self.graph = graph
        self.file_monitor = FileMonitor()
        self._pages: dict[Path, Page] = {}

    @property
    def pages(self) -> list[Page]:
        """Pages opened through this transaction."""
        return list(self._pages.values())

    def _cached(self, path: Path, opener) -> Page:
        page = self._pages.get(path)
        if page is None:
            page = opener()
            self._pages[path] = page
        return page

    def open_page(self, title: str) -> Page:
        path = self.graph.paths.page_path(title)
        return self._cached(
            path, lambda: self.graph.open_page(title, file_monitor=self.file_monitor)
        )

    def open_journal(self, day: Union[date, datetime]) -> Page:
        if isinstance(day, datetime):
            day = _local(day).date()
        path = self.graph.paths.journal_path(day)
        return self._cached(
            path, lambda: self.graph.open_journal(day, file_monitor=self.file_monitor)
        )

    def search_pages(self, options: Optional[SearchOptions] = None) -> SearchResults[PageResult]:
        """Search pages; results open their pages through this transaction."""
        return self.graph.search_pages(options, source=self)

    def search_blocks(self, options: Optional[SearchOptions] = None) -> SearchResults[BlockResult]:
        """Search blocks; results open their pages through this transaction."""
        return self.graph.search_blocks(options, source=self)

    def add_journal_block(self, when: datetime, block: Block) -> Page:
        """
        Add ``block`` to the journal of the day of ``when``.

        The block goes after the last block whose time stamp is not later
        than ``when``, or first when every block is later. With a block time
        format configured, the block is prefixed with the time of ``when``.

        Returns:
            The journal page the block was added to
        """
        when = _local(when)
        page = self.open_journal(when)

        time_format = None
        if self.graph.block_time_format:
            time_format = DateFormat(self.graph.block_time_format)

        insert_after = None
        for existing in page.blocks:
            stamp = parse_block_time(time_format, when, existing)
            if stamp is not None and stamp > when:
                break
            if existing.first_child is not None:
                insert_after = existing

        if time_format is not None:
            self._prefix_time(block, self.graph.block_time_formatter(time_format.format(when)))

        if insert_after is None:
            page.prepend_block(block)
        else:
            page.insert_block_after(block, insert_after)

        logger.debug(
            "journal_block_added",
            journal=page.title,
            after_existing=insert_after is not None,
        )
        return page

    @staticmethod
    def _prefix_time(block: Block, time_node) -> None:
        first = block.first_child
        if isinstance(first, Properties):
            first = first.next_sibling

        if isinstance(first, Paragraph):
            first.prepend_child(time_node)
            first.insert_child_after(Text(" "), time_node)
        else:
            paragraph = Paragraph(time_node, Text(" "))
            if first is None:
                block.add_child(paragraph)
            else:
                block.insert_child_before(paragraph, first)

    def verify(self) -> None:
        """
        Check that no opened page changed on disk.

        Raises:
            FileModifiedError: If a page was deleted, replaced by a
                directory or modified since it was opened
        """
        for path in self._pages:
            self.file_monitor.check(path)

    def save(self) -> None:
        """
        Write every opened page.

        Nothing is written unless all pages pass the modification check.

        Raises:
            FileModifiedError: If a page changed on disk since it was opened
            EmitError: If a page cannot be written as Markdown
            OSError: On file I/O errors
        """
        try:
            self.verify()
        except FileModifiedError as e:
            logger.warning("transaction_conflict", path=e.path, reason=e.message)
            raise

        for page in self._pages.values():
            page.save()

        logger.info("transaction_saved", pages=len(self._pages))
