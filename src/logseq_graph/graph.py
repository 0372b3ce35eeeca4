"""Logseq graphs: a directory of Markdown pages and journals."""

import threading
from datetime import date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Union

from logseq_graph.content import InlineNode, Strong, Text
from logseq_graph.errors import (
    ConfigError,
    IndexingDisabledError,
    LogseqGraphError,
    PageNotFoundError,
)
from logseq_graph.events import OpenEvent, PageDeleted, PageIndexed, PageUpdated
from logseq_graph.indexing import Index, IndexedPage, PageType, SQLiteIndex
from logseq_graph.models.config import GraphConfig
from logseq_graph.page import Page, open_or_create_page
from logseq_graph.search import BlockResult, PageResult, SearchOptions, SearchResults
from logseq_graph.services.file_monitor import FileMonitor
from logseq_graph.utils.filenames import (
    UnknownFilenameFormatError,
    filename_to_title,
    title_to_filename,
)
from logseq_graph.utils.logging import get_logger
from logseq_graph.watcher import DEFAULT_DEBOUNCE_SECONDS, ChangeWatcher, Watcher

if TYPE_CHECKING:
    from logseq_graph.transaction import Transaction

logger = get_logger(__name__)

PAGE_EXTENSION = ".md"

BlockTimeFormatter = Callable[[str], InlineNode]
OpenListener = Callable[[OpenEvent], None]

PageInfo = tuple[PageType, str, Optional[date]]


def default_block_time_formatter(value: str) -> InlineNode:
    """Time stamps are written in bold."""
    return Strong(Text(value))


def _as_date(value: Union[date, datetime]) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


class GraphPaths:
    """
    Locations of the files of a graph.

    Args:
        graph_path: Graph directory
        config: Settings read from ``logseq/config.edn``
    """

    def __init__(self, graph_path: Path, config: GraphConfig):
        self.graph_path = graph_path
        self.config = config
        self._file_format = config.journal_file_format
        self._title_format = config.journal_title_format

    @property
    def journals_dir(self) -> Path:
        return self.graph_path / self.config.journals_directory

    @property
    def pages_dir(self) -> Path:
        return self.graph_path / self.config.pages_directory

    def page_path(self, title: str) -> Path:
        """
        File of the dedicated page called ``title``.

        Raises:
            UnknownFilenameFormatError: If the graph uses an unsupported
                file name format
        """
        name = title_to_filename(title, self.config.file_name_format)
        return self.pages_dir / (name + PAGE_EXTENSION)

    def journal_path(self, day: date) -> Path:
        return self.journals_dir / (self._file_format.format(day) + PAGE_EXTENSION)

    def journal_title(self, day: date) -> str:
        return self._title_format.format(day)

    def sub_path(self, path: Path) -> str:
        """Path relative to the graph directory, with forward slashes."""
        return path.relative_to(self.graph_path).as_posix()

    def _list(self, directory: Path) -> list[Path]:
        if not directory.is_dir():
            return []
        return sorted(
            p for p in directory.iterdir()
            if p.suffix == PAGE_EXTENSION and p.is_file() and not p.name.startswith(".")
        )

    def list_journals(self) -> list[Path]:
        return self._list(self.journals_dir)

    def list_pages(self) -> list[Path]:
        return self._list(self.pages_dir)

    def classify(self, path: Path) -> Optional[PageInfo]:
        """
        Work out which page a file holds.

        Returns:
            Page type, title and journal date, or None for files that are
            not pages of the graph or journals whose name does not follow
            the journal file name format
        """
        if path.suffix != PAGE_EXTENSION:
            return None

        name = path.name[: -len(PAGE_EXTENSION)]

        if path.parent == self.journals_dir:
            try:
                day = self._file_format.parse(name).date()
            except ValueError:
                return None
            return PageType.JOURNAL, self.journal_title(day), day

        if path.parent == self.pages_dir:
            try:
                title = filename_to_title(name, self.config.file_name_format)
            except UnknownFilenameFormatError:
                logger.warning("page_filename_format_unknown", path=str(path))
                return None
            return PageType.DEDICATED, title, None

        return None


class Graph:
    """
    A Logseq graph opened from disk.

    Open graphs with ``Graph.open()``. When opened with an index the graph
    is synced with it and kept up to date by watching the journals and
    pages directories.

    Example:
        >>> with Graph.open("~/notes", index=True) as graph:
        ...     results = graph.search_pages(SearchOptions().with_query(title_matches("books")))
    """

    def __init__(
        self,
        directory: Path,
        config: GraphConfig,
        index: Optional[Index] = None,
        block_time_format: Optional[str] = None,
        block_time_formatter: Optional[BlockTimeFormatter] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self.directory = directory
        self.config = config
        self.paths = GraphPaths(directory, config)
        self.index = index
        self.block_time_format = block_time_format
        self.block_time_formatter = block_time_formatter or default_block_time_formatter
        self.debounce_seconds = debounce_seconds
        self.file_monitor = FileMonitor()

        self._lock = threading.Lock()
        self._watchers: list[Watcher] = []
        self._change_watcher: Optional[ChangeWatcher] = None

    @classmethod
    def open(
        cls,
        directory: Union[str, Path],
        *,
        index: bool = False,
        index_path: Optional[Path] = None,
        block_time_format: Optional[str] = None,
        block_time_formatter: Optional[BlockTimeFormatter] = None,
        listener: Optional[OpenListener] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        watch_changes: bool = True,
    ) -> "Graph":
        """
        Open the graph stored in ``directory``.

        Args:
            directory: Graph directory, holding ``logseq/config.edn``
            index: Keep a search index of the graph
            index_path: Index database file, None keeps the index in memory
            block_time_format: Time stamp pattern such as ``HH:mm`` prefixed
                to blocks added with ``Transaction.add_journal_block``
            block_time_formatter: Builds the node holding the time stamp
            listener: Called with a ``PageIndexed`` event for every page
                indexed while syncing
            debounce_seconds: Quiet period before a changed file is handled
            watch_changes: Keep the index up to date while the graph is open

        Raises:
            ConfigError: If ``logseq/config.edn`` is missing or invalid
        """
        directory = Path(directory).expanduser().resolve()
        config_path = directory / "logseq" / "config.edn"

        try:
            config = GraphConfig.load(directory)
        except FileNotFoundError as e:
            raise ConfigError(f"Graph configuration not found at {config_path}") from e
        except ValueError as e:
            raise ConfigError(f"Graph configuration invalid at {config_path}: {e}") from e

        graph = cls(
            directory,
            config,
            index=SQLiteIndex(index_path) if index else None,
            block_time_format=block_time_format,
            block_time_formatter=block_time_formatter,
            debounce_seconds=debounce_seconds,
        )
        logger.info("graph_opened", directory=str(directory), index=index)

        try:
            graph.sync(listener)
        except Exception:
            graph.close()
            raise

        if graph.index is not None and watch_changes:
            graph._start_change_watcher()
        return graph

    def close(self) -> None:
        """Stop watching for changes and close the index."""
        with self._lock:
            change_watcher = self._change_watcher
            self._change_watcher = None
            watchers = list(self._watchers)
            self._watchers.clear()

        if change_watcher is not None:
            change_watcher.stop()

        for watcher in watchers:
            watcher.close()

        if self.index is not None:
            self.index.close()
            self.index = None

    def __enter__(self) -> "Graph":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def new_transaction(self) -> "Transaction":
        from logseq_graph.transaction import Transaction

        return Transaction(self)

    def _open(
        self,
        path: Path,
        info: PageInfo,
        template_path: Optional[Path] = None,
        file_monitor: Optional[FileMonitor] = None,
    ) -> Page:
        page_type, title, day = info
        return open_or_create_page(
            path,
            page_type,
            title,
            day,
            template_path=template_path,
            file_monitor=file_monitor or self.file_monitor,
        )

    def open_page(
        self,
        title: str,
        must_exist: bool = False,
        file_monitor: Optional[FileMonitor] = None,
    ) -> Page:
        """
        Open the dedicated page called ``title``.

        A page without a file is returned as a new page unless
        ``must_exist`` is set.

        Raises:
            PageNotFoundError: If ``must_exist`` is set and the page has no file
            ParseError: If the file is not valid Markdown
        """
        path = self.paths.page_path(title)
        if must_exist and not path.is_file():
            raise PageNotFoundError(title, str(path))
        return self._open(path, (PageType.DEDICATED, title, None), file_monitor=file_monitor)

    def _journal_template(self) -> Optional[Path]:
        template = self.config.default_journal_template
        if not template:
            return None

        path = self.directory / template
        if not path.is_file():
            logger.warning("journal_template_missing", path=str(path))
            return None
        return path

    def open_journal(
        self,
        day: Union[date, datetime],
        file_monitor: Optional[FileMonitor] = None,
    ) -> Page:
        """
        Open the journal page of ``day``.

        New journals start from the configured journal template.

        Raises:
            ParseError: If the file is not valid Markdown
        """
        day = _as_date(day)
        return self._open(
            self.paths.journal_path(day),
            (PageType.JOURNAL, self.paths.journal_title(day), day),
            template_path=self._journal_template(),
            file_monitor=file_monitor,
        )

    def open_path(self, path: Path) -> Optional[Page]:
        """Open the page stored in ``path``, None if it is not a page of the graph."""
        info = self.paths.classify(path)
        if info is None:
            return None
        return self._open(path, info)

    def _index_page(self, page: Page) -> None:
        self.index.index_page(
            IndexedPage(
                sub_path=self.paths.sub_path(page.path),
                type=page.type,
                title=page.title,
                date=page.date,
                last_modified=page.last_modified,
                blocks=page.blocks,
            )
        )

    def sync(self, listener: Optional[OpenListener] = None) -> int:
        """
        Bring the index up to date with the files of the graph.

        Files whose modification time matches the index are skipped.

        Returns:
            Number of pages indexed
        """
        if self.index is None:
            return 0

        indexed = 0
        skipped = 0
        files = self.paths.list_journals() + self.paths.list_pages()

        on_disk = {self.paths.sub_path(path) for path in files}
        removed = [p for p in self.index.page_sub_paths() if p not in on_disk]
        for sub_path in removed:
            self.index.delete_page(sub_path)

        for path in files:
            sub_path = self.paths.sub_path(path)
            if self.index.get_last_modified(sub_path) == path.stat().st_mtime:
                continue

            try:
                page = self.open_path(path)
            except LogseqGraphError as e:
                logger.warning("index_page_skipped", path=sub_path, error=str(e))
                skipped += 1
                continue

            if page is None:
                continue

            self._index_page(page)
            indexed += 1
            if listener is not None:
                listener(PageIndexed(sub_path))

        self.index.sync()
        logger.info(
            "index_sync_completed", indexed=indexed, skipped=skipped, removed=len(removed)
        )
        return indexed

    def rebuild_index(self, listener: Optional[OpenListener] = None) -> int:
        """Drop every indexed page and index the graph again."""
        self._require_index().clear()
        return self.sync(listener)

    def _require_index(self) -> Index:
        if self.index is None:
            raise IndexingDisabledError()
        return self.index

    def search_pages(
        self, options: Optional[SearchOptions] = None, source=None
    ) -> SearchResults[PageResult]:
        """
        Search pages and journals.

        Raises:
            IndexingDisabledError: If the graph was opened without an index
        """
        index = self._require_index()
        options = options or SearchOptions()
        source = source or self

        found = index.search_pages(options.effective_query(), options.index_options())

        results = []
        for doc in found.results:
            if doc.type is PageType.JOURNAL and doc.date is not None:
                results.append(PageResult(
                    type=PageType.JOURNAL,
                    title=self.paths.journal_title(doc.date),
                    date=doc.date,
                    opener=lambda day=doc.date: source.open_journal(day),
                ))
            else:
                results.append(PageResult(
                    type=PageType.DEDICATED,
                    title=doc.title,
                    date=None,
                    opener=lambda title=doc.title: source.open_page(title),
                ))
        return SearchResults(count=found.count, results=results)

    def search_blocks(
        self, options: Optional[SearchOptions] = None, source=None
    ) -> SearchResults[BlockResult]:
        """
        Search blocks of every page.

        Raises:
            IndexingDisabledError: If the graph was opened without an index
        """
        index = self._require_index()
        options = options or SearchOptions()
        source = source or self

        found = index.search_blocks(options.effective_query(), options.index_options())

        results = []
        for doc in found.results:
            path = self.directory / doc.page_sub_path
            info = self.paths.classify(path)
            if info is None:
                # Journal file name format changed since indexing
                info = (PageType.DEDICATED, Path(doc.page_sub_path).stem, None)
            page_type, title, day = info

            if page_type is PageType.JOURNAL:
                opener = lambda day=day: source.open_journal(day)
            else:
                opener = lambda title=title: source.open_page(title)

            results.append(BlockResult(
                page_type=page_type,
                page_title=title,
                page_date=day,
                id=doc.id,
                preview=doc.preview,
                location=doc.location,
                opener=opener,
            ))
        return SearchResults(count=found.count, results=results)

    def _start_change_watcher(self) -> None:
        with self._lock:
            if self._change_watcher is not None:
                return
            change_watcher = ChangeWatcher(
                [self.paths.journals_dir, self.paths.pages_dir],
                self._handle_change,
                self.debounce_seconds,
            )
            self._change_watcher = change_watcher
        change_watcher.start()

    def watch(self) -> Watcher:
        """
        Subscribe to changes of pages on disk.

        The directories are watched while the graph has an index or at
        least one open watcher.
        """
        watcher = Watcher(self._unsubscribe)
        with self._lock:
            self._watchers.append(watcher)
        self._start_change_watcher()
        return watcher

    def _unsubscribe(self, watcher: Watcher) -> None:
        change_watcher = None
        with self._lock:
            if watcher in self._watchers:
                self._watchers.remove(watcher)
            if not self._watchers and self.index is None:
                change_watcher = self._change_watcher
                self._change_watcher = None

        if change_watcher is not None:
            change_watcher.stop()

    def _handle_change(self, path: Path) -> None:
        info = self.paths.classify(path)
        if info is None:
            return

        sub_path = self.paths.sub_path(path)
        event = None

        if path.is_file():
            page = self._open(path, info, file_monitor=FileMonitor())
            if self.index is not None:
                self._index_page(page)
                self.index.sync()
            event = PageUpdated(page)
            logger.info("page_changed", path=sub_path)
        else:
            if self.index is not None:
                self.index.delete_page(sub_path)
                self.index.sync()
            page_type, title, day = info
            event = PageDeleted(page_type, title, day)
            logger.info("page_deleted", path=sub_path)

        with self._lock:
            watchers = list(self._watchers)
        for watcher in watchers:
            watcher.publish(event)
