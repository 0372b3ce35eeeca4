"""Records stored in and returned by the search index."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Generic, Optional, Protocol, TypeVar

from logseq_graph.content import BlockList
from logseq_graph.indexing.queries import Query

T = TypeVar("T")

DEFAULT_RESULT_SIZE = 10


class PageType(Enum):
    """Kind of page: a dedicated page or a journal day."""

    DEDICATED = "page"
    JOURNAL = "journal"


@dataclass
class IndexedPage:
    """
    A page as seen by the index.

    Attributes:
        sub_path: Path of the file relative to the graph directory
        type: Dedicated page or journal
        title: Title of the page
        date: Day of a journal page
        last_modified: Modification time of the file (``st_mtime``)
        blocks: Top level blocks, only present while indexing
    """

    sub_path: str
    type: PageType
    title: str = ""
    date: Optional[date] = None
    last_modified: Optional[float] = None
    blocks: BlockList = field(default_factory=BlockList)


@dataclass
class IndexedBlock:
    """A block found by a search.

    ``location`` holds the index of the block among its siblings, from the
    top level block down to the block itself.
    """

    page_sub_path: str
    location: list[int]
    id: str = ""
    preview: str = ""


@dataclass(frozen=True)
class SortField:
    field: str
    asc: bool = True


@dataclass
class IndexSearchOptions:
    size: int = DEFAULT_RESULT_SIZE
    offset: int = 0
    sort_by: list[SortField] = field(default_factory=list)


@dataclass
class SearchResultSet(Generic[T]):
    """
    One page of search results.

    Attributes:
        count: Total number of matching documents
        results: Documents in this page of results
    """

    count: int
    results: list[T]

    @property
    def size(self) -> int:
        """Number of results in this set."""
        return len(self.results)


class Index(Protocol):
    """Storage for searching pages and blocks of a graph."""

    def close(self) -> None: ...

    def sync(self) -> None:
        """Make pending changes durable and visible to searches."""
        ...

    def clear(self) -> None: ...

    def page_sub_paths(self) -> list[str]: ...

    def delete_page(self, sub_path: str) -> None: ...

    def index_page(self, page: IndexedPage) -> None: ...

    def get_last_modified(self, sub_path: str) -> Optional[float]:
        """Modification time recorded for a page, None if it is not indexed."""
        ...

    def search_pages(
        self, query: Query, options: IndexSearchOptions
    ) -> SearchResultSet[IndexedPage]: ...

    def search_blocks(
        self, query: Query, options: IndexSearchOptions
    ) -> SearchResultSet[IndexedBlock]: ...
