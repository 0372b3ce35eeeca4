"""Search options and results for searching pages and blocks of a graph."""

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING, Callable, Generic, Optional, TypeVar

from logseq_graph.content import Block
from logseq_graph.errors import BlockNotFoundError
from logseq_graph.indexing import (
    All,
    And,
    IndexSearchOptions,
    PageType,
    Query,
    SortField,
)
from logseq_graph.indexing.documents import DEFAULT_RESULT_SIZE

if TYPE_CHECKING:
    from logseq_graph.page import Page

R = TypeVar("R")

PageOpener = Callable[[], "Page"]


class SearchOptions:
    """
    Options for a search, built by chaining.

    Example:
        >>> options = SearchOptions().with_query(references("Books")).with_max_hits(20)
    """

    def __init__(self) -> None:
        self.query: Optional[Query] = None
        self.size = DEFAULT_RESULT_SIZE
        self.offset = 0
        self.sort: list[SortField] = []

    def with_max_hits(self, n: int) -> "SearchOptions":
        """Return at most ``n`` results. Values below one restore the default of 10."""
        self.size = n if n > 0 else DEFAULT_RESULT_SIZE
        return self

    def from_hit(self, n: int) -> "SearchOptions":
        """Skip the first ``n`` results, for paging."""
        self.offset = max(n, 0)
        return self

    def with_query(self, query: Query) -> "SearchOptions":
        """Restrict the search to ``query``. Repeated calls are combined with And."""
        self.query = query if self.query is None else And(self.query, query)
        return self

    def sort_by(self, field: str, asc: bool = True) -> "SearchOptions":
        self.sort.append(SortField(field, asc))
        return self

    def effective_query(self) -> Query:
        return self.query if self.query is not None else All()

    def index_options(self) -> IndexSearchOptions:
        return IndexSearchOptions(size=self.size, offset=self.offset, sort_by=list(self.sort))


@dataclass
class SearchResults(Generic[R]):
    """
    A page of search results.

    Attributes:
        count: Total number of matches in the graph
        results: Results in this page
    """

    count: int
    results: list[R] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)


@dataclass
class PageResult:
    """A page or journal found by a search."""

    type: PageType
    title: str
    date: Optional[date]
    opener: PageOpener = field(repr=False)

    def open(self) -> "Page":
        return self.opener()


@dataclass
class BlockResult:
    """
    A block found by a search.

    Attributes:
        page_type: Kind of page holding the block
        page_title: Title of that page
        page_date: Day of the journal, None for dedicated pages
        id: Stable ``id::`` of the block, empty when it has none
        preview: Plain text preview of the block
        location: Index of the block among its siblings, from the top
            level block of the page down to the block
    """

    page_type: PageType
    page_title: str
    page_date: Optional[date]
    id: str
    preview: str
    location: list[int]
    opener: PageOpener = field(repr=False)

    def open_page(self) -> "Page":
        return self.opener()

    def open(self) -> tuple[Block, "Page"]:
        """
        Open the page and find the block on it.

        Blocks with a stable id are looked up by id anywhere on the page,
        other blocks by their location.

        Raises:
            BlockNotFoundError: If the block is no longer on the page
        """
        page = self.opener()

        if self.id:
            block = page.blocks.find_deep(lambda b: b.id == self.id)
            if block is None:
                raise BlockNotFoundError(self.page_title, self.id)
            return block, page

        blocks = page.blocks
        block = None
        for i in self.location:
            if i >= len(blocks):
                raise BlockNotFoundError(self.page_title, ":".join(map(str, self.location)))
            block = blocks[i]
            blocks = block.blocks()

        if block is None:
            raise BlockNotFoundError(self.page_title, "")
        return block, page
