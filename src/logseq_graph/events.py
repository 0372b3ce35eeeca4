"""Events reported while a graph is opened and when its files change."""

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Optional, Union

from logseq_graph.indexing import PageType

if TYPE_CHECKING:
    from logseq_graph.page import Page


@dataclass(frozen=True)
class PageIndexed:
    """A page was (re)indexed while syncing the graph with its index."""

    sub_path: str


@dataclass(frozen=True)
class PageUpdated:
    """A page was created or changed on disk."""

    page: "Page"


@dataclass(frozen=True)
class PageDeleted:
    """
    A page was deleted from disk.

    Attributes:
        type: Kind of page that was deleted
        title: Title of the page
        date: Day of the journal, None for dedicated pages
    """

    type: PageType
    title: str
    date: Optional[date] = None


OpenEvent = PageIndexed
ChangeEvent = Union[PageUpdated, PageDeleted]
