"""Links, page references and images."""

from typing import Optional

from logseq_graph.content.base import InlineContainer, InlineNode, Node


class HasLinkURL:
    """Mixin for nodes pointing at an external URL."""

    url: str


class Link(HasLinkURL, InlineContainer, InlineNode):
    """Markdown link ``[text](url 'title')``."""

    def __init__(self, url: str, *children: Node, title: str = "") -> None:
        self.url = url
        self.title = title
        super().__init__(*children)

    def with_title(self, title: str) -> "Link":
        self.title = title
        return self

    def _debug(self, printer) -> None:
        printer.start_type("Link")
        printer.field("url", self.url)
        printer.field("title", self.title)
        printer.children(self)
        printer.end_type()


class AutoLink(HasLinkURL, InlineNode):
    """URL written bare or between angle brackets."""

    def __init__(self, url: str) -> None:
        super().__init__()
        self.url = url

    def _debug(self, printer) -> None:
        printer.start_type("AutoLink")
        printer.field("url", self.url)
        printer.end_type()


class PageRef(InlineNode):
    """Reference to another page of the graph.

    Attributes:
        to: Title of the referenced page
    """

    def __init__(self, to: str) -> None:
        super().__init__()
        self.to = to


class PageLink(PageRef):
    """Wiki style ``[[page]]`` link."""

    def _debug(self, printer) -> None:
        printer.start_type("PageLink")
        printer.field("to", self.to)
        printer.end_type()


class Hashtag(PageRef):
    """Tag written as ``#page`` or ``#[[page with spaces]]``."""

    def _debug(self, printer) -> None:
        printer.start_type("TagLink")
        printer.field("to", self.to)
        printer.end_type()


class BlockRef(InlineNode):
    """Reference ``((id))`` to a block by its ``id::`` property."""

    def __init__(self, id: str) -> None:
        super().__init__()
        self.id = id

    def _debug(self, printer) -> None:
        printer.start_type("BlockRef")
        printer.field("id", self.id)
        printer.end_type()


class Image(InlineContainer, InlineNode):
    """Image ``![alt](src 'title')``; the children are the alt text."""

    def __init__(self, src: str, *children: Node, title: Optional[str] = "") -> None:
        self.src = src
        self.title = title or ""
        super().__init__(*children)

    def with_title(self, title: str) -> "Image":
        self.title = title
        return self

    def _debug(self, printer) -> None:
        printer.start_type("Image")
        printer.field("src", self.src)
        printer.field("title", self.title)
        printer.children(self)
        printer.end_type()
