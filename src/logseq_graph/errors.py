"""Exceptions raised by logseq-graph."""

from typing import Optional


class LogseqGraphError(Exception):
    """Base class for errors raised by this package."""


class ParseError(LogseqGraphError):
    """Raised when Markdown input could not be parsed.

    The original failure is chained as ``__cause__``.
    """

    def __init__(self, cause: object):
        self.cause = cause
        super().__init__(f"could not parse Markdown: {cause}")


class EmitError(LogseqGraphError):
    """Raised when a tree cannot be written as Markdown.

    Attributes:
        node: The node that could not be written, when known
    """

    def __init__(self, message: str, node: Optional[object] = None):
        self.node = node
        super().__init__(message)


class ConfigError(LogseqGraphError):
    """Raised when the graph configuration cannot be read or is invalid."""


class PageNotFoundError(LogseqGraphError):
    """Raised when a page is expected on disk but is missing."""

    def __init__(self, title: str, path: Optional[str] = None):
        self.title = title
        self.path = path
        where = f" at {path}" if path else ""
        super().__init__(f"Page not found: {title}{where}")


class BlockNotFoundError(LogseqGraphError):
    """Raised when a search result points at a block that no longer exists."""

    def __init__(self, page_title: str, block: str):
        self.page_title = page_title
        self.block = block
        super().__init__(f"Block not found on page {page_title}: {block}")


class IndexingDisabledError(LogseqGraphError):
    """Raised when searching a graph that was opened without an index."""

    def __init__(self, message: str = "indexing is not enabled"):
        super().__init__(message)

