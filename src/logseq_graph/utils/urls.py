"""logseq:// URLs pointing at pages and blocks of a graph."""

from pathlib import Path
from typing import Optional
from urllib.parse import quote


def logseq_url(graph_path: Path, page_title: str, block_id: Optional[str] = None) -> str:
    """Return a URL that opens a page, or a block, in the Logseq app.

    Blocks can only be linked when they carry an ``id::`` property.

    Example:
        >>> logseq_url(Path("/home/user/notes"), "Book Club")
        'logseq://graph/notes?page=Book%20Club'
    """
    graph = quote(graph_path.name, safe="")
    if block_id:
        return f"logseq://graph/{graph}?block-id={quote(block_id, safe='')}"
    return f"logseq://graph/{graph}?page={quote(page_title, safe='')}"
