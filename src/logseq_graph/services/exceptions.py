"""Exceptions raised by the file services."""

from logseq_graph.errors import LogseqGraphError


class FileModifiedError(LogseqGraphError):
    """Raised when a page file changed on disk after it was opened.

    Saving would overwrite the other change, so the save is refused.

    Attributes:
        path: Path to the file that was modified
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str = "File was modified since it was opened"):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
