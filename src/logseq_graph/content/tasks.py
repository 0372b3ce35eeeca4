"""Task markers such as ``TODO`` and ``DONE``."""

from enum import Enum
from typing import Optional

from logseq_graph.content.base import InlineNode


class TaskStatus(Enum):
    """Task keywords recognised at the start of a block."""

    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"
    LATER = "LATER"
    NOW = "NOW"
    CANCELLED = "CANCELLED"
    CANCELED = "CANCELED"
    IN_PROGRESS = "IN-PROGRESS"
    WAIT = "WAIT"
    WAITING = "WAITING"

    @classmethod
    def from_keyword(cls, keyword: str) -> Optional["TaskStatus"]:
        """Return the status written as ``keyword``, or None."""
        try:
            return cls(keyword)
        except ValueError:
            return None


class TaskMarker(InlineNode):
    """Status keyword leading a block's first paragraph."""

    def __init__(self, status: TaskStatus) -> None:
        super().__init__()
        self.status = status

    def _debug(self, printer) -> None:
        printer.start_type("TaskMarker")
        printer.field("status", self.status.value)
        printer.end_type()
