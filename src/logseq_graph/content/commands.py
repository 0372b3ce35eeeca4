"""Raw regions: ``#+BEGIN_X``/``#+END_X`` commands and logbooks."""

from logseq_graph.content.base import BlockNode, ContainerNode, Node, PreviousLineAware


class AdvancedCommand(PreviousLineAware, BlockNode):
    """Org style ``#+BEGIN_<type>`` region.

    Attributes:
        type: Token after ``BEGIN_``, case preserved
        value: Raw lines between the markers
    """

    def __init__(self, type: str, value: str) -> None:
        super().__init__()
        self.type = type
        self.value = value

    def _debug(self, printer) -> None:
        printer.start_type("AdvancedCommand")
        printer.field("type", self.type)
        printer.field("value", self.value)
        printer.end_type()


class QueryCommand(PreviousLineAware, BlockNode):
    """Advanced query written as ``#+BEGIN_QUERY`` region."""

    def __init__(self, query: str) -> None:
        super().__init__()
        self.query = query

    def _debug(self, printer) -> None:
        printer.start_type("QueryCommand")
        printer.field("query", self.query)
        printer.end_type()


class LogbookEntry(Node):
    """Raw line of a logbook, such as a ``CLOCK:`` entry."""

    def __init__(self, value: str) -> None:
        super().__init__()
        self.value = value

    def _debug(self, printer) -> None:
        printer.start_type("LogbookEntryRaw")
        printer.field("value", self.value)
        printer.end_type()


class Logbook(PreviousLineAware, ContainerNode, BlockNode):
    """``:LOGBOOK:`` ... ``:END:`` region holding LogbookEntry children."""

    def accepts(self, node: Node) -> bool:
        return isinstance(node, LogbookEntry)

    def _debug(self, printer) -> None:
        printer.start_type("TaskLogbook")
        printer.previous_line_type(self)
        printer.children(self)
        printer.end_type()
