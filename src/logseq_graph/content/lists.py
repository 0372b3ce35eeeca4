"""Ordinary Markdown lists.

Lists written with ``-`` are outline blocks, not lists, so a ``-`` marker
is normalised to ``*`` here.
"""

from enum import Enum

from logseq_graph.content.base import (
    ContainerNode,
    BlockNode,
    Node,
    PreviousLineAware,
    add_automatic_paragraphs,
)


class ListType(Enum):
    ORDERED = "ordered"
    UNORDERED = "unordered"


DEFAULT_MARKERS = {
    ListType.ORDERED: ".",
    ListType.UNORDERED: "*",
}


class List(PreviousLineAware, ContainerNode, BlockNode):
    """Bullet or ordered list.

    Attributes:
        type: Ordered or unordered
        marker: ``*`` or ``+`` for unordered lists, ``.`` or ``)`` for
            ordered lists
    """

    def __init__(self, type: ListType, *items: "ListItem") -> None:
        self.type = type
        self.marker = DEFAULT_MARKERS[type]
        super().__init__(*items)

    @classmethod
    def from_marker(cls, marker: str, *items: "ListItem") -> "List":
        """Create a list whose type follows from its marker.

        Example:
            >>> List.from_marker(")").type
            <ListType.ORDERED: 'ordered'>
        """
        return cls(ListType.UNORDERED, *items).with_marker(marker)

    def with_type(self, type: ListType) -> "List":
        self.type = type
        if type is ListType.ORDERED and self.marker not in (".", ")"):
            self.marker = "."
        elif type is ListType.UNORDERED and self.marker not in ("*", "+"):
            self.marker = "*"
        return self

    def with_marker(self, marker: str) -> "List":
        if marker in ("*", "+"):
            self.type = ListType.UNORDERED
            self.marker = marker
        elif marker in (".", ")"):
            self.type = ListType.ORDERED
            self.marker = marker
        else:
            self.type = ListType.UNORDERED
            self.marker = "*"
        return self

    def _debug(self, printer) -> None:
        printer.start_type("List")
        printer.field("type", self.type.value)
        printer.field("marker", self.marker)
        printer.previous_line_type(self)
        printer.children(self)
        printer.end_type()


def ordered_list(*items: "ListItem") -> List:
    return List(ListType.ORDERED, *items)


def unordered_list(*items: "ListItem") -> List:
    return List(ListType.UNORDERED, *items)


class ListItem(ContainerNode, BlockNode):
    """Item of a List. Inline children are wrapped in paragraphs."""

    def __init__(self, *children: Node) -> None:
        super().__init__(*add_automatic_paragraphs(children))

    def _debug(self, printer) -> None:
        printer.start_type("ListItem")
        printer.children(self)
        printer.end_type()
