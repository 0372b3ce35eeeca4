"""Block properties written as ``name:: value`` lines."""

from typing import Optional

from logseq_graph.content.base import (
    BlockNode,
    ContainerNode,
    InlineContainer,
    Node,
    PreviousLineAware,
)
from logseq_graph.content.querying import NodeList


class Property(InlineContainer):
    """Single property; its children are the value.

    Attributes:
        name: Property key as written before ``::``
    """

    def __init__(self, name: str, *children: Node) -> None:
        self.name = name
        super().__init__(*children)

    def _debug(self, printer) -> None:
        printer.start_type("Property")
        printer.field("Name", self.name)
        printer.children(self)
        printer.end_type()


class Properties(PreviousLineAware, ContainerNode, BlockNode):
    """Run of properties. Only Property children are accepted.

    Example:
        >>> props = Properties()
        >>> props.set("type", PageLink("Book"))
        >>> props.get("type").find(is_of_type(PageLink)).to
        'Book'
    """

    def accepts(self, node: Node) -> bool:
        return isinstance(node, Property)

    def get_as_node(self, name: str) -> Optional[Property]:
        for child in self.iter_children():
            if isinstance(child, Property) and child.name == name:
                return child
        return None

    def get(self, name: str) -> NodeList:
        """Value nodes of property ``name``, empty when it is not set."""
        prop = self.get_as_node(name)
        if prop is None:
            return NodeList()
        return prop.children

    def set(self, name: str, *nodes: Node) -> None:
        """Set property ``name`` to ``nodes``, adding it when missing."""
        prop = self.get_as_node(name)
        if prop is None:
            prop = Property(name)
            self.add_child(prop)
        prop.set_children(*nodes)

    def remove(self, name: str) -> None:
        prop = self.get_as_node(name)
        if prop is not None:
            self.remove_child(prop)

    def names(self) -> list[str]:
        return [child.name for child in self.iter_children() if isinstance(child, Property)]

    def _debug(self, printer) -> None:
        printer.start_type("Properties")
        printer.previous_line_type(self)
        printer.children(self)
        printer.end_type()
