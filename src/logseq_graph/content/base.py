"""Core node types for the Logseq document tree.

Every element of a parsed document is a ``Node``. Nodes that can hold other
nodes derive from ``ContainerNode``, which keeps its children as a doubly
linked list so structural edits never have to shift a list around.

Example:
    >>> from logseq_graph.content import Block, Paragraph, Strong, Text
    >>> paragraph = Paragraph(Text("Hello "), Strong(Text("world")))
    >>> block = Block(paragraph)
    >>> paragraph.parent is block
    True
"""

from enum import Enum
from typing import Callable, Iterable, Iterator, Optional


class PreviousLineType(Enum):
    """What preceded a block node in the source.

    ``AUTOMATIC`` lets the writer pick the separator, ``BLANK`` means the
    previous line was empty and ``NON_BLANK`` means the node interrupted the
    line before it.
    """

    AUTOMATIC = "automatic"
    BLANK = "blank"
    NON_BLANK = "non-blank"


class Node:
    """Base class of every node in a document tree."""

    def __init__(self) -> None:
        self._parent: Optional["ContainerNode"] = None
        self._next: Optional["Node"] = None
        self._prev: Optional["Node"] = None

    @property
    def parent(self) -> Optional["ContainerNode"]:
        """Container this node is attached to, or None."""
        return self._parent

    @property
    def next_sibling(self) -> Optional["Node"]:
        return self._next

    @property
    def previous_sibling(self) -> Optional["Node"]:
        return self._prev

    def remove_self(self) -> None:
        """Detach this node from its parent. Does nothing for a root node."""
        if self._parent is not None:
            self._parent.remove_child(self)

    def replace_with(self, node: "Node") -> None:
        """Put ``node`` where this node is and detach this node.

        Args:
            node: Replacement node, detached from its current parent first
        """
        if self._parent is not None:
            self._parent.replace_child(self, node)

    def _debug(self, printer) -> None:
        printer.start_type("Unknown")
        printer.end_type()

    def __repr__(self) -> str:
        return f"<{type(self).__name__}>"


class InlineNode(Node):
    """Marker base for nodes that live inside paragraphs and headings."""


class BlockNode(Node):
    """Marker base for nodes that form the block structure of a document."""


class PreviousLineAware:
    """Mixin for block nodes that remember what line came before them."""

    previous_line_type: PreviousLineType = PreviousLineType.AUTOMATIC

    def with_previous_line_type(self, value: PreviousLineType):
        """Set the previous line type and return the node for chaining."""
        self.previous_line_type = value
        return self


class ContainerNode(Node):
    """Node holding an ordered list of child nodes.

    Subclasses restrict which children they accept by overriding
    ``accepts``. Nodes that are rejected are silently ignored and stay where
    they were.
    """

    def __init__(self, *children: Node) -> None:
        super().__init__()
        self._first: Optional[Node] = None
        self._last: Optional[Node] = None
        self.add_children(*children)

    def accepts(self, node: Node) -> bool:
        """Check whether ``node`` may become a child of this container."""
        return True

    @property
    def children(self) -> "NodeList":
        """Snapshot of the direct children, in order."""
        from logseq_graph.content.querying import NodeList

        return NodeList(self.iter_children())

    def iter_children(self) -> Iterator[Node]:
        child = self._first
        while child is not None:
            following = child._next
            yield child
            child = following

    @property
    def first_child(self) -> Optional[Node]:
        return self._first

    @property
    def last_child(self) -> Optional[Node]:
        return self._last

    def set_children(self, *nodes: Node) -> None:
        """Replace all children of this node with ``nodes``."""
        child = self._first
        while child is not None:
            following = child._next
            child._parent = None
            child._prev = None
            child._next = None
            child = following

        self._first = None
        self._last = None
        self.add_children(*nodes)

    def add_child(self, node: Node) -> None:
        """Append ``node`` as the last child, detaching it first."""
        if not self.accepts(node):
            return

        node.remove_self()
        node._parent = self
        node._prev = self._last
        node._next = None
        if self._last is None:
            self._first = node
        else:
            self._last._next = node
        self._last = node

    def add_children(self, *nodes: Node) -> None:
        for node in nodes:
            self.add_child(node)

    def prepend_child(self, node: Node) -> None:
        """Insert ``node`` as the first child, detaching it first."""
        if not self.accepts(node):
            return

        node.remove_self()
        node._parent = self
        node._prev = None
        node._next = self._first
        if self._first is None:
            self._last = node
        else:
            self._first._prev = node
        self._first = node

    def prepend_children(self, *nodes: Node) -> None:
        for node in reversed(nodes):
            self.prepend_child(node)

    def remove_child(self, node: Node) -> bool:
        """Detach ``node`` from this container.

        Returns:
            True if ``node`` was a child and has been removed
        """
        if node._parent is not self:
            return False

        if node._prev is None:
            self._first = node._next
        else:
            node._prev._next = node._next

        if node._next is None:
            self._last = node._prev
        else:
            node._next._prev = node._prev

        node._parent = None
        node._prev = None
        node._next = None
        return True

    def remove_children(self, *nodes: Node) -> None:
        for node in nodes:
            self.remove_child(node)

    def replace_child(self, old: Node, new: Node) -> bool:
        """Put ``new`` in the slot of ``old`` and detach ``old``.

        Returns:
            True if ``old`` was a child of this node
        """
        if old._parent is not self or old is new:
            return False

        if not self.insert_child_before(new, old):
            return False
        return self.remove_child(old)

    def insert_child_before(self, node: Node, before: Node) -> bool:
        """Insert ``node`` directly before the child ``before``.

        Returns:
            True if ``before`` is a child of this node and ``node`` was accepted
        """
        if before._parent is not self or node is before:
            return False
        if not self.accepts(node):
            return False

        node.remove_self()
        node._parent = self
        node._next = before
        node._prev = before._prev
        if before._prev is None:
            self._first = node
        else:
            before._prev._next = node
        before._prev = node
        return True

    def insert_child_after(self, node: Node, after: Node) -> bool:
        """Insert ``node`` directly after the child ``after``.

        Returns:
            True if ``after`` is a child of this node and ``node`` was accepted
        """
        if after._parent is not self or node is after:
            return False
        if not self.accepts(node):
            return False

        node.remove_self()
        node._parent = self
        node._prev = after
        node._next = after._next
        if after._next is None:
            self._last = node
        else:
            after._next._prev = node
        after._next = node
        return True


class InlineContainer(ContainerNode):
    """Container that accepts inline children only."""

    def accepts(self, node: Node) -> bool:
        return isinstance(node, InlineNode)


class BlockContainer(ContainerNode):
    """Container that accepts block children only."""

    def accepts(self, node: Node) -> bool:
        return isinstance(node, BlockNode)


def add_automatic_paragraphs(nodes: Iterable[Node]) -> list[Node]:
    """Wrap runs of non-block nodes in paragraphs.

    Lets callers build blocks from bare inline nodes without spelling out the
    paragraph structure.

    Args:
        nodes: Nodes in document order

    Returns:
        Nodes where every run of non-block nodes sits in a new Paragraph

    Example:
        >>> nodes = add_automatic_paragraphs([Text("a"), Heading(1, Text("b"))])
        >>> [type(n).__name__ for n in nodes]
        ['Paragraph', 'Heading']
    """
    from logseq_graph.content.text import Paragraph

    rewritten: list[Node] = []
    current: Optional[Paragraph] = None
    for node in nodes:
        if isinstance(node, BlockNode):
            if current is not None:
                rewritten.append(current)
                current = None
            rewritten.append(node)
            continue

        if current is None:
            current = Paragraph()
        current.add_child(node)

    if current is not None:
        rewritten.append(current)
    return rewritten


NodePredicate = Callable[[Node], bool]
