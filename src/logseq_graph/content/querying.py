"""Node lists and predicates for searching document trees."""

from typing import Callable, Iterator, Optional

from logseq_graph.content.base import ContainerNode, Node, NodePredicate


class NodeList(list):
    """List of nodes with tree search helpers.

    The ``*_deep`` variants also look inside every container node, in
    document order. ``walk`` produces those nodes lazily; ``find_deep``
    stops at the first match. ``filter`` and ``filter_deep`` return new
    lists, so the tree can be edited while their results are iterated.
    """

    def walk(self) -> Iterator[Node]:
        """Yield every node of the list and, below it, its descendants."""
        for node in self:
            yield node
            if isinstance(node, ContainerNode):
                yield from node.children.walk()

    def find(self, predicate: NodePredicate) -> Optional[Node]:
        for node in self:
            if predicate(node):
                return node
        return None

    def find_deep(self, predicate: NodePredicate) -> Optional[Node]:
        return next((node for node in self.walk() if predicate(node)), None)

    def filter(self, predicate: NodePredicate) -> "NodeList":
        return NodeList(node for node in self if predicate(node))

    def filter_deep(self, predicate: NodePredicate) -> "NodeList":
        return NodeList(node for node in self.walk() if predicate(node))

    def map(self, mapper: Callable[[Node], Node]) -> "NodeList":
        return NodeList(mapper(node) for node in self)


def is_of_type(*types: type) -> NodePredicate:
    """Predicate matching nodes that are instances of any of ``types``.

    Example:
        >>> links = block.children.filter_deep(is_of_type(PageLink))
    """
    return lambda node: isinstance(node, types)


def is_either(a: NodePredicate, b: NodePredicate) -> NodePredicate:
    return lambda node: a(node) or b(node)


def is_both(a: NodePredicate, b: NodePredicate) -> NodePredicate:
    return lambda node: a(node) and b(node)


def is_page_reference() -> NodePredicate:
    """Predicate matching page links and hashtags."""
    from logseq_graph.content.links import Hashtag, PageLink

    return is_either(is_of_type(PageLink), is_of_type(Hashtag))
