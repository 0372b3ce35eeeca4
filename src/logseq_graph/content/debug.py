"""Canonical string form of document trees.

Two trees are considered equal when their debug strings are equal, which is
how the test-suite compares parser output with expected trees.

Example:
    >>> print(debug(Text("abc")))
    Text{
      value='abc'
    }
"""

from logseq_graph.content.base import ContainerNode, Node, PreviousLineAware


class DebugPrinter:
    """Accumulates the debug form of a node and its children."""

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._level = 0
        self._did_write = [False]

    def _mark(self, level: int, value: bool) -> None:
        while len(self._did_write) <= level:
            self._did_write.append(False)
        self._did_write[level] = value

    def _wrote(self, level: int) -> bool:
        return level < len(self._did_write) and self._did_write[level]

    def start_type(self, name: str) -> None:
        self._mark(self._level, True)
        self._parts.append(name + "{")
        self._level += 1
        self._mark(self._level, False)

    def end_type(self) -> None:
        self._level -= 1
        if self._wrote(self._level + 1):
            self._parts.append("  " * self._level)
        self._parts.append("}")

    def field(self, name: str, value: str) -> None:
        if not self._wrote(self._level):
            self._mark(self._level, True)
            self._parts.append("\n")

        self._parts.append(f"{'  ' * self._level}{name}='{value}'\n")

    def previous_line_type(self, node: PreviousLineAware) -> None:
        self.field("previousLineType", node.previous_line_type.value)

    def children(self, node: ContainerNode) -> None:
        if not self._wrote(self._level):
            self._mark(self._level, True)
            self._parts.append("\n")

        self._parts.append("  " * self._level + "children=[")
        self._level += 1
        self._mark(self._level, False)

        for child in node.iter_children():
            self._parts.append("\n" + "  " * self._level)
            child._debug(self)

        if self._wrote(self._level):
            self._parts.append("\n" + "  " * (self._level - 1))
        self._parts.append("]\n")
        self._level -= 1

    def getvalue(self) -> str:
        return "".join(self._parts)


def debug(node: Node) -> str:
    """Return the canonical debug string of ``node``."""
    printer = DebugPrinter()
    node._debug(printer)
    return printer.getvalue()
