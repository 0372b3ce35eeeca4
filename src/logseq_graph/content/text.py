"""Text, emphasis and basic block nodes."""

from logseq_graph.content.base import (
    BlockContainer,
    BlockNode,
    ContainerNode,
    InlineContainer,
    InlineNode,
    Node,
    PreviousLineAware,
    add_automatic_paragraphs,
)
from logseq_graph.content.properties import Properties


class Text(InlineNode):
    """Run of plain text, optionally ending in a soft or hard line break.

    Attributes:
        value: The text, without any Markdown escaping
        soft_line_break: Text is followed by a plain newline
        hard_line_break: Text is followed by a forced line break
    """

    def __init__(self, value: str = "") -> None:
        super().__init__()
        self.value = value
        self.soft_line_break = False
        self.hard_line_break = False

    def with_soft_line_break(self) -> "Text":
        self.soft_line_break = True
        self.hard_line_break = False
        return self

    def with_hard_line_break(self) -> "Text":
        self.hard_line_break = True
        self.soft_line_break = False
        return self

    @property
    def has_line_break(self) -> bool:
        return self.soft_line_break or self.hard_line_break

    def clear_line_break(self) -> None:
        self.soft_line_break = False
        self.hard_line_break = False

    def _debug(self, printer) -> None:
        printer.start_type("Text")
        printer.field("value", self.value)
        if self.hard_line_break:
            printer.field("lineBreak", "hard")
        elif self.soft_line_break:
            printer.field("lineBreak", "soft")
        printer.end_type()

    def __repr__(self) -> str:
        return f"Text({self.value!r})"


class CodeSpan(InlineNode):
    """Inline code, written between backticks."""

    def __init__(self, value: str) -> None:
        super().__init__()
        self.value = value

    def _debug(self, printer) -> None:
        printer.start_type("Code")
        printer.field("value", self.value)
        printer.end_type()


class Emphasis(InlineContainer, InlineNode):
    def _debug(self, printer) -> None:
        printer.start_type("Emphasis")
        printer.children(self)
        printer.end_type()


class Strong(InlineContainer, InlineNode):
    def _debug(self, printer) -> None:
        printer.start_type("Strong")
        printer.children(self)
        printer.end_type()


class Strikethrough(InlineContainer, InlineNode):
    def _debug(self, printer) -> None:
        printer.start_type("Strikethrough")
        printer.children(self)
        printer.end_type()


class Paragraph(PreviousLineAware, ContainerNode, BlockNode):
    """Paragraph of inline content, which may embed property runs."""

    def accepts(self, node: Node) -> bool:
        return isinstance(node, (InlineNode, Properties))

    def _debug(self, printer) -> None:
        printer.start_type("Paragraph")
        printer.previous_line_type(self)
        printer.children(self)
        printer.end_type()


class Heading(InlineContainer, BlockNode):
    """ATX heading.

    Attributes:
        level: Heading level, 1 to 6
    """

    def __init__(self, level: int, *children: Node) -> None:
        self.level = level
        super().__init__(*children)

    def _debug(self, printer) -> None:
        printer.start_type("Heading")
        printer.field("Level", str(self.level))
        printer.children(self)
        printer.end_type()


class Blockquote(PreviousLineAware, BlockContainer, BlockNode):
    """Quoted blocks. Inline children are wrapped in paragraphs."""

    def __init__(self, *children: Node) -> None:
        super().__init__(*add_automatic_paragraphs(children))

    def _debug(self, printer) -> None:
        printer.start_type("Blockquote")
        printer.previous_line_type(self)
        printer.children(self)
        printer.end_type()


class ThematicBreak(BlockNode):
    def _debug(self, printer) -> None:
        printer.start_type("ThematicBreak")
        printer.end_type()
