"""Fenced and indented code blocks."""

from logseq_graph.content.base import BlockNode, PreviousLineAware


class CodeBlock(PreviousLineAware, BlockNode):
    """Code block.

    Attributes:
        language: Info string after the opening fence, may be empty
        code: Raw code, normally ending in a newline
    """

    def __init__(self, code: str, language: str = "") -> None:
        super().__init__()
        self.code = code
        self.language = language

    def with_language(self, language: str) -> "CodeBlock":
        self.language = language
        return self

    def _debug(self, printer) -> None:
        printer.start_type("CodeBlock")
        printer.field("language", self.language)
        printer.field("code", self.code)
        printer.end_type()
