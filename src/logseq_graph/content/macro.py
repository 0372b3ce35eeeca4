"""Macros and the macro forms Logseq gives a meaning to."""

from typing import Iterable

from logseq_graph.content.base import InlineNode


class Macro(InlineNode):
    """Generic ``{{name arg1, arg2}}`` invocation.

    Attributes:
        name: Macro name, must not contain whitespace
        arguments: Argument values, unquoted
    """

    def __init__(self, name: str, arguments: Iterable[str] = ()) -> None:
        super().__init__()
        self.name = name
        self.arguments = list(arguments)

    def _debug(self, printer) -> None:
        printer.start_type("Macro")
        printer.field("name", self.name)
        printer.field("arguments", ", ".join(self.arguments))
        printer.end_type()


class Query(InlineNode):
    """Simple query ``{{query ...}}``. The query text is never evaluated."""

    def __init__(self, query: str) -> None:
        super().__init__()
        self.query = query

    def _debug(self, printer) -> None:
        printer.start_type("Query")
        printer.field("query", self.query)
        printer.end_type()


class PageEmbed(InlineNode):
    """Embedded page ``{{embed [[page]]}}``."""

    def __init__(self, to: str) -> None:
        super().__init__()
        self.to = to

    def _debug(self, printer) -> None:
        printer.start_type("PageEmbed")
        printer.field("to", self.to)
        printer.end_type()


class BlockEmbed(InlineNode):
    """Embedded block ``{{embed ((id))}}``."""

    def __init__(self, id: str) -> None:
        super().__init__()
        self.id = id

    def _debug(self, printer) -> None:
        printer.start_type("BlockEmbed")
        printer.field("id", self.id)
        printer.end_type()


class Cloze(InlineNode):
    """Flash card cloze ``{{cloze answer \\ cue}}``; the cue is optional."""

    def __init__(self, answer: str, cue: str = "") -> None:
        super().__init__()
        self.answer = answer
        self.cue = cue

    def _debug(self, printer) -> None:
        printer.start_type("Cloze")
        printer.field("answer", self.answer)
        printer.field("cue", self.cue)
        printer.end_type()
