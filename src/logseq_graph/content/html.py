"""Raw HTML passed through untouched."""

from logseq_graph.content.base import BlockNode, InlineNode


class RawHTML(InlineNode):
    def __init__(self, html: str) -> None:
        super().__init__()
        self.html = html

    def _debug(self, printer) -> None:
        printer.start_type("RawHTML")
        printer.field("HTML", self.html)
        printer.end_type()


class RawHTMLBlock(BlockNode):
    def __init__(self, html: str) -> None:
        super().__init__()
        self.html = html

    def _debug(self, printer) -> None:
        printer.start_type("RawHTMLBlock")
        printer.field("HTML", self.html)
        printer.end_type()
