"""Parser and writer for Logseq flavoured Markdown."""

from logseq_graph.errors import EmitError, ParseError
from logseq_graph.markdown.parser import parse, parse_nodes, parse_string
from logseq_graph.markdown.writer import MarkdownWriter, write, write_to_string

__all__ = [
    "EmitError",
    "MarkdownWriter",
    "ParseError",
    "parse",
    "parse_nodes",
    "parse_string",
    "write",
    "write_to_string",
]
