"""logseq-graph: read, edit and search Logseq graphs."""

from logseq_graph.content import debug
from logseq_graph.errors import (
    BlockNotFoundError,
    ConfigError,
    EmitError,
    IndexingDisabledError,
    LogseqGraphError,
    PageNotFoundError,
    ParseError,
)
from logseq_graph.markdown import parse, parse_nodes, parse_string, write, write_to_string

__version__ = "0.1.0"

__all__ = [
    "BlockNotFoundError",
    "ConfigError",
    "EmitError",
    "IndexingDisabledError",
    "LogseqGraphError",
    "PageNotFoundError",
    "ParseError",
    "__version__",
    "debug",
    "parse",
    "parse_nodes",
    "parse_string",
    "write",
    "write_to_string",
]
