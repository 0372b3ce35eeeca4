"""Plain text extraction used for full text search and previews."""

from collections.abc import Iterable

from logseq_graph.content import (
    Blockquote,
    BlockNode,
    CodeBlock,
    CodeSpan,
    ContainerNode,
    Hashtag,
    List,
    Node,
    PageLink,
    Paragraph,
    Properties,
    Text,
)


def plain_text(nodes: Iterable[Node]) -> str:
    """
    Return the readable text of ``nodes`` without Markdown syntax.

    Properties are skipped, page links are reduced to their target and
    nested block level content is separated by a blank line.
    """
    parts: list[str] = []
    write_plain_text(nodes, parts)
    return "".join(parts).strip()


def write_plain_text(nodes: Iterable[Node], parts: list[str]) -> None:
    """Append the plain text of ``nodes`` to ``parts``."""
    for node in nodes:
        if isinstance(node, Text):
            parts.append(node.value)
            if node.has_line_break:
                parts.append("\n")
        elif isinstance(node, Hashtag):
            parts.append("#" + node.to)
        elif isinstance(node, PageLink):
            parts.append(node.to)
        elif isinstance(node, CodeSpan):
            parts.append(node.value)
        elif isinstance(node, CodeBlock):
            if parts:
                parts.append("\n\n")
            parts.append(node.code)
        elif isinstance(node, Properties):
            continue
        elif isinstance(node, ContainerNode):
            if isinstance(node, BlockNode) and parts:
                parts.append("\n\n")
            write_plain_text(node.iter_children(), parts)


def preview(nodes: Iterable[Node]) -> str:
    """Plain text of the first paragraph, list, quote or code block."""
    for node in nodes:
        if isinstance(node, (Paragraph, List, Blockquote)):
            return plain_text(node.iter_children())
        if isinstance(node, CodeBlock):
            return node.code
    return ""
