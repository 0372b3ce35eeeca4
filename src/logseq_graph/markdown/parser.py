"""Parsing of Logseq Markdown into document trees.

markdown-it produces a token stream, which is converted into nodes. Property
lines are then extracted from paragraphs and the result is reshaped into the
block outline.

Example:
    >>> root = parse_string("- Parent\\n  - Child")
    >>> len(root.blocks())
    1
"""

from typing import Optional

from markdown_it.tree import SyntaxTreeNode

from logseq_graph.content import (
    AdvancedCommand,
    AutoLink,
    Block,
    Blockquote,
    BlockRef,
    CodeBlock,
    CodeSpan,
    ContainerNode,
    Emphasis,
    Hashtag,
    Heading,
    Image,
    Link,
    List,
    ListItem,
    ListType,
    Logbook,
    LogbookEntry,
    Node,
    NodeList,
    PageLink,
    Paragraph,
    PreviousLineAware,
    PreviousLineType,
    QueryCommand,
    RawHTML,
    RawHTMLBlock,
    Strikethrough,
    Strong,
    Text,
    ThematicBreak,
)
from logseq_graph.errors import LogseqGraphError, ParseError
from logseq_graph.markdown.extensions import create_markdown
from logseq_graph.markdown.macros import specialize_macro
from logseq_graph.markdown.outline import BLOCK_LIST_MARKER, convert_to_block
from logseq_graph.markdown.properties import extract_properties
from logseq_graph.utils.logging import get_logger

logger = get_logger(__name__)

_markdown = create_markdown()


class _TokenConverter:
    """Converts a markdown-it syntax tree into document nodes."""

    def __init__(self, source: str):
        self.lines = source.replace("\r\n", "\n").replace("\r", "\n").split("\n")

    def _previous_line_type(self, tree: SyntaxTreeNode, first: bool) -> PreviousLineType:
        if first or not tree.map:
            return PreviousLineType.AUTOMATIC

        start = tree.map[0]
        if start == 0:
            return PreviousLineType.AUTOMATIC
        if not self.lines[start - 1].strip(" \t>"):
            return PreviousLineType.AUTOMATIC
        return PreviousLineType.NON_BLANK

    def blocks(self, trees: list[SyntaxTreeNode], outline: bool) -> list[Node]:
        nodes: list[Node] = []
        for tree in trees:
            node = self.block(tree, outline)
            if node is None:
                continue
            if isinstance(node, PreviousLineAware):
                node.with_previous_line_type(self._previous_line_type(tree, first=not nodes))
            nodes.append(node)
        return nodes

    def block(self, tree: SyntaxTreeNode, outline: bool) -> Optional[Node]:
        kind = tree.type

        if kind == "paragraph":
            return Paragraph(*self.inline_content(tree))
        if kind == "heading":
            return Heading(int(tree.tag[1:]), *self.inline_content(tree))
        if kind == "blockquote":
            return Blockquote(*self.blocks(tree.children, outline=False))
        if kind in ("bullet_list", "ordered_list"):
            return self.bullet_list(tree, outline)
        if kind == "fence":
            return CodeBlock(tree.content, tree.info.strip())
        if kind == "code_block":
            return CodeBlock(tree.content)
        if kind == "hr":
            return ThematicBreak()
        if kind == "html_block":
            html = tree.content
            if html.endswith("\n"):
                html = html[:-1]
            return RawHTMLBlock(html)
        if kind == "logbook":
            entries = tree.content.split("\n")
            if entries and not entries[-1]:
                entries.pop()
            return Logbook(*(LogbookEntry(entry) for entry in entries))
        if kind == "begin_end":
            if tree.info == "QUERY":
                return QueryCommand(tree.content)
            return AdvancedCommand(tree.info, tree.content)

        logger.debug("parse_unsupported_token", token_type=kind)
        return None

    def bullet_list(self, tree: SyntaxTreeNode, outline: bool) -> List:
        is_outline = outline and tree.type == "bullet_list" and tree.markup == BLOCK_LIST_MARKER
        items = [
            ListItem(*self.blocks(item.children, outline=is_outline)) for item in tree.children
        ]

        if is_outline:
            node = List(ListType.UNORDERED, *items)
            node.marker = BLOCK_LIST_MARKER
            return node
        if tree.type == "ordered_list":
            return List.from_marker(tree.markup or ".", *items)
        return List.from_marker(tree.markup, *items)

    def inline_content(self, tree: SyntaxTreeNode) -> list[Node]:
        if not tree.children:
            return []
        return self.inlines(tree.children[0].children)

    def inlines(self, trees: list[SyntaxTreeNode]) -> list[Node]:
        nodes: list[Node] = []
        for tree in trees:
            kind = tree.type

            if kind in ("softbreak", "hardbreak"):
                previous = nodes[-1] if nodes else None
                if not isinstance(previous, Text) or previous.has_line_break:
                    previous = Text()
                    nodes.append(previous)
                if kind == "softbreak":
                    previous.with_soft_line_break()
                else:
                    previous.with_hard_line_break()
                continue

            if kind == "text":
                if not tree.content:
                    continue
                previous = nodes[-1] if nodes else None
                if isinstance(previous, Text) and not previous.has_line_break:
                    previous.value += tree.content
                else:
                    nodes.append(Text(tree.content))
                continue

            node = self.inline(tree)
            if node is not None:
                nodes.append(node)
        return nodes

    def inline(self, tree: SyntaxTreeNode) -> Optional[Node]:
        kind = tree.type

        if kind == "code_inline":
            return CodeSpan(tree.content)
        if kind == "em":
            return Emphasis(*self.inlines(tree.children))
        if kind == "strong":
            return Strong(*self.inlines(tree.children))
        if kind == "s":
            return Strikethrough(*self.inlines(tree.children))
        if kind == "link":
            if tree.markup == "autolink":
                return AutoLink("".join(child.content for child in tree.children))
            return Link(
                str(tree.attrs.get("href", "")),
                *self.inlines(tree.children),
                title=str(tree.attrs.get("title", "")),
            )
        if kind == "image":
            return Image(
                str(tree.attrs.get("src", "")),
                *self.inlines(tree.children),
                title=str(tree.attrs.get("title", "")),
            )
        if kind == "html_inline":
            return RawHTML(tree.content)
        if kind == "macro":
            return specialize_macro(tree.meta["name"], tree.meta["arguments"])
        if kind == "block_ref":
            return BlockRef(tree.content)
        if kind == "page_link":
            return PageLink(tree.content)
        if kind == "hashtag":
            return Hashtag(tree.content)
        if kind == "bare_url":
            return AutoLink(tree.content)

        logger.debug("parse_unsupported_token", token_type=kind)
        return None


def parse_string(text: str) -> Block:
    """Parse Logseq Markdown into a Block.

    The returned root block holds the content written before the first
    bullet, and one nested block per top level bullet.

    Raises:
        ParseError: If the text cannot be parsed
    """
    try:
        tokens = _markdown.parse(text)
        converter = _TokenConverter(text)
        document = ContainerNode(*converter.blocks(SyntaxTreeNode(tokens).children, outline=True))
        extract_properties(document)
        return convert_to_block(document.children)
    except LogseqGraphError:
        raise
    except Exception as e:
        logger.debug("parse_failed", error=str(e), error_type=type(e).__name__)
        raise ParseError(e) from e


def parse(data: bytes) -> Block:
    """Parse UTF-8 encoded Logseq Markdown into a Block.

    Raises:
        ParseError: If the data is not valid UTF-8 or cannot be parsed
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(e) from e
    return parse_string(text)


def parse_nodes(text: str) -> NodeList:
    """Parse ``text`` and return the children of the root block."""
    return parse_string(text).children
