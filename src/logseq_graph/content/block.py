"""Outline blocks, the bullets of a Logseq page."""

import uuid
from typing import Callable, Optional

from logseq_graph.content.base import (
    BlockContainer,
    BlockNode,
    Node,
    PreviousLineType,
    add_automatic_paragraphs,
)
from logseq_graph.content.properties import Properties
from logseq_graph.content.querying import NodeList
from logseq_graph.content.text import Paragraph, Text

BlockPredicate = Callable[["Block"], bool]


class Block(BlockContainer, BlockNode):
    """Node of the outline.

    Children that are not blocks form the content of the block, children
    that are blocks are nested under it. Inline nodes passed to the
    constructor are wrapped in paragraphs.

    Example:
        >>> block = Block(Text("Parent"), Block(Text("Child")))
        >>> len(block.blocks())
        1
    """

    def __init__(self, *children: Node) -> None:
        super().__init__(*add_automatic_paragraphs(children))

    def content(self) -> NodeList:
        """Children that are not nested blocks."""
        return self.children.filter(lambda node: not isinstance(node, Block))

    def blocks(self) -> "BlockList":
        """Nested blocks, in order."""
        return BlockList(child for child in self.iter_children() if isinstance(child, Block))

    def find_properties(self) -> Optional[Properties]:
        """Return the properties of this block without creating them.

        A leading Properties child wins, otherwise the first Properties node
        inside the first content paragraph is used.
        """
        first = self.first_child
        if isinstance(first, Properties):
            return first

        for node in self.iter_children():
            if isinstance(node, Block):
                break
            if isinstance(node, Paragraph):
                for child in node.iter_children():
                    if isinstance(child, Properties):
                        return child
                break
        return None

    @property
    def properties(self) -> Properties:
        """Properties of this block, created when missing.

        New properties go on the line after the first content paragraph, as
        the parser would read them back. A block without such a paragraph
        gets a leading paragraph holding only the properties.
        """
        found = self.find_properties()
        if found is not None:
            return found

        created = Properties()
        paragraph = self._first_paragraph()
        if paragraph is None:
            self.prepend_child(Paragraph(created))
            return created

        last = paragraph.last_child
        if last is not None:
            if not isinstance(last, Text):
                last = Text()
                paragraph.add_child(last)
            if not last.has_line_break:
                last.with_soft_line_break()
            created.with_previous_line_type(PreviousLineType.NON_BLANK)
        paragraph.add_child(created)
        return created

    def _first_paragraph(self) -> Optional[Paragraph]:
        for node in self.iter_children():
            if isinstance(node, Block):
                return None
            if isinstance(node, Paragraph):
                return node
        return None

    @property
    def id(self) -> str:
        """Stable identifier from the ``id::`` property, or an empty string."""
        props = self.find_properties()
        if props is None:
            return ""

        prop = props.get_as_node("id")
        if prop is None:
            return ""

        first = prop.first_child
        if isinstance(first, Text):
            return first.value
        return ""

    def with_id(self) -> "Block":
        """Give this block a random ``id::`` property unless it has one."""
        props = self.properties
        if props.get_as_node("id") is None:
            props.set("id", Text(str(uuid.uuid4())))
        return self

    def _debug(self, printer) -> None:
        printer.start_type("Block")
        printer.children(self)
        printer.end_type()


class BlockList(list):
    """List of blocks with search helpers that descend into nested blocks."""

    def find(self, predicate: BlockPredicate) -> Optional[Block]:
        for block in self:
            if predicate(block):
                return block
        return None

    def find_deep(self, predicate: BlockPredicate) -> Optional[Block]:
        for block in self:
            if predicate(block):
                return block
            found = block.blocks().find_deep(predicate)
            if found is not None:
                return found
        return None

    def filter(self, predicate: BlockPredicate) -> "BlockList":
        return BlockList(block for block in self if predicate(block))

    def filter_deep(self, predicate: BlockPredicate) -> "BlockList":
        filtered = BlockList()
        for block in self:
            if predicate(block):
                filtered.append(block)
            filtered.extend(block.blocks().filter_deep(predicate))
        return filtered
