"""Reshaping of parsed Markdown into the block outline of a page.

Lists written with ``-`` are the bullets of the outline: each of their items
becomes a nested Block. Everything else is content of the enclosing block.
"""

from typing import Iterable

from logseq_graph.content import (
    Block,
    List,
    Node,
    Paragraph,
    TaskMarker,
    TaskStatus,
    Text,
)

BLOCK_LIST_MARKER = "-"


def is_block_list(node: Node) -> bool:
    return isinstance(node, List) and node.marker == BLOCK_LIST_MARKER


def apply_task_marker(paragraph: Paragraph) -> None:
    """Turn a leading status keyword such as ``TODO`` into a TaskMarker."""
    first = paragraph.first_child
    if not isinstance(first, Text):
        return

    keyword, _, rest = first.value.partition(" ")
    status = TaskStatus.from_keyword(keyword)
    if status is None:
        return

    first.value = rest
    if not rest and not first.has_line_break:
        first.remove_self()
    paragraph.prepend_child(TaskMarker(status))


def _take_trailing_dash(paragraph: Paragraph) -> bool:
    # "text\n-" starts an empty block, the way the Logseq editor writes it
    last = paragraph.last_child
    if not isinstance(last, Text) or last.value != "-" or last.has_line_break:
        return False

    previous = last.previous_sibling
    if not isinstance(previous, Text) or not previous.has_line_break:
        return False

    last.remove_self()
    previous.clear_line_break()
    return True


def _append_to_last_block(block: Block, node: Node) -> None:
    last = block.blocks()[-1]

    anchor = None
    for child in last.iter_children():
        if not isinstance(child, Block):
            anchor = child

    if anchor is None:
        last.prepend_child(node)
    else:
        last.insert_child_after(node, anchor)


def convert_to_block(nodes: Iterable[Node]) -> Block:
    """Build a Block from parsed nodes in document order.

    Args:
        nodes: Top level nodes of a document or of a ``-`` list item

    Returns:
        A Block whose content are the non-list nodes and whose nested blocks
        come from ``-`` lists. Content following a ``-`` list belongs to the
        last nested block.
    """
    block = Block()
    after_blocks = False

    for node in list(nodes):
        if is_block_list(node):
            for item in node.children:
                block.add_child(convert_to_block(item.children))
            after_blocks = True
            continue

        if after_blocks:
            _append_to_last_block(block, node)
            continue

        if isinstance(node, Paragraph):
            if block.first_child is None:
                apply_task_marker(node)
            starts_block = _take_trailing_dash(node)
            block.add_child(node)
            if starts_block:
                block.add_child(Block())
                after_blocks = True
            continue

        block.add_child(node)

    return block
