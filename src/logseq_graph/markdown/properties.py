"""Extraction of ``name:: value`` property lines from parsed paragraphs."""

import re
from typing import Optional

from logseq_graph.content import (
    ContainerNode,
    Paragraph,
    PreviousLineType,
    Properties,
    Property,
    Text,
    is_of_type,
)

PROPERTY_PATTERN = re.compile(r"^([A-Za-z0-9_-]+)::")


def _properties_hint(paragraph: Paragraph, at_start: bool) -> PreviousLineType:
    if not at_start:
        return PreviousLineType.NON_BLANK
    if paragraph.previous_sibling is None:
        return PreviousLineType.AUTOMATIC
    if paragraph.previous_line_type is PreviousLineType.AUTOMATIC:
        return PreviousLineType.BLANK
    return PreviousLineType.NON_BLANK


def _open_property(node: Text) -> Optional[tuple[Property, Text]]:
    match = PROPERTY_PATTERN.match(node.value)
    if match is None:
        return None

    rest = node.value[match.end() :]
    if not rest.startswith(" "):
        return None

    value = Text(rest[1:])
    value.soft_line_break = node.soft_line_break
    value.hard_line_break = node.hard_line_break
    return Property(match.group(1)), value


def extract_paragraph_properties(paragraph: Paragraph) -> None:
    """Move property lines of ``paragraph`` into Properties nodes.

    A line is a property line when it starts with a Text of the form
    ``name:: value``. The value runs to the end of the line and may hold any
    inline node. Consecutive property lines share one Properties node, which
    takes the place of the lines inside the paragraph. Other lines are left
    untouched.
    """
    properties: Optional[Properties] = None
    collecting: Optional[Property] = None
    line_start = True

    node = paragraph.first_child
    while node is not None:
        following = node.next_sibling

        if collecting is not None:
            collecting.add_child(node)
            if isinstance(node, Text) and node.has_line_break:
                node.clear_line_break()
                collecting = None
                line_start = True
            node = following
            continue

        opened = _open_property(node) if line_start and isinstance(node, Text) else None
        if opened is None:
            properties = None
            line_start = isinstance(node, Text) and node.has_line_break
            node = following
            continue

        prop, value = opened
        if properties is None:
            at_start = node.previous_sibling is None
            properties = Properties().with_previous_line_type(_properties_hint(paragraph, at_start))
            paragraph.insert_child_before(properties, node)
        properties.add_child(prop)
        node.remove_self()

        if value.has_line_break:
            value.clear_line_break()
            if value.value:
                prop.add_child(value)
        else:
            if value.value:
                prop.add_child(value)
            collecting = prop
        line_start = collecting is None
        node = following


def extract_properties(root: ContainerNode) -> None:
    """Extract properties from every paragraph below ``root``."""
    for paragraph in root.children.filter_deep(is_of_type(Paragraph)):
        extract_paragraph_properties(paragraph)
