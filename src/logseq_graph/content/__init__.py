"""Document tree for Logseq flavoured Markdown."""

from logseq_graph.content.base import (
    BlockContainer,
    BlockNode,
    ContainerNode,
    InlineContainer,
    InlineNode,
    Node,
    NodePredicate,
    PreviousLineAware,
    PreviousLineType,
    add_automatic_paragraphs,
)
from logseq_graph.content.block import Block, BlockList
from logseq_graph.content.code import CodeBlock
from logseq_graph.content.commands import AdvancedCommand, Logbook, LogbookEntry, QueryCommand
from logseq_graph.content.debug import DebugPrinter, debug
from logseq_graph.content.html import RawHTML, RawHTMLBlock
from logseq_graph.content.links import (
    AutoLink,
    BlockRef,
    Hashtag,
    HasLinkURL,
    Image,
    Link,
    PageLink,
    PageRef,
)
from logseq_graph.content.lists import List, ListItem, ListType, ordered_list, unordered_list
from logseq_graph.content.macro import BlockEmbed, Cloze, Macro, PageEmbed, Query
from logseq_graph.content.properties import Properties, Property
from logseq_graph.content.querying import (
    NodeList,
    is_both,
    is_either,
    is_of_type,
    is_page_reference,
)
from logseq_graph.content.tasks import TaskMarker, TaskStatus
from logseq_graph.content.text import (
    Blockquote,
    CodeSpan,
    Emphasis,
    Heading,
    Paragraph,
    Strikethrough,
    Strong,
    Text,
    ThematicBreak,
)

__all__ = [
    "AdvancedCommand",
    "AutoLink",
    "Block",
    "BlockContainer",
    "BlockEmbed",
    "BlockList",
    "BlockNode",
    "BlockRef",
    "Blockquote",
    "Cloze",
    "CodeBlock",
    "CodeSpan",
    "ContainerNode",
    "DebugPrinter",
    "Emphasis",
    "HasLinkURL",
    "Hashtag",
    "Heading",
    "Image",
    "InlineContainer",
    "InlineNode",
    "Link",
    "List",
    "ListItem",
    "ListType",
    "Logbook",
    "LogbookEntry",
    "Macro",
    "Node",
    "NodeList",
    "NodePredicate",
    "PageEmbed",
    "PageLink",
    "PageRef",
    "Paragraph",
    "PreviousLineAware",
    "PreviousLineType",
    "Properties",
    "Property",
    "Query",
    "QueryCommand",
    "RawHTML",
    "RawHTMLBlock",
    "Strikethrough",
    "Strong",
    "TaskMarker",
    "TaskStatus",
    "Text",
    "ThematicBreak",
    "add_automatic_paragraphs",
    "debug",
    "is_both",
    "is_either",
    "is_of_type",
    "is_page_reference",
    "ordered_list",
    "unordered_list",
]
