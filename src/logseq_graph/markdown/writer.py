"""Markdown writer for document trees.

Each node kind has a small emitter; ``MarkdownWriter.write`` looks the
emitter up by type. Block level nodes go through ``_start_block`` which
decides how many newlines separate them from what was written before,
based on the previous line hint recorded by the parser.

Example:
    >>> write_to_string(Block(Paragraph(Text("Hello"))))
    'Hello'
"""

import io
import re
from typing import Callable, Iterable, Optional, TextIO

from logseq_graph.content import (
    AdvancedCommand,
    AutoLink,
    Block,
    BlockEmbed,
    BlockRef,
    Blockquote,
    Cloze,
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
    Macro,
    Node,
    PageEmbed,
    PageLink,
    Paragraph,
    PreviousLineAware,
    PreviousLineType,
    Properties,
    Property,
    Query,
    QueryCommand,
    RawHTML,
    RawHTMLBlock,
    Strikethrough,
    Strong,
    TaskMarker,
    Text,
    ThematicBreak,
)
from logseq_graph.errors import EmitError
from logseq_graph.markdown.indent_writer import IndentWriter
from logseq_graph.utils.logging import get_logger

logger = get_logger(__name__)

URL_PATTERN = re.compile(
    r"(?:http|https|ftp)://[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-z]+(?::\d+)?"
    r"(?:[/#?][-a-zA-Z0-9@:%_+.~#$!?&/=\(\);,'\">\^{}\[\]`]*)?"
)

EscapeFunc = Callable[[str, str], bool]


# Only start a list or a quote at the beginning of a line
LINE_START_MARKERS = "-+>"


def escape_potential_markdown(prev: str, char: str) -> bool:
    if char in "*_[]#`":
        return True
    return char in "~{(" and prev == char


def escape_link_url(prev: str, char: str) -> bool:
    return char in "()"


def escape_link_title(prev: str, char: str) -> bool:
    return char in "'\"\\)"


def escape_wiki_link(prev: str, char: str) -> bool:
    return char == "]"


def escape_macro_argument(prev: str, char: str) -> bool:
    return char == '"'


def escape(value: str, escape_func: EscapeFunc) -> str:
    """Backslash escape the characters of ``value`` selected by ``escape_func``.

    ``escape_func`` receives the previous and the current character so that
    sequences such as ``~~`` can be broken up.
    """
    out = []
    prev = ""
    for char in value:
        if escape_func(prev, char):
            out.append("\\")
        out.append(char)
        prev = char
    return "".join(out)


def _longest_run(value: str, char: str) -> int:
    longest = 0
    current = 0
    for c in value:
        if c == char:
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest


class MarkdownWriter:
    """Writes nodes as Logseq flavoured Markdown to a text stream.

    A writer keeps track of indentation and of what it has written so far,
    so several nodes written one after the other are separated the same way
    as siblings in a tree would be.

    Args:
        sink: Stream receiving the Markdown
    """

    def __init__(self, sink: TextIO):
        self.out = IndentWriter(sink)
        self._emitters: dict[type, Callable[[Node], None]] = {
            Text: self._write_text,
            CodeSpan: self._write_code_span,
            Emphasis: self._write_emphasis,
            Strong: self._write_strong,
            Strikethrough: self._write_strikethrough,
            Link: self._write_link,
            AutoLink: self._write_auto_link,
            PageLink: self._write_page_link,
            Hashtag: self._write_hashtag,
            BlockRef: self._write_block_ref,
            Image: self._write_image,
            RawHTML: self._write_raw_html,
            Macro: self._write_macro,
            Query: self._write_query,
            PageEmbed: self._write_page_embed,
            BlockEmbed: self._write_block_embed,
            Cloze: self._write_cloze,
            TaskMarker: self._write_task_marker,
            Heading: self._write_heading,
            Paragraph: self._write_paragraph,
            Blockquote: self._write_blockquote,
            List: self._write_list,
            CodeBlock: self._write_code_block,
            ThematicBreak: self._write_thematic_break,
            RawHTMLBlock: self._write_raw_html_block,
            Properties: self._write_properties,
            AdvancedCommand: self._write_advanced_command,
            QueryCommand: self._write_query_command,
            Logbook: self._write_logbook,
            Block: self._write_block,
        }

    def write(self, node: Node) -> None:
        """Write ``node`` and everything below it.

        Raises:
            EmitError: If the tree contains a node that cannot be written
        """
        emitter = self._emitters.get(type(node))
        if emitter is None:
            for node_type, candidate in self._emitters.items():
                if isinstance(node, node_type):
                    emitter = candidate
                    break

        if emitter is None:
            logger.debug("emit_unsupported_node", node_type=type(node).__name__)
            raise EmitError(f"unsupported node: {type(node).__name__}", node)

        emitter(node)

    def write_blocks(self, blocks: Iterable[Block]) -> None:
        """Write ``blocks`` as a bulleted outline at the current level."""
        blocks = list(blocks)
        if not blocks:
            return

        self._start_block(None)
        for block in blocks:
            self.out.write("- ")
            self.out.push("  ")
            self.write(block)
            if block is not blocks[-1]:
                self.out.write("\n")
            self.out.pop()
        self.out.pop()

    def _write_children(self, node: ContainerNode) -> None:
        for child in node.iter_children():
            self.write(child)

    def _write_escaped(self, value: str, escape_func: EscapeFunc) -> None:
        self.out.write(escape(value, escape_func))

    def _separator_for(self, node: Optional[Node]) -> int:
        if not isinstance(node, PreviousLineAware):
            return 2

        hint = node.previous_line_type
        if hint is PreviousLineType.BLANK:
            return 2
        if hint is PreviousLineType.NON_BLANK:
            return 1

        previous = node.previous_sibling
        if isinstance(node, Properties) and isinstance(previous, Properties):
            return 1
        if isinstance(node, Paragraph) and isinstance(previous, Properties):
            return 1
        return 2

    def _start_block(self, node: Optional[Node], marker: str = "") -> None:
        if self.out.has_written_at_current_level():
            newlines = self._separator_for(node)
            if self.out.last_was_line_break:
                newlines -= 1
            self.out.write("\n" * newlines)

        self.out.push(marker)

    def _end_block(self) -> None:
        self.out.pop()

    # Inline nodes

    def _starts_line(self, node: Text) -> bool:
        if not isinstance(node.parent, Paragraph):
            return False
        previous = node.previous_sibling
        if previous is None:
            return True
        if isinstance(previous, Properties):
            return True
        return isinstance(previous, Text) and previous.has_line_break

    def _write_text(self, node: Text) -> None:
        if node.value and node.value[0] in LINE_START_MARKERS and self._starts_line(node):
            self.out.write("\\")
        self._write_escaped(node.value, escape_potential_markdown)
        if node.soft_line_break:
            self.out.write("\n")
        elif node.hard_line_break:
            self.out.write("\\\n")

    def _write_wrapped(self, node: ContainerNode, marker: str) -> None:
        if type(node.previous_sibling) is type(node):
            self.out.write(" ")

        self.out.write(marker)
        self._write_children(node)
        self.out.write(marker)

    def _write_emphasis(self, node: Emphasis) -> None:
        self._write_wrapped(node, "*")

    def _write_strong(self, node: Strong) -> None:
        self._write_wrapped(node, "**")

    def _write_strikethrough(self, node: Strikethrough) -> None:
        self._write_wrapped(node, "~~")

    def _write_code_span(self, node: CodeSpan) -> None:
        marker = "`" * (_longest_run(node.value, "`") + 1)
        value = node.value
        if value.startswith("`") or value.endswith("`"):
            value = f" {value} "
        elif value.startswith(" ") and value.endswith(" ") and value.strip(" "):
            value = f" {value} "
        self.out.write(marker + value + marker)

    def _write_destination(self, url: str, title: str) -> None:
        if " " in url:
            self.out.write("<" + url.replace("<", "\\<").replace(">", "\\>") + ">")
        else:
            self._write_escaped(url, escape_link_url)

        if title:
            self.out.write(" '")
            self._write_escaped(title, escape_link_title)
            self.out.write("'")

    def _write_link(self, node: Link) -> None:
        self.out.write("[")
        self._write_children(node)
        self.out.write("](")
        self._write_destination(node.url, node.title)
        self.out.write(")")

    def _write_image(self, node: Image) -> None:
        self.out.write("![")
        self._write_children(node)
        self.out.write("](")
        self._write_destination(node.src, node.title)
        self.out.write(")")

    def _write_auto_link(self, node: AutoLink) -> None:
        if URL_PATTERN.fullmatch(node.url):
            self.out.write(node.url)
        else:
            self.out.write(f"<{node.url}>")

    def _write_page_link(self, node: PageLink) -> None:
        self.out.write("[[")
        self._write_escaped(node.to, escape_wiki_link)
        self.out.write("]]")

    def _write_hashtag(self, node: Hashtag) -> None:
        if not node.to:
            raise EmitError("hashtag without a target", node)

        self.out.write("#")
        if any(char.isspace() for char in node.to):
            self.out.write("[[")
            self._write_escaped(node.to, escape_wiki_link)
            self.out.write("]]")
        else:
            self.out.write(node.to)

    def _write_block_ref(self, node: BlockRef) -> None:
        if not node.id:
            raise EmitError("block reference without an id", node)

        self.out.write("((")
        self._write_escaped(node.id, escape_wiki_link)
        self.out.write("))")

    def _write_raw_html(self, node: RawHTML) -> None:
        self.out.write(node.html)

    def _write_macro_call(self, name: str, arguments: list[str], node: Node) -> None:
        if not name or any(char.isspace() for char in name):
            raise EmitError(f"invalid macro name: {name!r}", node)

        self.out.write("{{" + name)
        for i, argument in enumerate(arguments):
            self.out.write(" " if i == 0 else ", ")
            if "," in argument or argument.startswith('"'):
                self.out.write('"' + escape(argument, escape_macro_argument) + '"')
            else:
                self.out.write(argument)
        self.out.write("}}")

    def _write_macro(self, node: Macro) -> None:
        self._write_macro_call(node.name, node.arguments, node)

    def _write_query(self, node: Query) -> None:
        self.out.write("{{query " + node.query + "}}")

    def _write_page_embed(self, node: PageEmbed) -> None:
        self.out.write("{{embed [[" + node.to + "]]}}")

    def _write_block_embed(self, node: BlockEmbed) -> None:
        self.out.write("{{embed ((" + node.id + "))}}")

    def _write_cloze(self, node: Cloze) -> None:
        if node.cue:
            self.out.write("{{cloze " + node.answer + " \\\\ " + node.cue + "}}")
        else:
            self.out.write("{{cloze " + node.answer + "}}")

    def _write_task_marker(self, node: TaskMarker) -> None:
        self.out.write(node.status.value)

        following = node.next_sibling
        if following is None:
            return
        if isinstance(following, Text) and not following.value and following.has_line_break:
            return
        self.out.write(" ")

    # Block nodes

    def _write_heading(self, node: Heading) -> None:
        self._start_block(node)
        self.out.write("#" * node.level + " ")
        self._write_children(node)
        self._end_block()

    def _write_paragraph(self, node: Paragraph) -> None:
        self._start_block(node)
        self._write_children(node)
        self._end_block()

    def _write_blockquote(self, node: Blockquote) -> None:
        self._start_block(node, "> ")
        if not self.out.last_was_line_break:
            # Stamp the marker when the quote opens a list item or outline block
            self.out.write_raw("> ")
        self._write_children(node)
        self._end_block()

    def _write_list(self, node: List) -> None:
        self._start_block(node)

        items = node.children
        for i, item in enumerate(items, start=1):
            if not isinstance(item, ListItem):
                raise EmitError(f"unsupported list child: {type(item).__name__}", item)

            if node.type is ListType.ORDERED:
                marker = f"{i}{node.marker}"
            else:
                marker = node.marker

            self.out.write(marker + " ")
            self.out.push(" " * (len(marker) + 1))
            self._write_children(item)
            if i < len(items):
                self.out.write("\n")
            self.out.pop()

        self._end_block()

    def _write_code_block(self, node: CodeBlock) -> None:
        self._start_block(node)

        fence = "`" * max(3, _longest_fence(node.code) + 1)
        self.out.write(fence + node.language + "\n")
        self.out.write(node.code)
        if node.code and not node.code.endswith("\n"):
            self.out.write("\n")
        self.out.write(fence)

        self._end_block()

    def _write_thematic_break(self, node: ThematicBreak) -> None:
        self._start_block(node)
        self.out.write("---")
        self._end_block()

    def _write_raw_html_block(self, node: RawHTMLBlock) -> None:
        self._start_block(node)
        self.out.write(node.html)
        self._end_block()

    def _write_properties(self, node: Properties) -> None:
        properties = node.children
        if not properties:
            return

        in_paragraph = isinstance(node.parent, Paragraph)
        if in_paragraph:
            if self.out.has_written_at_current_level() and not self.out.last_was_line_break:
                self.out.write("\n")
        else:
            self._start_block(node)

        for i, prop in enumerate(properties):
            if not isinstance(prop, Property):
                raise EmitError(f"unsupported properties child: {type(prop).__name__}", prop)

            if i > 0:
                self.out.write("\n")
            self.out.write(prop.name + "::")
            if prop.first_child is not None:
                self.out.write(" ")
                self._write_children(prop)

        if in_paragraph:
            if node.next_sibling is not None:
                self.out.write("\n")
        else:
            self._end_block()

    def _write_begin_end(self, node: Node, variant: str, value: str) -> None:
        self._start_block(node)
        self.out.write(f"#+BEGIN_{variant}\n")
        self.out.write(value)
        if not self.out.last_was_line_break:
            self.out.write("\n")
        self.out.write(f"#+END_{variant}")
        self._end_block()

    def _write_advanced_command(self, node: AdvancedCommand) -> None:
        self._write_begin_end(node, node.type, node.value)

    def _write_query_command(self, node: QueryCommand) -> None:
        self._write_begin_end(node, "QUERY", node.query)

    def _write_logbook(self, node: Logbook) -> None:
        self._start_block(node)
        self.out.write(":LOGBOOK:\n")
        for entry in node.iter_children():
            if not isinstance(entry, LogbookEntry):
                raise EmitError(f"unsupported logbook child: {type(entry).__name__}", entry)
            self.out.write(entry.value)
            if not entry.value.endswith("\n"):
                self.out.write("\n")
        self.out.write(":END:")
        self._end_block()

    def _write_block(self, node: Block) -> None:
        self._start_block(node)
        for child in node.content():
            self.write(child)
        self.write_blocks(node.blocks())
        self._end_block()


def _longest_fence(code: str) -> int:
    longest = 0
    for line in code.split("\n"):
        stripped = line.lstrip(" ")
        if stripped.startswith("```"):
            longest = max(longest, len(stripped) - len(stripped.lstrip("`")))
    return longest


def write(node: Node, sink: TextIO) -> None:
    """Write ``node`` as Markdown to ``sink``.

    Raises:
        EmitError: If the tree cannot be written
    """
    MarkdownWriter(sink).write(node)


def write_to_string(node: Node) -> str:
    """Return ``node`` as a Markdown string.

    Raises:
        EmitError: If the tree cannot be written
    """
    buffer = io.StringIO()
    write(node, buffer)
    return buffer.getvalue()
