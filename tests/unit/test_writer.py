"""Unit tests for the Markdown writer."""

import io

import pytest

from logseq_graph import EmitError, parse_string, write, write_to_string
from logseq_graph.content import (
    AutoLink,
    Block,
    BlockRef,
    Blockquote,
    Cloze,
    CodeBlock,
    CodeSpan,
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
    PageLink,
    Paragraph,
    Properties,
    Property,
    Query,
    Strikethrough,
    Strong,
    TaskMarker,
    TaskStatus,
    Text,
    debug,
)
from logseq_graph.markdown import MarkdownWriter


class TestInlineOutput:
    """Test writing inline nodes."""

    @pytest.mark.parametrize("node, expected", [
        (Text("abc"), "abc"),
        (Text("abc").with_soft_line_break(), "abc\n"),
        (Text("abc").with_hard_line_break(), "abc\\\n"),
        (Text("abc*"), "abc\\*"),
        (Text("[x]"), "\\[x\\]"),
        (Text("C#"), "C\\#"),
        (Text("a `b`"), "a \\`b\\`"),
        (Text("{{poem}}"), "{\\{poem}}"),
        (Text("((ref))"), "(\\(ref))"),
        (Text("a - b"), "a - b"),
        (Emphasis(Text("abc"), Text("def")), "*abcdef*"),
        (Strong(Text("abc")), "**abc**"),
        (Strong(Emphasis(Text("abc"))), "***abc***"),
        (Strikethrough(Text("abc")), "~~abc~~"),
        (CodeSpan("abc"), "`abc`"),
        (CodeSpan("abc`def"), "``abc`def``"),
        (CodeSpan("abc``def"), "```abc``def```"),
        (Link("https://example.com", Text("abc")), "[abc](https://example.com)"),
        (Link("https://example.com", Text("abc"), title="title)"), "[abc](https://example.com 'title\\)')"),
        (AutoLink("https://example.com"), "https://example.com"),
        (AutoLink("www.example.com"), "<www.example.com>"),
        (PageLink("abc def"), "[[abc def]]"),
        (Hashtag("abc"), "#abc"),
        (Hashtag("abc def"), "#[[abc def]]"),
        (Hashtag("abc def"), "#[[abc def]]"),
        (BlockRef("abc"), "((abc))"),
        (Image("https://example.com", Text("abc")), "![abc](https://example.com)"),
        (Macro("poem", ["red", "blue"]), "{{poem red, blue}}"),
        (Macro("poem", ["red, blue"]), '{{poem "red, blue"}}'),
        (Query("(todo now)"), "{{query (todo now)}}"),
        (Cloze("Paris", "capital"), "{{cloze Paris \\\\ capital}}"),
        (Cloze("Paris"), "{{cloze Paris}}"),
    ])
    def test_inline(self, node, expected):
        """Test the Markdown of a single inline node."""
        assert write_to_string(node) == expected

    def test_consecutive_writes_share_the_line(self):
        """Test that inline nodes written one after the other are joined."""
        buffer = io.StringIO()
        writer = MarkdownWriter(buffer)

        writer.write(Text("abc").with_soft_line_break())
        writer.write(Text("def"))

        assert buffer.getvalue() == "abc\ndef"

    def test_adjacent_emphasis_is_separated(self):
        """Test that two emphasis nodes in a row do not merge into strong."""
        paragraph = Paragraph(Emphasis(Text("a")), Emphasis(Text("b")))

        assert write_to_string(paragraph) == "*a* *b*"

    @pytest.mark.parametrize("paragraph, expected", [
        (Paragraph(Text("- not a bullet")), "\\- not a bullet"),
        (Paragraph(Text("+ not a bullet")), "\\+ not a bullet"),
        (Paragraph(Text("a").with_soft_line_break(), Text("> not a quote")), "a\n\\> not a quote"),
        (Paragraph(Strong(Text("a")), Text("- b")), "**a**- b"),
    ])
    def test_line_start_markers(self, paragraph, expected):
        """Test that list and quote markers are escaped only at the start of a line."""
        assert write_to_string(paragraph) == expected

    def test_task_marker(self):
        """Test that a task marker is followed by a space."""
        paragraph = Paragraph(TaskMarker(TaskStatus.LATER), Text("Call Bob"))

        assert write_to_string(paragraph) == "LATER Call Bob"


class TestBlockOutput:
    """Test writing block level nodes."""

    def test_blockquotes(self):
        """Test that separate quotes are separated by a blank line."""
        buffer = io.StringIO()
        writer = MarkdownWriter(buffer)

        writer.write(Blockquote(Paragraph(Text("abc"))))
        writer.write(Blockquote(Paragraph(Text("def"))))

        assert buffer.getvalue() == "> abc\n\n> def"

    def test_blockquote_with_paragraphs(self):
        """Test that blank lines inside a quote keep the marker."""
        quote = Blockquote(Paragraph(Text("abc")), Paragraph(Text("def")))

        assert write_to_string(quote) == "> abc\n>\n> def"

    def test_heading(self):
        """Test ATX headings."""
        assert write_to_string(Heading(3, Text("Title"))) == "### Title"

    def test_code_block(self):
        """Test a fenced code block with language."""
        code = CodeBlock('print("hi")\n', "python")

        assert write_to_string(code) == '```python\nprint("hi")\n```'

    def test_code_block_containing_fence(self):
        """Test that the fence is longer than any fence in the code."""
        code = CodeBlock("```\ninner\n```\n")

        assert write_to_string(code) == "````\n```\ninner\n```\n````"

    def test_lists(self):
        """Test ordered and unordered lists."""
        ordered = List(ListType.ORDERED, ListItem(Text("a")), ListItem(Text("b")))
        unordered = List(ListType.UNORDERED, ListItem(Text("a")), ListItem(Text("b")))

        assert write_to_string(ordered) == "1. a\n2. b"
        assert write_to_string(unordered) == "* a\n* b"

    def test_builders_change_output(self):
        """Test that with_type and with_language are reflected in the output."""
        numbered = List(ListType.UNORDERED, ListItem(Text("a"))).with_type(ListType.ORDERED)
        code = CodeBlock("x = 1\n").with_language("python")

        assert write_to_string(numbered) == "1. a"
        assert write_to_string(code) == "```python\nx = 1\n```"

    def test_logbook(self):
        """Test logbook markers around raw entries."""
        logbook = Logbook(LogbookEntry("CLOCK: [2024-01-31 Wed 09:00:00]"))

        assert write_to_string(logbook) == ":LOGBOOK:\nCLOCK: [2024-01-31 Wed 09:00:00]\n:END:"

    def test_write_to_sink(self):
        """Test writing to a text stream."""
        buffer = io.StringIO()

        write(Paragraph(Text("Hello")), buffer)

        assert buffer.getvalue() == "Hello"


class TestOutlineOutput:
    """Test writing blocks as outline bullets."""

    def test_block_with_only_content(self):
        """Test that a root block writes its content without bullet."""
        assert write_to_string(Block(Paragraph(Text("abc")))) == "abc"

    def test_sub_blocks(self):
        """Test nested blocks written as bullets."""
        root = Block(
            Block(Paragraph(Text("abc"))),
            Block(Paragraph(Text("def"))),
        )

        assert write_to_string(root) == "- abc\n- def"

    def test_content_and_sub_blocks(self):
        """Test root content followed by bullets."""
        root = Block(
            Paragraph(Text("abc")),
            Block(Paragraph(Text("block 1"))),
            Block(Paragraph(Text("block 2"))),
        )

        assert write_to_string(root) == "abc\n\n- block 1\n- block 2"

    def test_nested_blocks(self):
        """Test indentation of nested bullets."""
        root = Block(
            Paragraph(Text("abc")),
            Block(
                Paragraph(Text("block 1")),
                Block(Paragraph(Text("block 2"))),
            ),
        )

        assert write_to_string(root) == "abc\n\n- block 1\n\n  - block 2"

    def test_multiline_block_content_is_indented(self):
        """Test that continuation lines line up with the bullet text."""
        root = Block(
            Block(Paragraph(Text("abc"))),
            Block(Paragraph(Text("def").with_soft_line_break(), Text("continued"))),
        )

        assert write_to_string(root) == "- abc\n- def\n  continued"


class TestPropertiesOutput:
    """Test writing properties."""

    def test_properties(self):
        """Test a standalone property run."""
        props = Properties(Property("key", Text("value")))

        assert write_to_string(props) == "key:: value"

    def test_paragraph_with_properties_at_end(self):
        """Test properties following text in a paragraph."""
        paragraph = Paragraph(Text("abc"), Properties(Property("key", Text("value"))))

        assert write_to_string(paragraph) == "abc\nkey:: value"

    def test_paragraph_with_properties_at_start(self):
        """Test properties followed by text in a paragraph."""
        paragraph = Paragraph(
            Properties(
                Property("key1", Text("value1")),
                Property("key2", Hashtag("value2")),
            ),
            Text("abc"),
        )

        assert write_to_string(paragraph) == "key1:: value1\nkey2:: #value2\nabc"

    def test_property_without_value(self):
        """Test that an empty property keeps its colons."""
        assert write_to_string(Properties(Property("empty"))) == "empty::"


class TestEmitErrors:
    """Test trees that cannot be written."""

    @pytest.mark.parametrize("node", [
        Hashtag(""),
        BlockRef(""),
        Macro("two words"),
        Macro(""),
    ])
    def test_invalid_nodes(self, node):
        """Test that invalid inline nodes raise EmitError."""
        with pytest.raises(EmitError) as exc_info:
            write_to_string(Paragraph(node))

        assert exc_info.value.node is node

    def test_unknown_node_type(self):
        """Test that nodes without an emitter raise EmitError."""
        with pytest.raises(EmitError, match="unsupported node"):
            write_to_string(Node())


class TestRoundTrip:
    """Test that parsing then writing gives back the input."""

    @pytest.mark.parametrize("source", [
        "Basic content",
        "Basic\ncontent",
        "Basic\\\ncontent",
        "Basic content\n\nMore content",
        "**Basic** content",
        "*Basic\ncontent*",
        "~~Basic~~ content",
        "`Basic` content",
        "# Heading\n\nParagraph",
        "```go\nfunc main() {\n\tfmt.Println(\"Hello world\")\n}\n```\n\nParagraph",
        "Paragraph\n```go\nfunc main() {}\n```",
        "{{poem}}",
        "{{poem red, blue}}",
        "{{poem red blue}}",
        "{{poem \"red, blue\"}}",
        "{{query datalog}}",
        "key:: value",
        "key:: value\nkey2:: value2",
        "key:: value\nParagraph",
        "Paragraph\nkey:: value",
        "Paragraph\nkey:: value\nParagraph",
        "Paragraph\n\nkey:: value",
        "TODO Task",
        "IN-PROGRESS Task",
        "- abc\n- def\n  continued",
        "- Parent\n\n  - Child\n- Sibling",
        "- DONE Write\n  :LOGBOOK:\n  CLOCK: [2024-01-31 Wed 09:00:00]\n  :END:",
        "- See [[Books]] and #reading\n  id:: 65b8f5a2-0000-4000-8000-000000000001",
    ])
    def test_fully_equal(self, source):
        """Test inputs that are already in normal form."""
        assert write_to_string(parse_string(source)) == source

    @pytest.mark.parametrize("source, expected", [
        ("Basic  \ncontent", "Basic\\\ncontent"),
        ("{{poem red,blue}}", "{{poem red, blue}}"),
        (" TODO Task", "TODO Task"),
        ("{{poem red blue", "{\\{poem red blue"),
        ("- Item 1\n  - Item 1.1\n- Item 2\n", "- Item 1\n\n  - Item 1.1\n- Item 2"),
        ("#+BEGIN_ABC\nraw\n#+END_ABC\n", "#+BEGIN_ABC\nraw\n#+END_ABC"),
    ])
    def test_normalised(self, source, expected):
        """Test inputs that are rewritten in normal form."""
        assert write_to_string(parse_string(source)) == expected

    @pytest.mark.parametrize("source", [
        "Basic  \ncontent",
        " TODO Task",
        "- Item 1\n  - Item 1.1\n- Item 2\n",
        "**a** b",
        "- **09:00** Standup",
        "Read #books\nlater",
        "#[[unterminated",
        "#\\[\\[unterminated",
        "\\#books and C\\#",
        "a \\`b\\`",
        "\\- not a bullet",
        "a\n\\> not a quote",
        "{\\{poem}}",
        "(\\(65b8f5a2-0000-4000-8000-000000000001))",
        "text\n-",
        "- a\n- b\n\ntrailing",
        "- Dune\n  type:: [[Book]]\n  - Borrowed",
    ])
    def test_written_form_parses_to_same_tree(self, source):
        """Test that writing a parsed document and parsing it again changes nothing."""
        tree = parse_string(source)

        assert debug(parse_string(write_to_string(tree))) == debug(tree)
