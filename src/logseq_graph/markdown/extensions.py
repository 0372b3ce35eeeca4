"""markdown-it plugins for the Logseq flavour of Markdown.

Inline rules add macros, block references, page links, hashtags and bare
URLs, and replace the code span rule with one that keeps the raw content.
Block rules add ``:LOGBOOK:`` regions and ``#+BEGIN_``/``#+END_`` commands.

Every rule produces its own token type, which the parser converts into
document nodes:

- ``macro``: ``meta["name"]``, ``meta["arguments"]``
- ``block_ref``, ``page_link``, ``hashtag``, ``bare_url``: ``content``
- ``logbook``: ``content`` holds the raw lines
- ``begin_end``: ``info`` holds the command type, ``content`` the raw lines
"""

import re

from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock
from markdown_it.rules_inline import StateInline

from logseq_graph.markdown.macros import scan_macro

# Characters where the text rule stops so that another rule gets a chance
TERMINATOR_CHARS = "\n!#$%&()*+-:<=>@[\\]^_`{}~"
_TERMINATOR_RE = re.compile("[" + re.escape(TERMINATOR_CHARS) + "]")

BLOCK_REF_RE = re.compile(r"\(\(([0-9a-f-]+)\)\)")
SCHEME_RE = re.compile(r"(?:^|[^a-zA-Z0-9.+-])(https?|ftp)$")
BARE_URL_RE = re.compile(
    r"(?:http|https|ftp)://[-a-zA-Z0-9@:%._\+~#=]{1,256}\.[a-z]+(?::\d+)?"
    r"(?:[/#?][-a-zA-Z0-9@:%_+.~#$!?&/=\(\);,'\"\^{}\[\]`]*)?"
)


def _line_end(state: StateInline, pos: int) -> int:
    newline = state.src.find("\n", pos, state.posMax)
    return state.posMax if newline < 0 else newline


def text(state: StateInline, silent: bool) -> bool:
    """Consume plain text up to the next character another rule cares about."""
    match = _TERMINATOR_RE.search(state.src, state.pos, state.posMax)
    pos = match.start() if match else state.posMax

    if pos == state.pos:
        return False

    if not silent:
        state.pending += state.src[state.pos : pos]
    state.pos = pos
    return True


def raw_backtick(state: StateInline, silent: bool) -> bool:
    """Code spans that keep newlines and repeated spaces as written."""
    pos = state.pos
    if state.src[pos] != "`":
        return False

    start = pos
    pos += 1
    maximum = state.posMax
    while pos < maximum and state.src[pos] == "`":
        pos += 1

    marker = state.src[start:pos]
    opener_length = len(marker)

    if state.backticksScanned and state.backticks.get(opener_length, 0) <= start:
        if not silent:
            state.pending += marker
        state.pos += opener_length
        return True

    match_start = match_end = pos
    while True:
        match_start = state.src.find("`", match_end, maximum)
        if match_start < 0:
            break
        match_end = match_start + 1
        while match_end < maximum and state.src[match_end] == "`":
            match_end += 1

        closer_length = match_end - match_start
        if closer_length == opener_length:
            if not silent:
                token = state.push("code_inline", "code", 0)
                token.markup = marker
                content = state.src[pos:match_start]
                if content.startswith(" ") and content.endswith(" ") and content.strip(" "):
                    content = content[1:-1]
                token.content = content
            state.pos = match_end
            return True

        state.backticks[closer_length] = match_start

    state.backticksScanned = True
    if not silent:
        state.pending += marker
    state.pos += opener_length
    return True


def macro(state: StateInline, silent: bool) -> bool:
    if not state.src.startswith("{{", state.pos):
        return False

    scanned = scan_macro(state.src, state.pos, state.posMax)
    if scanned is None:
        return False

    if not silent:
        token = state.push("macro", "", 0)
        token.meta = {"name": scanned.name, "arguments": scanned.arguments}
        token.markup = state.src[state.pos : scanned.end]
    state.pos = scanned.end
    return True


def block_ref(state: StateInline, silent: bool) -> bool:
    if not state.src.startswith("((", state.pos):
        return False

    match = BLOCK_REF_RE.match(state.src, state.pos, state.posMax)
    if match is None:
        return False

    if not silent:
        token = state.push("block_ref", "", 0)
        token.content = match.group(1)
    state.pos = match.end()
    return True


def _find_closing_brackets(src: str, start: int, end: int) -> int:
    i = start
    while i < end - 1:
        if src[i] == "]" and src[i + 1] == "]" and src[i - 1] != "\\":
            return i
        i += 1
    return -1


def page_link(state: StateInline, silent: bool) -> bool:
    """Wiki style ``[[page]]`` links. ``\\]`` escapes a bracket."""
    if not state.src.startswith("[[", state.pos):
        return False

    end = _find_closing_brackets(state.src, state.pos + 2, _line_end(state, state.pos))
    if end < 0:
        return False

    if not silent:
        token = state.push("page_link", "", 0)
        token.content = state.src[state.pos + 2 : end].replace("\\", "")
    state.pos = end + 2
    return True


def hashtag(state: StateInline, silent: bool) -> bool:
    """Tags written as ``#tag`` or ``#[[tag with spaces]]``."""
    pos = state.pos
    if state.src[pos] != "#":
        return False

    line_end = _line_end(state, pos)
    if state.src.startswith("[[", pos + 1):
        end = _find_closing_brackets(state.src, pos + 3, line_end)
        if end < 0:
            return False
        value = state.src[pos + 3 : end].replace("\\", "")
        next_pos = end + 2
    else:
        end = pos + 1
        while end < line_end and not state.src[end].isspace() and state.src[end] != "\\":
            end += 1
        value = state.src[pos + 1 : end]
        next_pos = end

    if not value:
        return False

    if not silent:
        token = state.push("hashtag", "", 0)
        token.content = value
    state.pos = next_pos
    return True


def bare_url(state: StateInline, silent: bool) -> bool:
    """Link ``http``, ``https`` and ``ftp`` URLs written without brackets."""
    if state.linkLevel > 0:
        return False

    pos = state.pos
    if not state.src.startswith("://", pos):
        return False

    scheme = SCHEME_RE.search(state.pending)
    if scheme is None:
        return False

    proto = scheme.group(1)
    match = BARE_URL_RE.match(state.src, pos - len(proto), state.posMax)
    if match is None:
        return False

    url = match.group(0).rstrip("*")
    if not silent:
        state.pending = state.pending[: -len(proto)]
        token = state.push("bare_url", "", 0)
        token.content = url
    state.pos += len(url) - len(proto)
    return True


def _scan_region(
    state: StateBlock, start_line: int, end_line: int, closing: str
) -> tuple[int, bool]:
    next_line = start_line
    while True:
        next_line += 1
        if next_line >= end_line:
            return next_line, False

        pos = state.bMarks[next_line] + state.tShift[next_line]
        maximum = state.eMarks[next_line]
        if pos < maximum and state.sCount[next_line] < state.blkIndent:
            return next_line, False

        line = state.src[pos:maximum]
        if line.startswith(closing) and not line[len(closing) :].strip():
            return next_line, True


def logbook(state: StateBlock, start_line: int, end_line: int, silent: bool) -> bool:
    """``:LOGBOOK:`` ... ``:END:`` regions, kept as raw lines."""
    if state.is_code_block(start_line):
        return False

    pos = state.bMarks[start_line] + state.tShift[start_line]
    maximum = state.eMarks[start_line]
    if not state.src.startswith(":LOGBOOK:", pos) or state.src[pos + 9 : maximum].strip():
        return False

    if silent:
        return True

    next_line, closed = _scan_region(state, start_line, end_line, ":END:")
    state.line = next_line + (1 if closed else 0)

    token = state.push("logbook", "", 0)
    token.content = state.getLines(start_line + 1, next_line, state.sCount[start_line], True)
    token.map = [start_line, state.line]
    return True


def begin_end(state: StateBlock, start_line: int, end_line: int, silent: bool) -> bool:
    """Org style ``#+BEGIN_<TYPE>`` ... ``#+END_<TYPE>`` commands."""
    if state.is_code_block(start_line):
        return False

    pos = state.bMarks[start_line] + state.tShift[start_line]
    maximum = state.eMarks[start_line]
    if not state.src.startswith("#+BEGIN_", pos):
        return False

    line = state.src[pos + 8 : maximum]
    variant = re.match(r"[^ \t]*", line).group(0)
    if not variant or line[len(variant) :].strip():
        return False

    if silent:
        return True

    next_line, closed = _scan_region(state, start_line, end_line, "#+END_" + variant)
    state.line = next_line + (1 if closed else 0)

    token = state.push("begin_end", "", 0)
    token.info = variant
    token.content = state.getLines(start_line + 1, next_line, state.sCount[start_line], True)
    token.map = [start_line, state.line]
    return True


def logseq_plugin(md: MarkdownIt) -> None:
    """Install the Logseq syntax rules on ``md``."""
    md.inline.ruler.at("text", text)
    md.inline.ruler.at("backticks", raw_backtick)
    md.inline.ruler.before("newline", "bare_url", bare_url)
    md.inline.ruler.before("link", "macro", macro)
    md.inline.ruler.before("link", "block_ref", block_ref)
    md.inline.ruler.before("link", "page_link", page_link)
    md.inline.ruler.push("hashtag", hashtag)

    alt = {"alt": ["paragraph", "reference", "blockquote", "list"]}
    md.block.ruler.before("html_block", "logbook", logbook, alt)
    md.block.ruler.before("html_block", "begin_end", begin_end, alt)


def create_markdown() -> MarkdownIt:
    """Return a markdown-it parser configured for Logseq pages.

    Entities stay literal, setext headings and link reference definitions
    are disabled so that writing a parsed page gives back the same text,
    and link targets are kept exactly as written.
    """
    md = MarkdownIt("commonmark")
    md.enable("strikethrough")
    md.disable(["entity", "lheading", "reference"])
    md.use(logseq_plugin)

    md.normalizeLink = lambda url: url
    md.normalizeLinkText = lambda link: link
    md.validateLink = lambda url: True
    return md
