"""Macro scanning and the macros Logseq gives a meaning to.

Macros look like ``{{name arg1, arg2}}``; ``{{{name}}}`` is accepted too.
Arguments are comma separated and may be quoted, in which case they can
contain commas:

- ``{{poem red, blue}}``: ``red``, ``blue``
- ``{{poem red blue}}``: ``red blue``
- ``{{poem "red, blue"}}``: ``red, blue``
- ``{{poem "blue" red}}``: invalid, no comma after the quoted argument
- ``{{poem red,}}``: invalid, empty argument

Invalid macros are left as plain text by the parser.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from logseq_graph.content import BlockEmbed, Cloze, Macro, Node, PageEmbed, Query


class _State(Enum):
    NAME = 1
    ARGUMENT_START = 2
    ARGUMENT_UNQUOTED = 3
    ARGUMENT_QUOTED = 4
    EXPECT_COMMA = 5


@dataclass
class ScannedMacro:
    """Result of scanning a macro.

    Attributes:
        name: Macro name
        arguments: Argument values with quotes removed
        end: Index just after the closing braces
    """

    name: str
    arguments: list[str] = field(default_factory=list)
    end: int = 0


def _unescape(value: str) -> str:
    return value.replace("\\", "")


def scan_macro(src: str, pos: int, limit: Optional[int] = None) -> Optional[ScannedMacro]:
    """Scan a macro starting at ``src[pos]``.

    Macros never span lines; scanning stops at the first newline.

    Args:
        src: Text being parsed
        pos: Index of the first ``{``
        limit: Index scanning must not pass, defaults to ``len(src)``

    Returns:
        The scanned macro, or None if the text at ``pos`` is not a valid macro
    """
    if limit is None:
        limit = len(src)
    newline = src.find("\n", pos, limit)
    line = src[pos : newline if newline >= 0 else limit]

    if not line.startswith("{{"):
        return None

    triple = line.startswith("{{{")
    closing = "}}}" if triple else "}}"
    start = 3 if triple else 2

    name = ""
    arguments: list[str] = []
    state = _State.NAME
    end = -1

    i = start
    while i < len(line) - 1:
        char = line[i]

        if line.startswith(closing, i):
            if line[i - 1] == "\\":
                i += 1
                continue

            end = i + len(closing)
            if state is _State.NAME:
                name = line[start:i]
            elif state in (_State.ARGUMENT_START, _State.ARGUMENT_UNQUOTED, _State.ARGUMENT_QUOTED):
                value = line[start:i].strip()
                if not value:
                    return None
                # An unterminated quote keeps its text as written
                arguments.append(value)
            break

        if state is _State.NAME:
            if char == " ":
                name = line[start:i]
                state = _State.ARGUMENT_START
                start = i + 1
        elif state is _State.ARGUMENT_START:
            if char == '"':
                state = _State.ARGUMENT_QUOTED
                start = i
            elif char == ",":
                return None
            elif not char.isspace():
                state = _State.ARGUMENT_UNQUOTED
                start = i
        elif state is _State.ARGUMENT_QUOTED:
            if char == '"' and line[i - 1] != "\\":
                arguments.append(_unescape(line[start + 1 : i]))
                state = _State.EXPECT_COMMA
                start = i + 1
        elif state is _State.ARGUMENT_UNQUOTED:
            if char == ",":
                value = line[start:i].strip()
                if not value:
                    return None
                arguments.append(value)
                state = _State.ARGUMENT_START
                start = i + 1
        elif state is _State.EXPECT_COMMA:
            if char == ",":
                state = _State.ARGUMENT_START
                start = i + 1
            elif not char.isspace():
                return None

        i += 1

    if end < 0 or not name:
        return None

    return ScannedMacro(name=name, arguments=arguments, end=pos + end)


def specialize_macro(name: str, arguments: list[str]) -> Node:
    """Turn a scanned macro into its dedicated node when Logseq knows it.

    ``query`` becomes a Query, ``embed`` a PageEmbed or BlockEmbed and
    ``cloze`` a Cloze. Anything else, including known macros with arguments
    that do not fit, stays a generic Macro.

    Example:
        >>> specialize_macro("embed", ["[[Page]]"])
        <PageEmbed>
    """
    if name == "query" and arguments:
        return Query(", ".join(arguments))

    if name == "embed" and len(arguments) == 1:
        argument = arguments[0]
        if argument.startswith("((") and argument.endswith("))") and len(argument) > 4:
            return BlockEmbed(argument[2:-2])
        if argument.startswith("[[") and argument.endswith("]]") and len(argument) > 4:
            return PageEmbed(argument[2:-2])

    if name == "cloze" and arguments:
        joined = ", ".join(arguments)
        separator = joined.rfind("\\")
        if separator < 0:
            return Cloze(joined.strip())

        answer = joined[:separator].rstrip().rstrip("\\").strip()
        cue = joined[separator + 1 :].strip()
        return Cloze(answer, cue)

    return Macro(name, arguments)
