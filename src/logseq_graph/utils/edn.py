"""Minimal EDN reader for Logseq's ``config.edn``.

Supports maps, vectors, lists, sets, keywords, symbols, strings, characters,
integers, floats, booleans, ``nil``, comments, the ``#_`` discard form and
tagged literals (the tag is dropped, the value kept).

Keywords are returned as ``Keyword`` instances, a ``str`` subclass holding
the name without the leading colon, so ``{:journals-directory "j"}`` reads
as ``{Keyword("journals-directory"): "j"}``. Vectors and lists both become
Python lists and sets become frozensets.
"""

import re
from typing import Any


class EDNError(ValueError):
    """Raised when EDN text cannot be read."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} at position {position}")
        self.position = position


class Keyword(str):
    """EDN keyword such as ``:file/name-format``."""

    @property
    def namespace(self) -> str:
        ns, sep, _ = self.partition("/")
        return ns if sep else ""

    @property
    def name(self) -> str:
        _, sep, name = self.partition("/")
        return name if sep else str(self)

    def __repr__(self) -> str:
        return f":{str(self)}"


class Symbol(str):
    """EDN symbol, kept by name."""

    def __repr__(self) -> str:
        return f"Symbol({str(self)!r})"


_DELIMITERS = set("()[]{}\"; \t\r\n,")
_INT_PATTERN = re.compile(r"[+-]?\d+N?$")
_FLOAT_PATTERN = re.compile(r"[+-]?\d+(\.\d*)?([eE][+-]?\d+)?M?$")
_NAMED_CHARS = {
    "newline": "\n",
    "return": "\r",
    "space": " ",
    "tab": "\t",
    "formfeed": "\f",
    "backspace": "\b",
}
_STRING_ESCAPES = {
    "t": "\t",
    "r": "\r",
    "n": "\n",
    "\\": "\\",
    '"': '"',
    "b": "\b",
    "f": "\f",
}

_DISCARD = object()


class _Reader:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def error(self, message: str) -> EDNError:
        return EDNError(message, self.pos)

    def skip_whitespace(self) -> None:
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char in " \t\r\n,":
                self.pos += 1
            elif char == ";":
                newline = text.find("\n", self.pos)
                self.pos = len(text) if newline < 0 else newline + 1
            else:
                break

    def read_token(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in _DELIMITERS:
            self.pos += 1
        return self.text[start : self.pos]

    def read(self) -> Any:
        while True:
            value = self.read_one()
            if value is not _DISCARD:
                return value

    def read_one(self) -> Any:
        self.skip_whitespace()
        if self.pos >= len(self.text):
            raise self.error("unexpected end of input")

        char = self.text[self.pos]
        if char == "{":
            self.pos += 1
            items = self.read_sequence("}")
            if len(items) % 2:
                raise self.error("map literal must contain an even number of forms")
            return {_hashable(items[i]): items[i + 1] for i in range(0, len(items), 2)}
        if char == "[":
            self.pos += 1
            return self.read_sequence("]")
        if char == "(":
            self.pos += 1
            return self.read_sequence(")")
        if char == '"':
            return self.read_string()
        if char == "\\":
            return self.read_character()
        if char == "#":
            return self.read_dispatch()
        if char in ")]}":
            raise self.error(f"unexpected {char!r}")

        token = self.read_token()
        if not token:
            raise self.error(f"unexpected {char!r}")
        return _atom(token)

    def read_sequence(self, closing: str) -> list:
        items = []
        while True:
            self.skip_whitespace()
            if self.pos >= len(self.text):
                raise self.error(f"expected {closing!r} before end of input")
            if self.text[self.pos] == closing:
                self.pos += 1
                return items

            value = self.read_one()
            if value is not _DISCARD:
                items.append(value)

    def read_string(self) -> str:
        self.pos += 1
        parts = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self.error("unterminated string")

            char = text[self.pos]
            if char == '"':
                self.pos += 1
                return "".join(parts)

            if char == "\\":
                self.pos += 1
                if self.pos >= len(text):
                    raise self.error("unterminated string")
                escaped = text[self.pos]
                if escaped == "u":
                    code = text[self.pos + 1 : self.pos + 5]
                    if not re.fullmatch(r"[0-9a-fA-F]{4}", code):
                        raise self.error("invalid unicode escape")
                    parts.append(chr(int(code, 16)))
                    self.pos += 5
                    continue
                if escaped not in _STRING_ESCAPES:
                    raise self.error(f"invalid escape \\{escaped}")
                parts.append(_STRING_ESCAPES[escaped])
            else:
                parts.append(char)
            self.pos += 1

    def read_character(self) -> str:
        self.pos += 1
        start = self.pos
        if self.pos >= len(self.text):
            raise self.error("unexpected end of input")

        # The first character is taken even when it is a delimiter, as in \(
        self.pos += 1
        while self.pos < len(self.text) and self.text[self.pos] not in _DELIMITERS:
            self.pos += 1
        token = self.text[start : self.pos]

        if len(token) == 1:
            return token
        if token in _NAMED_CHARS:
            return _NAMED_CHARS[token]
        if token.startswith("u") and re.fullmatch(r"u[0-9a-fA-F]{4}", token):
            return chr(int(token[1:], 16))
        raise self.error(f"invalid character \\{token}")

    def read_dispatch(self) -> Any:
        self.pos += 1
        if self.pos >= len(self.text):
            raise self.error("unexpected end of input")

        char = self.text[self.pos]
        if char == "{":
            self.pos += 1
            return frozenset(_hashable(item) for item in self.read_sequence("}"))
        if char == "_":
            self.pos += 1
            self.read()
            return _DISCARD

        tag = self.read_token()
        if not tag:
            raise self.error("invalid dispatch character")
        return self.read()


def _hashable(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_hashable(item) for item in value)
    if isinstance(value, dict):
        return tuple((key, _hashable(item)) for key, item in value.items())
    return value


def _atom(token: str) -> Any:
    if token == "nil":
        return None
    if token == "true":
        return True
    if token == "false":
        return False
    if token.startswith(":"):
        return Keyword(token[1:])
    if _INT_PATTERN.match(token):
        return int(token.rstrip("N"))
    if _FLOAT_PATTERN.match(token):
        return float(token.rstrip("M"))
    return Symbol(token)


def loads(text: str) -> Any:
    """Read the first EDN value in ``text``.

    Raises:
        EDNError: If the text is not valid EDN
    """
    return _Reader(text).read()
