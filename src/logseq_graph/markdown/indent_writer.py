"""Line prefixing text stream used by the Markdown writer."""

from typing import TextIO


class IndentWriter:
    """Writes text while stamping the current indentation on every line.

    The indentation is a stack of segments such as ``"> "`` or ``"  "``. It
    is split in two parts: the structural prefix, which ends at the last
    non-whitespace character, and the trailing whitespace after it. The
    structural prefix is written at the start of every line, the trailing
    whitespace only before the first character of a line that is not a
    newline. Empty lines inside a blockquote therefore come out as ``>``.

    Each stack level remembers whether anything was written while it was
    active; popping a level passes that flag on to the level below.

    Example:
        >>> out = io.StringIO()
        >>> w = IndentWriter(out)
        >>> w.push("> ")
        >>> w.write("a\\n\\nb")
        >>> out.getvalue()
        '> a\\n>\\n> b'
    """

    def __init__(self, sink: TextIO):
        self.sink = sink
        self._indent = ""
        self._lengths: list[int] = []
        self._did_write = [False]
        self._trailing_space_index = 0
        self.last_was_line_break = True

    @property
    def only_indent(self) -> str:
        return self._indent[: self._trailing_space_index]

    @property
    def trailing_whitespace(self) -> str:
        return self._indent[self._trailing_space_index :]

    @property
    def level(self) -> int:
        return len(self._lengths)

    def push(self, segment: str) -> None:
        self._lengths.append(len(self._indent))
        self._indent += segment
        self._update_trailing_space_index()
        self._did_write.append(False)

    def pop(self) -> str:
        """Remove the innermost indentation segment and return it."""
        last = self._lengths.pop()
        segment = self._indent[last:]
        self._indent = self._indent[:last]
        self._update_trailing_space_index()

        did_write = self._did_write.pop()
        if did_write:
            self._did_write[-1] = True
        return segment

    def has_written_at_current_level(self) -> bool:
        return self._did_write[-1]

    def _update_trailing_space_index(self) -> None:
        stripped = self._indent.rstrip(" \t")
        self._trailing_space_index = len(stripped)

    def write(self, value: str) -> None:
        if not value:
            return

        self._did_write[-1] = True

        start = 0
        for i, char in enumerate(value):
            if self.last_was_line_break:
                self.sink.write(self.only_indent)

            if char == "\n":
                self.sink.write(value[start : i + 1])
                self.last_was_line_break = True
                start = i + 1
            else:
                if self.last_was_line_break:
                    self.sink.write(self.trailing_whitespace)
                self.last_was_line_break = False

        if start < len(value):
            self.sink.write(value[start:])

    def write_raw(self, value: str) -> None:
        """Write straight to the sink, bypassing indentation handling."""
        self.sink.write(value)
