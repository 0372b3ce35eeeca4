"""Logseq date formats.

Logseq configures journal file names and titles with date-fns style
patterns such as ``yyyy_MM_dd`` or ``MMM do, yyyy``. A ``DateFormat``
compiles such a pattern once and can both format dates and read them back.

Example:
    >>> fmt = DateFormat("MMM do, yyyy")
    >>> fmt.format(date(2024, 3, 1))
    'Mar 1st, 2024'
    >>> fmt.parse("Mar 1st, 2024")
    datetime.datetime(2024, 3, 1, 0, 0)
"""

import re
from datetime import date, datetime
from typing import Callable, Union

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# Longest tokens first so that "MMMM" wins over "MM"
TOKENS = (
    "yyyy",
    "MMMM",
    "EEEE",
    "MMM",
    "EEE",
    "yy",
    "MM",
    "dd",
    "do",
    "HH",
    "hh",
    "mm",
    "ss",
    "M",
    "d",
    "E",
    "H",
    "h",
    "m",
    "s",
    "a",
)

DateLike = Union[date, datetime]


def ordinal(day: int) -> str:
    """Return ``day`` with its English ordinal suffix, as in ``21st``."""
    if 11 <= day % 100 <= 13:
        return f"{day}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _hour12(value: DateLike) -> int:
    hour = getattr(value, "hour", 0) % 12
    return hour or 12


_FORMATTERS: dict[str, Callable[[DateLike], str]] = {
    "yyyy": lambda v: f"{v.year:04d}",
    "yy": lambda v: f"{v.year % 100:02d}",
    "MMMM": lambda v: MONTH_NAMES[v.month - 1],
    "MMM": lambda v: MONTH_NAMES[v.month - 1][:3],
    "MM": lambda v: f"{v.month:02d}",
    "M": lambda v: str(v.month),
    "dd": lambda v: f"{v.day:02d}",
    "d": lambda v: str(v.day),
    "do": lambda v: ordinal(v.day),
    "EEEE": lambda v: WEEKDAY_NAMES[v.weekday()],
    "EEE": lambda v: WEEKDAY_NAMES[v.weekday()][:3],
    "E": lambda v: WEEKDAY_NAMES[v.weekday()][:3],
    "HH": lambda v: f"{getattr(v, 'hour', 0):02d}",
    "H": lambda v: str(getattr(v, "hour", 0)),
    "hh": lambda v: f"{_hour12(v):02d}",
    "h": lambda v: str(_hour12(v)),
    "mm": lambda v: f"{getattr(v, 'minute', 0):02d}",
    "m": lambda v: str(getattr(v, "minute", 0)),
    "ss": lambda v: f"{getattr(v, 'second', 0):02d}",
    "s": lambda v: str(getattr(v, "second", 0)),
    "a": lambda v: "PM" if getattr(v, "hour", 0) >= 12 else "AM",
}

_PATTERNS = {
    "yyyy": r"(?P<year>\d{4})",
    "yy": r"(?P<year2>\d{2})",
    "MMMM": r"(?P<month_name>[A-Za-z]+)",
    "MMM": r"(?P<month_abbr>[A-Za-z]{3})",
    "MM": r"(?P<month>\d{2})",
    "M": r"(?P<month>\d{1,2})",
    "dd": r"(?P<day>\d{2})",
    "d": r"(?P<day>\d{1,2})",
    "do": r"(?P<day>\d{1,2})(?:st|nd|rd|th)",
    "EEEE": r"[A-Za-z]+",
    "EEE": r"[A-Za-z]{3}",
    "E": r"[A-Za-z]{3}",
    "HH": r"(?P<hour>\d{2})",
    "H": r"(?P<hour>\d{1,2})",
    "hh": r"(?P<hour12>\d{2})",
    "h": r"(?P<hour12>\d{1,2})",
    "mm": r"(?P<minute>\d{2})",
    "m": r"(?P<minute>\d{1,2})",
    "ss": r"(?P<second>\d{2})",
    "s": r"(?P<second>\d{1,2})",
    "a": r"(?P<ampm>[AaPp][Mm])",
}


def tokenize(pattern: str) -> list[tuple[bool, str]]:
    """Split a date pattern into ``(is_token, text)`` pieces.

    Text between single quotes is literal; ``''`` stands for a quote.
    """
    pieces: list[tuple[bool, str]] = []
    literal = ""
    i = 0
    while i < len(pattern):
        char = pattern[i]

        if char == "'":
            end = pattern.find("'", i + 1)
            if end == i + 1:
                literal += "'"
                i += 2
                continue
            if end < 0:
                end = len(pattern)
            literal += pattern[i + 1 : end]
            i = end + 1
            continue

        token = next((t for t in TOKENS if pattern.startswith(t, i)), None)
        if token is None:
            literal += char
            i += 1
            continue

        if literal:
            pieces.append((False, literal))
            literal = ""
        pieces.append((True, token))
        i += len(token)

    if literal:
        pieces.append((False, literal))
    return pieces


class DateFormat:
    """Compiled Logseq date pattern."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        self._pieces = tokenize(pattern)
        self._regex = self._compile()

    def _compile(self) -> "re.Pattern[str]":
        parts = []
        seen: set[str] = set()
        for is_token, text in self._pieces:
            if not is_token:
                parts.append(re.escape(text))
                continue

            regex = _PATTERNS[text]
            group = re.search(r"\?P<(\w+)>", regex)
            if group is not None:
                name = group.group(1)
                if name in seen:
                    regex = regex.replace(f"?P<{name}>", "?:")
                seen.add(name)
            parts.append(regex)
        return re.compile("".join(parts) + r"\Z")

    def format(self, value: DateLike) -> str:
        """Format a date or datetime with this pattern."""
        return "".join(
            _FORMATTERS[text](value) if is_token else text for is_token, text in self._pieces
        )

    def parse(self, text: str) -> datetime:
        """Read a date written with this pattern.

        Missing fields default to January, the first day and midnight.

        Raises:
            ValueError: If ``text`` does not follow the pattern
        """
        match = self._regex.match(text)
        if match is None:
            raise ValueError(f"{text!r} does not match date format {self.pattern!r}")

        fields = {k: v for k, v in match.groupdict().items() if v is not None}

        year = 1970
        if "year" in fields:
            year = int(fields["year"])
        elif "year2" in fields:
            year = 2000 + int(fields["year2"])

        month = 1
        if "month" in fields:
            month = int(fields["month"])
        elif "month_name" in fields or "month_abbr" in fields:
            month = _month_from_name(fields.get("month_name") or fields["month_abbr"])

        hour = int(fields.get("hour", 0))
        if "hour12" in fields:
            hour = int(fields["hour12"]) % 12
            if fields.get("ampm", "").upper() == "PM":
                hour += 12

        return datetime(
            year,
            month,
            int(fields.get("day", 1)),
            hour,
            int(fields.get("minute", 0)),
            int(fields.get("second", 0)),
        )

    def __repr__(self) -> str:
        return f"DateFormat({self.pattern!r})"


def _month_from_name(name: str) -> int:
    lowered = name.lower()
    for i, month in enumerate(MONTH_NAMES, start=1):
        if month.lower() == lowered or month[:3].lower() == lowered:
            return i
    raise ValueError(f"unknown month name: {name!r}")
