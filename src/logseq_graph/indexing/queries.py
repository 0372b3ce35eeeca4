"""Query algebra for searching the index.

Queries are small immutable values that the index backend translates into
its own query language. Build them with the helper functions rather than
the classes, for example::

    And(references("Books"), Not(property_equals("status", "done")))
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class All:
    """Matches every document."""


@dataclass(frozen=True)
class Nothing:
    """Matches no document."""


@dataclass(frozen=True)
class And:
    clauses: tuple["Query", ...]

    def __init__(self, *clauses: "Query") -> None:
        object.__setattr__(self, "clauses", tuple(clauses))


@dataclass(frozen=True)
class Or:
    clauses: tuple["Query", ...]

    def __init__(self, *clauses: "Query") -> None:
        object.__setattr__(self, "clauses", tuple(clauses))


@dataclass(frozen=True)
class Not:
    clause: "Query"


@dataclass(frozen=True)
class FieldMatches:
    """Full text match of ``text`` against a text field."""

    field: str
    text: str


@dataclass(frozen=True)
class FieldEquals:
    """Exact match of a keyword field."""

    field: str
    value: str


@dataclass(frozen=True)
class FieldRefs:
    """Field references the page ``target``, optionally only as a hashtag."""

    field: str
    target: str
    tag: bool = False


Query = Union[All, Nothing, And, Or, Not, FieldMatches, FieldEquals, FieldRefs]

PROPERTY_PREFIX = "prop:"


def title_matches(text: str) -> Query:
    """Pages whose title contains all words of ``text``."""
    return FieldMatches("title", text)


def content_matches(text: str) -> Query:
    """Pages or blocks whose text contains all words of ``text``."""
    return FieldMatches("content", text)


def property_matches(name: str, text: str) -> Query:
    """Documents where the text of property ``name`` contains any word of ``text``."""
    return FieldMatches(PROPERTY_PREFIX + name, text)


def property_equals(name: str, value: str) -> Query:
    return FieldEquals(PROPERTY_PREFIX + name, value)


def property_references(name: str, target: str) -> Query:
    return FieldRefs(PROPERTY_PREFIX + name, target)


def property_references_tag(name: str, target: str) -> Query:
    return FieldRefs(PROPERTY_PREFIX + name, target, tag=True)


def references(page: str) -> Query:
    """Documents linking to ``page`` either as ``[[page]]`` or ``#page``."""
    return FieldRefs("pages", page)


def references_tag(tag: str) -> Query:
    """Documents tagging ``tag`` with ``#tag``."""
    return FieldRefs("pages", tag, tag=True)


def links_to_url(url: str) -> Query:
    return FieldEquals("link", url)
