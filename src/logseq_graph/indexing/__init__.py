"""Full text index of pages and blocks."""

from logseq_graph.indexing.documents import (
    Index,
    IndexedBlock,
    IndexedPage,
    IndexSearchOptions,
    PageType,
    SearchResultSet,
    SortField,
)
from logseq_graph.indexing.queries import (
    All,
    And,
    FieldEquals,
    FieldMatches,
    FieldRefs,
    Not,
    Nothing,
    Or,
    Query,
    content_matches,
    links_to_url,
    property_equals,
    property_matches,
    property_references,
    property_references_tag,
    references,
    references_tag,
    title_matches,
)
from logseq_graph.indexing.sqlite_index import SQLiteIndex
from logseq_graph.indexing.text import plain_text, preview

__all__ = [
    "All",
    "And",
    "FieldEquals",
    "FieldMatches",
    "FieldRefs",
    "Index",
    "IndexSearchOptions",
    "IndexedBlock",
    "IndexedPage",
    "Not",
    "Nothing",
    "Or",
    "PageType",
    "Query",
    "SQLiteIndex",
    "SearchResultSet",
    "SortField",
    "content_matches",
    "links_to_url",
    "plain_text",
    "preview",
    "property_equals",
    "property_matches",
    "property_references",
    "property_references_tag",
    "references",
    "references_tag",
    "title_matches",
]
