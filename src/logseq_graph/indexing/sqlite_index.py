"""SQLite-based search index with FTS5 full text search.

The database is a cache that can be rebuilt at any time: the Markdown files
of the graph remain the source of truth. A schema version mismatch drops
and recreates every table.
"""

import re
import sqlite3
import threading
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Optional

from logseq_graph.content import (
    Block,
    ContainerNode,
    Hashtag,
    HasLinkURL,
    PageRef,
    Properties,
    Property,
    is_of_type,
)
from logseq_graph.indexing.documents import (
    DEFAULT_RESULT_SIZE,
    IndexedBlock,
    IndexedPage,
    IndexSearchOptions,
    PageType,
    SearchResultSet,
)
from logseq_graph.indexing.queries import (
    PROPERTY_PREFIX,
    All,
    And,
    FieldEquals,
    FieldMatches,
    FieldRefs,
    Not,
    Nothing,
    Or,
    Query,
)
from logseq_graph.indexing.text import plain_text, preview, write_plain_text
from logseq_graph.utils.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

# Pending writes are committed once this many documents changed
BATCH_SIZE = 1000

TEXT_COLUMNS = ("title", "content")

SORT_COLUMNS = {
    "_id": "d.id",
    "title": "d.title",
    "date": "d.date",
    "lastModified": "d.last_modified",
    "last_modified": "d.last_modified",
    "page": "d.page",
}

PAGE_TYPES = (PageType.DEDICATED.value, PageType.JOURNAL.value)
BLOCK_TYPE = "block"

_TERM_RE = re.compile(r"\w+", re.UNICODE)


@dataclass
class _Document:
    id: str
    type: str
    page: Optional[str] = None
    title: str = ""
    date: Optional[str] = None
    last_modified: Optional[float] = None
    location: Optional[str] = None
    block_id: Optional[str] = None
    preview: str = ""
    content: str = ""
    fields: list[tuple[str, str]] = field(default_factory=list)
    property_text: list[tuple[str, str]] = field(default_factory=list)

    def add(self, name: str, value: str) -> None:
        self.fields.append((name, value))


def _fts_terms(text: str) -> list[str]:
    return ['"' + term.replace('"', '""') + '"' for term in _TERM_RE.findall(text)]


def _ref_key(target: str) -> str:
    # Page names are case insensitive in Logseq
    return target.lower()


def _transfer_refs(doc: _Document, name: str, root: ContainerNode) -> None:
    for ref in root.children.filter_deep(is_of_type(PageRef)):
        doc.add(f"{name}:ref", _ref_key(ref.to))
        if isinstance(ref, Hashtag):
            doc.add(f"{name}:tag", _ref_key(ref.to))


def _transfer_links(doc: _Document, nodes) -> None:
    for node in nodes:
        if isinstance(node, HasLinkURL):
            doc.add("link", node.url)
        if isinstance(node, ContainerNode):
            _transfer_links(doc, node.iter_children())


def _transfer_properties(doc: _Document, properties: Optional[Properties]) -> None:
    if properties is None:
        return

    for prop in properties.iter_children():
        if not isinstance(prop, Property):
            continue

        name = PROPERTY_PREFIX + prop.name
        _transfer_refs(doc, name, prop)

        text = plain_text(prop.iter_children())
        if not text:
            continue

        doc.property_text.append((name, text))
        doc.add(f"{name}:value", text)


def _page_document(page: IndexedPage) -> _Document:
    doc = _Document(
        id=page.sub_path,
        type=page.type.value,
        title=page.title,
        date=page.date.isoformat() if page.date else None,
        last_modified=page.last_modified,
    )
    doc.add("type", doc.type)

    if page.blocks:
        first = page.blocks[0]
        _transfer_properties(doc, first.find_properties())
        _transfer_refs(doc, "pages", first)
        doc.preview = preview(first.iter_children())

    parts: list[str] = []
    for i, block in enumerate(page.blocks):
        _transfer_links(doc, block.iter_children())
        if i > 0:
            parts.append("\n\n")
        write_plain_text(block.iter_children(), parts)
    doc.content = "".join(parts)

    return doc


def _block_document(sub_path: str, location: list[int], block: Block) -> _Document:
    content = block.content()
    doc = _Document(
        id=sub_path + "".join(f":{i}" for i in location),
        type=BLOCK_TYPE,
        page=sub_path,
        location=":".join(str(i) for i in location),
        block_id=block.id or None,
        preview=preview(content),
        content=plain_text(content),
    )
    doc.add("type", BLOCK_TYPE)
    doc.add("page", sub_path)
    if doc.block_id:
        doc.add("id", doc.block_id)

    _transfer_properties(doc, block.find_properties())
    for node in content:
        if isinstance(node, ContainerNode):
            _transfer_refs(doc, "pages", node)
        elif isinstance(node, PageRef):
            doc.add("pages:ref", _ref_key(node.to))
    _transfer_links(doc, content)

    return doc


def _block_documents(sub_path: str, blocks, parent: list[int]):
    for i, block in enumerate(blocks):
        location = parent + [i]
        yield _block_document(sub_path, location, block)
        yield from _block_documents(sub_path, block.blocks(), location)


class _QueryTranslator:
    """Translates a query into an SQL condition on ``documents d``."""

    def __init__(self) -> None:
        self.params: list[Any] = []
        self.rank_query: Optional[str] = None

    def translate(self, query: Query, negated: bool = False) -> str:
        if isinstance(query, All):
            return "1"
        if isinstance(query, Nothing):
            return "0"
        if isinstance(query, And):
            if not query.clauses:
                return "1"
            return "(" + " AND ".join(self.translate(q, negated) for q in query.clauses) + ")"
        if isinstance(query, Or):
            if not query.clauses:
                return "0"
            return "(" + " OR ".join(self.translate(q, negated) for q in query.clauses) + ")"
        if isinstance(query, Not):
            return f"NOT {self.translate(query.clause, not negated)}"
        if isinstance(query, FieldMatches):
            return self._matches(query, negated)
        if isinstance(query, FieldEquals):
            name = query.field
            if name.startswith(PROPERTY_PREFIX):
                name += ":value"
            return self._keyword(name, query.value)
        if isinstance(query, FieldRefs):
            suffix = ":tag" if query.tag else ":ref"
            return self._keyword(query.field + suffix, _ref_key(query.target))

        raise TypeError(f"unsupported query: {query!r}")

    def _keyword(self, name: str, value: str) -> str:
        self.params.extend([name, value])
        return "d.id IN (SELECT doc_id FROM fields WHERE field = ? AND value = ?)"

    def _matches(self, query: FieldMatches, negated: bool) -> str:
        terms = _fts_terms(query.text)
        if not terms:
            return "0"

        if query.field.startswith(PROPERTY_PREFIX):
            self.params.extend([query.field, " OR ".join(terms)])
            return (
                "d.id IN (SELECT id FROM property_fts "
                "WHERE field = ? AND property_fts MATCH ?)"
            )

        if query.field not in TEXT_COLUMNS:
            logger.debug("index_unknown_text_field", field=query.field)
            return "0"

        match = " AND ".join(f"{query.field}:{term}" for term in terms)
        if not negated and self.rank_query is None:
            self.rank_query = match
        self.params.append(match)
        return "d.id IN (SELECT id FROM fts WHERE fts MATCH ?)"


class SQLiteIndex:
    """
    Search index of a graph stored in SQLite.

    Every page and every block is a row of ``documents``. Keyword values
    such as references, links and property values live in ``fields``; page
    titles and plain text content are searched through the ``fts`` FTS5
    table and property text through ``property_fts``.

    Writes are collected in a transaction that is committed by ``sync()``
    or after ``BATCH_SIZE`` changed documents. Searches on the same index
    already see uncommitted changes.

    Args:
        path: Database file, or None for an in-memory index

    Example:
        >>> index = SQLiteIndex(None)
        >>> index.index_page(page)
        >>> index.sync()
        >>> index.search_pages(content_matches("book"), IndexSearchOptions())
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        self._lock = threading.RLock()
        self._pending = 0

        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)

        self._db = self._connect()
        self._ensure_schema()
        logger.info("index_opened", path=str(path) if path else ":memory:")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self.path) if self.path is not None else ":memory:",
            check_same_thread=False,
        )
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA temp_store=MEMORY")
        return conn

    def _schema_version(self) -> int:
        try:
            row = self._db.execute(
                "SELECT value FROM meta WHERE key = 'schema_version'"
            ).fetchone()
        except sqlite3.OperationalError:
            return 0
        return int(row[0]) if row else 0

    def _ensure_schema(self) -> None:
        version = self._schema_version()
        if version == SCHEMA_VERSION:
            return

        if version:
            logger.info("index_schema_reset", found=version, expected=SCHEMA_VERSION)

        db = self._db
        for table in ("meta", "documents", "fields", "fts", "property_fts"):
            db.execute(f"DROP TABLE IF EXISTS {table}")

        db.execute("""
            CREATE TABLE meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)

        db.execute("""
            CREATE TABLE documents (
                id TEXT PRIMARY KEY,
                type TEXT NOT NULL,
                page TEXT,
                title TEXT,
                date TEXT,
                last_modified REAL,
                location TEXT,
                block_id TEXT,
                preview TEXT
            )
        """)
        db.execute("CREATE INDEX documents_page_idx ON documents(page)")
        db.execute("CREATE INDEX documents_type_idx ON documents(type)")

        db.execute("""
            CREATE TABLE fields (
                doc_id TEXT NOT NULL,
                field TEXT NOT NULL,
                value TEXT NOT NULL
            )
        """)
        db.execute("CREATE INDEX fields_field_value_idx ON fields(field, value)")
        db.execute("CREATE INDEX fields_doc_idx ON fields(doc_id)")

        db.execute("""
            CREATE VIRTUAL TABLE fts USING fts5(
                id UNINDEXED,
                title,
                content,
                tokenize = "unicode61 remove_diacritics 2"
            )
        """)

        db.execute("""
            CREATE VIRTUAL TABLE property_fts USING fts5(
                id UNINDEXED,
                field UNINDEXED,
                text,
                tokenize = "unicode61 remove_diacritics 2"
            )
        """)

        db.execute(
            "INSERT INTO meta(key, value) VALUES('schema_version', ?)",
            (str(SCHEMA_VERSION),),
        )
        db.commit()

    def close(self) -> None:
        with self._lock:
            self._db.commit()
            self._db.close()
        logger.debug("index_closed")

    def sync(self) -> None:
        with self._lock:
            self._db.commit()
            self._pending = 0

    def _changed(self, count: int) -> None:
        self._pending += count
        if self._pending >= BATCH_SIZE:
            self._db.commit()
            self._pending = 0

    def _delete_documents(self, ids: list[str]) -> None:
        db = self._db
        for doc_id in ids:
            db.execute("DELETE FROM documents WHERE id = ?", (doc_id,))
            db.execute("DELETE FROM fields WHERE doc_id = ?", (doc_id,))
            db.execute("DELETE FROM fts WHERE id = ?", (doc_id,))
            db.execute("DELETE FROM property_fts WHERE id = ?", (doc_id,))
        self._changed(len(ids))

    def _block_ids(self, sub_path: str) -> list[str]:
        rows = self._db.execute(
            "SELECT id FROM documents WHERE page = ? AND type = ?",
            (sub_path, BLOCK_TYPE),
        )
        return [row[0] for row in rows]

    def _insert(self, doc: _Document) -> None:
        db = self._db
        db.execute(
            """
            INSERT OR REPLACE INTO documents
                (id, type, page, title, date, last_modified, location, block_id, preview)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                doc.id, doc.type, doc.page, doc.title, doc.date,
                doc.last_modified, doc.location, doc.block_id, doc.preview,
            ),
        )
        db.executemany(
            "INSERT INTO fields(doc_id, field, value) VALUES (?, ?, ?)",
            [(doc.id, name, value) for name, value in doc.fields],
        )
        db.execute(
            "INSERT INTO fts(id, title, content) VALUES (?, ?, ?)",
            (doc.id, doc.title, doc.content),
        )
        db.executemany(
            "INSERT INTO property_fts(id, field, text) VALUES (?, ?, ?)",
            [(doc.id, name, text) for name, text in doc.property_text],
        )
        self._changed(1)

    def delete_page(self, sub_path: str) -> None:
        """Remove a page and all of its blocks."""
        with self._lock:
            self._delete_documents([sub_path] + self._block_ids(sub_path))
        logger.debug("index_page_deleted", sub_path=sub_path)

    def index_page(self, page: IndexedPage) -> None:
        """Add or replace a page and its blocks."""
        with self._lock:
            self._delete_documents([page.sub_path] + self._block_ids(page.sub_path))
            self._insert(_page_document(page))

            count = 0
            for doc in _block_documents(page.sub_path, page.blocks, []):
                self._insert(doc)
                count += 1

        logger.debug("index_page_indexed", sub_path=page.sub_path, blocks=count)

    def page_sub_paths(self) -> list[str]:
        """Sub paths of every indexed page."""
        with self._lock:
            rows = self._db.execute(
                "SELECT id FROM documents WHERE type IN (?, ?) ORDER BY id", PAGE_TYPES
            ).fetchall()
        return [row[0] for row in rows]

    def clear(self) -> None:
        """Remove every document."""
        with self._lock:
            for table in ("documents", "fields", "fts", "property_fts"):
                self._db.execute(f"DELETE FROM {table}")
            self._db.commit()
            self._pending = 0
        logger.info("index_cleared")

    def get_last_modified(self, sub_path: str) -> Optional[float]:
        with self._lock:
            row = self._db.execute(
                "SELECT last_modified FROM documents WHERE id = ? AND type IN (?, ?)",
                (sub_path, *PAGE_TYPES),
            ).fetchone()
        return row[0] if row else None

    def _search(
        self,
        base: str,
        base_params: list[Any],
        query: Query,
        options: IndexSearchOptions,
        columns: str,
    ) -> tuple[int, list[tuple]]:
        translator = _QueryTranslator()
        condition = translator.translate(query)
        where = f"{base} AND {condition}"
        params = base_params + translator.params

        size = options.size if options.size > 0 else DEFAULT_RESULT_SIZE
        offset = max(options.offset, 0)

        order = []
        for sort in options.sort_by:
            column = SORT_COLUMNS.get(sort.field)
            if column is None:
                raise ValueError(f"cannot sort by field: {sort.field}")
            order.append(f"{column} {'ASC' if sort.asc else 'DESC'}")

        join = ""
        join_params: list[Any] = []
        if not order and translator.rank_query is not None:
            join = "LEFT JOIN (SELECT id, rank FROM fts WHERE fts MATCH ?) r ON r.id = d.id"
            join_params.append(translator.rank_query)
            order.append("r.rank IS NULL, r.rank")
        order.append("d.id")

        with self._lock:
            count = self._db.execute(
                f"SELECT COUNT(*) FROM documents d WHERE {where}", params
            ).fetchone()[0]
            rows = self._db.execute(
                f"SELECT {columns} FROM documents d {join} WHERE {where} "
                f"ORDER BY {', '.join(order)} LIMIT ? OFFSET ?",
                join_params + params + [size, offset],
            ).fetchall()

        return count, rows

    def search_pages(
        self, query: Query, options: IndexSearchOptions
    ) -> SearchResultSet[IndexedPage]:
        """Search pages and journals."""
        count, rows = self._search(
            "d.type IN (?, ?)",
            list(PAGE_TYPES),
            query,
            options,
            "d.id, d.type, d.title, d.date, d.last_modified",
        )

        results = [
            IndexedPage(
                sub_path=sub_path,
                type=PageType(doc_type),
                title=title or "",
                date=date.fromisoformat(day) if day else None,
                last_modified=last_modified,
            )
            for sub_path, doc_type, title, day, last_modified in rows
        ]
        return SearchResultSet(count=count, results=results)

    def search_blocks(
        self, query: Query, options: IndexSearchOptions
    ) -> SearchResultSet[IndexedBlock]:
        """Search blocks of every page."""
        count, rows = self._search(
            "d.type = ?",
            [BLOCK_TYPE],
            query,
            options,
            "d.page, d.location, d.block_id, d.preview",
        )

        results = [
            IndexedBlock(
                page_sub_path=page,
                location=[int(part) for part in location.split(":") if part],
                id=block_id or "",
                preview=block_preview or "",
            )
            for page, location, block_id, block_preview in rows
        ]
        return SearchResultSet(count=count, results=results)
