# ABOUTME: SQL DDL for the derived full-text search index over the collection.
# ABOUTME: One FTS5 row per book, keyed by the full path of the book's main copy.

INDEX_VERSION = 1

INDEXED_COLUMNS: tuple[str, ...] = (
    "title",
    "authors",
    "year",
    "language",
    "series",
    "tags",
    "publisher",
    "description",
    "category",
    "genre",
    "progress",
    "review",
)

SCHEMA_V1 = f"""
-- Full-text index; key and book_id are stored but not searchable
CREATE VIRTUAL TABLE books_index USING fts5(
    key UNINDEXED,
    book_id UNINDEXED,
    {", ".join(INDEXED_COLUMNS)}
);

-- Schema versioning so a future layout change can force a rebuild
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES ({INDEX_VERSION});
"""
