# SQL schema for VerseCoach database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- JSON documents keyed by (collection, id); backs the document store
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    id TEXT NOT NULL,
    body TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (collection, id)
);
"""

# Indexes for performance
INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_documents_collection ON documents (collection);
"""
