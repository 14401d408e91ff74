"""Document store used by the rehearsal scheduler.

Records are plain JSON-compatible dicts addressed by ``(collection, id)``.
Every ``set`` is its own write; stores never group writes into transactions,
so callers performing several writes must handle partial failure themselves.
"""

from __future__ import annotations

import json
import logging
import operator
import sqlite3
from copy import deepcopy
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Filter = Tuple[str, str, Any]

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda value, options: value in options,
}


class StoreFailure(RuntimeError):
    """The backing store rejected a read or write."""


class DocumentStore(Protocol):
    def get(self, collection: str, record_id: str) -> Optional[Record]:
        ...

    def set(self, collection: str, record_id: str, record: Record, merge: bool = False) -> None:
        ...

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        ...


def _matches(record: Record, filters: Sequence[Filter]) -> bool:
    for field, op, expected in filters:
        compare = _OPERATORS.get(op)
        if compare is None:
            raise ValueError(f"Unsupported filter operator: {op}")
        value = record.get(field)
        if value is None and op not in ("==", "!="):
            return False
        if not compare(value, expected):
            return False
    return True


def apply_query(
    records: Iterable[Record],
    filters: Sequence[Filter] = (),
    order_by: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Record]:
    """Filter, sort and truncate records the way ``DocumentStore.query`` promises.

    ``order_by`` may be prefixed with ``-`` for descending order; records
    missing the field sort last.
    """
    selected = [record for record in records if _matches(record, filters)]
    if order_by:
        descending = order_by.startswith("-")
        field = order_by.lstrip("-")
        present = [record for record in selected if record.get(field) is not None]
        absent = [record for record in selected if record.get(field) is None]
        present.sort(key=lambda record: record[field], reverse=descending)
        selected = present + absent
    if limit is not None:
        selected = selected[:limit]
    return selected


class MemoryStore:
    """In-process store, mostly for tests and embedding."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Record]] = {}

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        record = self._collections.get(collection, {}).get(record_id)
        if record is None:
            return None
        return {**deepcopy(record), "id": record_id}

    def set(self, collection: str, record_id: str, record: Record, merge: bool = False) -> None:
        documents = self._collections.setdefault(collection, {})
        body = deepcopy(record)
        if merge and record_id in documents:
            body = {**documents[record_id], **body}
        documents[record_id] = body

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        records = [
            {**deepcopy(record), "id": record_id}
            for record_id, record in self._collections.get(collection, {}).items()
        ]
        return apply_query(records, filters, order_by, limit)


class SQLiteStore:
    """Store backed by the ``documents`` table; commits after every write."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        try:
            cursor = self.conn.cursor()
            cursor.execute(
                "SELECT body FROM documents WHERE collection = ? AND id = ?",
                (collection, record_id),
            )
            row = cursor.fetchone()
        except sqlite3.Error as exc:
            logger.error("Failed to read %s/%s: %s", collection, record_id, exc)
            raise StoreFailure(f"Failed to read {collection}/{record_id}") from exc
        if not row:
            return None
        return {**json.loads(row[0]), "id": record_id}

    def set(self, collection: str, record_id: str, record: Record, merge: bool = False) -> None:
        body = dict(record)
        try:
            if merge:
                existing = self.get(collection, record_id)
                if existing is not None:
                    existing.pop("id", None)
                    body = {**existing, **body}
            cursor = self.conn.cursor()
            cursor.execute(
                """
                INSERT INTO documents (collection, id, body, updated_at)
                VALUES (?, ?, ?, datetime('now'))
                ON CONFLICT(collection, id) DO UPDATE SET
                    body = excluded.body,
                    updated_at = excluded.updated_at
                """,
                (collection, record_id, json.dumps(body)),
            )
            self.conn.commit()
        except (sqlite3.Error, TypeError) as exc:
            logger.error("Failed to write %s/%s: %s", collection, record_id, exc)
            raise StoreFailure(f"Failed to write {collection}/{record_id}") from exc

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        order_by: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Record]:
        try:
            cursor = self.conn.cursor()
            cursor.execute(
                "SELECT id, body FROM documents WHERE collection = ?",
                (collection,),
            )
            rows = cursor.fetchall()
        except sqlite3.Error as exc:
            logger.error("Failed to query %s: %s", collection, exc)
            raise StoreFailure(f"Failed to query {collection}") from exc
        records = [{**json.loads(row[1]), "id": row[0]} for row in rows]
        return apply_query(records, filters, order_by, limit)
