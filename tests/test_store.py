import sqlite3

import pytest

from db.schema import SCHEMA_SQL, INDEXES_SQL
from db.store import MemoryStore, SQLiteStore, StoreFailure, apply_query


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    if request.param == "memory":
        yield MemoryStore()
        return
    conn = sqlite3.connect(":memory:")
    conn.executescript(SCHEMA_SQL)
    conn.executescript(INDEXES_SQL)
    yield SQLiteStore(conn)
    conn.close()


def _seed(store):
    store.set("rehearsals", "a", {"verse_id": "v1", "user_id": "u1", "day": 3, "completed": False})
    store.set("rehearsals", "b", {"verse_id": "v1", "user_id": "u1", "day": 1, "completed": True})
    store.set("rehearsals", "c", {"verse_id": "v2", "user_id": "u2", "day": 2, "completed": False})


def test_get_missing_returns_none(store):
    assert store.get("rehearsals", "nope") is None


def test_set_then_get_includes_id(store):
    store.set("rehearsals", "a", {"verse_id": "v1"})
    assert store.get("rehearsals", "a") == {"verse_id": "v1", "id": "a"}


def test_set_replaces_without_merge(store):
    store.set("rehearsals", "a", {"verse_id": "v1", "completed": False})
    store.set("rehearsals", "a", {"completed": True})
    assert store.get("rehearsals", "a") == {"completed": True, "id": "a"}


def test_set_merge_keeps_other_fields(store):
    store.set("rehearsals", "a", {"verse_id": "v1", "completed": False})
    store.set("rehearsals", "a", {"completed": True, "accuracy": 90}, merge=True)
    assert store.get("rehearsals", "a") == {
        "verse_id": "v1",
        "completed": True,
        "accuracy": 90,
        "id": "a",
    }


def test_query_filters(store):
    _seed(store)
    records = store.query("rehearsals", [("verse_id", "==", "v1"), ("completed", "==", True)])
    assert [record["id"] for record in records] == ["b"]


def test_query_order_and_limit(store):
    _seed(store)
    ordered = store.query("rehearsals", order_by="day")
    assert [record["id"] for record in ordered] == ["b", "c", "a"]
    descending = store.query("rehearsals", order_by="-day", limit=2)
    assert [record["id"] for record in descending] == ["a", "c"]


def test_query_other_collection_is_empty(store):
    _seed(store)
    assert store.query("verses") == []


def test_memory_store_returns_copies():
    store = MemoryStore()
    store.set("rehearsals", "a", {"tags": ["psalms"]})
    record = store.get("rehearsals", "a")
    record["tags"].append("mutated")
    assert store.get("rehearsals", "a")["tags"] == ["psalms"]


def test_apply_query_operators():
    records = [{"id": "a", "day": 1}, {"id": "b", "day": 5}, {"id": "c"}]
    assert [r["id"] for r in apply_query(records, [("day", ">", 1)])] == ["b"]
    assert [r["id"] for r in apply_query(records, [("day", "in", [1, 5])])] == ["a", "b"]
    assert [r["id"] for r in apply_query(records, [("day", "!=", 1)])] == ["b", "c"]
    assert [r["id"] for r in apply_query(records, order_by="day")] == ["a", "b", "c"]


def test_apply_query_rejects_unknown_operator():
    with pytest.raises(ValueError):
        apply_query([{"id": "a"}], [("id", "~", "a")])


def test_sqlite_store_wraps_database_errors():
    conn = sqlite3.connect(":memory:")
    store = SQLiteStore(conn)
    with pytest.raises(StoreFailure):
        store.get("rehearsals", "a")
    with pytest.raises(StoreFailure):
        store.set("rehearsals", "a", {"verse_id": "v1"})
    with pytest.raises(StoreFailure):
        store.query("rehearsals")
    conn.close()


def test_sqlite_store_rejects_unserializable_records():
    conn = sqlite3.connect(":memory:")
    conn.executescript(SCHEMA_SQL)
    store = SQLiteStore(conn)
    with pytest.raises(StoreFailure):
        store.set("rehearsals", "a", {"when": object()})
    conn.close()
