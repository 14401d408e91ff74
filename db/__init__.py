from .database import get_conn, get_db, init_db
from .store import DocumentStore, MemoryStore, SQLiteStore, StoreFailure

__all__ = [
    'get_conn', 'get_db', 'init_db',
    'DocumentStore', 'MemoryStore', 'SQLiteStore', 'StoreFailure',
]
