"""存储抽象层

- provider: SQLite / PostgreSQL 引擎与会话
- kv: 建立在 app_metadata 表之上的 KV 原语（也提供进程内实现）
"""

from app.core.db.kv import DatabaseKVStore, KeyValueStore, MemoryKVStore, get_memory_store
from app.core.db.provider import (
    DatabaseProvider,
    PostgresProvider,
    SQLiteProvider,
    close_database_provider,
    get_database_provider,
)

__all__ = [
    "KeyValueStore",
    "DatabaseKVStore",
    "MemoryKVStore",
    "get_memory_store",
    "DatabaseProvider",
    "SQLiteProvider",
    "PostgresProvider",
    "get_database_provider",
    "close_database_provider",
]
