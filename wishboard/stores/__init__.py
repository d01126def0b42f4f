from wishboard.core.config import Settings
from wishboard.stores.base import BoardRepository, BoardStore, DuplicateReactionError
from wishboard.stores.json_file import JsonBoardStore
from wishboard.stores.sql import SqlBoardStore


def build_store(settings: Settings) -> BoardStore:
    backend = settings.store_backend
    if backend == "sql":
        return SqlBoardStore(settings.DATABASE_URL, create_tables=settings.DATABASE_CREATE_TABLES)
    if backend == "json":
        return JsonBoardStore(settings.JSON_STORE_PATH)
    raise ValueError(f"Unknown STORE_BACKEND {settings.STORE_BACKEND!r}; expected 'sql' or 'json'.")


__all__ = [
    "BoardRepository",
    "BoardStore",
    "DuplicateReactionError",
    "JsonBoardStore",
    "SqlBoardStore",
    "build_store",
]
