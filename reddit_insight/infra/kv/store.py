"""Key/value storage port implementations.

The analysis cache and the theme list only ever need whole-value reads,
writes and deletes, so both sit on this narrow interface rather than on the
database session directly.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from reddit_insight.core.errors import StorageError
from reddit_insight.infra.db.repos import KeyValueRepo
from reddit_insight.infra.db.session import init_db, session_scope


class SqlKeyValueStore:
    def __init__(self, database_url: str, create_tables: bool = True) -> None:
        self.database_url = database_url
        if create_tables:
            init_db(database_url)

    def read(self, key: str) -> Optional[str]:
        try:
            with session_scope(self.database_url) as session:
                row = KeyValueRepo(session).get(key)
                return row.value if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to read key {key!r}: {exc}") from exc

    def write(self, key: str, value: str) -> None:
        try:
            with session_scope(self.database_url) as session:
                KeyValueRepo(session).upsert(key, value)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to write key {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            with session_scope(self.database_url) as session:
                KeyValueRepo(session).delete(key)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete key {key!r}: {exc}") from exc

    def keys(self, prefix: str = "") -> List[str]:
        try:
            with session_scope(self.database_url) as session:
                return KeyValueRepo(session).list_keys(prefix=prefix)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to list keys: {exc}") from exc


class MemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(key for key in self._data if key.startswith(prefix))
