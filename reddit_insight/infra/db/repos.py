from __future__ import annotations

from typing import List, Optional

from sqlmodel import Session, col, select

from reddit_insight.infra.db.models import KeyValueEntryTable, utc_now


class KeyValueRepo:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, key: str) -> Optional[KeyValueEntryTable]:
        return self.session.get(KeyValueEntryTable, key)

    def upsert(self, key: str, value: str) -> KeyValueEntryTable:
        row = self.get(key)
        if row is None:
            row = KeyValueEntryTable(key=key, value=value)
        else:
            row.value = value
            row.updated_at = utc_now()
        self.session.add(row)
        self.session.flush()
        return row

    def delete(self, key: str) -> bool:
        row = self.get(key)
        if row is None:
            return False
        self.session.delete(row)
        return True

    def list_keys(self, prefix: str = "") -> List[str]:
        statement = select(KeyValueEntryTable.key).order_by(KeyValueEntryTable.key)
        if prefix:
            statement = statement.where(col(KeyValueEntryTable.key).startswith(prefix))
        return list(self.session.exec(statement).all())
