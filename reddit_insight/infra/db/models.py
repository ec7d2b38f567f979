from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueEntryTable(SQLModel, table=True):
    __tablename__ = "kv_entries"

    key: str = Field(primary_key=True, max_length=512)
    value: str
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
