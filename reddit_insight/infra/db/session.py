from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlmodel import Session, SQLModel, create_engine


@lru_cache(maxsize=8)
def get_engine(database_url: str):
    # Reuse engine instances per URL so requests do not rebuild connection pools.
    connect_args = (
        {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    )
    return create_engine(database_url, echo=False, connect_args=connect_args)


def init_db(database_url: str) -> None:
    # Import models for side effects so SQLModel metadata includes all tables.
    from reddit_insight.infra.db import models  # noqa: F401

    engine = get_engine(database_url)
    SQLModel.metadata.create_all(engine)


@contextmanager
def session_scope(database_url: str) -> Iterator[Session]:
    engine = get_engine(database_url)
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
