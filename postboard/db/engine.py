"""Database engine and sessions.

One process-wide engine built from ``DATABASE_URL``. Requests get their own
session through ``get_session_dependency``; scripts use ``get_session``.
SQLite serves local development and tests, PostgreSQL production.
"""

from contextlib import contextmanager
from typing import Generator

from sqlmodel import Session, SQLModel, create_engine

from postboard.config import DATABASE_URL


def build_engine(url: str):
    if url.startswith("sqlite"):
        # Sync routes run in the threadpool, so connections cross threads
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)


engine = build_engine(DATABASE_URL)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Session for scripts and one-off jobs; rolled back if the block raises."""
    with Session(engine) as session:
        try:
            yield session
        except Exception:
            session.rollback()
            raise


def get_session_dependency() -> Generator[Session, None, None]:
    """Per-request session, overridden in tests."""
    with Session(engine) as session:
        yield session


def init_db() -> None:
    """Create any missing tables. Production schemas come from Alembic."""
    import postboard.db.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
