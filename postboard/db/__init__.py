"""Engine, sessions and table creation for the dashboard database."""

from postboard.db.engine import engine, get_session, get_session_dependency, init_db

__all__ = [
    "engine",
    "get_session",
    "get_session_dependency",
    "init_db",
]
