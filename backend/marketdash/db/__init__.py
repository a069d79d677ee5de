"""
Database module for MarketDash.

Provides the SQLite connection and the options ratio history table.
"""

from marketdash.db.database import (
    AsyncSessionLocal,
    close_db,
    create_engine,
    create_session_factory,
    create_tables,
    init_db,
    session_scope,
)
from marketdash.db.models import Base, OptionsRatioHistory
from marketdash.db.history_store import SQLHistoryStore, get_history_store

__all__ = [
    "AsyncSessionLocal",
    "close_db",
    "create_engine",
    "create_session_factory",
    "create_tables",
    "init_db",
    "session_scope",
    "Base",
    "OptionsRatioHistory",
    "SQLHistoryStore",
    "get_history_store",
]
