"""
Database integration module for fasttable: public API

Features:
- Store capability set (BaseStore, PendingQuery) consumed by the table query adapter
- SQLAlchemyStore over async SQLAlchemy (PostgreSQL+asyncpg or SQLite+aiosqlite)
- FastAPI dependency for session access
- Lifecycle management for FastAPI apps

Limitations:
- Only async SQLAlchemy is supported (no sync engine/session)
- No migration helpers
"""
from fasttable.db.base import Base, RecordModel, metadata
from fasttable.db.engine import init_db, shutdown_db
from fasttable.db.manager import get_db, setup_db
from fasttable.db.sqlalchemy_store import SQLAlchemyPendingQuery, SQLAlchemyStore
from fasttable.db.store import BaseStore, PendingQuery

__all__ = [
    "init_db",
    "shutdown_db",
    "setup_db",
    "get_db",
    "BaseStore",
    "PendingQuery",
    "SQLAlchemyStore",
    "SQLAlchemyPendingQuery",
    "Base",
    "RecordModel",
    "metadata",
]
