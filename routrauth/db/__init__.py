"""
Database integration: public API

Features:
- Async SQLAlchemy integration (PostgreSQL+asyncpg or SQLite+aiosqlite)
- Repository pattern for lookups and updates
- FastAPI dependency for session access
- Lifecycle management for FastAPI apps

Limitations:
- Only async SQLAlchemy is supported (no sync engine/session)
- No migration helpers; tables are created on startup only in debug mode
"""
from routrauth.db.base import Base, BaseModel, metadata
from routrauth.db.engine import init_db, shutdown_db
from routrauth.db.manager import get_db, setup_db
from routrauth.db.repository import BaseRepository

__all__ = [
    "init_db",
    "shutdown_db",
    "setup_db",
    "get_db",
    "BaseRepository",
    "Base",
    "BaseModel",
    "metadata",
]
