"""Database infrastructure with async SQLAlchemy and the repository pattern.

Core components:
- **base**: Declarative base and common model fields
- **session**: Async engine and session management
- **repository**: Generic repository with read and staged-write operations
- **dependencies**: FastAPI dependency injection helpers
"""

from src.infrastructure.database.base import Base, BaseModel
from src.infrastructure.database.dependencies import DatabaseSession, get_db
from src.infrastructure.database.repository import BaseRepository
from src.infrastructure.database.session import (
    check_database_connection,
    close_database,
    create_database_engine,
    create_schema,
    get_async_session,
    get_engine,
    get_session_factory,
)

__all__ = [
    "Base",
    "BaseModel",
    "BaseRepository",
    "DatabaseSession",
    "check_database_connection",
    "close_database",
    "create_database_engine",
    "create_schema",
    "get_async_session",
    "get_db",
    "get_engine",
    "get_session_factory",
]
