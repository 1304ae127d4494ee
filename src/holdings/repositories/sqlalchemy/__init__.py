"""SQLAlchemy repository implementations."""

from holdings.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    get_session,
    init_db,
    init_db_with_path,
    reset_database,
    Base,
)
from holdings.repositories.sqlalchemy.portfolio_store import SqlAlchemyPortfolioStore

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_session",
    "init_db",
    "init_db_with_path",
    "reset_database",
    "Base",
    "SqlAlchemyPortfolioStore",
]
