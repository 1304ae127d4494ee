"""Application context for in-process service management.

Provides the import and portfolio services without HTTP, for scripts
and tests that drive the engine directly.
"""

from pathlib import Path
from typing import Optional

from holdings.config.settings import Settings, set_settings, get_settings
from holdings.repositories.sqlalchemy.database import (
    init_db_with_path,
    reset_database,
    get_session,
)
from holdings.repositories.sqlalchemy import SqlAlchemyPortfolioStore
from holdings.services import ImportService, PortfolioService


class AppContext:
    """Application context providing in-process access to all services."""

    def __init__(self, data_dir: Optional[Path] = None):
        self._data_dir = data_dir
        self._session = None
        self._initialized = False

        # Service instances (lazy initialized)
        self._store: Optional[SqlAlchemyPortfolioStore] = None
        self._import_service: Optional[ImportService] = None
        self._portfolio_service: Optional[PortfolioService] = None

    def initialize(self, data_dir: Optional[Path] = None) -> None:
        """
        Initialize or reinitialize the application with a data directory.

        Args:
            data_dir: Data directory path. Uses default if not provided.
        """
        if data_dir:
            self._data_dir = data_dir

        settings = Settings(data_dir=self._data_dir)
        set_settings(settings)

        reset_database()
        init_db_with_path(settings.get_data_dir() / "holdings.db")

        self._reset_services()
        self._initialized = True

    @property
    def is_initialized(self) -> bool:
        """Check if context is initialized."""
        return self._initialized

    @property
    def data_dir(self) -> Path:
        """Get the current data directory."""
        return get_settings().get_data_dir()

    def _get_session(self):
        if self._session is None:
            self._session = get_session()
        return self._session

    def _reset_services(self) -> None:
        if self._session:
            self._session.close()
        self._session = None
        self._store = None
        self._import_service = None
        self._portfolio_service = None

    def refresh_session(self) -> None:
        """Refresh the database session (call after external changes)."""
        self._reset_services()

    @property
    def store(self) -> SqlAlchemyPortfolioStore:
        """Get the PortfolioStore instance."""
        if self._store is None:
            self._store = SqlAlchemyPortfolioStore(self._get_session())
        return self._store

    @property
    def imports(self) -> ImportService:
        """Get the ImportService instance."""
        if self._import_service is None:
            self._import_service = ImportService(store=self.store, settings=get_settings())
        return self._import_service

    @property
    def portfolio(self) -> PortfolioService:
        """Get the PortfolioService instance."""
        if self._portfolio_service is None:
            self._portfolio_service = PortfolioService(store=self.store)
        return self._portfolio_service

    def close(self) -> None:
        """Clean up resources."""
        self._reset_services()


# Global application context
_app_context: Optional[AppContext] = None


def get_app_context() -> AppContext:
    """Get or create the global application context."""
    global _app_context
    if _app_context is None:
        _app_context = AppContext()
    return _app_context


def set_app_context(context: AppContext) -> None:
    """Set the global application context."""
    global _app_context
    _app_context = context
