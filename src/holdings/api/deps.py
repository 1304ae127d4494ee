"""Dependency injection for FastAPI."""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from holdings.config.settings import Settings, get_settings
from holdings.core.exceptions import ValidationError
from holdings.repositories.sqlalchemy.database import get_db
from holdings.repositories.sqlalchemy import SqlAlchemyPortfolioStore
from holdings.services import ImportService, PortfolioService


def get_owner_id(x_owner_id: str = Header(..., alias="X-Owner-Id")) -> str:
    """Owner whose portfolio the request reads or writes."""
    owner_id = x_owner_id.strip()
    if not owner_id:
        raise ValidationError("X-Owner-Id header must not be blank")
    return owner_id


def get_app_settings() -> Settings:
    """Provide the current Settings instance."""
    return get_settings()


def get_portfolio_store(db: Session = Depends(get_db)) -> SqlAlchemyPortfolioStore:
    """Provide PortfolioStore instance."""
    return SqlAlchemyPortfolioStore(db)


def get_import_service(
    store: SqlAlchemyPortfolioStore = Depends(get_portfolio_store),
    settings: Settings = Depends(get_app_settings),
) -> ImportService:
    """Provide ImportService instance."""
    return ImportService(store=store, settings=settings)


def get_portfolio_service(
    store: SqlAlchemyPortfolioStore = Depends(get_portfolio_store),
) -> PortfolioService:
    """Provide PortfolioService instance."""
    return PortfolioService(store=store)
