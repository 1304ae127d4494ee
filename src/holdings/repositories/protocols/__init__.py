"""Repository protocol definitions (interfaces)."""

from holdings.repositories.protocols.portfolio_store import PortfolioStore

__all__ = [
    "PortfolioStore",
]
