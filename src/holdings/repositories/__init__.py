"""Repository layer - data access abstractions and implementations."""

from holdings.repositories.protocols import PortfolioStore

__all__ = [
    "PortfolioStore",
]
