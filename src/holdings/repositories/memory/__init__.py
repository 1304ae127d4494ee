"""In-memory repository implementations."""

from holdings.repositories.memory.portfolio_store import InMemoryPortfolioStore

__all__ = [
    "InMemoryPortfolioStore",
]
