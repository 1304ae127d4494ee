"""API routers package."""

from holdings.api.routers.imports import router as imports_router
from holdings.api.routers.portfolio import router as portfolio_router

__all__ = [
    "imports_router",
    "portfolio_router",
]
