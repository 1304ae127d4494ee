"""Domain layer - pure business models with no external dependencies."""

from holdings.domain.models import (
    CASH_SYMBOL,
    AccountBreakdown,
    ParsedPosition,
    PositionUpsert,
    StoredPosition,
    PortfolioSummary,
    ImportHistoryRecord,
    PositionCategory,
    ApplyStep,
    CashAction,
)

__all__ = [
    "CASH_SYMBOL",
    "AccountBreakdown",
    "ParsedPosition",
    "PositionUpsert",
    "StoredPosition",
    "PortfolioSummary",
    "ImportHistoryRecord",
    "PositionCategory",
    "ApplyStep",
    "CashAction",
]
