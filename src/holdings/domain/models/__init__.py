"""Domain models package."""

from holdings.domain.models.enums import PositionCategory, ApplyStep, CashAction
from holdings.domain.models.position import (
    CASH_SYMBOL,
    AccountBreakdown,
    ParsedPosition,
    PositionUpsert,
    StoredPosition,
    breakdowns_from_json,
    to_decimal,
)
from holdings.domain.models.summary import PortfolioSummary, ImportHistoryRecord

__all__ = [
    "PositionCategory",
    "ApplyStep",
    "CashAction",
    "CASH_SYMBOL",
    "AccountBreakdown",
    "ParsedPosition",
    "PositionUpsert",
    "StoredPosition",
    "breakdowns_from_json",
    "to_decimal",
    "PortfolioSummary",
    "ImportHistoryRecord",
]
