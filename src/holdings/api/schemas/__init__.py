"""Pydantic schemas for API request/response."""

from holdings.api.schemas.imports import (
    AccountBreakdownResponse,
    ParsedPositionResponse,
    ParseResultResponse,
    FieldChangeResponse,
    NewPositionResponse,
    UpdatedPositionResponse,
    RemovedPositionResponse,
    ChangeSummaryResponse,
    ImportHistoryResponse,
    ApplyResultResponse,
    ReconcileResponse,
    ApplyResponse,
)
from holdings.api.schemas.portfolio import (
    PositionResponse,
    PositionListResponse,
    SummaryResponse,
    HistoryListResponse,
    AccountSummaryResponse,
    AccountListResponse,
    RemoveAccountResponse,
    ClearPortfolioResponse,
)

__all__ = [
    "AccountBreakdownResponse",
    "ParsedPositionResponse",
    "ParseResultResponse",
    "FieldChangeResponse",
    "NewPositionResponse",
    "UpdatedPositionResponse",
    "RemovedPositionResponse",
    "ChangeSummaryResponse",
    "ImportHistoryResponse",
    "ApplyResultResponse",
    "ReconcileResponse",
    "ApplyResponse",
    "PositionResponse",
    "PositionListResponse",
    "SummaryResponse",
    "HistoryListResponse",
    "AccountSummaryResponse",
    "AccountListResponse",
    "RemoveAccountResponse",
    "ClearPortfolioResponse",
]
