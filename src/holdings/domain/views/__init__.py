"""View models for service outputs."""

from holdings.domain.views.imports import (
    ParseResult,
    FieldChange,
    NewPosition,
    UpdatedPosition,
    RemovedPosition,
    ChangeSummary,
    ApplyResult,
    AccountSummaryItem,
)

__all__ = [
    "ParseResult",
    "FieldChange",
    "NewPosition",
    "UpdatedPosition",
    "RemovedPosition",
    "ChangeSummary",
    "ApplyResult",
    "AccountSummaryItem",
]
