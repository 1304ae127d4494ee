"""Service layer - business logic orchestration."""

from holdings.services.reconciliation import diff_positions, field_changes
from holdings.services.import_applier import ImportApplier
from holdings.services.import_service import ImportService, ImportOutcome
from holdings.services.portfolio_service import PortfolioService

__all__ = [
    "diff_positions",
    "field_changes",
    "ImportApplier",
    "ImportService",
    "ImportOutcome",
    "PortfolioService",
]
