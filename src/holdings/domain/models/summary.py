"""Portfolio summary and import history models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class PortfolioSummary:
    """Per-owner cash balance and the time of the last applied import."""

    owner_id: str
    cash_balance: Decimal = field(default_factory=lambda: Decimal("0"))
    last_import_date: Optional[datetime] = None


@dataclass(frozen=True)
class ImportHistoryRecord:
    """
    Append-only record of one applied import.

    Never updated or deleted once written.
    """

    owner_id: str
    file_names: tuple[str, ...]
    total_positions: int
    total_value: Decimal
    timestamp: datetime
    id: Optional[str] = None
