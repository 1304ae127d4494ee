"""View models for import previews, change summaries and apply results."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from holdings.domain.models import (
    AccountBreakdown,
    ApplyStep,
    CashAction,
    ImportHistoryRecord,
    ParsedPosition,
)


@dataclass(frozen=True)
class ParseResult:
    """
    Snapshot produced by parsing every file of an import session.

    Rebuilt from scratch whenever the file set changes; never persisted.
    """

    positions: tuple[ParsedPosition, ...] = ()
    cash_balance: Decimal = Decimal("0")
    cash_accounts: tuple[AccountBreakdown, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def positions_value(self) -> Decimal:
        """Sum of current values over non-cash positions."""
        return sum((p.current_value for p in self.positions), Decimal("0"))

    @property
    def total_value(self) -> Decimal:
        """Positions plus cash."""
        return self.positions_value + self.cash_balance


@dataclass(frozen=True)
class FieldChange:
    """A single formatted before/after pair."""

    field: str
    old: str
    new: str


@dataclass(frozen=True)
class NewPosition:
    symbol: str
    value: Decimal
    accounts: str


@dataclass(frozen=True)
class UpdatedPosition:
    symbol: str
    changes: tuple[FieldChange, ...]
    value_delta: Decimal = Decimal("0")


@dataclass(frozen=True)
class RemovedPosition:
    id: str
    symbol: str
    current_value: Decimal


@dataclass(frozen=True)
class ChangeSummary:
    """Classified diff between a parsed import and the stored portfolio."""

    new_positions: tuple[NewPosition, ...] = ()
    updated_positions: tuple[UpdatedPosition, ...] = ()
    unchanged_count: int = 0
    removed_positions: tuple[RemovedPosition, ...] = ()
    old_cash: Decimal = Decimal("0")
    new_cash: Decimal = Decimal("0")
    old_total: Decimal = Decimal("0")
    new_total: Decimal = Decimal("0")

    @property
    def has_changes(self) -> bool:
        """Return True if applying would change any position or the cash balance."""
        return bool(
            self.new_positions
            or self.updated_positions
            or self.removed_positions
            or self.old_cash != self.new_cash
        )


@dataclass
class ApplyResult:
    """Outcome of a successful apply."""

    owner_id: str
    steps_completed: list[ApplyStep] = field(default_factory=list)
    positions_deleted: int = 0
    positions_upserted: int = 0
    cash_action: CashAction = CashAction.NONE
    history: Optional[ImportHistoryRecord] = None


@dataclass(frozen=True)
class AccountSummaryItem:
    """One brokerage account seen across stored positions."""

    name: str
    position_count: int
    total_value: Decimal
