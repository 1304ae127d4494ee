"""Canonical position builder."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from holdings.core.exceptions import ValidationError
from holdings.domain.models import AccountBreakdown, ParsedPosition

# Allowed drift between a position's value and the sum of its account values
CONSERVATION_TOLERANCE = Decimal("0.01")


@dataclass
class SymbolGroup:
    """Running totals for one symbol while files are being merged."""

    symbol: str
    company_name: str = ""
    shares: Decimal = field(default_factory=lambda: Decimal("0"))
    current_value: Decimal = field(default_factory=lambda: Decimal("0"))
    cost_basis: Decimal = field(default_factory=lambda: Decimal("0"))
    last_price: Decimal = field(default_factory=lambda: Decimal("0"))
    accounts: list[AccountBreakdown] = field(default_factory=list)


def build_position(group: SymbolGroup) -> ParsedPosition:
    """
    Freeze a symbol group into a ParsedPosition.

    Price is recomputed as value / shares so files quoting slightly
    different prices for the same symbol stay consistent; with no shares
    the last quoted price is kept.
    """
    if group.shares > 0:
        price = group.current_value / group.shares
    else:
        price = group.last_price

    account_total = sum((a.value for a in group.accounts), Decimal("0"))
    if abs(account_total - group.current_value) > CONSERVATION_TOLERANCE:
        raise ValidationError(
            f"{group.symbol}: account values sum to {account_total}, "
            f"position value is {group.current_value}"
        )

    return ParsedPosition(
        symbol=group.symbol,
        company_name=group.company_name,
        shares=group.shares,
        current_price=price,
        current_value=group.current_value,
        cost_basis=group.cost_basis,
        accounts=tuple(group.accounts),
    )


def build_positions(groups: Iterable[SymbolGroup]) -> tuple[ParsedPosition, ...]:
    """Build positions ordered by value (largest first), then symbol."""
    positions = [build_position(g) for g in groups]
    positions.sort(key=lambda p: (-p.current_value, p.symbol))
    return tuple(positions)
