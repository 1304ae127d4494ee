"""Multi-file aggregation of brokerage exports into one ParseResult."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from holdings.csv.parser import ParsedFile, parse_csv_text
from holdings.csv.positions import SymbolGroup, build_positions
from holdings.domain.models import AccountBreakdown
from holdings.domain.views import ParseResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportFile:
    """One uploaded file: its name and decoded text."""

    name: str
    text: str


def merge_parsed_files(parsed_files: Sequence[ParsedFile]) -> ParseResult:
    """
    Merge already-parsed files into canonical positions.

    Rows are grouped by symbol across every file. Shares, value and cost
    basis are summed; company name is the first non-empty one seen; each
    contributing row adds its own account breakdown. Cash rows are summed
    into a single balance.
    """
    groups: dict[str, SymbolGroup] = {}
    cash_balance = Decimal("0")
    cash_accounts: list[AccountBreakdown] = []
    errors: list[str] = []

    for parsed in parsed_files:
        errors.extend(parsed.errors)
        for row in parsed.rows:
            breakdown = AccountBreakdown(account=row.account, shares=row.shares, value=row.value)
            if row.is_cash:
                cash_balance += row.value
                cash_accounts.append(breakdown)
                continue

            group = groups.get(row.symbol)
            if group is None:
                group = groups[row.symbol] = SymbolGroup(symbol=row.symbol)
            group.shares += row.shares
            group.current_value += row.value
            group.cost_basis += row.cost_basis
            group.last_price = row.price
            if not group.company_name and row.company_name:
                group.company_name = row.company_name
            group.accounts.append(breakdown)

    return ParseResult(
        positions=build_positions(groups.values()),
        cash_balance=cash_balance,
        cash_accounts=tuple(cash_accounts),
        errors=tuple(errors),
    )


def aggregate_files(
    files: Iterable[ImportFile],
    cash_symbols: Optional[Iterable[str]] = None,
) -> ParseResult:
    """Parse every file independently, then merge them. Pure and deterministic."""
    symbols = tuple(cash_symbols) if cash_symbols is not None else None
    parsed_files = [parse_csv_text(f.text, file_name=f.name, cash_symbols=symbols) for f in files]
    result = merge_parsed_files(parsed_files)
    logger.debug(
        "Aggregated %d file(s): %d positions, cash %s, %d warning(s)",
        len(parsed_files), len(result.positions), result.cash_balance, len(result.errors),
    )
    return result
