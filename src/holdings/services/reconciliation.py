"""Diff engine: classify a parsed import against the stored portfolio."""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Sequence

from holdings.core.exceptions import DuplicateSymbolError
from holdings.domain.models import CASH_SYMBOL, ParsedPosition, StoredPosition
from holdings.domain.views import (
    ChangeSummary,
    FieldChange,
    NewPosition,
    RemovedPosition,
    UpdatedPosition,
)

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = Decimal("0.001")

# (field, formatter kind) in display order
COMPARED_FIELDS = (
    ("shares", "quantity"),
    ("current_price", "price"),
    ("current_value", "money"),
    ("cost_basis", "money"),
)


def _format_number(value: Decimal, places: int, min_places: int = 0) -> str:
    quantum = Decimal(1).scaleb(-places)
    text = format(value.quantize(quantum, rounding=ROUND_HALF_UP), ",f")
    whole, _, frac = text.partition(".")
    frac = frac.rstrip("0").ljust(min_places, "0")
    return f"{whole}.{frac}" if frac else whole


def _with_dollar(text: str) -> str:
    if text.startswith("-"):
        return "-$" + text[1:]
    return "$" + text


def format_money(value: Decimal) -> str:
    """Format as dollars with two decimals, e.g. ``$1,234.50``."""
    return _with_dollar(_format_number(value, 2, 2))


def format_price(value: Decimal) -> str:
    """Format a per-share price with two to four decimals."""
    return _with_dollar(_format_number(value, 4, 2))


def format_quantity(value: Decimal) -> str:
    """Format a share count with up to four decimals."""
    return _format_number(value, 4)


_FORMATTERS = {
    "quantity": format_quantity,
    "price": format_price,
    "money": format_money,
}


def _index_parsed(parsed: Iterable[ParsedPosition]) -> dict[str, ParsedPosition]:
    by_symbol: dict[str, ParsedPosition] = {}
    for position in parsed:
        if position.symbol in by_symbol:
            raise DuplicateSymbolError(position.symbol)
        by_symbol[position.symbol] = position
    return by_symbol


def field_changes(
    old: StoredPosition,
    new: ParsedPosition,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> tuple[FieldChange, ...]:
    """Compare the financial fields; a difference equal to tolerance is no change."""
    changes = []
    for name, kind in COMPARED_FIELDS:
        old_value = getattr(old, name)
        new_value = getattr(new, name)
        if abs(old_value - new_value) > tolerance:
            fmt = _FORMATTERS[kind]
            changes.append(FieldChange(field=name, old=fmt(old_value), new=fmt(new_value)))
    return tuple(changes)


def diff_positions(
    existing: Sequence[StoredPosition],
    parsed: Sequence[ParsedPosition],
    old_cash: Decimal,
    new_cash: Decimal,
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> ChangeSummary:
    """
    Classify every symbol of ``existing`` and ``parsed`` (CASH excluded).

    Args:
        existing: Positions currently stored for the owner, CASH included
        parsed: Positions from the import session; symbols must be unique
        old_cash: Cash balance before the import
        new_cash: Cash balance from the import
        tolerance: Largest absolute difference still treated as unchanged

    Returns:
        ChangeSummary partitioning the symbols into new, updated,
        unchanged and removed, plus old and new totals.

    Raises:
        DuplicateSymbolError: If ``parsed`` repeats a symbol
    """
    parsed_by_symbol = _index_parsed(parsed)
    existing_by_symbol = {p.symbol: p for p in existing if not p.is_cash}

    new_positions: list[NewPosition] = []
    updated_positions: list[UpdatedPosition] = []
    unchanged_count = 0

    for position in parsed_by_symbol.values():
        if position.symbol == CASH_SYMBOL:
            continue
        old = existing_by_symbol.get(position.symbol)
        if old is None:
            new_positions.append(
                NewPosition(
                    symbol=position.symbol,
                    value=position.current_value,
                    accounts=", ".join(position.account_names),
                )
            )
            continue

        changes = field_changes(old, position, tolerance)
        if changes:
            updated_positions.append(
                UpdatedPosition(
                    symbol=position.symbol,
                    changes=changes,
                    value_delta=position.current_value - old.current_value,
                )
            )
        else:
            unchanged_count += 1

    removed_positions = [
        RemovedPosition(id=p.id, symbol=p.symbol, current_value=p.current_value)
        for symbol, p in sorted(existing_by_symbol.items())
        if symbol not in parsed_by_symbol
    ]

    old_total = sum((p.current_value for p in existing_by_symbol.values()), Decimal("0")) + old_cash
    new_total = sum(
        (p.current_value for p in parsed_by_symbol.values() if p.symbol != CASH_SYMBOL),
        Decimal("0"),
    ) + new_cash

    logger.debug(
        "Diff: %d new, %d updated, %d unchanged, %d removed",
        len(new_positions), len(updated_positions), unchanged_count, len(removed_positions),
    )

    return ChangeSummary(
        new_positions=tuple(new_positions),
        updated_positions=tuple(updated_positions),
        unchanged_count=unchanged_count,
        removed_positions=tuple(removed_positions),
        old_cash=old_cash,
        new_cash=new_cash,
        old_total=old_total,
        new_total=new_total,
    )
