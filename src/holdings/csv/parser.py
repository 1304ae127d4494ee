"""
Brokerage positions CSV parser.

Turns the text of one brokerage export into cleaned holding rows plus a
list of human-readable warnings. Column detection is keyword based so the
same parser handles Fidelity, Schwab and hand-made exports; malformed rows
are skipped with a warning instead of failing the whole file.
"""

import csv
import io
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_CASH_SYMBOLS = ("SPAXX", "FDRXX", "FCASH", "SWVXX", "VMFXX", "CASH")

# Keyword candidates per field, most specific first. Matching is a
# case-insensitive substring test against each header cell.
SYMBOL_KEYWORDS = ("symbol", "ticker", "stock", "sym")
COMPANY_KEYWORDS = ("description", "security", "company", "name")
PRICE_KEYWORDS = ("last price", "current price", "price", "last", "close", "value")
SHARES_KEYWORDS = ("quantity", "shares", "qty")
VALUE_KEYWORDS = ("current value", "market value", "value")
COST_BASIS_KEYWORDS = ("cost basis total", "total cost basis", "cost basis")
ACCOUNT_KEYWORDS = ("account name", "account number", "account")

# Positional defaults when no header keyword matches
DEFAULT_SYMBOL_COLUMN = 0
DEFAULT_COMPANY_COLUMN = 1
DEFAULT_PRICE_COLUMN = 2

MISSING_MARKERS = {"", "--", "-", "n/a", "na", "none"}

_NUMERIC_NOISE = re.compile(r"[\s$€£¥,%+]")
_TICKER = re.compile(r"^[A-Z0-9][A-Z0-9.\-/]{0,14}$")


@dataclass(frozen=True)
class ColumnMap:
    """Detected column index per field (None when the file has no such column)."""

    symbol: int
    company: Optional[int] = None
    price: Optional[int] = None
    shares: Optional[int] = None
    value: Optional[int] = None
    cost_basis: Optional[int] = None
    account: Optional[int] = None


@dataclass(frozen=True)
class RawCsvRow:
    """Cells of one data line with the header mapping they were read under."""

    line_number: int
    cells: tuple[str, ...]
    columns: ColumnMap

    def cell(self, index: Optional[int]) -> str:
        if index is None or index >= len(self.cells):
            return ""
        return self.cells[index].strip()

    @property
    def non_empty_count(self) -> int:
        return sum(1 for c in self.cells if c.strip())


@dataclass(frozen=True)
class HoldingRow:
    """One cleaned holding (or cash) line from a brokerage export."""

    symbol: str
    company_name: str
    account: str
    shares: Decimal
    price: Decimal
    value: Decimal
    cost_basis: Decimal
    line_number: int
    is_cash: bool = False


@dataclass(frozen=True)
class ParsedFile:
    """Rows and warnings from a single file."""

    file_name: str
    rows: tuple[HoldingRow, ...] = ()
    errors: tuple[str, ...] = ()


def clean_number(raw: Optional[str]) -> Optional[Decimal]:
    """
    Parse a brokerage-formatted number.

    Strips currency symbols, thousands separators, percent signs and
    whitespace; "(1,234.50)" is negative. Returns None for blanks, "--",
    "n/a" and anything that is still not a number after cleaning.
    """
    if raw is None:
        return None
    text = raw.strip()
    if text.lower() in MISSING_MARKERS:
        return None

    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1]

    text = _NUMERIC_NOISE.sub("", text)
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return -number if negative else number


def _find_column(
    headers: list[str],
    keywords: Iterable[str],
    claimed: set[int],
) -> Optional[int]:
    for keyword in keywords:
        for idx, header in enumerate(headers):
            if idx not in claimed and keyword in header:
                return idx
    return None


def detect_columns(header_cells: Iterable[str]) -> ColumnMap:
    """
    Map header cells to fields.

    A column claimed by one field is never reused by another, so
    "Account Name" cannot become the company column and "Current Value"
    cannot become the price column.
    """
    headers = [h.strip().lower() for h in header_cells]
    claimed: set[int] = set()

    def claim(keywords: Iterable[str]) -> Optional[int]:
        idx = _find_column(headers, keywords, claimed)
        if idx is not None:
            claimed.add(idx)
        return idx

    symbol = claim(SYMBOL_KEYWORDS)
    if symbol is None:
        symbol = DEFAULT_SYMBOL_COLUMN
        claimed.add(symbol)
    account = claim(ACCOUNT_KEYWORDS)
    cost_basis = claim(COST_BASIS_KEYWORDS)
    shares = claim(SHARES_KEYWORDS)
    value = claim(VALUE_KEYWORDS)
    price = claim(PRICE_KEYWORDS)
    company = claim(COMPANY_KEYWORDS)

    # Positional defaults apply only to columns no other field took
    if company is None and DEFAULT_COMPANY_COLUMN not in claimed:
        company = DEFAULT_COMPANY_COLUMN
        claimed.add(company)
    if price is None and DEFAULT_PRICE_COLUMN not in claimed:
        price = DEFAULT_PRICE_COLUMN

    return ColumnMap(
        symbol=symbol,
        company=company,
        price=price,
        shares=shares,
        value=value,
        cost_basis=cost_basis,
        account=account,
    )


def _is_header_row(cells: list[str]) -> bool:
    non_empty = [c.strip().lower() for c in cells if c.strip()]
    if len(non_empty) < 2:
        return False
    return any(keyword in cell for cell in non_empty for keyword in SYMBOL_KEYWORDS)


def _is_footer(symbol: str) -> bool:
    words = symbol.split()
    if not words:
        return True
    return "TOTAL" in words or words[0].startswith("TOTAL") or "PENDING" in symbol


def _is_cash(symbol: str, company: str, cash_symbols: frozenset[str]) -> bool:
    description = company.lower()
    return (
        symbol in cash_symbols
        or "**" in symbol
        or symbol.startswith("CASH")
        or "money market" in description
        or description.startswith("cash")
    )


def _has_numbers(raw: RawCsvRow) -> bool:
    columns = raw.columns
    return any(
        clean_number(raw.cell(col)) is not None
        for col in (columns.shares, columns.value)
    )


def _normalize_symbol(raw: str) -> str:
    # Fidelity prefixes option symbols with "-"
    return raw.strip().lstrip("-").strip().upper()


def parse_csv_text(
    text: str,
    file_name: str = "",
    cash_symbols: Optional[Iterable[str]] = None,
) -> ParsedFile:
    """
    Parse one brokerage CSV export.

    Never raises for bad content: every problem becomes a warning string in
    ``ParsedFile.errors`` and parsing moves on to the next line.
    """
    label = file_name or "file"
    cash_set = frozenset(s.upper() for s in (cash_symbols or DEFAULT_CASH_SYMBOLS))
    errors: list[str] = []
    rows: list[HoldingRow] = []

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    lines: list[tuple[int, list[str]]] = []
    try:
        for cells in reader:
            lines.append((reader.line_num, cells))
    except csv.Error as e:
        errors.append(f"{label} line {reader.line_num}: unreadable CSV ({e}); stopped reading")

    header_pos = next((i for i, (_, cells) in enumerate(lines) if _is_header_row(cells)), None)
    if header_pos is None:
        header_pos = next((i for i, (_, cells) in enumerate(lines) if any(c.strip() for c in cells)), None)
        if header_pos is None:
            errors.append(f"{label}: file is empty")
            return ParsedFile(file_name=file_name, errors=tuple(errors))
        errors.append(
            f"{label}: no Symbol header found; reading line {lines[header_pos][0]} as the header"
        )

    columns = detect_columns(lines[header_pos][1])
    if columns.shares is None and columns.value is None:
        errors.append(f"{label}: no quantity or value column found; nothing imported")
        return ParsedFile(file_name=file_name, errors=tuple(errors))
    logger.debug("%s: header on line %d, columns %s", label, lines[header_pos][0], columns)

    for line_number, cells in lines[header_pos + 1:]:
        raw = RawCsvRow(line_number=line_number, cells=tuple(cells), columns=columns)
        if raw.non_empty_count < 2:
            continue  # blank line or single-cell disclaimer text

        symbol = _normalize_symbol(raw.cell(columns.symbol))
        if not symbol or _is_footer(symbol):
            continue

        company = raw.cell(columns.company)
        account = raw.cell(columns.account) or file_name or "Default"

        if _is_cash(symbol, company, cash_set):
            amount = clean_number(raw.cell(columns.value))
            if amount is None:
                amount = clean_number(raw.cell(columns.shares))
            if amount is None:
                errors.append(f"{label} line {line_number}: skipped cash row {symbol}, missing value")
                continue
            rows.append(
                HoldingRow(
                    symbol=symbol.replace("*", ""),
                    company_name=company,
                    account=account,
                    shares=amount,
                    price=Decimal("1"),
                    value=amount,
                    cost_basis=amount,
                    line_number=line_number,
                    is_cash=True,
                )
            )
            continue

        if not _TICKER.match(symbol):
            if _has_numbers(raw):
                errors.append(f"{label} line {line_number}: skipped {symbol}, unrecognised symbol")
            continue  # free text in the symbol column, e.g. footnotes

        row = _build_holding(raw, symbol, company, account, label)
        if isinstance(row, str):
            errors.append(row)
        else:
            rows.append(row)

    return ParsedFile(file_name=file_name, rows=tuple(rows), errors=tuple(errors))


def _build_holding(
    raw: RawCsvRow,
    symbol: str,
    company: str,
    account: str,
    label: str,
) -> Union[HoldingRow, str]:
    """Build a holding from a data row, or return the warning explaining why not."""
    columns = raw.columns
    shares = clean_number(raw.cell(columns.shares))
    price = clean_number(raw.cell(columns.price))
    value = clean_number(raw.cell(columns.value))

    missing = []
    if columns.shares is not None and shares is None:
        missing.append("shares")
    if columns.price is not None and price is None:
        missing.append("price")
    if columns.value is not None and value is None:
        missing.append("value")
    if missing:
        return f"{label} line {raw.line_number}: skipped {symbol}, missing {', '.join(missing)}"

    # Derive a field only when the file has no column for it at all
    if price is None:
        if shares is None or value is None:
            return f"{label} line {raw.line_number}: skipped {symbol}, no price column to value it"
        price = value / shares if shares else Decimal("0")
    if value is None:
        value = shares * price
    if shares is None:
        if price == 0:
            return f"{label} line {raw.line_number}: skipped {symbol}, cannot derive shares at zero price"
        shares = value / price

    cost_basis = clean_number(raw.cell(columns.cost_basis)) or Decimal("0")

    return HoldingRow(
        symbol=symbol,
        company_name=company,
        account=account,
        shares=shares,
        price=price,
        value=value,
        cost_basis=cost_basis,
        line_number=raw.line_number,
    )
