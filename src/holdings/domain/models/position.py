"""Position domain models: account breakdowns, parsed and stored positions."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from holdings.core.exceptions import ValidationError
from holdings.domain.models.enums import PositionCategory

CASH_SYMBOL = "CASH"


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Coerce a number-like value to a finite Decimal or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError):
            raise ValidationError(f"{field_name} must be numeric, got {value!r}")
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be finite, got {value!r}")
    return result


@dataclass(frozen=True)
class AccountBreakdown:
    """
    One symbol's holding within one brokerage account (or uploaded file).

    Validated on construction; malformed shapes raise ValidationError.
    """

    account: str
    shares: Decimal
    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.account, str) or not self.account.strip():
            raise ValidationError(f"Account breakdown needs an account name, got {self.account!r}")
        object.__setattr__(self, "account", self.account.strip())
        object.__setattr__(self, "shares", to_decimal(self.shares, "shares"))
        object.__setattr__(self, "value", to_decimal(self.value, "value"))

    @classmethod
    def from_dict(cls, data: Any) -> "AccountBreakdown":
        """Build from a JSON-style mapping, rejecting malformed shapes."""
        if not isinstance(data, dict):
            raise ValidationError(f"Account breakdown must be an object, got {type(data).__name__}")
        missing = {"account", "shares", "value"} - set(data)
        if missing:
            raise ValidationError(f"Account breakdown missing fields: {sorted(missing)}")
        return cls(account=data["account"], shares=data["shares"], value=data["value"])

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON storage (numbers as strings to keep precision)."""
        return {"account": self.account, "shares": str(self.shares), "value": str(self.value)}


def breakdowns_from_json(raw: Any) -> tuple[AccountBreakdown, ...]:
    """Parse a stored accounts column; None means no breakdowns."""
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ValidationError(f"Accounts must be a list, got {type(raw).__name__}")
    return tuple(AccountBreakdown.from_dict(item) for item in raw)


@dataclass(frozen=True)
class ParsedPosition:
    """Canonical per-symbol position built from one import session."""

    symbol: str
    company_name: str
    shares: Decimal
    current_price: Decimal
    current_value: Decimal
    cost_basis: Decimal
    accounts: tuple[AccountBreakdown, ...] = ()

    @property
    def account_names(self) -> list[str]:
        """Account names in breakdown order, without repeats."""
        names: list[str] = []
        for breakdown in self.accounts:
            if breakdown.account not in names:
                names.append(breakdown.account)
        return names


@dataclass(frozen=True)
class PositionUpsert:
    """
    Financial fields written by an import for one (owner, symbol).

    Carries no annotation fields, so an upsert can never touch them.
    """

    symbol: str
    company_name: str
    shares: Decimal
    current_price: Decimal
    current_value: Decimal
    cost_basis: Decimal
    accounts: tuple[AccountBreakdown, ...] = ()

    @classmethod
    def from_parsed(cls, position: ParsedPosition) -> "PositionUpsert":
        return cls(
            symbol=position.symbol,
            company_name=position.company_name,
            shares=position.shares,
            current_price=position.current_price,
            current_value=position.current_value,
            cost_basis=position.cost_basis,
            accounts=position.accounts,
        )

    @classmethod
    def cash(cls, balance: Decimal, accounts: tuple[AccountBreakdown, ...]) -> "PositionUpsert":
        """The CASH pseudo-position for a cash balance."""
        return cls(
            symbol=CASH_SYMBOL,
            company_name="Cash",
            shares=balance,
            current_price=Decimal("1"),
            current_value=balance,
            cost_basis=balance,
            accounts=accounts,
        )


@dataclass
class StoredPosition:
    """
    Persisted position owned by a user.

    Financial fields are rewritten by each import; category, tier, notes,
    source, tags, removed_tag_ids and first_seen_at belong to the user.
    """

    id: str
    owner_id: str
    symbol: str
    company_name: str = ""
    shares: Decimal = field(default_factory=lambda: Decimal("0"))
    current_price: Decimal = field(default_factory=lambda: Decimal("0"))
    current_value: Decimal = field(default_factory=lambda: Decimal("0"))
    cost_basis: Decimal = field(default_factory=lambda: Decimal("0"))
    accounts: tuple[AccountBreakdown, ...] = ()
    category: Optional[PositionCategory] = None
    tier: Optional[str] = None
    notes: Optional[str] = None
    source: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    removed_tag_ids: list[str] = field(default_factory=list)
    first_seen_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if isinstance(self.category, str):
            self.category = PositionCategory(self.category)
        self.accounts = tuple(self.accounts)

    @property
    def is_cash(self) -> bool:
        """Return True for the synthetic CASH pseudo-position."""
        return self.symbol == CASH_SYMBOL
