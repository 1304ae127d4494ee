"""Pydantic schemas for import endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from holdings.domain.models.enums import ApplyStep, CashAction


class AccountBreakdownResponse(BaseModel):
    """One account's share of a position."""

    model_config = {"from_attributes": True}

    account: str
    shares: Decimal
    value: Decimal


class ParsedPositionResponse(BaseModel):
    """Response schema for a parsed position."""

    model_config = {"from_attributes": True}

    symbol: str
    company_name: str
    shares: Decimal
    current_price: Decimal
    current_value: Decimal
    cost_basis: Decimal
    accounts: list[AccountBreakdownResponse]


class ParseResultResponse(BaseModel):
    """Response schema for a parsed import session."""

    model_config = {"from_attributes": True}

    positions: list[ParsedPositionResponse]
    cash_balance: Decimal
    cash_accounts: list[AccountBreakdownResponse]
    errors: list[str]
    total_value: Decimal


class FieldChangeResponse(BaseModel):
    model_config = {"from_attributes": True}

    field: str
    old: str
    new: str


class NewPositionResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    value: Decimal
    accounts: str


class UpdatedPositionResponse(BaseModel):
    model_config = {"from_attributes": True}

    symbol: str
    changes: list[FieldChangeResponse]
    value_delta: Decimal


class RemovedPositionResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    symbol: str
    current_value: Decimal


class ChangeSummaryResponse(BaseModel):
    """Response schema for the diff against the stored portfolio."""

    model_config = {"from_attributes": True}

    new_positions: list[NewPositionResponse]
    updated_positions: list[UpdatedPositionResponse]
    unchanged_count: int
    removed_positions: list[RemovedPositionResponse]
    old_cash: Decimal
    new_cash: Decimal
    old_total: Decimal
    new_total: Decimal
    has_changes: bool


class ImportHistoryResponse(BaseModel):
    """Response schema for one applied import."""

    model_config = {"from_attributes": True}

    id: Optional[str] = None
    file_names: list[str]
    total_positions: int
    total_value: Decimal
    timestamp: datetime


class ApplyResultResponse(BaseModel):
    """Response schema for a completed apply."""

    model_config = {"from_attributes": True}

    owner_id: str
    steps_completed: list[ApplyStep]
    positions_deleted: int
    positions_upserted: int
    cash_action: CashAction
    history: Optional[ImportHistoryResponse] = None


class ReconcileResponse(BaseModel):
    """Parse result plus the diff it would apply."""

    parse_result: ParseResultResponse
    summary: ChangeSummaryResponse


class ApplyResponse(BaseModel):
    """Diff that was applied plus the apply outcome."""

    summary: ChangeSummaryResponse
    result: ApplyResultResponse
