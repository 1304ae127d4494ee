"""Pydantic schemas for portfolio endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from holdings.api.schemas.imports import AccountBreakdownResponse, ImportHistoryResponse
from holdings.domain.models.enums import PositionCategory


class PositionResponse(BaseModel):
    """Response schema for a stored position."""

    model_config = {"from_attributes": True}

    id: str
    symbol: str
    company_name: str
    shares: Decimal
    current_price: Decimal
    current_value: Decimal
    cost_basis: Decimal
    accounts: list[AccountBreakdownResponse]
    category: Optional[PositionCategory] = None
    tier: Optional[str] = None
    notes: Optional[str] = None
    source: Optional[str] = None
    tags: list[str] = []
    first_seen_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PositionListResponse(BaseModel):
    """Response schema for listing positions."""

    positions: list[PositionResponse]
    count: int
    total_value: Decimal


class SummaryResponse(BaseModel):
    """Response schema for the portfolio summary."""

    model_config = {"from_attributes": True}

    owner_id: str
    cash_balance: Decimal
    last_import_date: Optional[datetime] = None


class HistoryListResponse(BaseModel):
    """Response schema for listing import history."""

    imports: list[ImportHistoryResponse]
    count: int


class AccountSummaryResponse(BaseModel):
    model_config = {"from_attributes": True}

    name: str
    position_count: int
    total_value: Decimal


class AccountListResponse(BaseModel):
    """Response schema for listing accounts found in positions."""

    accounts: list[AccountSummaryResponse]
    count: int


class RemoveAccountResponse(BaseModel):
    account: str
    positions_affected: int


class ClearPortfolioResponse(BaseModel):
    positions_deleted: int
