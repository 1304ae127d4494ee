"""Portfolio endpoints: stored positions, summary, history and accounts."""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query

from holdings.api.deps import get_owner_id, get_portfolio_service
from holdings.api.schemas.imports import ImportHistoryResponse
from holdings.api.schemas.portfolio import (
    AccountListResponse,
    AccountSummaryResponse,
    ClearPortfolioResponse,
    HistoryListResponse,
    PositionListResponse,
    PositionResponse,
    RemoveAccountResponse,
    SummaryResponse,
)
from holdings.core.exceptions import ValidationError
from holdings.core.timezone import parse_since
from holdings.services import PortfolioService

router = APIRouter(prefix="/portfolio", tags=["portfolio"])


@router.get("/positions", response_model=PositionListResponse)
def list_positions(
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """List stored positions, largest value first."""
    positions = service.list_positions(owner_id)
    return PositionListResponse(
        positions=[PositionResponse.model_validate(p) for p in positions],
        count=len(positions),
        total_value=sum((p.current_value for p in positions), Decimal("0")),
    )


@router.get("/summary", response_model=SummaryResponse)
def get_summary(
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Get cash balance and last import date."""
    return SummaryResponse.model_validate(service.get_summary(owner_id))


@router.get("/history", response_model=HistoryListResponse)
def list_history(
    since: Optional[str] = Query(None, description="Only imports at or after this time (Eastern if no zone)"),
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """List applied imports, newest first."""
    since_dt = None
    if since:
        try:
            since_dt = parse_since(since)
        except ValueError:
            raise ValidationError(f"Invalid 'since' datetime: {since}")

    records = service.list_history(owner_id, since=since_dt)
    return HistoryListResponse(
        imports=[ImportHistoryResponse.model_validate(r) for r in records],
        count=len(records),
    )


@router.get("/accounts", response_model=AccountListResponse)
def list_accounts(
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """List accounts found in position breakdowns, largest value first."""
    items = service.account_summaries(owner_id)
    return AccountListResponse(
        accounts=[AccountSummaryResponse.model_validate(i) for i in items],
        count=len(items),
    )


@router.delete("/accounts/{account_name}", response_model=RemoveAccountResponse)
def remove_account(
    account_name: str,
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Remove one account's holdings from every position."""
    affected = service.remove_account(owner_id, account_name)
    return RemoveAccountResponse(account=account_name, positions_affected=affected)


@router.delete("", response_model=ClearPortfolioResponse)
def clear_portfolio(
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Delete every position and the summary. Import history is kept."""
    return ClearPortfolioResponse(positions_deleted=service.clear_portfolio(owner_id))
