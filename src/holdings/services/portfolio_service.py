"""Portfolio service: read the stored portfolio and manage accounts."""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from holdings.core.exceptions import NotFoundError
from holdings.core.locks import OwnerLockRegistry, get_lock_registry
from holdings.core.timezone import to_eastern
from holdings.domain.models import (
    ImportHistoryRecord,
    PortfolioSummary,
    PositionUpsert,
    StoredPosition,
)
from holdings.domain.views import AccountSummaryItem
from holdings.repositories.protocols import PortfolioStore

logger = logging.getLogger(__name__)


class PortfolioService:
    """Service for the stored portfolio outside of imports."""

    def __init__(
        self,
        store: PortfolioStore,
        locks: Optional[OwnerLockRegistry] = None,
    ):
        self._store = store
        self._locks = locks or get_lock_registry()

    def list_positions(self, owner_id: str) -> list[StoredPosition]:
        """List positions by value, largest first."""
        positions = self._store.list_positions(owner_id)
        return sorted(positions, key=lambda p: (-p.current_value, p.symbol))

    def get_summary(self, owner_id: str) -> PortfolioSummary:
        """Get the summary, or an empty one before the first import."""
        summary = self._store.get_summary(owner_id)
        return summary or PortfolioSummary(owner_id=owner_id)

    def list_history(
        self,
        owner_id: str,
        since: Optional[datetime] = None,
    ) -> list[ImportHistoryRecord]:
        """List applied imports, newest first."""
        if since is not None:
            since = to_eastern(since)
        return self._store.list_history(owner_id, since=since)

    def account_summaries(self, owner_id: str) -> list[AccountSummaryItem]:
        """
        Summarize every account name found in position breakdowns.

        A position counts once per breakdown entry naming the account.
        Sorted by total value, largest first.
        """
        counts: dict[str, int] = {}
        totals: dict[str, Decimal] = {}
        for position in self._store.list_positions(owner_id):
            for breakdown in position.accounts:
                counts[breakdown.account] = counts.get(breakdown.account, 0) + 1
                totals[breakdown.account] = totals.get(breakdown.account, Decimal("0")) + breakdown.value

        items = [
            AccountSummaryItem(name=name, position_count=counts[name], total_value=totals[name])
            for name in counts
        ]
        return sorted(items, key=lambda i: (-i.total_value, i.name))

    def remove_account(self, owner_id: str, account_name: str) -> int:
        """
        Strip one account from every position.

        Positions held only in that account are deleted. The others are
        re-summed from their remaining breakdowns, and cost basis shrinks
        by the share of value that was removed.

        Returns:
            Number of positions affected

        Raises:
            NotFoundError: If no position has a breakdown for the account
        """
        with self._locks.hold(owner_id), self._store.transaction(owner_id):
            positions = self._store.list_positions(owner_id)
            affected = [
                p for p in positions
                if any(b.account == account_name for b in p.accounts)
            ]
            if not affected:
                raise NotFoundError("Account", account_name)

            to_delete: list[str] = []
            new_cash: Optional[Decimal] = None

            for position in affected:
                remaining = tuple(b for b in position.accounts if b.account != account_name)
                if not remaining:
                    to_delete.append(position.id)
                    if position.is_cash:
                        new_cash = Decimal("0")
                    continue

                updated = self._without_account(position, remaining)
                self._store.upsert_position(owner_id, updated)
                if position.is_cash:
                    new_cash = updated.current_value

            self._store.delete_positions(to_delete)

            summary = self._store.get_summary(owner_id)
            if new_cash is not None and summary is not None:
                self._store.upsert_summary(owner_id, replace(summary, cash_balance=new_cash))

        logger.info(
            "Removed account %r for owner %s: %d position(s) affected, %d deleted",
            account_name, owner_id, len(affected), len(to_delete),
        )
        return len(affected)

    @staticmethod
    def _without_account(position: StoredPosition, remaining) -> PositionUpsert:
        shares = sum((b.shares for b in remaining), Decimal("0"))
        value = sum((b.value for b in remaining), Decimal("0"))
        price = value / shares if shares > 0 else position.current_price

        old_total = sum((b.value for b in position.accounts), Decimal("0"))
        ratio = value / old_total if old_total > 0 else Decimal("1")

        return PositionUpsert(
            symbol=position.symbol,
            company_name=position.company_name,
            shares=shares,
            current_price=price,
            current_value=value,
            cost_basis=position.cost_basis * ratio,
            accounts=remaining,
        )

    def clear_portfolio(self, owner_id: str) -> int:
        """
        Delete every position and the summary. Import history is kept.

        Returns:
            Number of positions deleted
        """
        with self._locks.hold(owner_id), self._store.transaction(owner_id):
            ids = [p.id for p in self._store.list_positions(owner_id)]
            self._store.delete_positions(ids)
            self._store.delete_summary(owner_id)

        logger.info("Cleared portfolio for owner %s: %d position(s) deleted", owner_id, len(ids))
        return len(ids)
