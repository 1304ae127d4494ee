"""Apply a reconciled import to the portfolio store as one unit of work."""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from holdings.core.exceptions import ApplyError, ValidationError
from holdings.core.locks import OwnerLockRegistry, get_lock_registry
from holdings.core.timezone import now_eastern
from holdings.domain.models import (
    CASH_SYMBOL,
    ApplyStep,
    CashAction,
    ImportHistoryRecord,
    PortfolioSummary,
    PositionUpsert,
)
from holdings.domain.views import ApplyResult, ChangeSummary, ParseResult
from holdings.repositories.protocols import PortfolioStore

logger = logging.getLogger(__name__)


class ImportApplier:
    """
    Writes an import to the store in five ordered steps.

    1. Delete removed positions
    2. Upsert parsed positions (financial fields only)
    3. Upsert the CASH pseudo-position, or delete it when cash is zero
    4. Upsert the portfolio summary
    5. Append an import history record

    All steps share one store transaction and the owner's lock, so a
    failure leaves the stored portfolio exactly as it was.
    """

    def __init__(
        self,
        store: PortfolioStore,
        locks: Optional[OwnerLockRegistry] = None,
    ):
        self._store = store
        self._locks = locks or get_lock_registry()

    @property
    def locks(self) -> OwnerLockRegistry:
        """Registry whose per-owner lock every apply holds."""
        return self._locks

    def apply(
        self,
        owner_id: str,
        summary: ChangeSummary,
        parse_result: ParseResult,
        file_names: Sequence[str],
    ) -> ApplyResult:
        """
        Persist the import.

        Raises:
            ValidationError: If the summary was not computed from this parse result
            ApplyError: If any step fails; nothing is persisted in that case
        """
        if summary.new_cash != parse_result.cash_balance:
            raise ValidationError(
                "Change summary does not match the parse result "
                f"(cash {summary.new_cash} vs {parse_result.cash_balance})"
            )

        result = ApplyResult(owner_id=owner_id)
        step = ApplyStep.DELETE_REMOVED

        with self._locks.hold(owner_id):
            try:
                with self._store.transaction(owner_id):
                    step = ApplyStep.DELETE_REMOVED
                    removed_ids = [p.id for p in summary.removed_positions]
                    self._store.delete_positions(removed_ids)
                    result.positions_deleted = len(removed_ids)
                    result.steps_completed.append(step)

                    step = ApplyStep.UPSERT_POSITIONS
                    for position in parse_result.positions:
                        self._store.upsert_position(owner_id, PositionUpsert.from_parsed(position))
                    result.positions_upserted = len(parse_result.positions)
                    result.steps_completed.append(step)

                    step = ApplyStep.UPSERT_CASH
                    result.cash_action = self._apply_cash(owner_id, parse_result)
                    result.steps_completed.append(step)

                    step = ApplyStep.UPSERT_SUMMARY
                    now = now_eastern()
                    self._store.upsert_summary(
                        owner_id,
                        PortfolioSummary(
                            owner_id=owner_id,
                            cash_balance=parse_result.cash_balance,
                            last_import_date=now,
                        ),
                    )
                    result.steps_completed.append(step)

                    step = ApplyStep.APPEND_HISTORY
                    result.history = self._store.append_history(
                        owner_id,
                        ImportHistoryRecord(
                            owner_id=owner_id,
                            file_names=tuple(file_names),
                            total_positions=len(parse_result.positions),
                            total_value=parse_result.total_value,
                            timestamp=now,
                        ),
                    )
                    result.steps_completed.append(step)
            except Exception as e:
                logger.error(
                    "Import apply failed for owner %s at step %s: %s",
                    owner_id, step.value, e,
                )
                raise ApplyError(
                    step=step.value,
                    completed_steps=[s.value for s in result.steps_completed],
                    cause=e,
                    rolled_back=True,
                ) from e

        logger.info(
            "Applied import for owner %s: %d upserted, %d deleted, cash %s",
            owner_id, result.positions_upserted, result.positions_deleted,
            result.cash_action.value,
        )
        return result

    def _apply_cash(self, owner_id: str, parse_result: ParseResult) -> CashAction:
        if parse_result.cash_balance > Decimal("0"):
            self._store.upsert_position(
                owner_id,
                PositionUpsert.cash(parse_result.cash_balance, parse_result.cash_accounts),
            )
            return CashAction.UPSERTED

        stale = [p.id for p in self._store.list_positions(owner_id) if p.symbol == CASH_SYMBOL]
        if stale:
            self._store.delete_positions(stale)
            return CashAction.DELETED
        return CashAction.NONE
