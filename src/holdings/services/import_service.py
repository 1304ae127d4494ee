"""Import service: parse uploaded exports, reconcile them, apply them."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from holdings.config.settings import Settings, get_settings
from holdings.core.exceptions import ValidationError
from holdings.csv import ImportSession
from holdings.domain.views import ApplyResult, ChangeSummary, ParseResult
from holdings.repositories.protocols import PortfolioStore
from holdings.services.import_applier import ImportApplier
from holdings.services.reconciliation import diff_positions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportOutcome:
    """Everything produced by a one-shot import."""

    parse_result: ParseResult
    summary: ChangeSummary
    result: ApplyResult


class ImportService:
    """
    Service for the import workflow.

    Nothing is written until ``apply()``; preview and reconcile only read.
    """

    def __init__(
        self,
        store: PortfolioStore,
        settings: Optional[Settings] = None,
        applier: Optional[ImportApplier] = None,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._applier = applier or ImportApplier(store)

    def start_session(self, files: Iterable[tuple[str, str]] = ()) -> ImportSession:
        """Start an import session with the configured cash symbols."""
        return ImportSession.from_files(files, cash_symbols=self._settings.cash_symbols)

    def preview(self, files: Iterable[tuple[str, str]]) -> ParseResult:
        """
        Parse (file name, text) pairs without touching the store.

        Raises:
            ValidationError: If no files were given
        """
        session = self.start_session(files)
        if session.is_empty:
            raise ValidationError("No files to import")

        parse_result = session.parse()
        logger.info(
            "Parsed %d file(s): %d positions, cash %s, %d warning(s)",
            len(session.files), len(parse_result.positions),
            parse_result.cash_balance, len(parse_result.errors),
        )
        return parse_result

    def current_cash(self, owner_id: str) -> Decimal:
        """Stored cash balance: summary first, then the CASH position, else zero."""
        summary = self._store.get_summary(owner_id)
        if summary is not None:
            return summary.cash_balance
        for position in self._store.list_positions(owner_id):
            if position.is_cash:
                return position.current_value
        return Decimal("0")

    def reconcile(self, owner_id: str, parse_result: ParseResult) -> ChangeSummary:
        """Diff a parse result against what the owner has stored."""
        existing = self._store.list_positions(owner_id)
        return diff_positions(
            existing=existing,
            parsed=parse_result.positions,
            old_cash=self.current_cash(owner_id),
            new_cash=parse_result.cash_balance,
            tolerance=self._settings.diff_tolerance,
        )

    def apply(
        self,
        owner_id: str,
        summary: ChangeSummary,
        parse_result: ParseResult,
        file_names: Iterable[str],
    ) -> ApplyResult:
        """Persist a reconciled import."""
        if not parse_result.positions and parse_result.cash_balance <= 0:
            raise ValidationError("Nothing to import: no positions or cash were parsed")
        return self._applier.apply(owner_id, summary, parse_result, list(file_names))

    def import_files(self, owner_id: str, files: Iterable[tuple[str, str]]) -> ImportOutcome:
        """
        Preview, reconcile and apply in one call.

        The owner's lock is held from reconcile through apply, so the
        removed positions are computed from what is stored when the
        write happens.
        """
        files = list(files)
        parse_result = self.preview(files)
        with self._applier.locks.hold(owner_id):
            summary = self.reconcile(owner_id, parse_result)
            result = self.apply(owner_id, summary, parse_result, [name for name, _ in files])
        return ImportOutcome(parse_result=parse_result, summary=summary, result=result)
