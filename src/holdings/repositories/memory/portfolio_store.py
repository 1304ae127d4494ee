"""In-memory implementation of PortfolioStore."""

import copy
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Iterator, Optional

from holdings.core.timezone import now_eastern
from holdings.domain.models import (
    ImportHistoryRecord,
    PortfolioSummary,
    PositionUpsert,
    StoredPosition,
)

IMPORT_SOURCE = "import"


class InMemoryPortfolioStore:
    """
    Dict-backed portfolio store.

    ``transaction()`` snapshots the whole state and restores it if the
    block raises. Reads return copies so callers cannot mutate stored rows.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._positions: dict[str, StoredPosition] = {}
        self._summaries: dict[str, PortfolioSummary] = {}
        self._history: list[ImportHistoryRecord] = []
        self._unit_depth = 0

    @contextmanager
    def transaction(self, owner_id: str) -> Iterator[None]:
        """Restore the pre-block state if anything in the block raises."""
        with self._lock:
            if self._unit_depth:
                self._unit_depth += 1
                try:
                    yield
                finally:
                    self._unit_depth -= 1
                return

            snapshot = self._snapshot()
            self._unit_depth = 1
            try:
                yield
            except Exception:
                self._restore(snapshot)
                raise
            finally:
                self._unit_depth = 0

    def _snapshot(self) -> tuple:
        return (
            copy.deepcopy(self._positions),
            copy.deepcopy(self._summaries),
            list(self._history),
        )

    def _restore(self, snapshot: tuple) -> None:
        self._positions, self._summaries, self._history = snapshot

    # Positions

    def list_positions(self, owner_id: str) -> list[StoredPosition]:
        with self._lock:
            positions = [p for p in self._positions.values() if p.owner_id == owner_id]
            positions.sort(key=lambda p: p.symbol)
            return [copy.deepcopy(p) for p in positions]

    def delete_positions(self, ids: list[str]) -> None:
        with self._lock:
            for position_id in ids:
                self._positions.pop(position_id, None)

    def upsert_position(self, owner_id: str, record: PositionUpsert) -> StoredPosition:
        with self._lock:
            now = now_eastern()
            existing = self._find(owner_id, record.symbol)

            if existing is None:
                existing = StoredPosition(
                    id=str(uuid.uuid4()),
                    owner_id=owner_id,
                    symbol=record.symbol,
                    source=IMPORT_SOURCE,
                    first_seen_at=now,
                )

            updated = replace(
                existing,
                company_name=record.company_name,
                shares=record.shares,
                current_price=record.current_price,
                current_value=record.current_value,
                cost_basis=record.cost_basis,
                accounts=tuple(record.accounts),
                updated_at=now,
            )
            self._positions[updated.id] = updated
            return copy.deepcopy(updated)

    def _find(self, owner_id: str, symbol: str) -> Optional[StoredPosition]:
        for position in self._positions.values():
            if position.owner_id == owner_id and position.symbol == symbol:
                return position
        return None

    # Summary

    def get_summary(self, owner_id: str) -> Optional[PortfolioSummary]:
        with self._lock:
            summary = self._summaries.get(owner_id)
            return copy.deepcopy(summary) if summary else None

    def upsert_summary(self, owner_id: str, record: PortfolioSummary) -> PortfolioSummary:
        with self._lock:
            stored = replace(record, owner_id=owner_id)
            self._summaries[owner_id] = stored
            return copy.deepcopy(stored)

    def delete_summary(self, owner_id: str) -> None:
        with self._lock:
            self._summaries.pop(owner_id, None)

    # History

    def append_history(self, owner_id: str, record: ImportHistoryRecord) -> ImportHistoryRecord:
        with self._lock:
            stored = replace(record, owner_id=owner_id, id=record.id or str(uuid.uuid4()))
            self._history.append(stored)
            return stored

    def list_history(
        self,
        owner_id: str,
        since: Optional[datetime] = None,
    ) -> list[ImportHistoryRecord]:
        with self._lock:
            records = [h for h in self._history if h.owner_id == owner_id]
            if since is not None:
                records = [h for h in records if h.timestamp >= since]
            # Stable sort keeps later appends first among equal timestamps
            return sorted(reversed(records), key=lambda h: h.timestamp, reverse=True)
