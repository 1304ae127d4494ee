"""SQLAlchemy implementation of PortfolioStore."""

import uuid
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import Iterator, Optional

from sqlalchemy.orm import Session

from holdings.core.timezone import from_naive_eastern, now_eastern, to_naive_eastern
from holdings.domain.models import (
    ImportHistoryRecord,
    PortfolioSummary,
    PositionUpsert,
    StoredPosition,
    breakdowns_from_json,
)
from holdings.repositories.sqlalchemy.orm_models import (
    ImportHistoryORM,
    PortfolioSummaryORM,
    PositionORM,
)

IMPORT_SOURCE = "import"


def _decimal(value) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


class SqlAlchemyPortfolioStore:
    """
    SQLAlchemy-backed portfolio store.

    Each mutation commits on its own, except inside ``transaction()``,
    where mutations are only flushed and the block commits (or rolls
    back) as a whole.
    """

    def __init__(self, db: Session):
        self._db = db
        self._unit_depth = 0

    # Unit of work

    @contextmanager
    def transaction(self, owner_id: str) -> Iterator[None]:
        """Commit every mutation in the block together, or roll all back."""
        if self._unit_depth:
            self._unit_depth += 1
            try:
                yield
            finally:
                self._unit_depth -= 1
            return

        self._unit_depth = 1
        try:
            yield
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise
        finally:
            self._unit_depth = 0

    def _commit(self) -> None:
        if self._unit_depth:
            self._db.flush()
        else:
            self._db.commit()

    # Positions

    def list_positions(self, owner_id: str) -> list[StoredPosition]:
        """List all stored positions for an owner, CASH included."""
        orm_positions = (
            self._db.query(PositionORM)
            .filter(PositionORM.owner_id == owner_id)
            .order_by(PositionORM.symbol)
            .all()
        )
        return [self._position_to_domain(p) for p in orm_positions]

    def delete_positions(self, ids: list[str]) -> None:
        """Delete positions by id."""
        if not ids:
            return
        self._db.query(PositionORM).filter(
            PositionORM.id.in_(list(ids))
        ).delete(synchronize_session=False)
        self._commit()

    def upsert_position(self, owner_id: str, record: PositionUpsert) -> StoredPosition:
        """Insert or update the financial fields of (owner_id, symbol)."""
        orm_pos = (
            self._db.query(PositionORM)
            .filter(
                PositionORM.owner_id == owner_id,
                PositionORM.symbol == record.symbol,
            )
            .first()
        )
        now = to_naive_eastern(now_eastern())

        if orm_pos is None:
            orm_pos = PositionORM(
                id=str(uuid.uuid4()),
                owner_id=owner_id,
                symbol=record.symbol,
                source=IMPORT_SOURCE,
                tags=[],
                removed_tag_ids=[],
                first_seen_at=now,
            )
            self._db.add(orm_pos)

        orm_pos.company_name = record.company_name
        orm_pos.shares = record.shares
        orm_pos.current_price = record.current_price
        orm_pos.current_value = record.current_value
        orm_pos.cost_basis = record.cost_basis
        orm_pos.accounts = [a.to_dict() for a in record.accounts]
        orm_pos.updated_at = now

        self._commit()
        self._db.refresh(orm_pos)
        return self._position_to_domain(orm_pos)

    # Summary

    def get_summary(self, owner_id: str) -> Optional[PortfolioSummary]:
        """Get the portfolio summary for an owner."""
        orm_summary = self._db.get(PortfolioSummaryORM, owner_id)
        return self._summary_to_domain(orm_summary) if orm_summary else None

    def upsert_summary(self, owner_id: str, record: PortfolioSummary) -> PortfolioSummary:
        """Insert or update the owner's portfolio summary."""
        orm_summary = self._db.get(PortfolioSummaryORM, owner_id)
        if orm_summary is None:
            orm_summary = PortfolioSummaryORM(owner_id=owner_id)
            self._db.add(orm_summary)

        orm_summary.cash_balance = record.cash_balance
        orm_summary.last_import_date = to_naive_eastern(record.last_import_date)

        self._commit()
        self._db.refresh(orm_summary)
        return self._summary_to_domain(orm_summary)

    def delete_summary(self, owner_id: str) -> None:
        """Delete the owner's portfolio summary."""
        self._db.query(PortfolioSummaryORM).filter(
            PortfolioSummaryORM.owner_id == owner_id
        ).delete(synchronize_session=False)
        self._commit()

    # History

    def append_history(self, owner_id: str, record: ImportHistoryRecord) -> ImportHistoryRecord:
        """Append an import history record."""
        orm_history = ImportHistoryORM(
            id=record.id or str(uuid.uuid4()),
            owner_id=owner_id,
            file_names=list(record.file_names),
            total_positions=record.total_positions,
            total_value=record.total_value,
            imported_at=to_naive_eastern(record.timestamp),
        )
        self._db.add(orm_history)
        self._commit()
        self._db.refresh(orm_history)
        return self._history_to_domain(orm_history)

    def list_history(
        self,
        owner_id: str,
        since: Optional[datetime] = None,
    ) -> list[ImportHistoryRecord]:
        """List import history for an owner, newest first."""
        query = self._db.query(ImportHistoryORM).filter(ImportHistoryORM.owner_id == owner_id)
        if since is not None:
            query = query.filter(ImportHistoryORM.imported_at >= to_naive_eastern(since))
        query = query.order_by(ImportHistoryORM.imported_at.desc())
        return [self._history_to_domain(h) for h in query.all()]

    # Conversion

    @staticmethod
    def _position_to_domain(orm: PositionORM) -> StoredPosition:
        """Convert ORM position to domain model."""
        return StoredPosition(
            id=orm.id,
            owner_id=orm.owner_id,
            symbol=orm.symbol,
            company_name=orm.company_name or "",
            shares=_decimal(orm.shares),
            current_price=_decimal(orm.current_price),
            current_value=_decimal(orm.current_value),
            cost_basis=_decimal(orm.cost_basis),
            accounts=breakdowns_from_json(orm.accounts),
            category=orm.category,
            tier=orm.tier,
            notes=orm.notes,
            source=orm.source,
            tags=list(orm.tags or []),
            removed_tag_ids=list(orm.removed_tag_ids or []),
            first_seen_at=from_naive_eastern(orm.first_seen_at),
            updated_at=from_naive_eastern(orm.updated_at),
        )

    @staticmethod
    def _summary_to_domain(orm: PortfolioSummaryORM) -> PortfolioSummary:
        """Convert ORM summary to domain model."""
        return PortfolioSummary(
            owner_id=orm.owner_id,
            cash_balance=_decimal(orm.cash_balance),
            last_import_date=from_naive_eastern(orm.last_import_date),
        )

    @staticmethod
    def _history_to_domain(orm: ImportHistoryORM) -> ImportHistoryRecord:
        """Convert ORM history row to domain model."""
        return ImportHistoryRecord(
            id=orm.id,
            owner_id=orm.owner_id,
            file_names=tuple(orm.file_names or []),
            total_positions=orm.total_positions,
            total_value=_decimal(orm.total_value),
            timestamp=from_naive_eastern(orm.imported_at),
        )
