"""Portfolio store protocol."""

from contextlib import AbstractContextManager
from datetime import datetime
from typing import Protocol, Optional

from holdings.domain.models import (
    ImportHistoryRecord,
    PortfolioSummary,
    PositionUpsert,
    StoredPosition,
)


class PortfolioStore(Protocol):
    """Interface for the owner-scoped portfolio data the import engine reads and writes."""

    def list_positions(self, owner_id: str) -> list[StoredPosition]:
        """List all stored positions for an owner, CASH included."""
        ...

    def get_summary(self, owner_id: str) -> Optional[PortfolioSummary]:
        """Get the portfolio summary, or None before the first import."""
        ...

    def delete_positions(self, ids: list[str]) -> None:
        """Delete positions by id; unknown ids are ignored."""
        ...

    def upsert_position(self, owner_id: str, record: PositionUpsert) -> StoredPosition:
        """
        Insert or update the position keyed by (owner_id, record.symbol).

        Updates overwrite financial fields and accounts only.
        """
        ...

    def upsert_summary(self, owner_id: str, record: PortfolioSummary) -> PortfolioSummary:
        """Insert or update the owner's portfolio summary."""
        ...

    def append_history(self, owner_id: str, record: ImportHistoryRecord) -> ImportHistoryRecord:
        """Append an import history record (never updated afterwards)."""
        ...

    def list_history(
        self,
        owner_id: str,
        since: Optional[datetime] = None,
    ) -> list[ImportHistoryRecord]:
        """List import history, newest first."""
        ...

    def delete_summary(self, owner_id: str) -> None:
        """Delete the owner's portfolio summary."""
        ...

    def transaction(self, owner_id: str) -> AbstractContextManager[None]:
        """
        Unit of work: every mutation inside the block commits together or
        not at all.
        """
        ...
