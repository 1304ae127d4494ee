"""SQLAlchemy ORM model definitions."""

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Enum as SqlEnum,
)

from holdings.repositories.sqlalchemy.database import Base
from holdings.domain.models.enums import PositionCategory


class PositionORM(Base):
    """SQLAlchemy model for StoredPosition."""

    __tablename__ = "positions"
    __table_args__ = (UniqueConstraint("owner_id", "symbol", name="uq_positions_owner_symbol"),)

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    symbol = Column(String(20), nullable=False)
    company_name = Column(String(255), nullable=False, default="")
    shares = Column(Numeric(precision=24, scale=8), nullable=False, default=0)
    current_price = Column(Numeric(precision=24, scale=8), nullable=False, default=0)
    current_value = Column(Numeric(precision=24, scale=6), nullable=False, default=0)
    cost_basis = Column(Numeric(precision=24, scale=6), nullable=False, default=0)
    accounts = Column(JSON, nullable=False, default=list)

    # User annotations, never written by imports after the first insert
    category = Column(SqlEnum(PositionCategory), nullable=True)
    tier = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    source = Column(String(50), nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    removed_tag_ids = Column(JSON, nullable=False, default=list)
    first_seen_at = Column(DateTime, nullable=True)

    updated_at = Column(DateTime, nullable=True)


class PortfolioSummaryORM(Base):
    """SQLAlchemy model for PortfolioSummary."""

    __tablename__ = "portfolio_summaries"

    owner_id = Column(String(64), primary_key=True)
    cash_balance = Column(Numeric(precision=24, scale=6), nullable=False, default=0)
    last_import_date = Column(DateTime, nullable=True)


class ImportHistoryORM(Base):
    """SQLAlchemy model for ImportHistoryRecord (append-only)."""

    __tablename__ = "import_history"

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), nullable=False, index=True)
    file_names = Column(JSON, nullable=False, default=list)
    total_positions = Column(Integer, nullable=False, default=0)
    total_value = Column(Numeric(precision=24, scale=6), nullable=False, default=0)
    imported_at = Column(DateTime, nullable=False)
