"""
Pytest configuration and fixtures for holdings import tests.

This module provides:
- In-memory SQLite database fixtures
- In-memory and SQLAlchemy portfolio store fixtures
- Sample brokerage CSV exports
- Factory helpers for parsed and stored positions
- Time helpers for Eastern timezone
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from holdings.main import app
from holdings.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from holdings.repositories.sqlalchemy import orm_models  # noqa: F401
from holdings.repositories.sqlalchemy import SqlAlchemyPortfolioStore
from holdings.repositories.memory import InMemoryPortfolioStore
from holdings.core.locks import OwnerLockRegistry
from holdings.core.timezone import EASTERN_TZ
from holdings.config.settings import Settings, set_settings, reset_settings
from holdings.domain.models import AccountBreakdown, ParsedPosition, PositionUpsert
from holdings.services import ImportApplier, ImportService, PortfolioService

OWNER = "owner-1"
OTHER_OWNER = "owner-2"


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


# =============================================================================
# SETTINGS FIXTURES
# =============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings that never touch the user's data directory."""
    reset_settings()
    settings = Settings(database_url="sqlite:///:memory:")
    set_settings(settings)
    yield settings
    reset_settings()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# STORE AND SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def sql_store(test_session) -> SqlAlchemyPortfolioStore:
    """Provide SQLite-backed PortfolioStore."""
    return SqlAlchemyPortfolioStore(test_session)


@pytest.fixture
def memory_store() -> InMemoryPortfolioStore:
    """Provide in-memory PortfolioStore."""
    return InMemoryPortfolioStore()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, test_session):
    """Run a test against both store implementations."""
    if request.param == "memory":
        return InMemoryPortfolioStore()
    return SqlAlchemyPortfolioStore(test_session)


@pytest.fixture
def lock_registry() -> OwnerLockRegistry:
    """Fresh lock registry so tests never share locks."""
    return OwnerLockRegistry()


@pytest.fixture
def applier(store, lock_registry) -> ImportApplier:
    """Provide ImportApplier over the parametrized store."""
    return ImportApplier(store, locks=lock_registry)


@pytest.fixture
def import_service(store, lock_registry) -> ImportService:
    """Provide ImportService over the parametrized store."""
    return ImportService(
        store=store,
        settings=Settings(),
        applier=ImportApplier(store, locks=lock_registry),
    )


@pytest.fixture
def portfolio_service(store, lock_registry) -> PortfolioService:
    """Provide PortfolioService over the parametrized store."""
    return PortfolioService(store=store, locks=lock_registry)


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(test_engine, test_settings) -> TestClient:
    """Provide FastAPI test client with test database."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    reset_database()
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_database()


# =============================================================================
# SAMPLE CSV FIXTURES
# =============================================================================


ROTH_CSV = """Account Number,Account Name,Symbol,Description,Quantity,Last Price,Current Value,Cost Basis Total
X12345678,Roth IRA,SPAXX**,HELD IN MONEY MARKET,,,$500.00,
X12345678,Roth IRA,AAPL,APPLE INC,10,$150.00,"$1,500.00","$1,200.00"
X12345678,Roth IRA,MSFT,MICROSOFT CORP,4,$400.00,"$1,600.00","$1,000.00"

"The data and information in this spreadsheet is provided to you solely for your use",,,,,,,
"""

TAXABLE_CSV = """Symbol,Description,Quantity,Last Price,Current Value,Cost Basis Total,Account Name
AAPL,APPLE INC,5,$150.00,$750.00,$600.00,Taxable
VTI,VANGUARD TOTAL STOCK MARKET ETF,20,$250.00,"$5,000.00","$4,000.00",Taxable
FCASH**,Cash,,,$250.00,,Taxable
Total,,,,"$7,000.00",,
"""


@pytest.fixture
def roth_csv() -> str:
    """Fidelity-style export with an account column and a money market row."""
    return ROTH_CSV


@pytest.fixture
def taxable_csv() -> str:
    """Second account export with a cash row and a totals footer."""
    return TAXABLE_CSV


@pytest.fixture
def ten_row_csv_with_one_bad() -> str:
    """Eleven holdings, one with a blank price."""
    symbols = ["AAA", "BBB", "CCC", "DDD", "EEE", "FFF", "GGG", "HHH", "III", "JJJ"]
    lines = ["Symbol,Name,Shares,Price,Value"]
    for i, symbol in enumerate(symbols, start=1):
        lines.append(f"{symbol},{symbol} Corp,{i},10.00,{i * 10}.00")
    lines.append("BAD,Bad Corp,3,,30.00")
    return "\n".join(lines) + "\n"


# =============================================================================
# FACTORY HELPERS
# =============================================================================


def make_parsed(
    symbol: str,
    shares: str,
    price: str,
    cost_basis: Optional[str] = None,
    account: str = "Brokerage",
    company_name: str = "",
) -> ParsedPosition:
    """Build a single-account ParsedPosition from string amounts."""
    shares_d = Decimal(shares)
    price_d = Decimal(price)
    value = shares_d * price_d
    return ParsedPosition(
        symbol=symbol,
        company_name=company_name or f"{symbol} Inc",
        shares=shares_d,
        current_price=price_d,
        current_value=value,
        cost_basis=Decimal(cost_basis) if cost_basis is not None else value,
        accounts=(AccountBreakdown(account=account, shares=shares_d, value=value),),
    )


@pytest.fixture
def seed_position(store) -> Callable[..., object]:
    """Factory that stores a position for an owner and returns it."""

    def _seed(
        symbol: str,
        shares: str,
        price: str,
        owner_id: str = OWNER,
        cost_basis: Optional[str] = None,
        account: str = "Brokerage",
    ):
        parsed = make_parsed(symbol, shares, price, cost_basis=cost_basis, account=account)
        return store.upsert_position(owner_id, PositionUpsert.from_parsed(parsed))

    return _seed


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def assert_decimal_equal(
    actual: Decimal,
    expected: Decimal,
    tolerance: Decimal = Decimal("0.01"),
) -> None:
    """Assert two Decimals are equal within tolerance."""
    diff = abs(actual - expected)
    assert diff <= tolerance, f"Expected {expected}, got {actual} (diff={diff})"


def annotate(store, position_id: str, **fields) -> None:
    """Set user annotation fields directly in the backing storage."""
    if isinstance(store, InMemoryPortfolioStore):
        position = store._positions[position_id]
        for name, value in fields.items():
            setattr(position, name, value)
        return

    orm_pos = store._db.get(orm_models.PositionORM, position_id)
    for name, value in fields.items():
        setattr(orm_pos, name, value)
    store._db.commit()


class FailingStore:
    """Delegates to a real store but raises from one chosen method."""

    def __init__(self, inner, fail_on: str, exc: Exception = None):
        self._inner = inner
        self._fail_on = fail_on
        self._exc = exc or RuntimeError(f"{fail_on} unavailable")

    def __getattr__(self, name):
        if name == self._fail_on:
            def _fail(*args, **kwargs):
                raise self._exc
            return _fail
        return getattr(self._inner, name)
