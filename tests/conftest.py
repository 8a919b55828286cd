"""Pytest fixtures for testing"""

import os

# Keep the import-time engine off PostgreSQL; every test binds its own database below
os.environ.setdefault("ATM_DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from atm_core.api.main import create_app
from atm_core.domain.models import Account
from atm_core.infrastructure.database.models import Base
from atm_core.infrastructure.database.repositories import AccountRepository
from atm_core.infrastructure.database.session import get_db
from atm_core.services.deposit import DepositService
from atm_core.services.readers import BalanceService, TransactionHistoryService
from atm_core.services.retry import RetryPolicy
from atm_core.services.withdrawal import WithdrawalService


class FakeClock:
    """Controllable wall clock for crossing calendar-day boundaries"""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)

    @property
    def today(self) -> date:
        return self.current.date()


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    """Fresh file-backed SQLite database per test"""
    engine = create_engine(f"sqlite:///{tmp_path / 'atm.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Create test database and session"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def other_db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Second, independent session playing a concurrent writer"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 11, 27, 10, 30))


@pytest.fixture
def no_backoff() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, backoff_seconds=0)


@pytest.fixture
def make_account(db: Session, clock: FakeClock) -> Callable[..., Account]:
    """Factory persisting an account; defaults match the John Doe sample account"""

    def _make(
        balance: str = "5000.00",
        available_balance: str | None = None,
        daily_limit: str = "1000.00",
        withdrawn: str = "0.00",
        last_activity_date: date | None = None,
        active: bool = True,
        card_number: str = "4532015112830366",
        pin: str = "1234",
        customer_name: str = "John Doe",
    ) -> Account:
        account = AccountRepository(db).create(
            Account(
                id=0,
                card_number=card_number,
                customer_name=customer_name,
                pin=pin,
                balance=Decimal(balance),
                available_balance=Decimal(available_balance if available_balance is not None else balance),
                daily_withdrawal_limit=Decimal(daily_limit),
                daily_withdrawn_amount=Decimal(withdrawn),
                last_activity_date=last_activity_date if last_activity_date is not None else clock.today,
                active=active,
                version=0,
            )
        )
        db.commit()
        return account

    return _make


@pytest.fixture
def reload(db: Session) -> Callable[[int], Account]:
    """Read an account's committed state"""

    def _reload(account_id: int) -> Account:
        db.rollback()
        return AccountRepository(db).get(account_id)

    return _reload


@pytest.fixture
def withdrawals(db: Session, clock: FakeClock, no_backoff: RetryPolicy) -> WithdrawalService:
    return WithdrawalService(db, clock=clock, retry_policy=no_backoff)


@pytest.fixture
def deposits(db: Session, clock: FakeClock, no_backoff: RetryPolicy) -> DepositService:
    return DepositService(db, clock=clock, retry_policy=no_backoff)


@pytest.fixture
def balances(db: Session, clock: FakeClock, no_backoff: RetryPolicy) -> BalanceService:
    return BalanceService(db, clock=clock, retry_policy=no_backoff)


@pytest.fixture
def history(db: Session) -> TransactionHistoryService:
    return TransactionHistoryService(db)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
