"""Pytest fixtures for testing"""

import pytest
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from loan_ledger.api.main import create_app
from loan_ledger.domain.accounts import AccountService, DEMO_USERS
from loan_ledger.domain.lifecycle import LoanLifecycleManager
from loan_ledger.domain.store import Collection
from loan_ledger.infrastructure.database.memory import InMemoryLedgerStore
from loan_ledger.infrastructure.database.models import Base
from loan_ledger.infrastructure.database.repositories import SqlLedgerStore
from loan_ledger.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def sql_store(db: Session) -> SqlLedgerStore:
    """SQL-backed ledger store seeded with the demo users"""
    store = SqlLedgerStore(db)
    AccountService(store).seed_demo_users()
    return store


@pytest.fixture
def client(sql_store: SqlLedgerStore, db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app(run_bootstrap=False)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def store() -> InMemoryLedgerStore:
    """In-memory ledger store holding john, jane (borrowers) and staff"""
    return InMemoryLedgerStore({Collection.USERS: list(DEMO_USERS)})


@pytest.fixture
def manager(store: InMemoryLedgerStore) -> LoanLifecycleManager:
    return LoanLifecycleManager(store)


@pytest.fixture
def funded_loan(manager: LoanLifecycleManager):
    """100,000 at 12% over 12 months disbursed to john by staff"""
    return manager.disburse("john", 100000, 12, 12, "staff")


class RecordingLock:
    """Context-manager lock that counts acquisitions"""

    def __init__(self):
        self.acquired = 0

    def __enter__(self):
        self.acquired += 1
        return self

    def __exit__(self, *exc_info):
        return False


@pytest.fixture
def recording_lock() -> RecordingLock:
    return RecordingLock()
