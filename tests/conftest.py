"""Pytest fixtures for testing"""

import itertools
import pytest
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, Generator, List, Optional
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from wallet_tracker.api.main import create_app
from wallet_tracker.cache.store import DerivedCacheStore
from wallet_tracker.domain.aggregation import recompute_spent
from wallet_tracker.domain.exceptions import LedgerReadError, LedgerWriteError
from wallet_tracker.domain.ledger import TransactionFilter
from wallet_tracker.domain.models import (
    EXPENSE,
    AggregateKey,
    Transaction,
    TransactionCreate,
    TransactionPatch,
)
from wallet_tracker.infrastructure.database.ledger import SqlLedger
from wallet_tracker.infrastructure.database.models import Base
from wallet_tracker.infrastructure.database.session import get_db
from wallet_tracker.services.coordinator import ConsistencyCoordinator


class InMemoryLedger:
    """Ledger double holding transactions in a dict, with failure switches"""

    def __init__(self):
        self.transactions: Dict[str, Transaction] = {}
        self.fail_writes = False
        self.fail_reads = False
        self.list_calls = 0
        self._ids = itertools.count(1)

    def _matches(self, t: Transaction, f: TransactionFilter) -> bool:
        return (
            t.user_id == f.user_id
            and (f.category_id is None or t.category_id == f.category_id)
            and (f.type is None or t.type == f.type)
            and (f.date_from is None or t.date >= f.date_from)
            and (f.date_to is None or t.date <= f.date_to)
        )

    async def list_transactions(self, filter: TransactionFilter) -> List[Transaction]:
        self.list_calls += 1
        if self.fail_reads:
            raise LedgerReadError("ledger unavailable")
        return [t for t in self.transactions.values() if self._matches(t, filter)]

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        if self.fail_reads:
            raise LedgerReadError("ledger unavailable")
        return self.transactions.get(transaction_id)

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        if self.fail_writes:
            raise LedgerWriteError("insert rejected")
        transaction = Transaction(
            id=f"tx_{next(self._ids)}",
            created_at=datetime.now(timezone.utc),
            **data.__dict__,
        )
        self.transactions[transaction.id] = transaction
        return transaction

    async def update_transaction(self, transaction_id: str, patch: TransactionPatch) -> Transaction:
        if self.fail_writes or transaction_id not in self.transactions:
            raise LedgerWriteError("update rejected")
        updated = replace(self.transactions[transaction_id], **patch.changes())
        self.transactions[transaction_id] = updated
        return updated

    async def delete_transaction(self, transaction_id: str) -> None:
        if self.fail_writes or transaction_id not in self.transactions:
            raise LedgerWriteError("delete rejected")
        del self.transactions[transaction_id]

    def expected_spent(self, key: AggregateKey) -> Decimal:
        """Independent recomputation over the full transaction set"""
        return sum(
            (
                t.amount
                for t in self.transactions.values()
                if t.user_id == key.user_id
                and t.category_id == key.category_id
                and t.type == EXPENSE
                and (t.date.year, t.date.month) == (key.year, key.month)
            ),
            Decimal("0"),
        )


def make_create(
    amount,
    type: str = EXPENSE,
    day: date = date(2024, 6, 10),
    category_id: str = "food",
    user_id: str = "user_1",
    wallet_id: str = "wallet_1",
) -> TransactionCreate:
    return TransactionCreate(
        user_id=user_id,
        wallet_id=wallet_id,
        category_id=category_id,
        amount=Decimal(str(amount)),
        type=type,
        date=day,
    )


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def store(ledger: InMemoryLedger) -> DerivedCacheStore:
    return DerivedCacheStore(lambda key: recompute_spent(ledger, key))


@pytest.fixture
def coordinator(ledger: InMemoryLedger, store: DerivedCacheStore) -> ConsistencyCoordinator:
    return ConsistencyCoordinator(ledger, store)


@pytest.fixture
def session_factory(tmp_path):
    """File-backed SQLite so ledger sessions and request sessions are separate connections"""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    """Create test database session"""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sql_ledger(session_factory) -> SqlLedger:
    return SqlLedger(session_factory)


@pytest.fixture
def client(db: Session, sql_ledger: SqlLedger) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app(ledger=sql_ledger)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def new_txn():
    """Factory for TransactionCreate payloads (June 2024 food expense by default)"""
    return make_create
