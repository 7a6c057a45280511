"""Integration tests for the SQLAlchemy-backed ledger"""

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Session
from wallet_tracker.cache.store import DerivedCacheStore
from wallet_tracker.domain.aggregation import recompute_spent
from wallet_tracker.domain.exceptions import LedgerWriteError
from wallet_tracker.domain.ledger import TransactionFilter
from wallet_tracker.domain.models import AggregateKey, TransactionPatch
from wallet_tracker.infrastructure.database.models import CategoryRecord, ProfileRecord, WalletRecord
from wallet_tracker.infrastructure.database.repositories import CategoryRepository, ProfileRepository
from wallet_tracker.services.coordinator import ConsistencyCoordinator

pytestmark = pytest.mark.integration

FOOD_JUNE = AggregateKey("user_1", "food", 6, 2024)


@pytest.fixture
def seeded(db: Session) -> Session:
    db.add(ProfileRecord(id="user_1", full_name="Test User"))
    db.add(WalletRecord(id="wallet_1", user_id="user_1", name="Cash", balance=Decimal("1000000")))
    db.add(CategoryRecord(id="food", user_id=None, name="Food", icon="utensils", type="expense"))
    db.add(CategoryRecord(id="transport", user_id=None, name="Transport", icon="bus", type="expense"))
    db.add(CategoryRecord(id="salary", user_id=None, name="Salary", icon="wallet", type="income"))
    db.commit()
    return db


def wallet_balance(db: Session) -> Decimal:
    db.expire_all()
    return Decimal(db.get(WalletRecord, "wallet_1").balance)


async def test_create_adjusts_wallet_balance(seeded, sql_ledger, new_txn):
    await sql_ledger.create_transaction(new_txn(150000))
    await sql_ledger.create_transaction(new_txn(500000, type="income", category_id="salary"))

    assert wallet_balance(seeded) == Decimal("1350000")


async def test_update_reverts_old_effect(seeded, sql_ledger, new_txn):
    t = await sql_ledger.create_transaction(new_txn(100000))

    await sql_ledger.update_transaction(t.id, TransactionPatch(amount=Decimal("40000")))
    assert wallet_balance(seeded) == Decimal("960000")

    await sql_ledger.update_transaction(t.id, TransactionPatch(type="income", category_id="salary"))
    assert wallet_balance(seeded) == Decimal("1040000")


async def test_delete_reverts_balance(seeded, sql_ledger, new_txn):
    t = await sql_ledger.create_transaction(new_txn(100000))

    await sql_ledger.delete_transaction(t.id)

    assert wallet_balance(seeded) == Decimal("1000000")
    assert await sql_ledger.get_transaction(t.id) is None


async def test_list_filters(seeded, sql_ledger, new_txn):
    await sql_ledger.create_transaction(new_txn(1, day=date(2024, 2, 29)))
    await sql_ledger.create_transaction(new_txn(2, day=date(2024, 3, 1)))
    await sql_ledger.create_transaction(new_txn(3, day=date(2024, 2, 10), category_id="transport"))
    await sql_ledger.create_transaction(new_txn(4, day=date(2024, 2, 10), type="income", category_id="salary"))

    february_food = await sql_ledger.list_transactions(
        TransactionFilter(
            user_id="user_1",
            category_id="food",
            type="expense",
            date_from=date(2024, 2, 1),
            date_to=date(2024, 2, 29),
        )
    )

    assert [t.amount for t in february_food] == [Decimal("1")]


async def test_list_is_newest_first(seeded, sql_ledger, new_txn):
    await sql_ledger.create_transaction(new_txn(1, day=date(2024, 6, 1)))
    await sql_ledger.create_transaction(new_txn(2, day=date(2024, 6, 20)))

    transactions = await sql_ledger.list_transactions(TransactionFilter(user_id="user_1"))

    assert [t.date for t in transactions] == [date(2024, 6, 20), date(2024, 6, 1)]


async def test_create_creates_missing_profile(db, sql_ledger, new_txn):
    await sql_ledger.create_transaction(new_txn(10, user_id="newcomer"))

    assert ProfileRepository(db).get("newcomer").full_name == "User"


async def test_invalid_writes_raise(seeded, sql_ledger, new_txn):
    with pytest.raises(LedgerWriteError):
        await sql_ledger.create_transaction(new_txn(10, type="transfer"))
    with pytest.raises(LedgerWriteError):
        await sql_ledger.create_transaction(new_txn(-5))
    with pytest.raises(LedgerWriteError):
        await sql_ledger.update_transaction("missing", TransactionPatch(amount=Decimal("1")))
    with pytest.raises(LedgerWriteError):
        await sql_ledger.delete_transaction("missing")


async def test_coordinator_against_sql_ledger(seeded, sql_ledger, new_txn):
    """Category move recomputes both aggregates to match the database"""
    store = DerivedCacheStore(lambda key: recompute_spent(sql_ledger, key))
    coordinator = ConsistencyCoordinator(sql_ledger, store)
    transport_june = AggregateKey("user_1", "transport", 6, 2024)

    moved = await coordinator.create_transaction(new_txn("70.25"))
    await coordinator.create_transaction(new_txn("29.75"))
    await coordinator.update_transaction("user_1", moved.id, TransactionPatch(category_id="transport"), old=moved)

    assert store.get(FOOD_JUNE) == Decimal("29.75")
    assert store.get(transport_june) == Decimal("70.25")
    assert store.get(FOOD_JUNE) == await recompute_spent(sql_ledger, FOOD_JUNE)


def test_categories_include_shared(seeded):
    seeded.add(CategoryRecord(id="pets", user_id="user_1", name="Pets", icon="paw", type="expense"))
    seeded.add(ProfileRecord(id="user_2"))
    seeded.add(CategoryRecord(id="hobby", user_id="user_2", name="Hobby", icon="star", type="expense"))
    seeded.commit()

    names = [c.name for c in CategoryRepository(seeded).list_visible("user_1", type="expense")]

    assert names == ["Food", "Pets", "Transport"]
