"""Unit tests for affected aggregate key computation"""

from datetime import date
from decimal import Decimal
from wallet_tracker.domain.models import AggregateKey, Transaction, TransactionPatch
from wallet_tracker.domain.mutations import (
    TransactionCreated,
    TransactionDeleted,
    TransactionUpdated,
    affected_keys,
    key_for,
)


def txn(type="expense", category_id="food", day=date(2024, 6, 15)):
    return Transaction(
        id="tx_1",
        user_id="user_1",
        wallet_id="wallet_1",
        category_id=category_id,
        amount=Decimal("100"),
        type=type,
        date=day,
    )


def test_key_for_expense_uses_category_and_month():
    assert key_for(txn()) == AggregateKey("user_1", "food", 6, 2024)


def test_key_for_income_is_none():
    assert key_for(txn(type="income")) is None


def test_created_expense_affects_its_month():
    assert affected_keys(TransactionCreated(txn())) == [AggregateKey("user_1", "food", 6, 2024)]


def test_created_income_affects_nothing():
    assert affected_keys(TransactionCreated(txn(type="income"))) == []


def test_deleted_expense_affects_its_month():
    assert affected_keys(TransactionDeleted(txn(day=date(2024, 2, 29)))) == [
        AggregateKey("user_1", "food", 2, 2024)
    ]


def test_update_income_to_expense_only_new_key():
    """No old aggregate exists for an income record; only the new one is touched"""
    mutation = TransactionUpdated("user_1", TransactionPatch(type="expense"), old=txn(type="income"))

    assert affected_keys(mutation) == [AggregateKey("user_1", "food", 6, 2024)]


def test_update_expense_to_income_only_old_key():
    mutation = TransactionUpdated("user_1", TransactionPatch(type="income"), old=txn())

    assert affected_keys(mutation) == [AggregateKey("user_1", "food", 6, 2024)]


def test_update_category_change_affects_both():
    mutation = TransactionUpdated("user_1", TransactionPatch(category_id="transport"), old=txn())

    assert affected_keys(mutation) == [
        AggregateKey("user_1", "food", 6, 2024),
        AggregateKey("user_1", "transport", 6, 2024),
    ]


def test_update_date_across_months_affects_both():
    mutation = TransactionUpdated("user_1", TransactionPatch(date=date(2024, 7, 1)), old=txn())

    assert affected_keys(mutation) == [
        AggregateKey("user_1", "food", 6, 2024),
        AggregateKey("user_1", "food", 7, 2024),
    ]


def test_update_amount_only_recomputes_once():
    mutation = TransactionUpdated("user_1", TransactionPatch(amount=Decimal("250")), old=txn())

    assert affected_keys(mutation) == [AggregateKey("user_1", "food", 6, 2024)]


def test_update_between_income_records_skips_aggregates():
    mutation = TransactionUpdated("user_1", TransactionPatch(amount=Decimal("5")), old=txn(type="income"))

    assert affected_keys(mutation) == []


def test_update_without_prior_state_uses_patch_fields():
    patch = TransactionPatch(type="expense", category_id="rent", date=date(2023, 12, 31))
    mutation = TransactionUpdated("user_1", patch, old=None)

    assert affected_keys(mutation) == [AggregateKey("user_1", "rent", 12, 2023)]


def test_patch_changes_skip_unset_fields():
    assert TransactionPatch(amount=Decimal("5")).changes() == {"amount": Decimal("5")}


def test_patch_changes_include_cleared_description():
    patch = TransactionPatch(category_id="transport", clear=frozenset({"description"}))

    assert patch.changes() == {"category_id": "transport", "description": None}
