"""Unit tests for spend aggregation and month boundaries"""

import pytest
from datetime import date
from decimal import Decimal
from wallet_tracker.domain.aggregation import (
    compute_spent,
    expense_filter,
    recompute_spent,
    spending_by_category,
    summarize_month,
)
from wallet_tracker.domain.exceptions import InvalidRangeError
from wallet_tracker.domain.models import AggregateKey, Transaction
from wallet_tracker.utils.date_utils import days_in_month, month_range


def txn(id, amount, type="expense", day=date(2024, 6, 15), category_id="food", user_id="user_1"):
    return Transaction(
        id=id,
        user_id=user_id,
        wallet_id="wallet_1",
        category_id=category_id,
        amount=Decimal(str(amount)) if amount is not None else None,
        type=type,
        date=day,
    )


def test_compute_spent_sums_only_in_range_expenses():
    """Two in-range expenses count; out-of-range dates and income do not"""
    transactions = [
        txn("1", 100),
        txn("2", "50.5", day=date(2024, 6, 30)),
        txn("3", 999, day=date(2024, 7, 1)),
        txn("4", 999, day=date(2024, 5, 31)),
        txn("5", 999, type="income"),
    ]
    start_date, end_date = month_range(6, 2024)
    candidates = [t for t in transactions if t.type == "expense" and start_date <= t.date <= end_date]

    assert compute_spent(candidates) == Decimal("150.5")


def test_compute_spent_treats_missing_amount_as_zero():
    assert compute_spent([txn("1", None), txn("2", "20.25")]) == Decimal("20.25")


def test_compute_spent_is_exact_decimal():
    """Ten 0.1s add to exactly 1, unlike float accumulation"""
    assert compute_spent([txn(str(i), "0.1") for i in range(10)]) == Decimal("1.0")


def test_compute_spent_accepts_float_amounts():
    t = txn("1", 0)
    t.amount = 50.5
    assert compute_spent([t, txn("2", 100)]) == Decimal("150.5")


def test_compute_spent_empty():
    assert compute_spent([]) == Decimal("0")


@pytest.mark.parametrize(
    "month, year, last_day",
    [
        (2, 2024, 29),
        (2, 2023, 28),
        (2, 1900, 28),
        (2, 2000, 29),
        (4, 2024, 30),
        (12, 2024, 31),
        (1, 2025, 31),
    ],
)
def test_month_range_uses_real_month_length(month, year, last_day):
    start_date, end_date = month_range(month, year)

    assert start_date == date(year, month, 1)
    assert end_date == date(year, month, last_day)
    assert days_in_month(month, year) == last_day


@pytest.mark.parametrize("month", [0, 13, -1])
def test_month_range_rejects_invalid_month(month):
    with pytest.raises(InvalidRangeError):
        month_range(month, 2024)


def test_month_range_rejects_year_out_of_range():
    with pytest.raises(InvalidRangeError):
        month_range(1, 0)


def test_expense_filter_covers_whole_month():
    f = expense_filter(AggregateKey("user_1", "food", 2, 2024))

    assert f.user_id == "user_1"
    assert f.category_id == "food"
    assert f.type == "expense"
    assert f.date_from == date(2024, 2, 1)
    assert f.date_to == date(2024, 2, 29)


async def test_recompute_spent_reads_from_ledger(ledger, new_txn):
    await ledger.create_transaction(new_txn(100))
    await ledger.create_transaction(new_txn(200, day=date(2024, 7, 1)))
    await ledger.create_transaction(new_txn(300, type="income"))
    await ledger.create_transaction(new_txn(400, category_id="transport"))
    await ledger.create_transaction(new_txn(500, user_id="user_2"))

    spent = await recompute_spent(ledger, AggregateKey("user_1", "food", 6, 2024))

    assert spent == Decimal("100")


def test_spending_by_category():
    transactions = [
        txn("1", 100),
        txn("2", 50, category_id="transport"),
        txn("3", 25),
        txn("4", 70, type="income"),
        txn("5", 80, day=date(2024, 7, 2)),
    ]

    totals = spending_by_category(transactions, 6, 2024)

    assert totals == {"food": Decimal("125"), "transport": Decimal("50")}


def test_summarize_month():
    transactions = [txn("1", 100), txn("2", 1000, type="income"), txn("3", "49.5")]

    totals = summarize_month(transactions)

    assert totals["income"] == Decimal("1000")
    assert totals["expense"] == Decimal("149.5")
    assert totals["net"] == Decimal("850.5")
