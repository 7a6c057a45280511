"""Spend aggregation - reduces ledger transactions to budget totals"""

from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, Optional

from wallet_tracker.domain.ledger import Ledger, TransactionFilter
from wallet_tracker.domain.models import EXPENSE, INCOME, AggregateKey, Transaction
from wallet_tracker.utils.date_utils import month_range


def _as_decimal(amount) -> Decimal:
    if amount is None:
        return Decimal("0")
    if isinstance(amount, Decimal):
        return amount
    # floats via str() to keep their printed value
    return Decimal(str(amount))


def compute_spent(transactions: Iterable[Transaction]) -> Decimal:
    """
    Sum the amounts of an already-filtered set of expense transactions.

    Missing amounts count as zero. Pure: no filtering happens here, the
    caller (normally the ledger query) restricts user, category, type and
    date range.
    """
    return sum((_as_decimal(t.amount) for t in transactions), Decimal("0"))


def expense_filter(key: AggregateKey) -> TransactionFilter:
    """Ledger query selecting exactly the transactions behind an aggregate"""
    start_date, end_date = month_range(key.month, key.year)
    return TransactionFilter(
        user_id=key.user_id,
        category_id=key.category_id,
        type=EXPENSE,
        date_from=start_date,
        date_to=end_date,
    )


async def recompute_spent(ledger: Ledger, key: AggregateKey) -> Decimal:
    """Authoritative spend total for a key, read fresh from the ledger"""
    transactions = await ledger.list_transactions(expense_filter(key))
    return compute_spent(transactions)


def spending_by_category(
    transactions: Iterable[Transaction],
    month: int,
    year: int,
    user_id: Optional[str] = None,
) -> Dict[str, Decimal]:
    """Expense totals per category for one month of an unfiltered list"""
    start_date, end_date = month_range(month, year)
    totals: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))

    for t in transactions:
        if t.type != EXPENSE or not start_date <= t.date <= end_date:
            continue
        if user_id is not None and t.user_id != user_id:
            continue
        totals[t.category_id] += _as_decimal(t.amount)

    return dict(totals)


def summarize_month(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
    """Income, expense and net totals of a month's transactions"""
    income = Decimal("0")
    expense = Decimal("0")
    for t in transactions:
        if t.type == INCOME:
            income += _as_decimal(t.amount)
        elif t.type == EXPENSE:
            expense += _as_decimal(t.amount)

    return {"income": income, "expense": expense, "net": income - expense}
