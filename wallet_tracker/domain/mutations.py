"""Which spend aggregates a transaction mutation can change"""

from dataclasses import dataclass
from typing import List, Optional, Union

from wallet_tracker.domain.models import (
    EXPENSE,
    AggregateKey,
    Transaction,
    TransactionPatch,
)
from wallet_tracker.utils.date_utils import month_of


@dataclass
class TransactionCreated:
    transaction: Transaction


@dataclass
class TransactionUpdated:
    user_id: str
    patch: TransactionPatch
    old: Optional[Transaction]


@dataclass
class TransactionDeleted:
    transaction: Transaction


TransactionMutation = Union[TransactionCreated, TransactionUpdated, TransactionDeleted]


def key_for(transaction: Transaction) -> Optional[AggregateKey]:
    """Aggregate a transaction counts towards, None for income"""
    if transaction.type != EXPENSE:
        return None
    month, year = month_of(transaction.date)
    return AggregateKey(transaction.user_id, transaction.category_id, month, year)


def _updated_keys(mutation: TransactionUpdated) -> List[AggregateKey]:
    old = mutation.old
    patch = mutation.patch
    old_type = old.type if old else None
    new_type = patch.type or old_type

    if old_type != EXPENSE and new_type != EXPENSE:
        return []

    keys: List[AggregateKey] = []

    if old is not None and old_type == EXPENSE:
        keys.append(key_for(old))

    if new_type == EXPENSE:
        new_date = patch.date or (old.date if old else None)
        new_category = patch.category_id or (old.category_id if old else None)
        if new_date is not None and new_category is not None:
            month, year = month_of(new_date)
            keys.append(AggregateKey(mutation.user_id, new_category, month, year))

    return keys


def affected_keys(mutation: TransactionMutation) -> List[AggregateKey]:
    """
    Distinct aggregate keys to recompute after a mutation.

    - created: the new record's key if it is an expense
    - updated: the old key if it was an expense, the new key if it is one now
      (patched category/date/type, falling back to the old values)
    - deleted: the removed record's key if it was an expense

    Order is stable and duplicates are dropped, so an update that keeps the
    same category and month yields a single key.
    """
    if isinstance(mutation, TransactionCreated):
        keys = [key_for(mutation.transaction)]
    elif isinstance(mutation, TransactionDeleted):
        keys = [key_for(mutation.transaction)]
    elif isinstance(mutation, TransactionUpdated):
        keys = _updated_keys(mutation)
    else:
        raise TypeError(f"Unknown mutation: {mutation!r}")

    unique: List[AggregateKey] = []
    for key in keys:
        if key is not None and key not in unique:
            unique.append(key)
    return unique
