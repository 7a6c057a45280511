"""Ledger backed by the local database"""

from typing import Callable, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from wallet_tracker.domain.exceptions import LedgerReadError, LedgerWriteError, NotFoundError
from wallet_tracker.domain.ledger import TransactionFilter
from wallet_tracker.domain.models import TRANSACTION_TYPES, Transaction, TransactionCreate, TransactionPatch
from wallet_tracker.infrastructure.database.repositories import (
    ProfileRepository,
    TransactionRepository,
    to_transaction,
)
from wallet_tracker.infrastructure.observability.metrics import ledger_failure_counter, ledger_latency_histogram


def _check_type(type: Optional[str]) -> None:
    if type is not None and type not in TRANSACTION_TYPES:
        raise LedgerWriteError(f"Invalid transaction type: {type}")


def _check_amount(amount) -> None:
    if amount is not None and amount <= 0:
        raise LedgerWriteError("Amount must be positive")


class SqlLedger:
    """
    Ledger implementation over SQLAlchemy.

    Each call runs in its own short-lived session and commits before
    returning, so a read right after a write sees it. Wallet balances are
    adjusted in the same unit of work as the transaction write.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def list_transactions(self, filter: TransactionFilter) -> List[Transaction]:
        with ledger_latency_histogram.labels(operation="list").time():
            try:
                with self.session_factory() as db:
                    return TransactionRepository(db).list(filter)
            except SQLAlchemyError as e:
                ledger_failure_counter.labels(operation="list").inc()
                raise LedgerReadError(f"Ledger query failed: {e}") from e

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with ledger_latency_histogram.labels(operation="get").time():
            try:
                with self.session_factory() as db:
                    row = TransactionRepository(db).get(transaction_id)
                    return to_transaction(row) if row is not None else None
            except SQLAlchemyError as e:
                ledger_failure_counter.labels(operation="get").inc()
                raise LedgerReadError(f"Ledger query failed: {e}") from e

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        _check_type(data.type)
        _check_amount(data.amount)
        with ledger_latency_histogram.labels(operation="create").time():
            try:
                with self.session_factory() as db:
                    ProfileRepository(db).ensure_exists(data.user_id)
                    row = TransactionRepository(db).create(dict(data.__dict__))
                    db.commit()
                    return to_transaction(row)
            except SQLAlchemyError as e:
                ledger_failure_counter.labels(operation="create").inc()
                raise LedgerWriteError(f"Ledger insert failed: {e}") from e

    async def update_transaction(self, transaction_id: str, patch: TransactionPatch) -> Transaction:
        _check_type(patch.type)
        _check_amount(patch.amount)
        with ledger_latency_histogram.labels(operation="update").time():
            try:
                with self.session_factory() as db:
                    row = TransactionRepository(db).update(transaction_id, patch.changes())
                    db.commit()
                    return to_transaction(row)
            except (SQLAlchemyError, NotFoundError) as e:
                ledger_failure_counter.labels(operation="update").inc()
                raise LedgerWriteError(f"Ledger update failed: {e}") from e

    async def delete_transaction(self, transaction_id: str) -> None:
        with ledger_latency_histogram.labels(operation="delete").time():
            try:
                with self.session_factory() as db:
                    TransactionRepository(db).delete(transaction_id)
                    db.commit()
            except (SQLAlchemyError, NotFoundError) as e:
                ledger_failure_counter.labels(operation="delete").inc()
                raise LedgerWriteError(f"Ledger delete failed: {e}") from e
