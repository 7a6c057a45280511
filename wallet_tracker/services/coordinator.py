"""Keeps cached spend aggregates consistent with transaction mutations"""

import asyncio
import logging
import time
from typing import List, Optional

from wallet_tracker.cache.store import DerivedCacheStore, RecomputeResult, for_user
from wallet_tracker.domain.exceptions import NotFoundError
from wallet_tracker.domain.ledger import Ledger
from wallet_tracker.domain.models import (
    AggregateKey,
    Transaction,
    TransactionCreate,
    TransactionPatch,
)
from wallet_tracker.domain.mutations import (
    TransactionCreated,
    TransactionDeleted,
    TransactionUpdated,
    affected_keys,
)
from wallet_tracker.infrastructure.observability.logging import log_mutation
from wallet_tracker.infrastructure.observability.metrics import (
    mutation_counter,
    record_recompute,
    record_safety_net,
)

logger = logging.getLogger(__name__)


class ConsistencyCoordinator:
    """
    Runs transaction writes against the ledger and repairs the derived cache.

    Flow per mutation:
    1. Write to the ledger (failure raises LedgerWriteError, cache untouched)
    2. Compute affected aggregate keys from the mutation and prior state
    3. Recompute each key from the ledger and set it, concurrently
    4. Safety net: invalidate + refetch every cached aggregate of the user

    Steps 3-4 never raise; failures are logged and left for the safety net
    or the next reader to repair.
    """

    def __init__(self, ledger: Ledger, store: DerivedCacheStore, request_id: Optional[str] = None):
        self.ledger = ledger
        self.store = store
        self.request_id = request_id

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        start_time = time.time()
        created = await self.ledger.create_transaction(data)

        keys = affected_keys(TransactionCreated(created))
        await self._reconcile(created.user_id, keys)

        self._finish("create", created.user_id, created.id, keys, start_time)
        return created

    async def update_transaction(
        self,
        user_id: str,
        transaction_id: str,
        patch: TransactionPatch,
        old: Optional[Transaction] = None,
    ) -> Transaction:
        """
        Apply a patch and repair the old and new aggregates.

        old is the caller's copy of the record before the edit. The ledger
        copy is always read before writing: it proves the record belongs to
        user_id, and the prior category/month cannot be recovered afterwards.
        Keys of both copies are repaired when they disagree.
        """
        start_time = time.time()
        current = await self.resolve_prior_state(user_id, transaction_id)
        priors = [current] if old is None or old == current else [old, current]

        updated = await self.ledger.update_transaction(transaction_id, patch)

        keys = list(
            dict.fromkeys(
                key
                for prior in priors
                for key in affected_keys(TransactionUpdated(user_id=user_id, patch=patch, old=prior))
            )
        )
        await self._reconcile(user_id, keys)

        self._finish("update", user_id, transaction_id, keys, start_time)
        return updated

    async def delete_transaction(self, transaction: Transaction) -> None:
        """Delete a record; the caller supplies its last known state"""
        start_time = time.time()
        await self.ledger.delete_transaction(transaction.id)

        keys = affected_keys(TransactionDeleted(transaction))
        await self._reconcile(transaction.user_id, keys)

        self._finish("delete", transaction.user_id, transaction.id, keys, start_time)

    async def delete_transaction_by_id(self, user_id: str, transaction_id: str) -> Transaction:
        transaction = await self.resolve_prior_state(user_id, transaction_id)
        await self.delete_transaction(transaction)
        return transaction

    async def resolve_prior_state(self, user_id: str, transaction_id: str) -> Transaction:
        transaction = await self.ledger.get_transaction(transaction_id)
        if transaction is None or transaction.user_id != user_id:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction

    async def _reconcile(self, user_id: str, keys: List[AggregateKey]) -> None:
        if not keys or self.store.closed:
            return

        # Targeted recomputes all complete before the safety net starts
        results = await asyncio.gather(*(self.store.recompute(k) for k in keys))
        for result in results:
            record_recompute(result.ok)
            if not result.ok:
                self._log_failure("Aggregate recompute failed", result)

        await self.safety_net(user_id)

    async def safety_net(self, user_id: str) -> List[RecomputeResult]:
        """Mark every aggregate of the user stale, then refetch them all"""
        predicate = for_user(user_id)
        try:
            self.store.invalidate(predicate)
            results = await self.store.refetch_matching(predicate)
        except Exception as e:
            logger.error(
                f"Safety-net refresh failed: {e}",
                extra={"request_id": self.request_id, "user_id": user_id},
            )
            return []

        for result in results:
            record_safety_net(result.ok)
            if not result.ok:
                self._log_failure("Safety-net refetch failed", result)
        return results

    def _log_failure(self, message: str, result: RecomputeResult) -> None:
        logger.warning(
            f"{message}: {result.error.cause}",
            extra={
                "request_id": self.request_id,
                "user_id": result.key.user_id,
                "category_id": result.key.category_id,
                "period": f"{result.key.year}-{result.key.month:02d}",
            },
        )

    def _finish(self, operation: str, user_id: str, transaction_id: str, keys: List[AggregateKey], start_time: float) -> None:
        mutation_counter.labels(operation=operation).inc()
        duration_ms = (time.time() - start_time) * 1000
        log_mutation(operation, user_id, transaction_id, keys, duration_ms, self.request_id)
