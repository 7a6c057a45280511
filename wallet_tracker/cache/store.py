"""Derived cache of spend aggregates with stale-marking and refetch"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Awaitable, Callable, Dict, List, Optional

from wallet_tracker.domain.exceptions import AggregateRecomputeError, CacheClosedError
from wallet_tracker.domain.models import AggregateKey


Fetcher = Callable[[AggregateKey], Awaitable[Decimal]]
KeyPredicate = Callable[[AggregateKey], bool]


@dataclass
class CacheEntry:
    value: Decimal
    stale: bool
    updated_at: datetime


@dataclass
class RecomputeResult:
    """Outcome of recomputing one key: a value or an error, never both"""

    key: AggregateKey
    value: Optional[Decimal] = None
    error: Optional[AggregateRecomputeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def for_user(user_id: str) -> KeyPredicate:
    """Match every aggregate of a user, whatever category or month"""
    return lambda key: key.user_id == user_id


def for_entity(entity: str) -> KeyPredicate:
    return lambda key: key.entity == entity


class DerivedCacheStore:
    """
    Session-scoped store of derived aggregates.

    Entries are only ever written from authoritative recomputation, so a
    fresh entry always equals what the ledger would return. Stale entries
    keep their last value but are hidden from get() until refetched.

    All mutating steps are synchronous; under a single event loop they
    never interleave, only the awaits between them do.
    """

    def __init__(self, fetcher: Fetcher):
        self._fetcher = fetcher
        self._entries: Dict[AggregateKey, CacheEntry] = {}
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise CacheClosedError("Cache store has been closed")

    def get(self, key: AggregateKey) -> Optional[Decimal]:
        """Fresh cached value, or None when absent or stale"""
        self._check_open()
        entry = self._entries.get(key)
        if entry is None or entry.stale:
            return None
        return entry.value

    def peek(self, key: AggregateKey) -> Optional[CacheEntry]:
        """Raw entry including stale ones"""
        self._check_open()
        return self._entries.get(key)

    def set(self, key: AggregateKey, value: Decimal) -> None:
        """Overwrite unconditionally; last write wins"""
        self._check_open()
        self._entries[key] = CacheEntry(
            value=value,
            stale=False,
            updated_at=datetime.now(timezone.utc),
        )

    def invalidate(self, predicate: KeyPredicate) -> int:
        """Mark matching entries stale; returns how many were marked"""
        self._check_open()
        count = 0
        for key, entry in self._entries.items():
            if predicate(key):
                entry.stale = True
                count += 1
        return count

    def keys(self, predicate: Optional[KeyPredicate] = None) -> List[AggregateKey]:
        self._check_open()
        return [k for k in self._entries if predicate is None or predicate(k)]

    async def recompute(self, key: AggregateKey) -> RecomputeResult:
        """Recompute one key from the ledger and set it; errors are returned"""
        try:
            self._check_open()
            value = await self._fetcher(key)
        except Exception as e:
            return RecomputeResult(key=key, error=AggregateRecomputeError(key, e))

        # Session may have been torn down while the fetch was in flight
        if not self._closed:
            self.set(key, value)
        return RecomputeResult(key=key, value=value)

    async def refetch_matching(self, predicate: KeyPredicate) -> List[RecomputeResult]:
        """
        Recompute every cached entry matching predicate, observed or not.

        Runs concurrently. Failed keys keep their previous entry (and stale
        flag) so the next reader retries.
        """
        keys = self.keys(predicate)
        if not keys:
            return []
        return list(await asyncio.gather(*(self.recompute(k) for k in keys)))

    async def fetch(self, key: AggregateKey) -> Decimal:
        """Reader path: cached value, or recompute on miss/stale"""
        cached = self.get(key)
        if cached is not None:
            return cached

        result = await self.recompute(key)
        if not result.ok:
            raise result.error
        return result.value

    def close(self) -> None:
        """Tear down at logout; further use raises CacheClosedError"""
        self._entries.clear()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: AggregateKey) -> bool:
        return key in self._entries
