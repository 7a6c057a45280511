"""One derived cache store per user session"""

import logging
from typing import Callable, Dict, Optional

from wallet_tracker.cache.store import DerivedCacheStore, Fetcher

logger = logging.getLogger(__name__)


class CacheSessionRegistry:
    """Creates stores at session start and tears them down at logout"""

    def __init__(self, fetcher_factory: Callable[[str], Fetcher]):
        self._fetcher_factory = fetcher_factory
        self._stores: Dict[str, DerivedCacheStore] = {}

    def open(self, user_id: str) -> DerivedCacheStore:
        """Return the user's store, creating it if needed"""
        store = self._stores.get(user_id)
        if store is None or store.closed:
            store = DerivedCacheStore(self._fetcher_factory(user_id))
            self._stores[user_id] = store
            logger.info("Cache session opened", extra={"user_id": user_id})
        return store

    def get(self, user_id: str) -> Optional[DerivedCacheStore]:
        return self._stores.get(user_id)

    def close(self, user_id: str) -> bool:
        store = self._stores.pop(user_id, None)
        if store is None:
            return False
        store.close()
        logger.info("Cache session closed", extra={"user_id": user_id})
        return True

    def close_all(self) -> None:
        for user_id in list(self._stores):
            self.close(user_id)

    def __len__(self) -> int:
        return len(self._stores)
