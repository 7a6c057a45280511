"""Contract of the authoritative transaction store"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Protocol

from wallet_tracker.domain.models import Transaction, TransactionCreate, TransactionPatch


@dataclass(frozen=True)
class TransactionFilter:
    """Query over one user's transactions; unset fields do not filter"""

    user_id: str
    category_id: Optional[str] = None
    type: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class Ledger(Protocol):
    """
    Transaction CRUD against the backing store.

    Implementations must give read-your-writes consistency for the calling
    session. Reads raise LedgerReadError, writes raise LedgerWriteError.
    """

    async def list_transactions(self, filter: TransactionFilter) -> List[Transaction]:
        ...

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        ...

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        ...

    async def update_transaction(self, transaction_id: str, patch: TransactionPatch) -> Transaction:
        ...

    async def delete_transaction(self, transaction_id: str) -> None:
        ...
