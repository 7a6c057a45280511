"""Hosted ledger client over a PostgREST-style HTTP API, with read retries"""

import httpx
import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
from wallet_tracker.config import settings
from wallet_tracker.domain.exceptions import LedgerReadError, LedgerWriteError
from wallet_tracker.domain.ledger import TransactionFilter
from wallet_tracker.domain.models import Transaction, TransactionCreate, TransactionPatch
from wallet_tracker.infrastructure.observability.metrics import ledger_latency_histogram, ledger_failure_counter


def _parse_transaction(row: Dict[str, Any]) -> Transaction:
    amount = row.get("amount")
    created_at = row.get("created_at")
    return Transaction(
        id=str(row["id"]),
        user_id=row["user_id"],
        wallet_id=str(row["wallet_id"]),
        category_id=str(row["category_id"]),
        amount=Decimal(str(amount)) if amount is not None else None,
        type=row["type"],
        date=date.fromisoformat(row["date"]),
        description=row.get("description"),
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )


def _serialize(fields: Dict[str, Any]) -> Dict[str, Any]:
    body = {}
    for name, value in fields.items():
        if isinstance(value, Decimal):
            value = str(value)
        elif isinstance(value, date):
            value = value.isoformat()
        body[name] = value
    return body


def filter_params(filter: TransactionFilter) -> List[Tuple[str, str]]:
    """Encode a filter as PostgREST query params (date may repeat)"""
    params = [("select", "*"), ("user_id", f"eq.{filter.user_id}")]
    if filter.category_id is not None:
        params.append(("category_id", f"eq.{filter.category_id}"))
    if filter.type is not None:
        params.append(("type", f"eq.{filter.type}"))
    if filter.date_from is not None:
        params.append(("date", f"gte.{filter.date_from.isoformat()}"))
    if filter.date_to is not None:
        params.append(("date", f"lte.{filter.date_to.isoformat()}"))
    params.append(("order", "date.desc,created_at.desc"))
    return params


class RestLedgerClient:
    """Client for the hosted transaction ledger"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.ledger_api_base).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.ledger_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.access_token = access_token or self.api_key
        self.max_retries = settings.ledger_max_retries
        self.backoff_base = settings.ledger_backoff_base
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.access_token}",
            },
        )

    async def _read(self, operation: str, table: str, params: List[Tuple[str, str]]) -> List[Dict[str, Any]]:
        """
        GET rows from a table with retry.

        Retry strategy:
        - Exponential backoff: base, 2*base, 4*base... (base * 2^(attempt-1))
        - Retries on 5xx errors and network failures, not on 4xx

        Raises:
            LedgerReadError: After the final attempt fails
        """
        attempt = 0
        async with self._client() as client:
            while True:
                try:
                    with ledger_latency_histogram.labels(operation=operation).time():
                        response = await client.get(f"/{table}", params=params)
                        response.raise_for_status()
                    return response.json()

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    ledger_failure_counter.labels(operation=operation).inc()

                    retryable = not isinstance(e, httpx.HTTPStatusError) or e.response.status_code >= 500
                    if not retryable or attempt >= self.max_retries:
                        raise LedgerReadError(f"Ledger {operation} failed: {e}") from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)

    async def _write(
        self,
        operation: str,
        method: str,
        table: str,
        params: Optional[List[Tuple[str, str]]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """Single-attempt write; writes are not idempotent so never retried"""
        async with self._client() as client:
            try:
                with ledger_latency_histogram.labels(operation=operation).time():
                    response = await client.request(
                        method,
                        f"/{table}",
                        params=params,
                        json=body,
                        headers={"Prefer": "return=representation"},
                    )
                    response.raise_for_status()
                return response.json() if response.content else []

            except httpx.TimeoutException as e:
                ledger_failure_counter.labels(operation=operation).inc()
                raise LedgerWriteError(f"Ledger timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                ledger_failure_counter.labels(operation=operation).inc()
                raise LedgerWriteError(f"Ledger error: {e.response.status_code} {e.response.text}") from e
            except httpx.RequestError as e:
                ledger_failure_counter.labels(operation=operation).inc()
                raise LedgerWriteError(f"Ledger unreachable: {e}") from e

    async def ensure_profile_exists(self, user_id: str) -> None:
        """Insert a profile row for the user if none exists yet"""
        rows = await self._read("get_profile", "profiles", [("select", "id"), ("id", f"eq.{user_id}")])
        if not rows:
            await self._write("create_profile", "POST", "profiles", body={"id": user_id, "full_name": "User"})

    async def list_transactions(self, filter: TransactionFilter) -> List[Transaction]:
        rows = await self._read("list", "transactions", filter_params(filter))
        try:
            return [_parse_transaction(row) for row in rows]
        except (KeyError, ValueError, TypeError) as e:
            raise LedgerReadError(f"Invalid transaction data from ledger: {e}") from e

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        rows = await self._read("get", "transactions", [("select", "*"), ("id", f"eq.{transaction_id}")])
        if not rows:
            return None
        try:
            return _parse_transaction(rows[0])
        except (KeyError, ValueError, TypeError) as e:
            raise LedgerReadError(f"Invalid transaction data from ledger: {e}") from e

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        try:
            await self.ensure_profile_exists(data.user_id)
        except LedgerReadError as e:
            raise LedgerWriteError(f"Profile lookup failed: {e}") from e

        rows = await self._write("create", "POST", "transactions", body=_serialize(data.__dict__))
        return self._single(rows)

    async def update_transaction(self, transaction_id: str, patch: TransactionPatch) -> Transaction:
        rows = await self._write(
            "update",
            "PATCH",
            "transactions",
            params=[("id", f"eq.{transaction_id}")],
            body=_serialize(patch.changes()),
        )
        return self._single(rows)

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._write("delete", "DELETE", "transactions", params=[("id", f"eq.{transaction_id}")])

    def _single(self, rows: List[Dict[str, Any]]) -> Transaction:
        if not rows:
            raise LedgerWriteError("Ledger returned no row for write")
        try:
            return _parse_transaction(rows[0])
        except (KeyError, ValueError, TypeError) as e:
            raise LedgerWriteError(f"Invalid transaction data from ledger: {e}") from e
