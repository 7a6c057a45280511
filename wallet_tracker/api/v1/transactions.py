"""Transaction endpoints - every write goes through the consistency coordinator"""

import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from wallet_tracker.api.v1.schemas import (
    TransactionCreateRequest,
    TransactionSchema,
    TransactionType,
    TransactionUpdateRequest,
)
from wallet_tracker.api.dependencies import get_coordinator, get_ledger, get_request_id, get_user_id
from wallet_tracker.domain.exceptions import (
    InvalidRangeError,
    LedgerReadError,
    LedgerWriteError,
    NotFoundError,
)
from wallet_tracker.domain.ledger import Ledger, TransactionFilter
from wallet_tracker.services.coordinator import ConsistencyCoordinator
from wallet_tracker.utils.date_utils import month_range

router = APIRouter()


@router.get("/transactions", response_model=List[TransactionSchema])
async def list_transactions(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    type: Optional[TransactionType] = Query(None),
    user_id: str = Depends(get_user_id),
    ledger: Ledger = Depends(get_ledger),
):
    """List the caller's transactions, newest first"""
    try:
        transactions = await ledger.list_transactions(
            TransactionFilter(user_id=user_id, type=type, date_from=start_date, date_to=end_date)
        )
    except LedgerReadError as e:
        logging.error(f"Ledger read error: {e}", extra={"user_id": user_id})
        raise HTTPException(status_code=503, detail="Ledger unavailable")

    return [TransactionSchema.model_validate(t) for t in transactions]


@router.get("/transactions/monthly", response_model=List[TransactionSchema])
async def list_monthly_transactions(
    month: int = Query(...),
    year: int = Query(...),
    user_id: str = Depends(get_user_id),
    ledger: Ledger = Depends(get_ledger),
):
    """All of a month's transactions in chronological order"""
    try:
        start_date, end_date = month_range(month, year)
        transactions = await ledger.list_transactions(
            TransactionFilter(user_id=user_id, date_from=start_date, date_to=end_date)
        )
    except InvalidRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except LedgerReadError as e:
        logging.error(f"Ledger read error: {e}", extra={"user_id": user_id})
        raise HTTPException(status_code=503, detail="Ledger unavailable")

    transactions.sort(key=lambda t: t.date)
    return [TransactionSchema.model_validate(t) for t in transactions]


@router.post("/transactions", response_model=TransactionSchema, status_code=201)
async def create_transaction(
    request_body: TransactionCreateRequest,
    user_id: str = Depends(get_user_id),
    request_id: str = Depends(get_request_id),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    """
    Record a transaction.

    Flow:
    1. Write to the ledger (wallet balance adjusted by the backend)
    2. Refresh the spend aggregate of the affected budget, if an expense
    3. Safety-net refresh of the caller's other cached aggregates
    """
    try:
        created = await coordinator.create_transaction(request_body.to_domain(user_id))
    except LedgerWriteError as e:
        logging.warning(f"Ledger write error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    return TransactionSchema.model_validate(created)


@router.patch("/transactions/{transaction_id}", response_model=TransactionSchema)
async def update_transaction(
    transaction_id: str,
    request_body: TransactionUpdateRequest,
    user_id: str = Depends(get_user_id),
    request_id: str = Depends(get_request_id),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    """Edit a transaction; old_transaction is read from the ledger when omitted"""
    old = request_body.old_transaction.to_domain() if request_body.old_transaction else None
    if old is not None and (old.id != transaction_id or old.user_id != user_id):
        raise HTTPException(status_code=422, detail="old_transaction does not match the edited record")

    try:
        updated = await coordinator.update_transaction(
            user_id, transaction_id, request_body.updates.to_domain(), old=old
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerReadError as e:
        logging.error(f"Ledger read error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger unavailable")
    except LedgerWriteError as e:
        logging.warning(f"Ledger write error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    return TransactionSchema.model_validate(updated)


@router.delete("/transactions/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: str,
    user_id: str = Depends(get_user_id),
    request_id: str = Depends(get_request_id),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    try:
        await coordinator.delete_transaction_by_id(user_id, transaction_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerReadError as e:
        logging.error(f"Ledger read error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ledger unavailable")
    except LedgerWriteError as e:
        logging.warning(f"Ledger write error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=400, detail=str(e))

    return Response(status_code=204)
