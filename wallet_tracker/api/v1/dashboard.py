"""GET /v1/dashboard - monthly overview"""

import logging
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from wallet_tracker.api.v1.schemas import DashboardResponse, TransactionSchema
from wallet_tracker.api.dependencies import get_ledger, get_user_id
from wallet_tracker.domain.aggregation import spending_by_category, summarize_month
from wallet_tracker.domain.exceptions import InvalidRangeError, LedgerReadError
from wallet_tracker.domain.ledger import Ledger, TransactionFilter
from wallet_tracker.infrastructure.database.repositories import WalletRepository
from wallet_tracker.infrastructure.database.session import get_db
from wallet_tracker.utils.date_utils import month_range

router = APIRouter()

RECENT_LIMIT = 5


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    month: int = Query(...),
    year: int = Query(...),
    user_id: str = Depends(get_user_id),
    ledger: Ledger = Depends(get_ledger),
    db: Session = Depends(get_db),
):
    """
    Income, expense and net for the month, expense per category, total
    balance across wallets and the latest transactions.
    """
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

    totals = summarize_month(transactions)
    wallets = WalletRepository(db).list(user_id)

    return DashboardResponse(
        month=month,
        year=year,
        income=totals["income"],
        expense=totals["expense"],
        net=totals["net"],
        spending_by_category=spending_by_category(transactions, month, year),
        total_balance=sum((w.balance for w in wallets), Decimal("0")),
        recent_transactions=[TransactionSchema.model_validate(t) for t in transactions[:RECENT_LIMIT]],
    )
