"""Budget endpoints - limits joined with cached spend aggregates"""

import asyncio
import logging
from decimal import Decimal
from typing import Dict, List
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from wallet_tracker.api.v1.schemas import (
    BudgetCreateRequest,
    BudgetSchema,
    BudgetUpdateRequest,
    BudgetViewSchema,
    SpendingResponse,
)
from wallet_tracker.api.dependencies import get_store, get_user_id
from wallet_tracker.cache.store import DerivedCacheStore
from wallet_tracker.config import settings
from wallet_tracker.domain.exceptions import AggregateRecomputeError, InvalidRangeError, NotFoundError
from wallet_tracker.domain.models import AggregateKey
from wallet_tracker.domain.views import budget_view
from wallet_tracker.infrastructure.database.repositories import BudgetRepository, ProfileRepository
from wallet_tracker.infrastructure.database.session import get_db
from wallet_tracker.infrastructure.observability.metrics import record_budget_status
from wallet_tracker.utils.date_utils import days_in_month

router = APIRouter()


@router.get("/budgets", response_model=List[BudgetViewSchema])
async def list_budgets(
    month: int = Query(...),
    year: int = Query(...),
    user_id: str = Depends(get_user_id),
    store: DerivedCacheStore = Depends(get_store),
    db: Session = Depends(get_db),
):
    """
    Budgets of a month with spent/remaining/percentage/status.

    Spend comes from the session cache; keys that are missing or stale are
    recomputed from the ledger, one fetch per distinct category.
    """
    try:
        days_in_month(month, year)
    except InvalidRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))

    budgets = BudgetRepository(db).list_for_period(user_id, month, year)
    keys = list(dict.fromkeys(AggregateKey(user_id, b.category_id, month, year) for b in budgets))

    try:
        values = await asyncio.gather(*(store.fetch(k) for k in keys))
    except AggregateRecomputeError as e:
        logging.error(f"Budget spending unavailable: {e}", extra={"user_id": user_id})
        raise HTTPException(status_code=503, detail="Ledger unavailable")
    spent_by_key: Dict[AggregateKey, Decimal] = dict(zip(keys, values))

    views = []
    for budget in budgets:
        key = AggregateKey(user_id, budget.category_id, month, year)
        view = budget_view(budget, spent_by_key[key], settings.budget_warning_threshold)
        record_budget_status(view.status)
        views.append(BudgetViewSchema.from_view(view))
    return views


@router.get("/budgets/spending", response_model=SpendingResponse)
async def get_budget_spending(
    category_id: str = Query(..., min_length=1),
    month: int = Query(...),
    year: int = Query(...),
    user_id: str = Depends(get_user_id),
    store: DerivedCacheStore = Depends(get_store),
):
    """Amount spent in a category for one month"""
    try:
        spent = await store.fetch(AggregateKey(user_id, category_id, month, year))
    except AggregateRecomputeError as e:
        if isinstance(e.cause, InvalidRangeError):
            raise HTTPException(status_code=422, detail=str(e.cause))
        logging.error(f"Budget spending unavailable: {e}", extra={"user_id": user_id})
        raise HTTPException(status_code=503, detail="Ledger unavailable")

    return SpendingResponse(category_id=category_id, month=month, year=year, spent=spent)


@router.post("/budgets", response_model=BudgetSchema, status_code=201)
def create_budget(
    request_body: BudgetCreateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    ProfileRepository(db).ensure_exists(user_id)
    budget = BudgetRepository(db).create({"user_id": user_id, **request_body.model_dump()})
    db.commit()
    return BudgetSchema.model_validate(budget)


@router.patch("/budgets/{budget_id}", response_model=BudgetSchema)
def update_budget(
    budget_id: str,
    request_body: BudgetUpdateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        budget = BudgetRepository(db).update(user_id, budget_id, request_body.changes())
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    db.commit()
    return BudgetSchema.model_validate(budget)


@router.delete("/budgets/{budget_id}", status_code=204)
def delete_budget(
    budget_id: str,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        BudgetRepository(db).delete(user_id, budget_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    db.commit()
    return Response(status_code=204)
