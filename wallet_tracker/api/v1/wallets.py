"""Wallet endpoints; balances are maintained by the ledger on transaction writes"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from wallet_tracker.api.v1.schemas import WalletCreateRequest, WalletSchema, WalletUpdateRequest
from wallet_tracker.api.dependencies import get_coordinator, get_user_id
from wallet_tracker.domain.exceptions import NotFoundError
from wallet_tracker.infrastructure.database.repositories import ProfileRepository, WalletRepository
from wallet_tracker.infrastructure.database.session import get_db
from wallet_tracker.services.coordinator import ConsistencyCoordinator

router = APIRouter()


@router.get("/wallets", response_model=List[WalletSchema])
def list_wallets(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return [WalletSchema.model_validate(w) for w in WalletRepository(db).list(user_id)]


@router.post("/wallets", response_model=WalletSchema, status_code=201)
def create_wallet(
    request_body: WalletCreateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    ProfileRepository(db).ensure_exists(user_id)
    wallet = WalletRepository(db).create({"user_id": user_id, **request_body.model_dump()})
    db.commit()
    return WalletSchema.model_validate(wallet)


@router.patch("/wallets/{wallet_id}", response_model=WalletSchema)
def update_wallet(
    wallet_id: str,
    request_body: WalletUpdateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    try:
        wallet = WalletRepository(db).update(user_id, wallet_id, request_body.changes())
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    db.commit()
    return WalletSchema.model_validate(wallet)


@router.delete("/wallets/{wallet_id}", status_code=204)
async def delete_wallet(
    wallet_id: str,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
    coordinator: ConsistencyCoordinator = Depends(get_coordinator),
):
    """
    Delete a wallet together with its transactions.

    The transactions go without passing through the coordinator, so every
    cached aggregate of the user is refreshed afterwards.
    """
    try:
        WalletRepository(db).delete(user_id, wallet_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    db.commit()

    await coordinator.safety_net(user_id)
    return Response(status_code=204)
