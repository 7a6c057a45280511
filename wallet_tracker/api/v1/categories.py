"""Category endpoints - the caller's own categories plus shared ones"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wallet_tracker.api.v1.schemas import CategoryCreateRequest, CategorySchema, TransactionType
from wallet_tracker.api.dependencies import get_user_id
from wallet_tracker.infrastructure.database.repositories import CategoryRepository, ProfileRepository
from wallet_tracker.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/categories", response_model=List[CategorySchema])
def list_categories(
    type: Optional[TransactionType] = Query(None),
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    return [CategorySchema.model_validate(c) for c in CategoryRepository(db).list_visible(user_id, type)]


@router.post("/categories", response_model=CategorySchema, status_code=201)
def create_category(
    request_body: CategoryCreateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    owner = None
    if not request_body.shared:
        ProfileRepository(db).ensure_exists(user_id)
        owner = user_id

    category = CategoryRepository(db).create(
        {"user_id": owner, **request_body.model_dump(exclude={"shared"})}
    )
    db.commit()
    return CategorySchema.model_validate(category)
