"""Profile of the calling user"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from wallet_tracker.api.v1.schemas import ProfileSchema, ProfileUpdateRequest
from wallet_tracker.api.dependencies import get_user_id
from wallet_tracker.infrastructure.database.repositories import ProfileRepository
from wallet_tracker.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/profile", response_model=ProfileSchema)
def get_profile(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    profile = ProfileRepository(db).get(user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail=f"Profile {user_id} not found")
    return ProfileSchema.model_validate(profile)


@router.patch("/profile", response_model=ProfileSchema)
def update_profile(
    request_body: ProfileUpdateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Update full_name and/or email; null clears a field"""
    profile = ProfileRepository(db).update(user_id, request_body.changes())
    db.commit()
    return ProfileSchema.model_validate(profile)
