"""Savings goal endpoints"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from wallet_tracker.api.v1.schemas import GoalCreateRequest, GoalSchema, GoalUpdateRequest
from wallet_tracker.api.dependencies import get_user_id
from wallet_tracker.domain.exceptions import NotFoundError
from wallet_tracker.domain.views import goal_progress
from wallet_tracker.infrastructure.database.repositories import GoalRepository, ProfileRepository
from wallet_tracker.infrastructure.database.session import get_db

router = APIRouter()


@router.get("/goals", response_model=List[GoalSchema])
def list_goals(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    """Goals with progress, newest first"""
    return [GoalSchema.from_progress(goal_progress(g)) for g in GoalRepository(db).list(user_id)]


@router.post("/goals", response_model=GoalSchema, status_code=201)
def create_goal(
    request_body: GoalCreateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    ProfileRepository(db).ensure_exists(user_id)
    goal = GoalRepository(db).create({"user_id": user_id, **request_body.model_dump()})
    db.commit()
    return GoalSchema.from_progress(goal_progress(goal))


@router.patch("/goals/{goal_id}", response_model=GoalSchema)
def update_goal(
    goal_id: str,
    request_body: GoalUpdateRequest,
    user_id: str = Depends(get_user_id),
    db: Session = Depends(get_db),
):
    """Edit a goal, including adding money via current_amount"""
    try:
        goal = GoalRepository(db).update(user_id, goal_id, request_body.changes())
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    db.commit()
    return GoalSchema.from_progress(goal_progress(goal))


@router.delete("/goals/{goal_id}", status_code=204)
def delete_goal(goal_id: str, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    try:
        GoalRepository(db).delete(user_id, goal_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    db.commit()
    return Response(status_code=204)
