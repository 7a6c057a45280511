"""Cache session lifecycle: opened at login, torn down at logout"""

from fastapi import APIRouter, Depends, Response

from wallet_tracker.api.v1.schemas import SessionResponse
from wallet_tracker.api.dependencies import get_cache_sessions, get_user_id
from wallet_tracker.cache.sessions import CacheSessionRegistry

router = APIRouter()


@router.post("/sessions", response_model=SessionResponse, status_code=201)
def open_session(
    user_id: str = Depends(get_user_id),
    sessions: CacheSessionRegistry = Depends(get_cache_sessions),
):
    store = sessions.open(user_id)
    return SessionResponse(user_id=user_id, cached_aggregates=len(store))


@router.delete("/sessions", status_code=204)
def close_session(
    user_id: str = Depends(get_user_id),
    sessions: CacheSessionRegistry = Depends(get_cache_sessions),
):
    sessions.close(user_id)
    return Response(status_code=204)
