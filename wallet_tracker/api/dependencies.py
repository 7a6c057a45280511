"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from wallet_tracker.cache.sessions import CacheSessionRegistry
from wallet_tracker.cache.store import DerivedCacheStore
from wallet_tracker.domain.ledger import Ledger
from wallet_tracker.services.coordinator import ConsistencyCoordinator


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: str = Header(..., min_length=1)) -> str:
    """Caller identity; established upstream by the auth layer"""
    return x_user_id


def get_ledger(request: Request) -> Ledger:
    """Provide the configured ledger backend"""
    return request.app.state.ledger


def get_cache_sessions(request: Request) -> CacheSessionRegistry:
    return request.app.state.cache_sessions


def get_store(
    user_id: str = Depends(get_user_id),
    sessions: CacheSessionRegistry = Depends(get_cache_sessions),
) -> DerivedCacheStore:
    """The caller's session cache, opened on first use"""
    return sessions.open(user_id)


def get_coordinator(
    request: Request,
    ledger: Ledger = Depends(get_ledger),
    store: DerivedCacheStore = Depends(get_store),
) -> ConsistencyCoordinator:
    """Provide a coordinator bound to the caller's cache"""
    return ConsistencyCoordinator(ledger, store, request_id=get_request_id(request))
