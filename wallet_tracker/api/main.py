"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from wallet_tracker.api.middleware import RequestIDMiddleware, MetricsMiddleware
from wallet_tracker.api.v1 import budgets, categories, dashboard, goals, profile, sessions, transactions, wallets
from wallet_tracker.cache.sessions import CacheSessionRegistry
from wallet_tracker.domain.aggregation import recompute_spent
from wallet_tracker.domain.ledger import Ledger
from wallet_tracker.infrastructure.database.ledger import SqlLedger
from wallet_tracker.infrastructure.database.models import Base
from wallet_tracker.infrastructure.database.session import SessionLocal, engine
from wallet_tracker.infrastructure.observability.logging import setup_logging
from wallet_tracker.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield
    app.state.cache_sessions.close_all()


def create_app(ledger: Ledger | None = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    ledger must write to the database behind get_db, since wallets,
    budgets and goals are read from there.
    """
    app = FastAPI(
        lifespan=lifespan,
        title="Wallet Tracker",
        description="Wallets, transactions, budgets and goals with consistent spend tracking",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Ledger shares the database the repositories read
    app.state.ledger = ledger or SqlLedger(SessionLocal)
    app.state.cache_sessions = CacheSessionRegistry(
        lambda user_id: lambda key: recompute_spent(app.state.ledger, key)
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(sessions.router, prefix="/v1", tags=["sessions"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(budgets.router, prefix="/v1", tags=["budgets"])
    app.include_router(wallets.router, prefix="/v1", tags=["wallets"])
    app.include_router(goals.router, prefix="/v1", tags=["goals"])
    app.include_router(categories.router, prefix="/v1", tags=["categories"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(profile.router, prefix="/v1", tags=["profile"])

    return app


app = create_app()
