"""Database session management with connection pooling"""

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from wallet_tracker.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """SQLite gets a thread-agnostic connection; server databases get a bounded, recycled pool"""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    # max 20 connections, recycled after 1 hour
    return {"pool_size": 10, "max_overflow": 10, "pool_recycle": 3600}


engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,  # Verify connections before using
    **engine_options(settings.database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Dependency injection for database sessions"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
