"""SQLAlchemy ORM models for the self-hosted ledger backend"""

import uuid
from sqlalchemy import Column, String, Numeric, DateTime, Date, Integer, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class ProfileRecord(Base):
    """User profile; every user-owned row references it"""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    email = Column(Text, nullable=True)
    full_name = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class WalletRecord(Base):
    """Wallet with balance maintained on transaction writes"""

    __tablename__ = "wallets"

    id = Column(String(64), primary_key=True, default=_uuid)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    balance = Column(Numeric(18, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship("TransactionRecord", back_populates="wallet", cascade="all, delete-orphan")


class CategoryRecord(Base):
    """Income/expense category; NULL user_id marks a shared category"""

    __tablename__ = "categories"

    id = Column(String(64), primary_key=True, default=_uuid)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(Text, nullable=False)
    icon = Column(Text, nullable=False, default="")
    type = Column(String(16), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class TransactionRecord(Base):
    """Ledger entry"""

    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True, default=_uuid)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    wallet_id = Column(String(64), ForeignKey("wallets.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(String(64), ForeignKey("categories.id"), nullable=False, index=True)
    amount = Column(Numeric(18, 2), nullable=False)
    type = Column(String(16), nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    wallet = relationship("WalletRecord", back_populates="transactions")


class BudgetRecord(Base):
    """Monthly category limit; no uniqueness per (user, category, month)"""

    __tablename__ = "budgets"

    id = Column(String(64), primary_key=True, default=_uuid)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(64), ForeignKey("categories.id"), nullable=False)
    amount_limit = Column(Numeric(18, 2), nullable=False)
    period_month = Column(Integer, nullable=False)
    period_year = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GoalRecord(Base):
    """Savings goal"""

    __tablename__ = "goals"

    id = Column(String(64), primary_key=True, default=_uuid)
    user_id = Column(String(64), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    target_amount = Column(Numeric(18, 2), nullable=False)
    current_amount = Column(Numeric(18, 2), nullable=False, default=0)
    deadline = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
