"""Data access layer for wallet-tracker entities"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from wallet_tracker.domain.exceptions import NotFoundError
from wallet_tracker.domain.ledger import TransactionFilter
from wallet_tracker.domain.models import (
    EXPENSE,
    INCOME,
    Budget,
    Category,
    Goal,
    Profile,
    Transaction,
    Wallet,
)
from wallet_tracker.infrastructure.database.models import (
    BudgetRecord,
    CategoryRecord,
    GoalRecord,
    ProfileRecord,
    TransactionRecord,
    WalletRecord,
)


def to_transaction(row: TransactionRecord) -> Transaction:
    return Transaction(
        id=row.id,
        user_id=row.user_id,
        wallet_id=row.wallet_id,
        category_id=row.category_id,
        amount=Decimal(row.amount) if row.amount is not None else None,
        type=row.type,
        date=row.date,
        description=row.description,
        created_at=row.created_at,
    )


def to_budget(row: BudgetRecord) -> Budget:
    return Budget(
        id=row.id,
        user_id=row.user_id,
        category_id=row.category_id,
        amount_limit=Decimal(row.amount_limit),
        period_month=row.period_month,
        period_year=row.period_year,
        description=row.description,
    )


def to_wallet(row: WalletRecord) -> Wallet:
    return Wallet(id=row.id, user_id=row.user_id, name=row.name, balance=Decimal(row.balance or 0))


def to_goal(row: GoalRecord) -> Goal:
    return Goal(
        id=row.id,
        user_id=row.user_id,
        name=row.name,
        target_amount=Decimal(row.target_amount),
        current_amount=Decimal(row.current_amount or 0),
        deadline=row.deadline,
    )


def to_category(row: CategoryRecord) -> Category:
    return Category(id=row.id, user_id=row.user_id, name=row.name, icon=row.icon, type=row.type)


def _apply_changes(row, changes: Dict[str, Any]) -> None:
    for name, value in changes.items():
        setattr(row, name, value)


class ProfileRepository:
    """Repository for user profiles"""

    def __init__(self, db: Session):
        self.db = db

    def ensure_exists(self, user_id: str, email: Optional[str] = None, full_name: Optional[str] = None) -> Profile:
        """Create the profile row on first write by a user"""
        row = self.db.get(ProfileRecord, user_id)
        if row is None:
            if not full_name:
                full_name = email.split("@")[0] if email else "User"
            row = ProfileRecord(id=user_id, email=email, full_name=full_name)
            self.db.add(row)
            self.db.flush()
        return Profile(id=row.id, email=row.email, full_name=row.full_name)

    def get(self, user_id: str) -> Optional[Profile]:
        row = self.db.get(ProfileRecord, user_id)
        if row is None:
            return None
        return Profile(id=row.id, email=row.email, full_name=row.full_name)

    def update(self, user_id: str, changes: Dict[str, Any]) -> Profile:
        """Edit name/email, creating the profile first if the user has none"""
        self.ensure_exists(user_id, email=changes.get("email"), full_name=changes.get("full_name"))
        row = self.db.get(ProfileRecord, user_id)
        _apply_changes(row, changes)
        self.db.flush()
        return Profile(id=row.id, email=row.email, full_name=row.full_name)


class TransactionRepository:
    """Repository for ledger transactions, including wallet balance upkeep"""

    def __init__(self, db: Session):
        self.db = db

    def list(self, filter: TransactionFilter) -> List[Transaction]:
        """Fetch transactions matching filter, newest first"""
        query = self.db.query(TransactionRecord).filter(TransactionRecord.user_id == filter.user_id)
        if filter.category_id is not None:
            query = query.filter(TransactionRecord.category_id == filter.category_id)
        if filter.type is not None:
            query = query.filter(TransactionRecord.type == filter.type)
        if filter.date_from is not None:
            query = query.filter(TransactionRecord.date >= filter.date_from)
        if filter.date_to is not None:
            query = query.filter(TransactionRecord.date <= filter.date_to)

        rows = query.order_by(TransactionRecord.date.desc(), TransactionRecord.created_at.desc()).all()
        return [to_transaction(row) for row in rows]

    def get(self, transaction_id: str) -> Optional[TransactionRecord]:
        return self.db.get(TransactionRecord, transaction_id)

    def create(self, data: Dict[str, Any]) -> TransactionRecord:
        row = TransactionRecord(**data)
        self.db.add(row)
        self.db.flush()
        self._adjust_wallet(row.wallet_id, row.type, row.amount, sign=1)
        return row

    def update(self, transaction_id: str, changes: Dict[str, Any]) -> TransactionRecord:
        row = self.get(transaction_id)
        if row is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")

        # Revert the old balance effect, then apply the new one
        self._adjust_wallet(row.wallet_id, row.type, row.amount, sign=-1)
        _apply_changes(row, changes)
        self.db.flush()
        self._adjust_wallet(row.wallet_id, row.type, row.amount, sign=1)
        return row

    def delete(self, transaction_id: str) -> None:
        row = self.get(transaction_id)
        if row is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        self._adjust_wallet(row.wallet_id, row.type, row.amount, sign=-1)
        self.db.delete(row)
        self.db.flush()

    def _adjust_wallet(self, wallet_id: str, type: str, amount, sign: int) -> None:
        wallet = self.db.get(WalletRecord, wallet_id)
        if wallet is None or amount is None:
            return
        delta = Decimal(amount)
        if type == EXPENSE:
            delta = -delta
        elif type != INCOME:
            return
        wallet.balance = Decimal(wallet.balance or 0) + sign * delta


class BudgetRepository:
    """Repository for monthly budgets"""

    def __init__(self, db: Session):
        self.db = db

    def list_for_period(self, user_id: str, month: int, year: int) -> List[Budget]:
        rows = (
            self.db.query(BudgetRecord)
            .filter(
                BudgetRecord.user_id == user_id,
                BudgetRecord.period_month == month,
                BudgetRecord.period_year == year,
            )
            .order_by(BudgetRecord.created_at)
            .all()
        )
        return [to_budget(row) for row in rows]

    def create(self, data: Dict[str, Any]) -> Budget:
        row = BudgetRecord(**data)
        self.db.add(row)
        self.db.flush()
        return to_budget(row)

    def update(self, user_id: str, budget_id: str, changes: Dict[str, Any]) -> Budget:
        row = self._owned(user_id, budget_id)
        _apply_changes(row, changes)
        self.db.flush()
        return to_budget(row)

    def delete(self, user_id: str, budget_id: str) -> None:
        self.db.delete(self._owned(user_id, budget_id))
        self.db.flush()

    def _owned(self, user_id: str, budget_id: str) -> BudgetRecord:
        row = self.db.get(BudgetRecord, budget_id)
        if row is None or row.user_id != user_id:
            raise NotFoundError(f"Budget {budget_id} not found")
        return row


class WalletRepository:
    """Repository for wallets"""

    def __init__(self, db: Session):
        self.db = db

    def list(self, user_id: str) -> List[Wallet]:
        rows = (
            self.db.query(WalletRecord)
            .filter(WalletRecord.user_id == user_id)
            .order_by(WalletRecord.created_at.desc())
            .all()
        )
        return [to_wallet(row) for row in rows]

    def create(self, data: Dict[str, Any]) -> Wallet:
        row = WalletRecord(**data)
        self.db.add(row)
        self.db.flush()
        return to_wallet(row)

    def update(self, user_id: str, wallet_id: str, changes: Dict[str, Any]) -> Wallet:
        row = self._owned(user_id, wallet_id)
        _apply_changes(row, changes)
        self.db.flush()
        return to_wallet(row)

    def delete(self, user_id: str, wallet_id: str) -> None:
        self.db.delete(self._owned(user_id, wallet_id))
        self.db.flush()

    def _owned(self, user_id: str, wallet_id: str) -> WalletRecord:
        row = self.db.get(WalletRecord, wallet_id)
        if row is None or row.user_id != user_id:
            raise NotFoundError(f"Wallet {wallet_id} not found")
        return row


class GoalRepository:
    """Repository for savings goals"""

    def __init__(self, db: Session):
        self.db = db

    def list(self, user_id: str) -> List[Goal]:
        rows = (
            self.db.query(GoalRecord)
            .filter(GoalRecord.user_id == user_id)
            .order_by(GoalRecord.created_at.desc())
            .all()
        )
        return [to_goal(row) for row in rows]

    def create(self, data: Dict[str, Any]) -> Goal:
        row = GoalRecord(**data)
        self.db.add(row)
        self.db.flush()
        return to_goal(row)

    def update(self, user_id: str, goal_id: str, changes: Dict[str, Any]) -> Goal:
        row = self._owned(user_id, goal_id)
        _apply_changes(row, changes)
        self.db.flush()
        return to_goal(row)

    def delete(self, user_id: str, goal_id: str) -> None:
        self.db.delete(self._owned(user_id, goal_id))
        self.db.flush()

    def _owned(self, user_id: str, goal_id: str) -> GoalRecord:
        row = self.db.get(GoalRecord, goal_id)
        if row is None or row.user_id != user_id:
            raise NotFoundError(f"Goal {goal_id} not found")
        return row


class CategoryRepository:
    """Repository for categories (user-owned plus shared)"""

    def __init__(self, db: Session):
        self.db = db

    def list_visible(self, user_id: str, type: Optional[str] = None) -> List[Category]:
        query = self.db.query(CategoryRecord).filter(
            or_(CategoryRecord.user_id == user_id, CategoryRecord.user_id.is_(None))
        )
        if type:
            query = query.filter(CategoryRecord.type == type)
        return [to_category(row) for row in query.order_by(CategoryRecord.name).all()]

    def create(self, data: Dict[str, Any]) -> Category:
        row = CategoryRecord(**data)
        self.db.add(row)
        self.db.flush()
        return to_category(row)
