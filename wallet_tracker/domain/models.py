"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

EXPENSE = "expense"
INCOME = "income"
TRANSACTION_TYPES = (INCOME, EXPENSE)

BUDGET_SPENDING = "budget-spending"


@dataclass
class Transaction:
    """Single income or expense entry in the ledger"""

    id: str
    user_id: str
    wallet_id: str
    category_id: str
    amount: Optional[Decimal]
    type: str  # "income" or "expense"
    date: date
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_expense(self) -> bool:
        return self.type == EXPENSE


@dataclass
class TransactionCreate:
    """Fields required to write a new transaction"""

    user_id: str
    wallet_id: str
    category_id: str
    amount: Decimal
    type: str
    date: date
    description: Optional[str] = None


@dataclass
class TransactionPatch:
    """
    Partial update.

    A None field is left unchanged, except description, which is cleared
    when listed in clear.
    """

    wallet_id: Optional[str] = None
    category_id: Optional[str] = None
    amount: Optional[Decimal] = None
    type: Optional[str] = None
    date: Optional[date] = None
    description: Optional[str] = None
    clear: frozenset = field(default_factory=frozenset)

    def changes(self) -> Dict[str, Any]:
        changed = {k: v for k, v in self.__dict__.items() if k != "clear" and v is not None}
        for name in self.clear:
            changed.setdefault(name, None)
        return changed


@dataclass
class Category:
    """Transaction category; user_id None means shared by all users"""

    id: str
    name: str
    icon: str
    type: str
    user_id: Optional[str] = None


@dataclass
class Budget:
    """Monthly spending limit for one category"""

    id: str
    user_id: str
    category_id: str
    amount_limit: Decimal
    period_month: int
    period_year: int
    description: Optional[str] = None


@dataclass
class Wallet:
    """Money container; balance is maintained by the ledger backend"""

    id: str
    user_id: str
    name: str
    balance: Decimal = Decimal("0")


@dataclass
class Goal:
    """Savings target"""

    id: str
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    deadline: Optional[date] = None


@dataclass
class Profile:
    """User profile row backing every user-owned record"""

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


@dataclass(frozen=True)
class AggregateKey:
    """Cache key of one derived spend total"""

    user_id: str
    category_id: str
    month: int
    year: int
    entity: str = field(default=BUDGET_SPENDING)


class BudgetStatus(str, Enum):
    OK = "ok"
    WARNING = "warning"
    OVER = "over"


@dataclass
class BudgetView:
    """Budget limit combined with the current spend aggregate"""

    budget: Budget
    spent: Decimal
    limit: Decimal
    remaining: Decimal
    percentage: Decimal
    status: BudgetStatus


@dataclass
class GoalProgress:
    """Progress of a goal towards its target"""

    goal: Goal
    current: Decimal
    target: Decimal
    remaining: Decimal
    percentage: Decimal
    completed: bool
