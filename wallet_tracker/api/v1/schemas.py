"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
import datetime as dt
from decimal import Decimal
from typing import ClassVar, Dict, FrozenSet, List, Literal, Optional

from wallet_tracker.domain.models import (
    BudgetView,
    GoalProgress,
    Transaction,
    TransactionCreate,
    TransactionPatch,
)

TransactionType = Literal["income", "expense"]


class PatchRequest(BaseModel):
    """
    PATCH body: omitted fields stay unchanged, explicit null clears.

    Only fields named in clearable may be null.
    """

    clearable: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def check_nulls(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.clearable:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class TransactionSchema(BaseModel):
    """Transaction as stored in the ledger"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    wallet_id: str
    category_id: str
    amount: Optional[Decimal] = None
    type: TransactionType
    date: dt.date
    description: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    def to_domain(self) -> Transaction:
        return Transaction(**self.model_dump())


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    wallet_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    type: TransactionType
    date: dt.date
    description: Optional[str] = None

    def to_domain(self, user_id: str) -> TransactionCreate:
        return TransactionCreate(user_id=user_id, **self.model_dump())


class TransactionPatchSchema(PatchRequest):
    """Fields that may change on an existing transaction"""

    clearable: ClassVar[FrozenSet[str]] = frozenset({"description"})

    wallet_id: Optional[str] = None
    category_id: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    type: Optional[TransactionType] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None

    def to_domain(self) -> TransactionPatch:
        cleared = frozenset(name for name, value in self.changes().items() if value is None)
        return TransactionPatch(**self.model_dump(), clear=cleared)


class TransactionUpdateRequest(BaseModel):
    """Request body for PATCH /v1/transactions/{id}"""

    updates: TransactionPatchSchema
    old_transaction: Optional[TransactionSchema] = Field(
        None, description="Caller's copy of the record before the edit"
    )


class BudgetCreateRequest(BaseModel):
    category_id: str = Field(..., min_length=1)
    amount_limit: Decimal = Field(..., gt=0)
    period_month: int = Field(..., ge=1, le=12)
    period_year: int = Field(..., ge=1)
    description: Optional[str] = None


class BudgetUpdateRequest(PatchRequest):
    clearable: ClassVar[FrozenSet[str]] = frozenset({"description"})

    category_id: Optional[str] = None
    amount_limit: Optional[Decimal] = Field(None, gt=0)
    period_month: Optional[int] = Field(None, ge=1, le=12)
    period_year: Optional[int] = Field(None, ge=1)
    description: Optional[str] = None


class BudgetSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    category_id: str
    amount_limit: Decimal
    period_month: int
    period_year: int
    description: Optional[str] = None


class BudgetViewSchema(BaseModel):
    """Budget with spend progress"""

    budget: BudgetSchema
    spent: Decimal
    limit: Decimal
    remaining: Decimal
    percentage: Decimal
    status: Literal["ok", "warning", "over"]

    @classmethod
    def from_view(cls, view: BudgetView) -> "BudgetViewSchema":
        return cls(
            budget=BudgetSchema.model_validate(view.budget),
            spent=view.spent,
            limit=view.limit,
            remaining=view.remaining,
            percentage=view.percentage,
            status=view.status.value,
        )


class SpendingResponse(BaseModel):
    category_id: str
    month: int
    year: int
    spent: Decimal


class WalletCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    balance: Decimal = Decimal("0")


class WalletUpdateRequest(PatchRequest):
    name: Optional[str] = Field(None, min_length=1)
    balance: Optional[Decimal] = None


class WalletSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    balance: Decimal


class GoalCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    target_amount: Decimal = Field(..., gt=0)
    current_amount: Decimal = Field(Decimal("0"), ge=0)
    deadline: Optional[dt.date] = None


class GoalUpdateRequest(PatchRequest):
    clearable: ClassVar[FrozenSet[str]] = frozenset({"deadline"})

    name: Optional[str] = Field(None, min_length=1)
    target_amount: Optional[Decimal] = Field(None, gt=0)
    current_amount: Optional[Decimal] = Field(None, ge=0)
    deadline: Optional[dt.date] = None


class GoalSchema(BaseModel):
    """Goal with progress towards its target"""

    id: str
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    deadline: Optional[dt.date] = None
    remaining: Decimal
    percentage: Decimal
    completed: bool

    @classmethod
    def from_progress(cls, progress: GoalProgress) -> "GoalSchema":
        goal = progress.goal
        return cls(
            id=goal.id,
            user_id=goal.user_id,
            name=goal.name,
            target_amount=progress.target,
            current_amount=progress.current,
            deadline=goal.deadline,
            remaining=progress.remaining,
            percentage=progress.percentage,
            completed=progress.completed,
        )


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    icon: str = ""
    type: TransactionType
    shared: bool = Field(False, description="Create as a category visible to all users")


class CategorySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    name: str
    icon: str
    type: TransactionType


class DashboardResponse(BaseModel):
    """Monthly overview"""

    month: int
    year: int
    income: Decimal
    expense: Decimal
    net: Decimal
    spending_by_category: Dict[str, Decimal]
    total_balance: Decimal
    recent_transactions: List[TransactionSchema]


class SessionResponse(BaseModel):
    user_id: str
    cached_aggregates: int


class ProfileSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class ProfileUpdateRequest(PatchRequest):
    clearable: ClassVar[FrozenSet[str]] = frozenset({"email", "full_name"})

    email: Optional[str] = Field(None, min_length=3)
    full_name: Optional[str] = Field(None, min_length=1)
