"""Domain models for Expense Manager.

- User: an account with a role and an approval status
- Category: a user-owned label for expenses
- Expense: a single recorded expense, owned by the user who created it
- Dashboard aggregates: summary, distributions, monthly trend
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from expensemanager.rbac import Role, UserStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class PaymentMethod(str, Enum):
    UPI = "UPI"
    CASH = "Cash"
    CARD = "Card"
    BANK_TRANSFER = "Bank Transfer"
    CHEQUE = "Cheque"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class User(BaseModel):
    id: int
    username: str
    password_hash: str = Field(exclude=True)
    name: str | None = None
    email: str
    role: Role = Role.USER
    status: UserStatus = UserStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    last_login: datetime | None = None
    reset_token: str | None = Field(default=None, exclude=True)
    reset_token_expiry: datetime | None = Field(default=None, exclude=True)

    @property
    def display_name(self) -> str:
        return self.name or self.username


class Category(BaseModel):
    id: int
    name: str
    color: str
    user_id: int


class Expense(BaseModel):
    id: int
    date: datetime
    category_id: int
    material_name: str
    vendor_name: str
    amount: float
    payment_method: PaymentMethod
    description: str | None = None
    receipt_path: str | None = None
    user_id: int
    created_at: datetime = Field(default_factory=_utcnow)


class ExpenseWithCategory(Expense):
    category: Category


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class NewCategory(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=128)
    color: str = Field(min_length=1, max_length=32)


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=128)
    color: str | None = Field(default=None, min_length=1, max_length=32)


class NewExpense(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: datetime
    category_id: int
    material_name: str = Field(min_length=1, max_length=256)
    vendor_name: str = Field(min_length=1, max_length=256)
    amount: float = Field(gt=0)
    payment_method: PaymentMethod
    description: str | None = Field(default=None, max_length=2000)
    receipt_path: str | None = Field(default=None, max_length=512)


class ExpenseUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    date: datetime | None = None
    category_id: int | None = None
    material_name: str | None = Field(default=None, min_length=1, max_length=256)
    vendor_name: str | None = Field(default=None, min_length=1, max_length=256)
    amount: float | None = Field(default=None, gt=0)
    payment_method: PaymentMethod | None = None
    description: str | None = Field(default=None, max_length=2000)
    receipt_path: str | None = Field(default=None, max_length=512)


class DateFilter(BaseModel):
    start_date: datetime
    end_date: datetime

    def contains(self, moment: datetime) -> bool:
        return _naive(self.start_date) <= _naive(moment) <= _naive(self.end_date)


def _naive(moment: datetime) -> datetime:
    """Compare instants as naive UTC so mixed-awareness inputs still order."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Dashboard aggregates
# ---------------------------------------------------------------------------


class HighestCategory(BaseModel):
    name: str
    amount: float
    percentage: float


class MostUsedPaymentMethod(BaseModel):
    method: str
    count: int


class ExpenseSummary(BaseModel):
    total_amount: float = 0.0
    highest_category: HighestCategory | None = None
    most_used_payment_method: MostUsedPaymentMethod | None = None
    pending_receipts: int = 0


class CategoryDistribution(BaseModel):
    category_id: int
    category_name: str
    color: str
    amount: float
    percentage: float


class PaymentMethodDistribution(BaseModel):
    method: str
    amount: float
    count: int
    percentage: float


class MonthlyExpense(BaseModel):
    month: str
    amount: float
