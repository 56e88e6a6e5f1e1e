"""Transient in-memory storage for Expense Manager.

Repository-style async API over plain dicts.  Nothing survives a restart;
this is the only storage backend.  Callers fetch rows here and hand owner
ids to the authorization core, which never queries storage itself.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone

from expensemanager.core import analytics
from expensemanager.core.models import (
    Category,
    CategoryDistribution,
    CategoryUpdate,
    DateFilter,
    Expense,
    ExpenseSummary,
    ExpenseUpdate,
    ExpenseWithCategory,
    MonthlyExpense,
    NewCategory,
    NewExpense,
    PaymentMethodDistribution,
    User,
)
from expensemanager.rbac import Role, UserStatus

logger = logging.getLogger("expensemanager.storage")

DEFAULT_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Office Supplies", "#1A73E8"),
    ("Travel", "#34A853"),
    ("Utilities", "#FBBC05"),
    ("Marketing", "#EA4335"),
    ("Office Rent", "#9C27B0"),
)

DEMO_USERS: tuple[tuple[str, str, str, Role], ...] = (
    ("admin", "Admin User", "admin@example.com", Role.ADMIN),
    ("accountant", "Accountant User", "accountant@example.com", Role.ACCOUNTANT),
    ("manager", "Manager User", "manager@example.com", Role.MANAGER),
    ("user", "Regular User", "user@example.com", Role.USER),
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStorage:
    """Users, categories and expenses kept in process memory."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Drop all rows and restart id sequences."""
        self._users: dict[int, User] = {}
        self._categories: dict[int, Category] = {}
        self._expenses: dict[int, Expense] = {}
        self._revoked_tokens: set[str] = set()
        self._next_user_id = 1
        self._next_category_id = 1
        self._next_expense_id = 1

    # -- Users --------------------------------------------------------------

    async def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    async def get_user_by_email(self, email: str) -> User | None:
        return next((u for u in self._users.values() if u.email == email), None)

    async def create_user(
        self,
        *,
        username: str,
        password_hash: str,
        email: str,
        name: str | None = None,
        role: Role = Role.USER,
        status: UserStatus = UserStatus.PENDING,
    ) -> User:
        """Insert a user and give them the default categories."""
        user = User(
            id=self._next_user_id,
            username=username,
            password_hash=password_hash,
            name=name,
            email=email,
            role=role,
            status=status,
        )
        self._next_user_id += 1
        self._users[user.id] = user

        for cat_name, color in DEFAULT_CATEGORIES:
            await self.create_category(user.id, NewCategory(name=cat_name, color=color))

        logger.debug("Created user %s (%s, %s)", user.id, role, status)
        return user

    async def update_user_status(self, user_id: int, status: UserStatus) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        updated = user.model_copy(update={"status": status})
        self._users[user_id] = updated
        return updated

    async def get_pending_users(self) -> list[User]:
        return [u for u in self._users.values() if u.status == UserStatus.PENDING]

    async def update_user_login_time(self, user_id: int) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        updated = user.model_copy(update={"last_login": _utcnow()})
        self._users[user_id] = updated
        return updated

    async def create_password_reset_token(
        self, email: str, lifetime: timedelta = timedelta(hours=1)
    ) -> str | None:
        user = await self.get_user_by_email(email)
        if user is None:
            return None
        token = secrets.token_urlsafe(24)
        self._users[user.id] = user.model_copy(
            update={"reset_token": token, "reset_token_expiry": _utcnow() + lifetime}
        )
        return token

    async def get_user_by_reset_token(self, token: str) -> User | None:
        now = _utcnow()
        return next(
            (
                u
                for u in self._users.values()
                if u.reset_token is not None
                and secrets.compare_digest(u.reset_token.encode(), token.encode())
                and u.reset_token_expiry is not None
                and u.reset_token_expiry > now
            ),
            None,
        )

    async def update_user_password(self, user_id: int, password_hash: str) -> User | None:
        user = self._users.get(user_id)
        if user is None:
            return None
        updated = user.model_copy(
            update={"password_hash": password_hash, "reset_token": None, "reset_token_expiry": None}
        )
        self._users[user_id] = updated
        return updated

    async def revoke_token(self, jti: str) -> None:
        self._revoked_tokens.add(jti)

    async def is_token_revoked(self, jti: str) -> bool:
        return jti in self._revoked_tokens

    async def seed_demo_users(self, password_hash: str) -> list[User]:
        """Create one active account per role, skipping usernames already taken."""
        created = []
        for username, name, email, role in DEMO_USERS:
            if await self.get_user_by_username(username) is not None:
                continue
            created.append(
                await self.create_user(
                    username=username,
                    password_hash=password_hash,
                    email=email,
                    name=name,
                    role=role,
                    status=UserStatus.ACTIVE,
                )
            )
        return created

    # -- Categories ---------------------------------------------------------

    async def get_categories(self, user_id: int) -> list[Category]:
        return [c for c in self._categories.values() if c.user_id == user_id]

    async def get_category(self, category_id: int) -> Category | None:
        return self._categories.get(category_id)

    async def create_category(self, user_id: int, data: NewCategory) -> Category:
        category = Category(id=self._next_category_id, user_id=user_id, **data.model_dump())
        self._next_category_id += 1
        self._categories[category.id] = category
        return category

    async def update_category(self, category_id: int, data: CategoryUpdate) -> Category | None:
        existing = self._categories.get(category_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=data.model_dump(exclude_unset=True, exclude_none=True))
        self._categories[category_id] = updated
        return updated

    async def category_in_use(self, category_id: int) -> bool:
        return any(e.category_id == category_id for e in self._expenses.values())

    async def delete_category(self, category_id: int) -> bool:
        """Delete a category. Returns False when missing or still used by an expense."""
        if await self.category_in_use(category_id):
            return False
        return self._categories.pop(category_id, None) is not None

    # -- Expenses -----------------------------------------------------------

    def _with_category(self, expense: Expense) -> ExpenseWithCategory:
        category = self._categories.get(expense.category_id)
        if category is None:
            msg = f"Category not found: {expense.category_id}"
            raise LookupError(msg)
        return ExpenseWithCategory(**expense.model_dump(), category=category)

    async def get_expenses(
        self, user_id: int, date_filter: DateFilter | None = None
    ) -> list[ExpenseWithCategory]:
        rows = [e for e in self._expenses.values() if e.user_id == user_id]
        if date_filter is not None:
            rows = [e for e in rows if date_filter.contains(e.date)]
        return [self._with_category(e) for e in rows]

    async def get_expense(self, expense_id: int) -> ExpenseWithCategory | None:
        expense = self._expenses.get(expense_id)
        if expense is None:
            return None
        return self._with_category(expense)

    async def create_expense(self, user_id: int, data: NewExpense) -> Expense:
        expense = Expense(id=self._next_expense_id, user_id=user_id, **data.model_dump())
        self._next_expense_id += 1
        self._expenses[expense.id] = expense
        return expense

    async def create_expenses_bulk(self, user_id: int, items: list[NewExpense]) -> list[Expense]:
        return [await self.create_expense(user_id, item) for item in items]

    async def update_expense(self, expense_id: int, data: ExpenseUpdate) -> Expense | None:
        """Apply the fields set on *data*. The owning user never changes."""
        existing = self._expenses.get(expense_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=data.model_dump(exclude_unset=True, exclude_none=True))
        self._expenses[expense_id] = updated
        return updated

    async def delete_expense(self, expense_id: int) -> bool:
        return self._expenses.pop(expense_id, None) is not None

    # -- Dashboard ----------------------------------------------------------

    async def get_expense_summary(
        self, user_id: int, date_filter: DateFilter | None = None
    ) -> ExpenseSummary:
        return analytics.summarize(await self.get_expenses(user_id, date_filter))

    async def get_category_distribution(
        self, user_id: int, date_filter: DateFilter | None = None
    ) -> list[CategoryDistribution]:
        return analytics.category_distribution(await self.get_expenses(user_id, date_filter))

    async def get_payment_method_distribution(
        self, user_id: int, date_filter: DateFilter | None = None
    ) -> list[PaymentMethodDistribution]:
        return analytics.payment_method_distribution(await self.get_expenses(user_id, date_filter))

    async def get_monthly_expense_trend(self, user_id: int, months: int = 12) -> list[MonthlyExpense]:
        return analytics.monthly_trend(await self.get_expenses(user_id), months)

    async def get_recent_expenses(self, user_id: int, limit: int = 5) -> list[ExpenseWithCategory]:
        return analytics.recent(await self.get_expenses(user_id), limit)
