"""Shared fixtures for Expense Manager tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from expensemanager.api.app import app
from expensemanager.api.rate_limit import limiter
from expensemanager.auth_providers.user_account import hash_password, issue_jwt
from expensemanager.core.models import NewExpense, PaymentMethod, User
from expensemanager.rbac import Role, UserStatus

TEST_PASSWORD = "correct-horse-battery"

# PBKDF2 is deliberately slow; hash once per session.
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture
def password() -> str:
    return TEST_PASSWORD


@pytest_asyncio.fixture
async def storage():
    """The app's storage, emptied for each test."""
    store = app.state.storage
    store.reset()
    return store


@pytest_asyncio.fixture
async def client(storage):
    """HTTP test client wired to a fresh in-memory store."""
    # Disable rate limiter for tests
    limiter.enabled = False

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def create_account(storage):
    """Factory: insert an account directly into storage."""

    async def _create(
        username: str,
        role: Role = Role.USER,
        status: UserStatus = UserStatus.ACTIVE,
    ) -> User:
        return await storage.create_user(
            username=username,
            password_hash=_PASSWORD_HASH,
            email=f"{username}@example.com",
            name=username.title(),
            role=role,
            status=status,
        )

    return _create


@pytest_asyncio.fixture
async def accounts(create_account) -> dict[str, User]:
    """One active account per role plus two regular users."""
    return {
        "admin": await create_account("admin", Role.ADMIN),
        "accountant": await create_account("accountant", Role.ACCOUNTANT),
        "manager": await create_account("manager", Role.MANAGER),
        "alice": await create_account("alice", Role.USER),
        "bob": await create_account("bob", Role.USER),
    }


@pytest.fixture
def auth_headers():
    """Factory: bearer header for an account."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_jwt(user.id, user.username)}"}

    return _headers


@pytest.fixture
def add_expense(storage):
    """Factory: store an expense in the owner's first default category."""

    async def _add(
        owner: User,
        amount: float = 100.0,
        when: datetime | None = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        receipt_path: str | None = None,
        category_index: int = 0,
    ):
        categories = await storage.get_categories(owner.id)
        return await storage.create_expense(
            owner.id,
            NewExpense(
                date=when or datetime(2024, 3, 15, tzinfo=timezone.utc),
                category_id=categories[category_index].id,
                material_name="Printer paper",
                vendor_name="Stationers Ltd",
                amount=amount,
                payment_method=payment_method,
                receipt_path=receipt_path,
            ),
        )

    return _add
