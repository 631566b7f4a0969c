import os
from datetime import date, timedelta
from typing import AsyncGenerator
import uuid

# Use SQLite for testing; must be set before fintrack.db.session is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from fintrack.db.base import Base
from fintrack.models.user import User
from fintrack.models.transaction import Transaction
from fintrack.models.enums import TransactionType


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed reference date (a Saturday) so heatmap/window tests are deterministic
TODAY = date(2025, 3, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_maker = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session_maker() as session:
        yield session


async def _make_user(session: AsyncSession, email: str, name: str) -> User:
    user = User(
        id=str(uuid.uuid4()),
        email=email,
        display_name=name,
        is_active=True,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest_asyncio.fixture(scope="function")
async def test_user(test_session: AsyncSession) -> User:
    """Create a test user."""
    return await _make_user(test_session, "test@example.com", "Test User")


@pytest_asyncio.fixture(scope="function")
async def other_user(test_session: AsyncSession) -> User:
    """A second user, for ownership checks."""
    return await _make_user(test_session, "other@example.com", "Other User")


@pytest_asyncio.fixture(scope="function")
async def test_transactions(test_session: AsyncSession, test_user: User) -> list[Transaction]:
    """Create test transactions for the user, dated relative to TODAY."""
    expense = TransactionType.EXPENSE.value
    income = TransactionType.INCOME.value
    transactions_data = [
        # Inside the 30-day window
        {"type": expense, "amount": 120.0, "category": "Food & Dining", "date": TODAY},
        {"type": expense, "amount": 80.0, "category": "Food & Dining", "date": TODAY - timedelta(days=1)},
        {"type": expense, "amount": 40.0, "category": "Transportation", "date": TODAY - timedelta(days=2)},
        {"type": expense, "amount": 60.0, "category": "Entertainment", "date": TODAY - timedelta(days=6)},
        {"type": expense, "amount": 200.0, "category": "Shopping", "date": TODAY - timedelta(days=8)},
        {"type": income, "amount": 3000.0, "category": "Salary", "date": TODAY - timedelta(days=10)},
        {"type": expense, "amount": 100.0, "category": "Utilities", "date": TODAY - timedelta(days=20)},
        # Only inside the 90-day window
        {"type": income, "amount": 400.0, "category": "Business", "date": TODAY - timedelta(days=45)},
        {"type": expense, "amount": 500.0, "category": "Travel", "date": TODAY - timedelta(days=60)},
    ]

    transactions = []
    for data in transactions_data:
        t = Transaction(
            id=str(uuid.uuid4()),
            user_id=test_user.id,
            description="",
            **data
        )
        test_session.add(t)
        transactions.append(t)

    await test_session.commit()
    for t in transactions:
        await test_session.refresh(t)

    return transactions
