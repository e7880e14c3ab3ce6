"""
Pytest fixtures for database and query engine testing.

Tests run against an in-memory SQLite database unless TEST_DATABASE_URL
points at another server.
"""

import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from database.models import Base
from database.repository import ExpenseRepository, IncomeRepository
from transactions import TransactionQueryService

from tests.helpers import OTHER_USER_ID, USER_ID, utc

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture(scope="function")
async def engine():
    """Create a test database engine."""
    options = {}
    if TEST_DATABASE_URL.startswith("sqlite"):
        # Share the single in-memory connection
        options.update(poolclass=StaticPool)
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, **options)

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables after test
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def expense_repo(session: AsyncSession) -> ExpenseRepository:
    return ExpenseRepository(session)


@pytest_asyncio.fixture
async def income_repo(session: AsyncSession) -> IncomeRepository:
    return IncomeRepository(session)


@pytest_asyncio.fixture
async def query_service(
    expense_repo: ExpenseRepository,
    income_repo: IncomeRepository,
) -> TransactionQueryService:
    return TransactionQueryService([expense_repo, income_repo])


@pytest_asyncio.fixture
async def sample_ledger(
    expense_repo: ExpenseRepository,
    income_repo: IncomeRepository,
) -> dict:
    """
    Three expenses and two incomes for USER_ID, plus noise for OTHER_USER_ID.

    Keys are "<kind>-<date>[-<hour>]".
    """
    entries = {}

    expense_data = [
        ("expense-01-10", date(2024, 1, 10), utc(2024, 1, 10, 9), 10, "12.50", "Lunch"),
        ("expense-01-15-10", date(2024, 1, 15), utc(2024, 1, 15, 10), 10, "40.00", "Groceries"),
        ("expense-01-15-11", date(2024, 1, 15), utc(2024, 1, 15, 11), 20, "9.99", "Cinema"),
    ]
    for key, entry_date, created_at, category_id, amount, description in expense_data:
        entries[key] = await expense_repo.create(
            user_id=USER_ID,
            category_id=category_id,
            currency_id=1,
            amount=Decimal(amount),
            date=entry_date,
            description=description,
            created_at=created_at,
        )

    income_data = [
        ("income-01-12", date(2024, 1, 12), utc(2024, 1, 12, 8), 30, "100.00", "Refund"),
        ("income-01-20", date(2024, 1, 20), utc(2024, 1, 20, 8), 31, "2500.00", "Salary"),
    ]
    for key, entry_date, created_at, category_id, amount, description in income_data:
        entries[key] = await income_repo.create(
            user_id=USER_ID,
            category_id=category_id,
            currency_id=1,
            amount=Decimal(amount),
            date=entry_date,
            description=description,
            created_at=created_at,
        )

    await expense_repo.create(
        user_id=OTHER_USER_ID,
        category_id=10,
        currency_id=1,
        amount=Decimal("1.00"),
        date=date(2024, 1, 14),
        description="Someone else",
    )
    await income_repo.create(
        user_id=OTHER_USER_ID,
        category_id=30,
        currency_id=1,
        amount=Decimal("1.00"),
        date=date(2024, 1, 14),
        description="Someone else",
    )

    return entries
