"""
Database package for the expense and income ledgers.

This package provides:
- SQLAlchemy models for the two ledger partitions
- Async database session management
- Repositories for CRUD operations and partition reads
"""

from database.config import get_settings, Settings
from database.models import Base, Expense, Income
from database.repository import (
    ExpenseRepository,
    IncomeRepository,
    LedgerRepository,
    repository_for,
)
from database.session import get_session, init_db, reset_engine, AsyncSessionLocal

__all__ = [
    # Config
    "get_settings",
    "Settings",
    # Session
    "get_session",
    "init_db",
    "reset_engine",
    "AsyncSessionLocal",
    # Models
    "Base",
    "Expense",
    "Income",
    # Repositories
    "LedgerRepository",
    "ExpenseRepository",
    "IncomeRepository",
    "repository_for",
]
