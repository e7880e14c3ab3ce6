"""
SQLAlchemy models for the expense and income ledgers.

Expenses and incomes live in separate tables with independent id
sequences; ids can therefore collide across the two tables.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Bounds of the Integer id columns
INTEGER_MIN = -(2 ** 31)
INTEGER_MAX = 2 ** 31 - 1


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LedgerEntryMixin:
    """Columns shared by expense and income rows."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    category_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    currency_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)

    # Set client-side so the value is known without a refresh after flush
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
        nullable=False,
    )


class Expense(LedgerEntryMixin, Base):
    """An expense fact owned by one user."""
    __tablename__ = "expenses"

    __table_args__ = (
        Index("ix_expenses_user_date_created", "user_id", "date", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, date={self.date}, amount={self.amount})>"


class Income(LedgerEntryMixin, Base):
    """An income fact owned by one user."""
    __tablename__ = "incomes"

    __table_args__ = (
        Index("ix_incomes_user_date_created", "user_id", "date", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Income(id={self.id}, date={self.date}, amount={self.amount})>"
