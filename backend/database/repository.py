"""
Repository pattern for database operations.

Each ledger table gets a repository that handles its writes and acts as
the partition reader for the transaction query engine.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, and_, false, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import INTEGER_MAX, INTEGER_MIN, Expense, Income, LedgerEntryMixin
from transactions.filters import FilterDescriptor
from transactions.records import PartitionResult, TransactionKind, TransactionRecord


class LedgerRepository:
    """Repository for one ledger partition (expenses or incomes)."""

    model: type[LedgerEntryMixin]
    kind: TransactionKind

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: int,
        category_id: int,
        currency_id: int,
        amount: Decimal,
        date: date,
        description: str = "",
        created_at: datetime | None = None,
    ) -> LedgerEntryMixin:
        """
        Create a new ledger entry.

        Args:
            user_id: Owning user
            category_id: Category reference (not validated here)
            currency_id: Currency reference (not validated here)
            amount: Non-negative amount
            date: Transaction date
            description: Optional free text
            created_at: Explicit creation timestamp, defaults to now

        Returns:
            The created row

        Raises:
            ValueError: If the amount is negative
        """
        amount = Decimal(str(amount))
        if amount < 0:
            raise ValueError(f"Amount must not be negative: {amount}")

        entry = self.model(
            user_id=user_id,
            category_id=category_id,
            currency_id=currency_id,
            amount=amount,
            date=date,
            description=description or "",
        )
        if created_at is not None:
            entry.created_at = created_at
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def get_by_id(self, user_id: int, entry_id: int) -> LedgerEntryMixin | None:
        """Get an entry by ID, only if it belongs to the user."""
        result = await self.session.execute(
            select(self.model).where(
                and_(self.model.id == entry_id, self.model.user_id == user_id)
            )
        )
        return result.scalar_one_or_none()

    async def update(
        self,
        user_id: int,
        entry_id: int,
        **changes: Any,
    ) -> LedgerEntryMixin | None:
        """
        Update fields of an entry.

        Args:
            user_id: Owning user
            entry_id: Entry ID
            **changes: category_id, currency_id, amount, date or description;
                None values are ignored

        Returns:
            Updated entry or None if not found
        """
        entry = await self.get_by_id(user_id, entry_id)
        if not entry:
            return None

        allowed = {"category_id", "currency_id", "amount", "date", "description"}
        for name, value in changes.items():
            if name not in allowed:
                raise ValueError(f"Cannot update field '{name}'")
            if value is None:
                continue
            if name == "amount":
                value = Decimal(str(value))
                if value < 0:
                    raise ValueError(f"Amount must not be negative: {value}")
            setattr(entry, name, value)

        await self.session.flush()
        return entry

    async def delete(self, user_id: int, entry_id: int) -> bool:
        """
        Delete an entry.

        Returns:
            True if deleted, False if not found
        """
        entry = await self.get_by_id(user_id, entry_id)
        if entry:
            await self.session.delete(entry)
            await self.session.flush()
            return True
        return False

    def _filtered(self, statement: Select, user_id: int, filters: FilterDescriptor) -> Select:
        statement = statement.where(self.model.user_id == user_id)
        if filters.category_ids:
            # ids the column cannot hold match no row
            storable = sorted(
                category_id for category_id in filters.category_ids
                if INTEGER_MIN <= category_id <= INTEGER_MAX
            )
            if storable:
                statement = statement.where(self.model.category_id.in_(storable))
            else:
                statement = statement.where(false())
        if filters.date_from is not None:
            statement = statement.where(self.model.date >= filters.date_from)
        if filters.date_to is not None:
            statement = statement.where(self.model.date <= filters.date_to)
        return statement

    async def count(self, user_id: int, filters: FilterDescriptor) -> int:
        """Count the user's entries matching the filters."""
        result = await self.session.execute(
            self._filtered(select(func.count(self.model.id)), user_id, filters)
        )
        return result.scalar_one()

    async def query(self, user_id: int, filters: FilterDescriptor) -> PartitionResult:
        """
        Read the user's entries matching the filters.

        The page is applied here only when the query is restricted to this
        partition; otherwise every match is returned for merging.

        Args:
            user_id: Owning user
            filters: Normalized filters

        Returns:
            PartitionResult with records and the unpaginated match count
        """
        if not filters.includes(self.kind):
            return PartitionResult(kind=self.kind)

        total = await self.count(user_id, filters)

        statement = self._filtered(select(self.model), user_id, filters).order_by(
            self.model.date.desc(),
            self.model.created_at.desc(),
            self.model.id.desc(),
        )
        paginated = filters.is_single_partition
        if paginated:
            if filters.offset >= total:
                return PartitionResult(kind=self.kind, count=total, paginated=True)
            statement = statement.offset(filters.offset).limit(filters.limit)

        result = await self.session.execute(statement)
        records = [
            TransactionRecord.from_row(row, self.kind)
            for row in result.scalars().all()
        ]
        return PartitionResult(
            kind=self.kind,
            records=records,
            count=total,
            paginated=paginated,
        )


class ExpenseRepository(LedgerRepository):
    """Repository for Expense operations."""

    model = Expense
    kind = TransactionKind.EXPENSE


class IncomeRepository(LedgerRepository):
    """Repository for Income operations."""

    model = Income
    kind = TransactionKind.INCOME


def repository_for(kind: TransactionKind, session: AsyncSession) -> LedgerRepository:
    """Get the repository that stores the given kind."""
    if kind == TransactionKind.EXPENSE:
        return ExpenseRepository(session)
    return IncomeRepository(session)
