"""
Unified view over the expense and income partitions.

A TransactionRecord is built by a partition reader from one stored row and
carries the partition it came from as its `kind`.
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from transactions.filters import FilterDescriptor


class TransactionKind(enum.Enum):
    """Partition a record originates from."""
    EXPENSE = "expense"
    INCOME = "income"


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops the offset on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TransactionRecord:
    id: int
    user_id: int
    category_id: int
    currency_id: int
    amount: Decimal
    description: str
    date: date
    kind: TransactionKind
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any, kind: TransactionKind) -> "TransactionRecord":
        """Build a record from a mapped expense/income row."""
        return cls(
            id=row.id,
            user_id=row.user_id,
            category_id=row.category_id,
            currency_id=row.currency_id,
            amount=Decimal(row.amount),
            description=row.description or "",
            date=row.date,
            kind=kind,
            created_at=as_utc(row.created_at),
        )

    @property
    def key(self) -> tuple[str, int]:
        # ids are only unique within one partition
        return (self.kind.value, self.id)

    @property
    def sort_key(self) -> tuple[date, datetime]:
        return (self.date, self.created_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "category_id": self.category_id,
            "currency_id": self.currency_id,
            "amount": self.amount,
            "description": self.description,
            "date": self.date,
            "type": self.kind.value,
            "created_at": self.created_at,
        }


@dataclass
class PartitionResult:
    """Rows and match count returned by one partition reader."""
    kind: TransactionKind
    records: list[TransactionRecord] = field(default_factory=list)
    count: int = 0
    # True when the reader already applied OFFSET/LIMIT
    paginated: bool = False


class PartitionReader(Protocol):
    """Query capability implemented once per partition."""

    kind: TransactionKind

    async def query(self, user_id: int, filters: "FilterDescriptor") -> PartitionResult:
        ...
