"""
Normalization of raw transaction query parameters.

Malformed input never fails a read: each bad value falls back to the
broadest filter (no type restriction, no category filter, open date
bounds, first page, default page size).
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from transactions.records import TransactionKind

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_INT_RE = re.compile(r"^[+-]?[0-9]+$")


@dataclass(frozen=True)
class FilterDescriptor:
    """Validated filters for one query call."""
    kind: TransactionKind | None = None
    category_ids: frozenset[int] = field(default_factory=frozenset)
    date_from: date | None = None
    date_to: date | None = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def is_single_partition(self) -> bool:
        return self.kind is not None

    def includes(self, kind: TransactionKind) -> bool:
        """Whether rows of the given partition can match."""
        return self.kind is None or self.kind == kind

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value if self.kind else None,
            "category_ids": sorted(self.category_ids),
            "start_date": self.date_from.isoformat() if self.date_from else None,
            "end_date": self.date_to.isoformat() if self.date_to else None,
            "page": self.page,
            "limit": self.limit,
        }


def _parse_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    value = str(value).strip()
    # int() would also take "1_0" and non-ASCII digits
    if not _INT_RE.match(value):
        return None
    try:
        return int(value)
    except ValueError:
        # longer than the interpreter's int string limit
        return None


def parse_kind(value: str | None) -> TransactionKind | None:
    """Map a type string to a partition; unknown values mean both."""
    if not value:
        return None
    try:
        return TransactionKind(str(value).strip().lower())
    except ValueError:
        return None


def parse_category_ids(value: str | Iterable[str] | None) -> frozenset[int]:
    """
    Parse category ids from a comma-separated string or repeated values.

    Pieces that are not integers are dropped.
    """
    if value is None:
        return frozenset()
    if isinstance(value, (str, int)):
        value = [value]

    ids = set()
    for item in value:
        for part in str(item).split(","):
            parsed = _parse_int(part) if part.strip() else None
            if parsed is not None:
                ids.add(parsed)
    return frozenset(ids)


def parse_date(value: str | date | None) -> date | None:
    """Parse a YYYY-MM-DD string; anything else is an open bound."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = str(value).strip()
    if not _DATE_RE.match(value):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def parse_page(value: Any) -> int:
    page = _parse_int(value)
    if page is None or page < 1:
        return DEFAULT_PAGE
    return page


def parse_limit(value: Any) -> int:
    limit = _parse_int(value)
    if limit is None or limit < 1:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def normalize_filters(
    type: str | None = None,
    category_ids: str | Iterable[str] | None = None,
    start_date: str | date | None = None,
    end_date: str | date | None = None,
    page: Any = None,
    limit: Any = None,
) -> FilterDescriptor:
    """
    Build a FilterDescriptor from raw query-string values.

    Args:
        type: "expense", "income", or anything else for both partitions
        category_ids: Comma-separated ids, or an iterable of such strings
        start_date: Inclusive lower bound as YYYY-MM-DD
        end_date: Inclusive upper bound as YYYY-MM-DD
        page: 1-based page number
        limit: Page size, clamped to [1, 100]

    Returns:
        A well-formed FilterDescriptor; this function never raises
    """
    return FilterDescriptor(
        kind=parse_kind(type),
        category_ids=parse_category_ids(category_ids),
        date_from=parse_date(start_date),
        date_to=parse_date(end_date),
        page=parse_page(page),
        limit=parse_limit(limit),
    )
