"""
Merging of partition results into one ordered, paginated page.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from transactions.filters import FilterDescriptor
from transactions.records import PartitionResult, TransactionRecord


@dataclass
class TransactionPage:
    records: list[TransactionRecord]
    total: int
    page: int
    limit: int
    total_pages: int
    filters: dict[str, Any] = field(default_factory=dict)


def total_pages(total: int, limit: int) -> int:
    if total == 0:
        return 0
    return math.ceil(total / limit)


def order_records(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    """
    Sort by date desc, then created_at desc.

    The sort is stable, so records with equal keys keep the order they
    were read in.
    """
    return sorted(records, key=lambda record: record.sort_key, reverse=True)


def merge_partitions(
    results: Sequence[PartitionResult],
    filters: FilterDescriptor,
) -> TransactionPage:
    """
    Combine partition results into the requested page.

    Results are passed through unchanged only when every included reader
    already applied OFFSET/LIMIT; otherwise the page is cut in memory.

    Args:
        results: One result per partition reader, in reader order
        filters: Normalized filters of the query

    Returns:
        TransactionPage with the combined total and page metadata
    """
    results = [result for result in results if filters.includes(result.kind)]
    total = sum(result.count for result in results)
    assert total >= 0, f"negative transaction total: {total}"

    if results and all(result.paginated for result in results):
        page_records = [record for result in results for record in result.records]
    else:
        merged = order_records(
            record for result in results for record in result.records
        )
        start = filters.offset
        if start >= total:
            page_records = []
        else:
            page_records = merged[start:min(start + filters.limit, total)]

    return TransactionPage(
        records=page_records,
        total=total,
        page=filters.page,
        limit=filters.limit,
        total_pages=total_pages(total, filters.limit),
        filters=filters.as_dict(),
    )
