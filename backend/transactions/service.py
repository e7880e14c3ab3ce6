"""
Query facade over the expense and income partitions.
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any

from transactions.filters import FilterDescriptor, normalize_filters
from transactions.merger import TransactionPage, merge_partitions, order_records
from transactions.records import PartitionReader, PartitionResult, TransactionRecord

logger = logging.getLogger(__name__)


class TransactionQueryService:
    """
    Single entry point for reading transactions across partitions.

    Readers are queried in the order given; that order is also the
    tie-break order for records with identical date and created_at.
    """

    def __init__(self, readers: Sequence[PartitionReader]):
        self.readers = list(readers)

    async def query(
        self,
        user_id: int,
        *,
        type: str | None = None,
        category_ids: str | Iterable[str] | None = None,
        start_date: str | date | None = None,
        end_date: str | date | None = None,
        page: Any = None,
        limit: Any = None,
    ) -> TransactionPage:
        """
        Return one page of the user's transactions.

        Args:
            user_id: Trusted owner id, already authorized by the caller
            type: "expense", "income", or anything else for both
            category_ids: Comma-separated category ids
            start_date: Inclusive lower date bound (YYYY-MM-DD)
            end_date: Inclusive upper date bound (YYYY-MM-DD)
            page: 1-based page number
            limit: Page size

        Returns:
            TransactionPage; pages past the end are empty, not errors
        """
        filters = normalize_filters(
            type=type,
            category_ids=category_ids,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )
        return await self.query_filters(user_id, filters)

    async def query_filters(
        self, user_id: int, filters: FilterDescriptor
    ) -> TransactionPage:
        """Run an already normalized query."""
        logger.debug("Querying transactions for user %s with %s", user_id, filters)
        results = await self._read_partitions(user_id, filters)
        page = merge_partitions(results, filters)
        logger.debug(
            "User %s: %d matching transactions, returning %d (page %d/%d)",
            user_id,
            page.total,
            len(page.records),
            page.page,
            page.total_pages,
        )
        return page

    async def list_all(self, user_id: int) -> list[TransactionRecord]:
        """Every transaction of the user, newest first, without pagination."""
        results = await self._read_partitions(user_id, FilterDescriptor())
        return order_records(
            record for result in results for record in result.records
        )

    async def _read_partitions(
        self, user_id: int, filters: FilterDescriptor
    ) -> list[PartitionResult]:
        # One AsyncSession cannot run statements concurrently, so readers
        # are awaited in turn. A failing reader fails the whole query.
        results = []
        for reader in self.readers:
            results.append(await reader.query(user_id, filters))
        return results
