"""
Unified transaction query engine.

This package provides:
- TransactionRecord, the read-only view over expense and income rows
- Filter normalization for raw query parameters
- Cross-partition merging and pagination
- TransactionQueryService, the query facade
"""

from transactions.filters import FilterDescriptor, normalize_filters
from transactions.merger import TransactionPage, merge_partitions, order_records
from transactions.records import (
    PartitionReader,
    PartitionResult,
    TransactionKind,
    TransactionRecord,
)
from transactions.service import TransactionQueryService

__all__ = [
    # Records
    "TransactionKind",
    "TransactionRecord",
    "PartitionResult",
    "PartitionReader",
    # Filters
    "FilterDescriptor",
    "normalize_filters",
    # Merging
    "TransactionPage",
    "merge_partitions",
    "order_records",
    # Facade
    "TransactionQueryService",
]
