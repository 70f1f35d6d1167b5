"""
Stable multi-key sorting of classified statement records.

Python's sorted() is stable, so records with equal keys keep their input
order; string comparison is by code point and independent of locale.
"""

from collections.abc import Iterable

from import_order.core.records import (
    ORDER_SENSITIVE_BUCKETS,
    ImportCategory,
    PreambleBucket,
    StatementRecord,
)


def import_sort_key(record: StatementRecord) -> tuple[int, str]:
    """Sort key of an import: (category rank, module path)"""
    category = record.category or ImportCategory.UNCLASSIFIED
    if category is ImportCategory.UNCLASSIFIED:
        # Unresolvable imports keep their input order
        return (int(category), "")
    return (int(category), record.module_path or "")


def sort_imports(records: Iterable[StatementRecord]) -> list[StatementRecord]:
    """Sort import records by category, then module path"""
    return sorted(records, key=import_sort_key)


def sort_bucket(
    bucket: PreambleBucket,
    records: Iterable[StatementRecord],
) -> list[StatementRecord]:
    """Order the records of a single preamble bucket.

    Imports get the import sort. Every other bucket keeps the original
    statement order; for REACTIVE and LIFECYCLE that order is what the
    component's behaviour depends on.
    """
    in_order = sorted(records, key=lambda record: record.original_index)
    if bucket in ORDER_SENSITIVE_BUCKETS:
        return in_order
    if bucket is PreambleBucket.IMPORTS:
        return sort_imports(in_order)
    return in_order
