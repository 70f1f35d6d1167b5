"""
Stable partition of a component preamble into its semantic buckets
"""

from collections.abc import Iterable

from import_order.core.records import PreambleBucket, StatementRecord
from import_order.core.sorter import sort_bucket


def partition(
    records: Iterable[StatementRecord],
) -> dict[PreambleBucket, list[StatementRecord]]:
    """Group classified records by bucket, in canonical bucket order.

    Every bucket is present in the result (possibly empty) and each record
    appears in exactly one of them.
    """
    grouped: dict[PreambleBucket, list[StatementRecord]] = {
        bucket: [] for bucket in PreambleBucket
    }
    for record in records:
        grouped[record.bucket or PreambleBucket.UNCLASSIFIED].append(record)

    return {bucket: sort_bucket(bucket, members) for bucket, members in grouped.items()}


def flatten(buckets: dict[PreambleBucket, list[StatementRecord]]) -> list[StatementRecord]:
    """Concatenate buckets in canonical order"""
    return [record for bucket in PreambleBucket for record in buckets.get(bucket, [])]
