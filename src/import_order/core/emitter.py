"""
Serialization of ordered records back into source text.

Statement text is written back verbatim; only the separators between
statements are normalized:

- import categories and preamble buckets are separated by one blank line,
- imports of the same category are on consecutive lines,
- inside a preamble bucket a statement whose code spans several lines is
  set off by blank lines.
"""

from collections import Counter
from collections.abc import Sequence
from itertools import groupby

from import_order.core.errors import PermutationError
from import_order.core.records import (
    ImportCategory,
    PreambleBucket,
    ScriptBlock,
    StatementRecord,
)

GROUP_SEPARATOR = "\n\n"


def emit_imports(records: Sequence[StatementRecord]) -> str:
    """Join sorted import records, one blank line between categories"""
    groups = groupby(records, key=lambda r: r.category or ImportCategory.UNCLASSIFIED)
    return GROUP_SEPARATOR.join(
        "\n".join(record.raw_text for record in group) for _, group in groups
    )


def emit_bucket(records: Sequence[StatementRecord]) -> str:
    parts: list[str] = []
    previous = None
    for record in records:
        if previous is not None:
            multiline = previous.is_multiline or record.is_multiline
            parts.append(GROUP_SEPARATOR if multiline else "\n")
        parts.append(record.raw_text)
        previous = record
    return "".join(parts)


def emit_preamble(buckets: dict[PreambleBucket, list[StatementRecord]]) -> str:
    """Join non-empty buckets in canonical order, one blank line apart"""
    sections = []
    for bucket in PreambleBucket:
        records = buckets.get(bucket) or []
        if not records:
            continue
        if bucket is PreambleBucket.IMPORTS:
            sections.append(emit_imports(records))
        else:
            sections.append(emit_bucket(records))
    return GROUP_SEPARATOR.join(sections)


def emit_block(block: ScriptBlock, body: str) -> str:
    """Put an emitted body back between the block's prologue and epilogue"""
    return f"{block.prologue}{body}{block.epilogue}"


def verify_permutation(
    before: Sequence[StatementRecord],
    after: Sequence[StatementRecord],
) -> None:
    """Raise PermutationError unless ``after`` reorders exactly ``before``"""
    if Counter(r.raw_text for r in before) != Counter(r.raw_text for r in after):
        raise PermutationError(
            f"Reordered statements differ from the input "
            f"({len(before)} in, {len(after)} out)"
        )
