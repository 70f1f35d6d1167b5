#!/usr/bin/env python3
"""
Reordering pipelines for plain-script and component files.

- Plain scripts: extract the leading import block, classify, sort by
  (category, module path) and emit it back in place.
- Components: for every top-level <script> block, extract the whole
  statement sequence, partition it into preamble buckets (imports sorted
  inside their bucket) and emit it back in place.

Both pipelines are pure functions of the text. Every result is checked to
be a fixed point of the pipeline before it is returned.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from import_order.core.classifier import PreambleClassifier, classify_import
from import_order.core.config import Config, OrderingConfig
from import_order.core.emitter import (
    emit_block,
    emit_imports,
    emit_preamble,
    verify_permutation,
)
from import_order.core.errors import IdempotencyError, ParseError
from import_order.core.partitioner import flatten, partition
from import_order.core.path_analyzer import FileKind
from import_order.core.records import StatementRecord
from import_order.core.scanner import extract_block, extract_import_block
from import_order.core.sorter import sort_imports

logger = logging.getLogger(__name__)

# Attribute values may contain ">" inside quotes (generics="T extends A<B>")
_SCRIPT_OPEN_RE = re.compile(
    r"""^<script(?P<attrs>(?:\s+[^\s=>"']+(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>"']+))?)*\s*/?)>""",
    re.MULTILINE,
)
_SCRIPT_CLOSE_RE = re.compile(r"</script\s*>")
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_TYPE_ATTR_RE = re.compile(r"""\btype\s*=\s*["']?([^"'\s>]+)""")
_SCRIPT_TYPES = {
    "module",
    "text/javascript",
    "application/javascript",
    "text/typescript",
    "ts",
}


@dataclass(frozen=True)
class ScriptSpan:
    """Location of a <script> block's content inside a component file"""

    start: int
    end: int
    attributes: str


# ============================================================
# COMPONENT SCRIPT BLOCKS
# ============================================================


def find_script_blocks(content: str) -> list[ScriptSpan]:
    """Locate the top-level <script> blocks of a component.

    Only tags starting at the beginning of a line are top-level; tags inside
    HTML comments and non-JavaScript scripts (JSON-LD and the like) are
    skipped.

    Raises:
        ParseError: if a <script> tag is never closed
    """
    if "\x00" in content:
        raise ParseError("Binary content is not a component file")

    comments = [m.span() for m in _HTML_COMMENT_RE.finditer(content)]

    def in_comment(offset: int) -> bool:
        return any(start <= offset < end for start, end in comments)

    spans = []
    pos = 0
    while True:
        opening = _SCRIPT_OPEN_RE.search(content, pos)
        if not opening:
            return spans
        if in_comment(opening.start()):
            pos = opening.end()
            continue

        attributes = opening.group("attrs") or ""
        if attributes.rstrip().endswith("/"):
            pos = opening.end()
            continue

        closing = _SCRIPT_CLOSE_RE.search(content, opening.end())
        if not closing:
            line = content.count("\n", 0, opening.start()) + 1
            raise ParseError(f"Unclosed <script> tag on line {line}")

        script_type = _TYPE_ATTR_RE.search(attributes)
        if script_type and script_type.group(1).lower() not in _SCRIPT_TYPES:
            logger.debug(f"Skipping <script type={script_type.group(1)}> block")
        else:
            spans.append(ScriptSpan(opening.end(), closing.start(), attributes))
        pos = closing.end()


# ============================================================
# SINGLE PASS PIPELINES
# ============================================================


def _reorder_script_once(content: str, ordering: OrderingConfig) -> str:
    block = extract_import_block(content)
    if block is None:
        return content

    records = [classify_import(record, ordering) for record in block.records]
    ordered = sort_imports(records)
    verify_permutation(block.records, ordered)
    return emit_block(block, emit_imports(ordered))


def _reorder_preamble_once(script: str, classifier: PreambleClassifier) -> str:
    block = extract_block(script)
    if not block.records:
        return script

    buckets = partition(classifier.classify_all(block.records))
    verify_permutation(block.records, flatten(buckets))
    return emit_block(block, emit_preamble(buckets))


def _reorder_component_once(content: str, ordering: OrderingConfig) -> str:
    classifier = PreambleClassifier(ordering)
    pieces = []
    last = 0
    for span in find_script_blocks(content):
        pieces.append(content[last : span.start])
        pieces.append(
            _reorder_preamble_once(content[span.start : span.end], classifier)
        )
        last = span.end
    pieces.append(content[last:])
    return "".join(pieces)


# ============================================================
# PUBLIC API
# ============================================================


def _split_newlines(content: str) -> tuple[str, str]:
    """Normalize consistent CRLF line endings to LF for processing"""
    crlf = content.count("\r\n")
    if crlf and crlf == content.count("\n"):
        return content.replace("\r\n", "\n"), "\r\n"
    return content, "\n"


def _run_verified(
    transform: Callable[[str, OrderingConfig], str],
    content: str,
    ordering: OrderingConfig,
) -> str:
    text, newline = _split_newlines(content)
    result = transform(text, ordering)

    again = transform(result, ordering)
    if again != result:
        raise IdempotencyError(
            "Reordering is not idempotent: a second pass changed the output"
        )

    if newline != "\n":
        result = result.replace("\n", newline)
    return result


def _ordering_of(config: Config | OrderingConfig | None) -> OrderingConfig:
    if config is None:
        return OrderingConfig()
    if isinstance(config, Config):
        return config.ordering
    return config


def reorder_script(content: str, config: Config | OrderingConfig | None = None) -> str:
    """Reorder the leading import block of a plain-script file"""
    return _run_verified(_reorder_script_once, content, _ordering_of(config))


def reorder_component(
    content: str, config: Config | OrderingConfig | None = None
) -> str:
    """Reorder the preamble of every script block of a component file"""
    return _run_verified(_reorder_component_once, content, _ordering_of(config))


def reorder_text(
    content: str,
    kind: FileKind,
    config: Config | OrderingConfig | None = None,
) -> str:
    """Dispatch to the pipeline of the given file kind"""
    if kind is FileKind.SCRIPT:
        return reorder_script(content, config)
    if kind is FileKind.COMPONENT:
        return reorder_component(content, config)
    raise ParseError(f"Unsupported file kind: {kind.value}")


def explain_script(
    content: str, config: Config | OrderingConfig | None = None
) -> list[StatementRecord]:
    """Classified import records of a plain-script file, in input order"""
    ordering = _ordering_of(config)
    block = extract_import_block(_split_newlines(content)[0])
    if block is None:
        return []
    return [classify_import(record, ordering) for record in block.records]


def explain_component(
    content: str, config: Config | OrderingConfig | None = None
) -> list[list[StatementRecord]]:
    """Classified preamble records of each script block, in input order"""
    text = _split_newlines(content)[0]
    classifier = PreambleClassifier(_ordering_of(config))
    return [
        classifier.classify_all(extract_block(text[span.start : span.end]).records)
        for span in find_script_blocks(text)
    ]
