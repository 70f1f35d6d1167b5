"""
Unit tests for the emitter and permutation check
"""

import pytest
from import_order.core.emitter import (
    emit_block,
    emit_bucket,
    emit_imports,
    emit_preamble,
    verify_permutation,
)
from import_order.core.errors import PermutationError, VerificationError
from import_order.core.records import (
    ImportCategory,
    PreambleBucket,
    ScriptBlock,
    StatementRecord,
)


def _record(text, index=0, leading="", category=None, bucket=None):
    return StatementRecord(
        text=text,
        original_index=index,
        leading=leading,
        category=category,
        bucket=bucket,
    )


class TestEmitImports:
    """Test import block serialization"""

    def test_blank_line_between_categories(self):
        """Test categories are separated by one blank line"""
        records = [
            _record("import type { B } from '@b';", category=ImportCategory.TYPE_SCOPED),
            _record("import a from 'a';", category=ImportCategory.VALUE_THIRD_PARTY),
            _record("import c from 'c';", category=ImportCategory.VALUE_THIRD_PARTY),
        ]

        assert emit_imports(records) == (
            "import type { B } from '@b';\n\nimport a from 'a';\nimport c from 'c';"
        )

    def test_leading_comments_are_kept(self):
        """Test attached comments are written above their statement"""
        records = [
            _record(
                "import a from 'a';",
                leading="// why a\n",
                category=ImportCategory.VALUE_THIRD_PARTY,
            )
        ]

        assert emit_imports(records) == "// why a\nimport a from 'a';"

    def test_empty(self):
        """Test an empty import list"""
        assert emit_imports([]) == ""


class TestEmitPreamble:
    """Test preamble serialization"""

    def test_single_line_records_are_consecutive(self):
        """Test one-line statements of a bucket"""
        records = [_record("const a = 1;"), _record("const b = 2;")]
        assert emit_bucket(records) == "const a = 1;\nconst b = 2;"

    def test_multiline_records_are_set_apart(self):
        """Test multi-line statements get blank lines around them"""
        records = [
            _record("const a = 1;"),
            _record("function f() {\n  return a;\n}"),
            _record("const b = 2;"),
        ]

        assert emit_bucket(records) == (
            "const a = 1;\n\nfunction f() {\n  return a;\n}\n\nconst b = 2;"
        )

    def test_multiline_comment_does_not_set_apart(self):
        """Test only the statement code decides"""
        records = [
            _record("const a = 1;"),
            _record("const b = 2;", leading="/**\n * B\n */\n"),
        ]

        assert emit_bucket(records) == "const a = 1;\n/**\n * B\n */\nconst b = 2;"

    def test_empty_buckets_are_skipped(self):
        """Test only non-empty buckets are emitted, one blank line apart"""
        buckets = {bucket: [] for bucket in PreambleBucket}
        buckets[PreambleBucket.IMPORTS] = [
            _record("import a from 'a';", category=ImportCategory.VALUE_THIRD_PARTY)
        ]
        buckets[PreambleBucket.CONSTANTS] = [_record("const MAX = 1;")]
        buckets[PreambleBucket.LIFECYCLE] = [_record("onMount(go);")]

        assert emit_preamble(buckets) == (
            "import a from 'a';\n\nconst MAX = 1;\n\nonMount(go);"
        )


class TestEmitBlock:
    """Test reassembly of a block"""

    def test_prologue_and_epilogue_verbatim(self):
        """Test surrounding text is untouched"""
        block = ScriptBlock(prologue="// head\n", records=(), epilogue="\n\nrest();\n")

        assert emit_block(block, "BODY") == "// head\nBODY\n\nrest();\n"


class TestVerifyPermutation:
    """Test the permutation check"""

    def test_reordering_passes(self):
        """Test a pure reordering"""
        a, b = _record("a();", 0), _record("b();", 1)
        verify_permutation([a, b], [b, a])

    def test_lost_record_fails(self):
        """Test a dropped statement"""
        a, b = _record("a();", 0), _record("b();", 1)

        with pytest.raises(PermutationError):
            verify_permutation([a, b], [a])

    def test_changed_text_fails(self):
        """Test a modified statement"""
        with pytest.raises(VerificationError):
            verify_permutation([_record("a();")], [_record("a() ;")])
