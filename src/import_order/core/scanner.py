"""
Statement boundary scanner for JavaScript/TypeScript source blocks.

The scanner only finds where top-level statements begin and end. It knows
enough of the lexical grammar to not be fooled by brackets, semicolons or
newlines inside strings, template literals, comments and regular
expression literals; it never parses expressions.

A statement ends at a ``;`` outside any bracket, or at a newline outside any
bracket when automatic semicolon insertion applies: the text so far does
not end in an operator and the next code line does not start with a
continuation token. Comments on the line where a statement ends belong to
that statement; comment lines above a statement are attached to it as its
``leading`` text.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from import_order.core.records import ScriptBlock, StatementRecord

logger = logging.getLogger(__name__)

_WHITESPACE = " \t\r\f\v\ufeff"

# Characters after which a "/" starts a regular expression literal
_REGEX_PRECEDERS = set("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = {
    "return",
    "typeof",
    "case",
    "do",
    "else",
    "in",
    "of",
    "new",
    "delete",
    "void",
    "throw",
    "await",
    "yield",
    "instanceof",
}

# A statement whose last token is one of these continues on the next line
_CONTINUATION_CHARS = set("=+-*/%&|^~?:,.")
_CONTINUATION_WORDS = {
    "import",
    "export",
    "from",
    "as",
    "const",
    "let",
    "var",
    "function",
    "class",
    "extends",
    "implements",
    "new",
    "typeof",
    "keyof",
    "instanceof",
    "in",
    "of",
    "await",
    "satisfies",
    "return",
    "throw",
    "yield",
    "void",
    "delete",
    "else",
    "do",
}

# A next line starting with one of these continues the current statement
_CONTINUATION_PREFIXES = (
    "?.",
    "??",
    "&&",
    "||",
    "=",
    ",",
    ":",
    ".",
    "?",
    "*",
    "%",
    "^",
    "&",
    "|",
    "/",
)
_CONTINUATION_LEADING_WORDS = {
    "else",
    "catch",
    "finally",
    "as",
    "satisfies",
    "instanceof",
    "in",
    "of",
    "extends",
    "implements",
    "from",
}

# Statements whose header parentheses are followed by a body on the next line
_BLOCK_HEADER_RE = re.compile(
    r"^(?:\$\s*:\s*)?(?:export\s+)?(?:default\s+)?(?:async\s+)?"
    r"(?:if|for|while|with|switch|function\s*\*?\s*[\w$]*)\s*\("
)

_IMPORT_RE = re.compile(r"^import(?=[\s{*'\"]|$)")
_DIRECTIVE_RE = re.compile(r"""^(["'])(?:\\.|(?!\1).)*\1\s*;?$""")


class _Unterminated(Exception):
    """Raised internally when a literal or bracket runs to the end of input"""


def _is_ident_char(char: str) -> bool:
    return char.isalnum() or char in "_$"


@dataclass(frozen=True)
class RawStatement:
    """Boundaries of one statement inside a source block"""

    start: int
    end: int
    leading: str
    complete: bool = True
    comments: tuple[tuple[int, int], ...] = ()


class StatementScanner:
    """Lazily yields the top-level statements of a source block"""

    def __init__(self, source: str):
        self.source = source
        self.length = len(source)

    def __iter__(self) -> Iterator[RawStatement]:
        pos = 0
        while True:
            code_start, comment_spans = self._skip_trivia(pos)
            if code_start >= self.length:
                return

            start = self._statement_start(code_start)
            end, complete = self._scan_statement(code_start)
            if not complete:
                logger.debug(
                    f"No clean statement boundary at offset {code_start}, "
                    "keeping the text as an opaque statement"
                )

            leading = ""
            if comment_spans:
                leading = "\n".join(self.source[a:b] for a, b in comment_spans) + "\n"

            yield RawStatement(
                start=start,
                end=end,
                leading=leading,
                complete=complete,
                comments=tuple(comment_spans),
            )
            pos = end

    # ============================================================
    # TRIVIA
    # ============================================================

    def _skip_trivia(self, pos: int) -> tuple[int, list[tuple[int, int]]]:
        """Skip whitespace and comments, returning the next code offset and
        the line spans of the comments that were skipped."""
        s, n = self.source, self.length
        spans: list[tuple[int, int]] = []
        i = pos

        def add_span(comment_start: int, comment_end: int) -> None:
            line_start = self._line_start(comment_start)
            line_end = self._line_end(comment_end)
            if spans and line_start <= spans[-1][1]:
                spans[-1] = (spans[-1][0], max(line_end, spans[-1][1]))
            else:
                spans.append((line_start, line_end))

        while i < n:
            char = s[i]
            if char in _WHITESPACE or char == "\n":
                i += 1
            elif i == 0 and s.startswith("#!"):
                end = self._line_end(0)
                add_span(0, end)
                i = end
            elif s.startswith("//", i):
                end = self._line_end(i)
                add_span(i, end)
                i = end
            elif s.startswith("/*", i):
                close = s.find("*/", i + 2)
                if close < 0:
                    # Unterminated comment, left to the statement scanner
                    return i, spans
                after = close + 2
                k = after
                while k < n and s[k] in _WHITESPACE:
                    k += 1
                if k < n and s[k] != "\n" and not s.startswith(("//", "/*"), k):
                    # Inline comment in front of code on the same line
                    return i, spans
                add_span(i, after)
                i = after
            else:
                return i, spans

        return n, spans

    def _statement_start(self, code_start: int) -> int:
        """Offset of the line start when only indentation precedes the code"""
        line_start = self._line_start(code_start)
        if self.source[line_start:code_start].strip(_WHITESPACE) == "":
            return line_start
        return code_start

    def _line_start(self, i: int) -> int:
        return self.source.rfind("\n", 0, i) + 1

    def _line_end(self, i: int) -> int:
        end = self.source.find("\n", i)
        return self.length if end < 0 else end

    # ============================================================
    # STATEMENTS
    # ============================================================

    def _scan_statement(self, code_start: int) -> tuple[int, bool]:
        """Find the end offset of the statement starting at ``code_start``.

        Returns:
            tuple[int, bool]: end offset and whether a clean boundary was found
        """
        s, n = self.source, self.length
        stack: list[str] = []
        last_sig = -1
        last_literal = False
        header_close = -1
        i = code_start

        while i < n:
            char = s[i]

            if char == "\n":
                if not stack and self._ends_at_newline(
                    code_start, last_sig, last_literal, header_close, i
                ):
                    return self._trim_end(code_start, i), True
                i += 1
                continue

            if char in _WHITESPACE:
                i += 1
                continue

            if s.startswith("//", i):
                i = self._line_end(i)
                continue

            if s.startswith("/*", i):
                close = s.find("*/", i + 2)
                if close < 0:
                    return self._trim_end(code_start, n), False
                i = close + 2
                continue

            if char in "'\"":
                end = self._skip_string(i)
                if end is None:
                    return self._trim_end(code_start, self._line_end(i)), False
                i, last_sig, last_literal = end, end - 1, True
                continue

            if char == "`":
                try:
                    end = self._skip_template(i)
                except _Unterminated:
                    return self._trim_end(code_start, n), False
                i, last_sig, last_literal = end, end - 1, True
                continue

            if char == "/" and self._regex_allowed(last_sig, last_literal, code_start):
                end = self._skip_regex(i)
                if end is not None:
                    i, last_sig, last_literal = end, end - 1, True
                    continue

            if char in "([{":
                stack.append(char)
            elif char in ")]}":
                if not stack:
                    # Stray closing bracket, nothing sensible to pair it with
                    return self._trim_end(code_start, self._line_end(i)), False
                opener = stack.pop()
                if opener == "(" and not stack and header_close < 0:
                    header_close = i
            elif char == ";" and not stack:
                return self._absorb_trailing(i + 1), True

            last_sig, last_literal = i, False
            i += 1

        return self._trim_end(code_start, n), not stack

    def _ends_at_newline(
        self,
        code_start: int,
        last_sig: int,
        last_literal: bool,
        header_close: int,
        newline: int,
    ) -> bool:
        """Decide whether automatic semicolon insertion ends the statement"""
        s = self.source
        if last_sig < 0:
            return True

        if not last_literal:
            tail = s[code_start : last_sig + 1]
            last_char = s[last_sig]
            if tail.endswith(("++", "--")):
                pass
            elif tail.endswith("=>") or last_char in _CONTINUATION_CHARS:
                return False
            elif _is_ident_char(last_char):
                word_start = last_sig
                while word_start > code_start and _is_ident_char(s[word_start - 1]):
                    word_start -= 1
                word = s[word_start : last_sig + 1]
                preceded_by_dot = word_start > code_start and s[word_start - 1] == "."
                if word in _CONTINUATION_WORDS and not preceded_by_dot:
                    return False
            elif last_char == ")" and last_sig == header_close:
                if _BLOCK_HEADER_RE.match(s[code_start : last_sig + 1]):
                    return False

        return not self._continues_on(self._next_code_offset(newline + 1))

    def _next_code_offset(self, i: int) -> int:
        """Offset of the next character that is neither whitespace nor comment"""
        s, n = self.source, self.length
        while i < n:
            if s[i] in _WHITESPACE or s[i] == "\n":
                i += 1
            elif s.startswith("//", i):
                i = self._line_end(i)
            elif s.startswith("/*", i):
                close = s.find("*/", i + 2)
                if close < 0:
                    return n
                i = close + 2
            else:
                return i
        return n

    def _continues_on(self, i: int) -> bool:
        """Whether the code at ``i`` continues the previous line's statement"""
        s = self.source
        if i >= self.length:
            return False
        head = s[i : i + 16]
        if head.startswith(("++", "--")):
            return False
        if head.startswith(_CONTINUATION_PREFIXES) or head[0] in "+-":
            return True
        match = re.match(r"[A-Za-z_$][\w$]*", head)
        if match:
            word = match.group(0)
            following = s[i + len(word) : i + len(word) + 1]
            return word in _CONTINUATION_LEADING_WORDS and not (
                following and _is_ident_char(following)
            )
        return False

    def _absorb_trailing(self, j: int) -> int:
        """Extend a ``;``-terminated statement over a same-line comment"""
        s, n = self.source, self.length
        k = j
        while k < n and s[k] in _WHITESPACE:
            k += 1
        if s.startswith("//", k):
            return self._trim_end(j, self._line_end(k))
        if s.startswith("/*", k):
            close = s.find("*/", k + 2)
            if close >= 0:
                m = close + 2
                while m < n and s[m] in _WHITESPACE:
                    m += 1
                if m >= n or s[m] == "\n":
                    return close + 2
        return j

    def _trim_end(self, floor: int, i: int) -> int:
        while i > floor and self.source[i - 1] in _WHITESPACE + "\n":
            i -= 1
        return i

    # ============================================================
    # LITERALS
    # ============================================================

    def _skip_string(self, i: int) -> int | None:
        s, n = self.source, self.length
        quote = s[i]
        j = i + 1
        while j < n:
            char = s[j]
            if char == "\\":
                j += 2
                continue
            if char == quote:
                return j + 1
            if char == "\n":
                return None
            j += 1
        return None

    def _skip_template(self, i: int) -> int:
        s, n = self.source, self.length
        j = i + 1
        while j < n:
            char = s[j]
            if char == "\\":
                j += 2
            elif char == "`":
                return j + 1
            elif s.startswith("${", j):
                j = self._skip_braced(j + 2)
            else:
                j += 1
        raise _Unterminated()

    def _skip_braced(self, j: int) -> int:
        """Skip the code of a template substitution up to its closing brace"""
        s, n = self.source, self.length
        floor = j
        depth = 0
        last_sig = -1
        last_literal = False
        while j < n:
            char = s[j]
            if char in _WHITESPACE or char == "\n":
                j += 1
                continue
            if s.startswith("//", j):
                j = self._line_end(j)
                continue
            if s.startswith("/*", j):
                close = s.find("*/", j + 2)
                if close < 0:
                    raise _Unterminated()
                j = close + 2
                continue
            if char in "'\"":
                end = self._skip_string(j)
                if end is None:
                    raise _Unterminated()
                j, last_sig, last_literal = end, end - 1, True
                continue
            if char == "`":
                end = self._skip_template(j)
                j, last_sig, last_literal = end, end - 1, True
                continue
            if char == "/" and self._regex_allowed(last_sig, last_literal, floor):
                end = self._skip_regex(j)
                if end is not None:
                    j, last_sig, last_literal = end, end - 1, True
                    continue
            if char == "{":
                depth += 1
            elif char == "}":
                if depth == 0:
                    return j + 1
                depth -= 1
            last_sig, last_literal = j, False
            j += 1
        raise _Unterminated()

    def _regex_allowed(self, last_sig: int, last_literal: bool, floor: int) -> bool:
        """Whether a ``/`` at this point starts a regular expression"""
        if last_sig < floor:
            return True
        if last_literal:
            return False
        char = self.source[last_sig]
        if char in _REGEX_PRECEDERS:
            return True
        if _is_ident_char(char):
            word_start = last_sig
            while word_start > floor and _is_ident_char(self.source[word_start - 1]):
                word_start -= 1
            return self.source[word_start : last_sig + 1] in _REGEX_KEYWORDS
        return False

    def _skip_regex(self, i: int) -> int | None:
        s, n = self.source, self.length
        j = i + 1
        in_class = False
        while j < n:
            char = s[j]
            if char == "\\":
                j += 2
                continue
            if char == "\n":
                return None
            if in_class:
                if char == "]":
                    in_class = False
            elif char == "[":
                in_class = True
            elif char == "/":
                j += 1
                while j < n and s[j].isalpha():
                    j += 1
                return j
            j += 1
        return None


# ============================================================
# HELPERS
# ============================================================


def strip_comments(text: str) -> str:
    """Return ``text`` with comments blanked out, string contents untouched"""
    out: list[str] = []
    i, n = 0, len(text)
    while i < n:
        if text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end < 0 else end
            out.append(" ")
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end < 0 else end + 2
            out.append(" ")
        elif text[i] in "'\"`":
            quote = text[i]
            j = i + 1
            while j < n and text[j] != quote:
                j += 2 if text[j] == "\\" else 1
            out.append(text[i : j + 1])
            i = j + 1
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def statement_code(text: str) -> str:
    """Statement text without comments or surrounding whitespace"""
    return strip_comments(text).strip()


def is_import_statement(text: str) -> bool:
    """Whether ``text`` is a static import declaration (not ``import()``)"""
    return bool(_IMPORT_RE.match(statement_code(text)))


def is_directive(text: str) -> bool:
    """Whether ``text`` is a directive prologue entry such as ``"use strict"``"""
    return bool(_DIRECTIVE_RE.match(statement_code(text)))


def _record(source: str, raw: RawStatement, index: int, leading: str) -> StatementRecord:
    return StatementRecord(
        text=source[raw.start : raw.end],
        leading=leading,
        original_index=index,
        opaque=not raw.complete,
    )


def _attached_comments(source: str, raw: RawStatement) -> int:
    """Offset where the comment lines directly above a statement begin.

    Comment lines count as attached while no blank line separates them from
    each other and from the statement. A shebang line never is.
    """
    start = raw.start
    for span_start, span_end in reversed(raw.comments):
        if source[span_end:start] != "\n" or source.startswith("#!", span_start):
            break
        start = span_start
    return start


def _block(source: str, statements: list[RawStatement]) -> ScriptBlock:
    """Build a block whose records are ``statements``.

    The first statement keeps its attached comments as leading text; the
    comments above them (a file header set off by a blank line, a shebang)
    stay in the prologue.
    """
    first = statements[0]
    prologue_end = _attached_comments(source, first)
    records = tuple(
        _record(
            source,
            raw,
            index,
            source[prologue_end : first.start] if index == 0 else raw.leading,
        )
        for index, raw in enumerate(statements)
    )
    return ScriptBlock(
        prologue=source[:prologue_end],
        records=records,
        epilogue=source[statements[-1].end :],
    )


def extract_block(source: str) -> ScriptBlock:
    """Split a whole script block into prologue, statements and epilogue.

    Everything after the last statement is the epilogue.
    """
    statements = list(StatementScanner(source))
    if not statements:
        return ScriptBlock(prologue=source, records=(), epilogue="")
    return _block(source, statements)


def extract_import_block(source: str) -> ScriptBlock | None:
    """Extract the leading run of import declarations of a script file.

    Directive statements (``"use strict"``, ``'use client'``) in front of
    the imports become part of the prologue. The epilogue is the rest of
    the file, byte for byte, starting right after the last import.

    Returns:
        ScriptBlock | None: the import block, or None when the file does not
        start with imports
    """
    imports: list[RawStatement] = []
    for raw in StatementScanner(source):
        text = source[raw.start : raw.end]
        if is_import_statement(text):
            imports.append(raw)
        elif not imports and is_directive(text):
            continue
        else:
            break

    if not imports:
        return None
    return _block(source, imports)
