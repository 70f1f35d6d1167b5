"""
Category classification for import declarations and preamble statements.

Imports are split on the type/value axis first, then their module path is
resolved to a PathKind, and the pair is looked up in a static table. No
category is computed dynamically, so every import has exactly one rank.

Preamble statements are reduced to a DeclarationShape and routed through
the preamble classification rules; a statement that matches no rule lands
in the terminal UNCLASSIFIED bucket.
"""

import logging
import re

from import_order.core.classification_rule_preamble import (
    ClassificationRulePreamble,
    DeclarationShape,
    get_default_preamble_rules,
)
from import_order.core.config import OrderingConfig
from import_order.core.records import (
    ImportCategory,
    ImportKind,
    PathKind,
    PreambleBucket,
    StatementRecord,
)
from import_order.core.scanner import is_import_statement, statement_code

logger = logging.getLogger(__name__)

CATEGORY_TABLE: dict[tuple[ImportKind, PathKind], ImportCategory] = {
    (ImportKind.TYPE, PathKind.SCOPED_PACKAGE): ImportCategory.TYPE_SCOPED,
    (ImportKind.TYPE, PathKind.BUILTIN_MODULE): ImportCategory.TYPE_BUILTIN,
    (ImportKind.TYPE, PathKind.THIRD_PARTY): ImportCategory.TYPE_THIRD_PARTY,
    # Type imports have no framework category
    (ImportKind.TYPE, PathKind.SVELTE_FRAMEWORK): ImportCategory.TYPE_THIRD_PARTY,
    (ImportKind.TYPE, PathKind.RELATIVE): ImportCategory.TYPE_RELATIVE,
    (ImportKind.VALUE, PathKind.SCOPED_PACKAGE): ImportCategory.VALUE_SCOPED,
    (ImportKind.VALUE, PathKind.SVELTE_FRAMEWORK): ImportCategory.VALUE_FRAMEWORK,
    (ImportKind.VALUE, PathKind.BUILTIN_MODULE): ImportCategory.VALUE_BUILTIN,
    (ImportKind.VALUE, PathKind.THIRD_PARTY): ImportCategory.VALUE_THIRD_PARTY,
    (ImportKind.VALUE, PathKind.RELATIVE): ImportCategory.VALUE_RELATIVE,
}

_STRING = r"""(["'])((?:\\.|(?!\1).)*)\1"""
_FROM_RE = re.compile(r"\bfrom\s*" + _STRING)
_BARE_IMPORT_RE = re.compile(r"^import\s*" + _STRING)
_REQUIRE_RE = re.compile(r"=\s*require\s*\(\s*" + _STRING + r"\s*\)")
# "import type X", "import type {", "import type *" but not "import type from"
_TYPE_ONLY_RE = re.compile(r"^import\s+type(?:\s*[{*]|\s+(?!from\b)[A-Za-z_$])")

_DECLARATION_RE = re.compile(
    r"^(?:declare\s+)?(?:(?:async)\s+)?"
    r"(?P<keyword>const\s+enum|const|let|var|function|abstract\s+class|class"
    r"|type|interface|enum)(?![\w$])\s*\*?\s*"
)
_NAME_RE = re.compile(r"[A-Za-z_$][\w$]*")
_CALLEE_RE = re.compile(
    r"^(?:await\s+|new\s+)*"
    r"(?P<callee>[A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*)\s*(?:<|\()"
)
_ARROW_HEAD_RE = re.compile(r"^(?:async\s*)?(?:<[^>]*>\s*)?")
_ARROW_TAIL_RE = re.compile(r"^\s*(?::[^=]*)?=>")


# ============================================================
# IMPORTS
# ============================================================


def parse_import(text: str) -> tuple[ImportKind, str | None]:
    """Extract the type/value axis and the module path of an import.

    Returns:
        tuple: (ImportKind, module path or None when no path can be found)
    """
    code = statement_code(text)
    kind = ImportKind.TYPE if _TYPE_ONLY_RE.match(code) else ImportKind.VALUE

    for pattern in (_FROM_RE, _BARE_IMPORT_RE, _REQUIRE_RE):
        match = pattern.search(code)
        if match:
            return kind, match.group(2)
    return kind, None


def resolve_path_kind(
    module_path: str,
    ordering: OrderingConfig,
    allow_framework: bool = True,
) -> PathKind:
    """Resolve the kind of a module specifier.

    Checks run in a fixed order: relative, scoped, built-in, framework
    runtime (value imports only), then the third-party fallback.
    """
    if module_path.startswith("."):
        return PathKind.RELATIVE

    if module_path.startswith(ordering.scope_marker):
        return PathKind.SCOPED_PACKAGE

    if module_path.startswith(tuple(ordering.builtin_prefixes)):
        return PathKind.BUILTIN_MODULE
    if module_path.split("/", 1)[0] in ordering.builtin_modules:
        return PathKind.BUILTIN_MODULE

    if allow_framework:
        for name in ordering.framework_modules:
            if module_path == name or module_path.startswith(f"{name}/"):
                return PathKind.SVELTE_FRAMEWORK

    return PathKind.THIRD_PARTY


def classify_import(
    record: StatementRecord,
    ordering: OrderingConfig,
) -> StatementRecord:
    """Return a copy of an import record with kind, path kind and category"""
    if record.opaque:
        return record.with_updates(category=ImportCategory.UNCLASSIFIED)

    kind, module_path = parse_import(record.text)
    if module_path is None:
        logger.debug(f"Import without module path: {record.text!r}")
        return record.with_updates(kind=kind, category=ImportCategory.UNCLASSIFIED)

    path_kind = resolve_path_kind(
        module_path,
        ordering,
        allow_framework=kind is ImportKind.VALUE,
    )
    return record.with_updates(
        kind=kind,
        module_path=module_path,
        path_kind=path_kind,
        category=CATEGORY_TABLE[(kind, path_kind)],
    )


# ============================================================
# PREAMBLE
# ============================================================


def _find_initializer(code: str, start: int) -> str | None:
    """Text after the first top-level ``=`` of a variable declaration"""
    depth = 0
    i, n = start, len(code)
    while i < n:
        char = code[i]
        if char in "'\"`":
            quote = char
            i += 1
            while i < n and code[i] != quote:
                i += 2 if code[i] == "\\" else 1
        elif char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
        elif char == "=" and depth == 0:
            following = code[i + 1 : i + 2]
            preceding = code[i - 1 : i] if i > 0 else ""
            if following not in ("=", ">") and preceding not in ("=", "!", "<", ">"):
                return code[i + 1 :].strip()
        i += 1
    return None


def _callee_of(expression: str) -> str | None:
    match = _CALLEE_RE.match(expression)
    if not match:
        return None
    return re.sub(r"\s+", "", match.group("callee"))


def _is_function_value(expression: str) -> bool:
    if re.match(r"^(?:async\s+)?function\b", expression):
        return True
    rest = expression[_ARROW_HEAD_RE.match(expression).end() :]
    if rest.startswith("("):
        depth = 0
        for i, char in enumerate(rest):
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return bool(_ARROW_TAIL_RE.match(rest[i + 1 :]))
        return False
    name = _NAME_RE.match(rest)
    return bool(name and _ARROW_TAIL_RE.match(rest[name.end() :]))


def shape_of(text: str) -> DeclarationShape:
    """Reduce a statement to the capabilities the preamble rules match on"""
    if is_import_statement(text):
        return DeclarationShape(is_import=True)

    code = statement_code(text)
    if re.match(r"^\$\s*:", code):
        return DeclarationShape(is_labeled=True)

    is_exported = False
    exported = re.match(r"^export\s+(?:default\s+)?", code)
    if exported:
        is_exported = True
        code = code[exported.end() :]

    declaration = _DECLARATION_RE.match(code)
    if not declaration:
        callee = _callee_of(code)
        return DeclarationShape(
            is_exported=is_exported,
            wrapper=callee if callee and callee.startswith("$") else None,
            callee=callee,
        )

    keyword = re.sub(r"\s+", " ", declaration.group("keyword"))
    keyword = {"abstract class": "class", "const enum": "enum"}.get(keyword, keyword)
    rest_start = declaration.end()
    is_destructure = code[rest_start : rest_start + 1] in ("{", "[")
    name_match = None if is_destructure else _NAME_RE.match(code, rest_start)

    wrapper = callee = None
    is_function_value = False
    if keyword in ("const", "let", "var"):
        initializer = _find_initializer(code, rest_start)
        if initializer:
            callee = _callee_of(initializer)
            if callee and callee.startswith("$"):
                wrapper = callee
            is_function_value = not is_destructure and _is_function_value(initializer)

    return DeclarationShape(
        is_exported=is_exported,
        keyword=keyword,
        name=name_match.group(0) if name_match else None,
        is_destructure=is_destructure,
        wrapper=wrapper,
        callee=callee,
        is_function_value=is_function_value,
    )


class PreambleClassifier:
    """Assigns preamble buckets using an ordered list of rules"""

    def __init__(
        self,
        ordering: OrderingConfig | None = None,
        rules: list[ClassificationRulePreamble] | None = None,
    ):
        self.ordering = ordering or OrderingConfig()
        self._rules = rules if rules is not None else get_default_preamble_rules()

    def add_rule(self, rule: ClassificationRulePreamble) -> None:
        """Add a custom classification rule"""
        self._rules.append(rule)

    @property
    def rules(self) -> list[ClassificationRulePreamble]:
        """Rules in evaluation order (stable by priority)"""
        return sorted(self._rules, key=lambda rule: rule.priority)

    def bucket_for(self, shape: DeclarationShape) -> PreambleBucket:
        for rule in self.rules:
            if rule.matches(shape):
                return rule.bucket
        return PreambleBucket.UNCLASSIFIED

    def classify(self, record: StatementRecord) -> StatementRecord:
        """Return a copy of the record with its bucket (and import category)"""
        if record.opaque:
            return record.with_updates(bucket=PreambleBucket.UNCLASSIFIED)

        bucket = self.bucket_for(shape_of(record.text))
        if bucket is PreambleBucket.IMPORTS:
            return classify_import(record, self.ordering).with_updates(bucket=bucket)
        return record.with_updates(kind=bucket, bucket=bucket)

    def classify_all(self, records) -> list[StatementRecord]:
        return [self.classify(record) for record in records]
