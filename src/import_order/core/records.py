"""
Statement records and the closed taxonomies used to order them.

Both taxonomies are fixed IntEnums: the enum value is the sort rank, so the
primary sort key of a record is simply ``int(record.category)`` or
``int(record.bucket)``.
"""

from dataclasses import dataclass, replace
from enum import Enum, IntEnum


class ImportKind(Enum):
    """Type/value axis of an import declaration"""

    TYPE = "type"
    VALUE = "value"


class PathKind(Enum):
    """Kind of module specifier an import points at"""

    SCOPED_PACKAGE = "scoped_package"
    BUILTIN_MODULE = "builtin_module"
    THIRD_PARTY = "third_party"
    RELATIVE = "relative"
    SVELTE_FRAMEWORK = "svelte_framework"


class ImportCategory(IntEnum):
    """Import taxonomy, lower values sort first"""

    TYPE_SCOPED = 1
    TYPE_BUILTIN = 2
    TYPE_THIRD_PARTY = 3
    TYPE_RELATIVE = 4
    VALUE_SCOPED = 5
    VALUE_FRAMEWORK = 6
    VALUE_BUILTIN = 7
    VALUE_THIRD_PARTY = 8
    VALUE_RELATIVE = 9
    UNCLASSIFIED = 10


class PreambleBucket(IntEnum):
    """Component preamble taxonomy, in canonical output order"""

    IMPORTS = 1
    PROPS = 2
    STATE = 3
    DERIVED = 4
    REACTIVE = 5
    CONSTANTS = 6
    FUNCTIONS = 7
    EVENTS = 8
    STORES = 9
    LIFECYCLE = 10
    UNCLASSIFIED = 11


# Buckets whose statements depend on execution sequence
ORDER_SENSITIVE_BUCKETS = frozenset(
    {
        PreambleBucket.REACTIVE,
        PreambleBucket.LIFECYCLE,
    }
)


@dataclass(frozen=True)
class StatementRecord:
    """One top-level statement of a script block.

    ``leading`` holds the comment lines attached above the statement and
    ``text`` the statement itself (with any same-line trailing comment).
    Neither is ever modified; emission writes ``raw_text`` back verbatim.
    """

    text: str
    original_index: int
    leading: str = ""
    kind: ImportKind | PreambleBucket | None = None
    module_path: str | None = None
    path_kind: PathKind | None = None
    category: ImportCategory | None = None
    bucket: PreambleBucket | None = None
    opaque: bool = False

    @property
    def raw_text(self) -> str:
        """Exact source text of the statement including attached comments"""
        return self.leading + self.text

    @property
    def is_import(self) -> bool:
        return isinstance(self.kind, ImportKind)

    @property
    def is_multiline(self) -> bool:
        """True when the statement code (not its comments) spans lines"""
        return "\n" in self.text

    def with_updates(self, **changes) -> "StatementRecord":
        """Return a copy with the given fields replaced"""
        return replace(self, **changes)


@dataclass(frozen=True)
class ScriptBlock:
    """A block of script text split into prologue, statements and epilogue.

    ``prologue + separator-joined statements + epilogue`` reproduces the
    block; the prologue and epilogue are never reordered.
    """

    prologue: str
    records: tuple[StatementRecord, ...]
    epilogue: str
