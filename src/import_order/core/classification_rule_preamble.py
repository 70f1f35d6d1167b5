"""
Preamble classification rules for component scripts.

Rules match on the shape of a declaration rather than on a single keyword,
so the legacy syntax (``export let``, ``$:``, plain ``let``) and the rune
syntax (``$props()``, ``$state()``, ``$effect()``) route to the same bucket.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum

from import_order.core.records import PreambleBucket


class Priority(IntEnum):
    """Priority levels for classification rules."""

    HIGHEST = 0
    HIGH = 10
    MEDIUM = 20
    NORMAL = 30
    LOW = 40
    LOWEST = 50


@dataclass(frozen=True)
class DeclarationShape:
    """Capabilities of a top-level statement, as seen by the classifier"""

    is_import: bool = False
    is_labeled: bool = False
    is_exported: bool = False
    keyword: str | None = None
    name: str | None = None
    is_destructure: bool = False
    # Rune callee of the initializer or expression, e.g. "$state.raw"
    wrapper: str | None = None
    # Plain callee of the initializer or expression, e.g. "writable"
    callee: str | None = None
    is_function_value: bool = False

    @property
    def is_declaration(self) -> bool:
        return self.keyword is not None


def _in_family(name: str | None, families: set[str]) -> bool:
    """``$state.raw`` belongs to the ``$state`` family"""
    if not name:
        return False
    return any(name == family or name.startswith(f"{family}.") for family in families)


@dataclass
class ClassificationRulePreamble:
    """A single preamble classification rule.

    Every constraint that is set must hold for the rule to match; unset
    constraints are ignored.
    """

    bucket: PreambleBucket
    priority: int = Priority.NORMAL

    keywords: set[str] = field(default_factory=set)
    wrappers: set[str] = field(default_factory=set)
    callees: set[str] = field(default_factory=set)
    name_pattern: str | None = None

    is_import: bool | None = None
    is_labeled: bool | None = None
    is_exported: bool | None = None
    is_function_value: bool | None = None
    expression_only: bool = False
    unwrapped_only: bool = False

    # Optional custom check function
    custom_check: Callable[[DeclarationShape], bool] | None = None

    def matches(self, shape: DeclarationShape) -> bool:
        """Check if this rule matches the given declaration shape."""
        if self.is_import is not None and shape.is_import != self.is_import:
            return False
        if self.is_labeled is not None and shape.is_labeled != self.is_labeled:
            return False
        if self.is_exported is not None and shape.is_exported != self.is_exported:
            return False
        if (
            self.is_function_value is not None
            and shape.is_function_value != self.is_function_value
        ):
            return False
        if self.expression_only and shape.is_declaration:
            return False
        if self.unwrapped_only and shape.wrapper:
            return False
        if self.keywords and shape.keyword not in self.keywords:
            return False
        if self.wrappers and not _in_family(shape.wrapper, self.wrappers):
            return False
        if self.callees and shape.callee not in self.callees:
            return False
        if self.name_pattern and not (
            shape.name and re.match(self.name_pattern, shape.name)
        ):
            return False
        if self.custom_check:
            return self.custom_check(shape)
        return True


def get_default_preamble_rules() -> list[ClassificationRulePreamble]:
    """Get the default set of preamble classification rules.

    Rules are evaluated by priority, then in list order; the first match
    decides the bucket.
    """
    rules = []

    # ============================================================
    # STRUCTURAL (Highest Priority)
    # ============================================================

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.IMPORTS,
            priority=Priority.HIGHEST,
            is_import=True,
        ),
    )

    # $: labeled statements are reactive whatever they contain
    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.REACTIVE,
            priority=Priority.HIGHEST,
            is_labeled=True,
        ),
    )

    # ============================================================
    # COMPONENT INTERFACE (High Priority)
    # ============================================================

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.PROPS,
            priority=Priority.HIGH,
            wrappers={"$props"},
        ),
    )

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.PROPS,
            priority=Priority.HIGH,
            is_exported=True,
            keywords={"let", "var"},
        ),
    )

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.EVENTS,
            priority=Priority.HIGH,
            callees={"createEventDispatcher"},
        ),
    )

    # Exported on* handlers are the component's event surface
    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.EVENTS,
            priority=Priority.HIGH,
            is_exported=True,
            keywords={"function", "const"},
            name_pattern=r"^on[A-Z_]",
        ),
    )

    # ============================================================
    # REACTIVITY (Medium Priority)
    # ============================================================

    # Store constructors before the legacy "let is state" rule
    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.STORES,
            priority=Priority.MEDIUM,
            keywords={"const", "let", "var"},
            callees={"writable", "readable", "derived"},
        ),
    )

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.STATE,
            priority=Priority.MEDIUM,
            wrappers={"$state"},
        ),
    )

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.DERIVED,
            priority=Priority.MEDIUM,
            wrappers={"$derived"},
        ),
    )

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.REACTIVE,
            priority=Priority.MEDIUM,
            wrappers={"$effect"},
        ),
    )

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.LIFECYCLE,
            priority=Priority.MEDIUM,
            expression_only=True,
            callees={"onMount", "onDestroy", "beforeUpdate", "afterUpdate"},
        ),
    )

    # ============================================================
    # PLAIN DECLARATIONS (Normal/Low Priority)
    # ============================================================

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.FUNCTIONS,
            priority=Priority.NORMAL,
            keywords={"function"},
        ),
    )

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.FUNCTIONS,
            priority=Priority.NORMAL,
            keywords={"const"},
            is_function_value=True,
        ),
    )

    # Legacy component state: a top-level let without any rune
    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.STATE,
            priority=Priority.LOW,
            keywords={"let", "var"},
            unwrapped_only=True,
        ),
    )

    rules.append(
        ClassificationRulePreamble(
            bucket=PreambleBucket.CONSTANTS,
            priority=Priority.LOW,
            keywords={"const"},
            unwrapped_only=True,
        ),
    )

    return rules
