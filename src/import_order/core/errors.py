"""
Exceptions raised by the reordering engine
"""


class ReorderError(Exception):
    """Base class for all reordering errors"""


class ParseError(ReorderError, ValueError):
    """The file content is not recognizable as the expected file kind"""


class VerificationError(ReorderError, RuntimeError):
    """The engine produced output that breaks one of its own guarantees.

    This always points at a defect in classification or sorting, never at
    the input, so it is reported as a hard error and nothing is written.
    """


class IdempotencyError(VerificationError):
    """Reapplying the pipeline to its own output changed it again"""


class PermutationError(VerificationError):
    """The reordered statements are not a permutation of the input"""
