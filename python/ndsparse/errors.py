"""Exceptions raised by ndsparse.

Every failure reported by this package is a local validation error: nothing
is transient and nothing is retried internally. All of them derive from
:class:`NdSparseError`, itself a ``ValueError``, so callers that already guard
array construction with ``except ValueError`` keep working.
"""


class NdSparseError(ValueError):
    """Base class for every ndsparse validation failure."""


class InvalidShape(NdSparseError):
    """A shape has no dimensions or a dimension that is not a positive integer."""


class OutOfBounds(NdSparseError):
    """A coordinate component is negative or not below its dimension size."""


class DuplicateCoordinate(NdSparseError):
    """Two COO entries share the same coordinate."""


class InconsistentDimension(NdSparseError):
    """A repeated dimension declaration disagrees with the first one at that depth."""


class TooManyDimensions(NdSparseError):
    """A dimension was declared while every depth of the branch is already open."""


class InvalidLine(NdSparseError):
    """A line has mismatched lengths, unsorted indices or an index past the last axis."""


class IncompleteStructure(NdSparseError):
    """A builder was finalized before every line position was supplied."""


class InvalidOffsets(NdSparseError):
    """Offset levels do not describe the declared shape."""


class TooManyLines(NdSparseError):
    """Input was supplied to a builder whose structure is already complete."""


class BuilderConsumed(NdSparseError):
    """The builder was already finalized."""


__all__ = [
    "NdSparseError",
    "InvalidShape",
    "OutOfBounds",
    "DuplicateCoordinate",
    "InconsistentDimension",
    "TooManyDimensions",
    "InvalidLine",
    "IncompleteStructure",
    "InvalidOffsets",
    "TooManyLines",
    "BuilderConsumed",
]
