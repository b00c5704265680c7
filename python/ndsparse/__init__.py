from ._runtime import get_check_invariants, set_check_invariants
from . import errors as errors
from .errors import (
    BuilderConsumed,
    DuplicateCoordinate,
    IncompleteStructure,
    InconsistentDimension,
    InvalidLine,
    InvalidOffsets,
    InvalidShape,
    NdSparseError,
    OutOfBounds,
    TooManyDimensions,
    TooManyLines,
)
from .sparse import COO, CSL, Coordinate, CslBuilder, Shape

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "set_check_invariants",
    "get_check_invariants",
    "COO",
    "CSL",
    "CslBuilder",
    "Coordinate",
    "Shape",
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
