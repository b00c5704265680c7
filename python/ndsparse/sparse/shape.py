"""Shape and coordinate value types.

Both are thin ``tuple`` subclasses: immutable, hashable, and ordered
lexicographically (component 0 is the most significant), which is exactly the
order used to sort COO entries and CSL data.
"""

import math
import operator

from ..errors import InvalidShape, OutOfBounds


def _as_index(value, error, what):
    try:
        return operator.index(value)
    except TypeError:
        raise error(f"{what} must be integers, got {value!r}") from None


class Coordinate(tuple):
    """Position of one cell, one non-negative index per axis.

    Parameters
    ----------
    idx : iterable of int or int
        Per-axis indices. A bare integer is treated as a 1-D coordinate.

    Raises
    ------
    OutOfBounds
        If a component is negative or not an integer.

    Examples
    --------
    >>> Coordinate([0, 2, 1]) < Coordinate([1, 0, 0])
    True
    """

    def __new__(cls, idx):
        if isinstance(idx, Coordinate):
            return idx
        try:
            items = tuple(idx)
        except TypeError:
            items = (idx,)
        out = tuple(_as_index(c, OutOfBounds, "coordinate components") for c in items)
        if any(c < 0 for c in out):
            raise OutOfBounds(f"negative indices are not supported, got {out}")
        return super().__new__(cls, out)

    def __repr__(self):
        return f"Coordinate({list(self)})"


class Shape(tuple):
    """Per-axis sizes bounding a sparse array.

    Parameters
    ----------
    dims : iterable of int
        Dimension sizes, outermost first. At least one entry, all positive.

    Attributes
    ----------
    ndim : int
        Number of axes.
    size : int
        Number of cells (product of ``dims``), as an unbounded Python int.

    Raises
    ------
    InvalidShape
        If ``dims`` is empty or holds a non-positive or non-integral entry.
    """

    def __new__(cls, dims):
        if isinstance(dims, Shape):
            return dims
        try:
            items = tuple(dims)
        except TypeError:
            raise InvalidShape(f"shape must be a sequence of sizes, got {dims!r}") from None
        if not items:
            raise InvalidShape("shape must have at least one dimension")
        out = tuple(_as_index(d, InvalidShape, "dimension sizes") for d in items)
        if any(d <= 0 for d in out):
            raise InvalidShape(f"dimension sizes must be positive, got {out}")
        return super().__new__(cls, out)

    @property
    def ndim(self):
        return len(self)

    @property
    def size(self):
        return math.prod(self)

    def contains(self, coord) -> bool:
        """True iff ``coord`` has ``ndim`` components, each within bounds."""
        try:
            coord = Coordinate(coord)
        except OutOfBounds:
            return False
        return len(coord) == len(self) and all(c < d for c, d in zip(coord, self))

    def check(self, coord):
        """Return ``coord`` as a :class:`Coordinate` or raise :class:`OutOfBounds`."""
        coord = Coordinate(coord)
        if len(coord) != len(self):
            raise OutOfBounds(
                f"coordinate {list(coord)} has {len(coord)} components, shape has {len(self)}"
            )
        for axis, (c, d) in enumerate(zip(coord, self)):
            if c >= d:
                raise OutOfBounds(
                    f"index {c} is out of bounds for axis {axis} with size {d}"
                )
        return coord

    def __repr__(self):
        return f"Shape({list(self)})"
