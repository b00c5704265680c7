"""Incremental, single-pass construction of a :class:`~ndsparse.sparse.CSL`.

The builder walks the dimension hierarchy depth-first, outermost axis first.
The caller declares the size of each depth as the walk enters it, then pushes
the lines of the innermost group one by one (empty ones included). When a
group fills up, the walk climbs to the parent, moves it to its next sibling
slot and resets every deeper cursor to zero. The caller then declares the
deeper depths again (each declaration is checked against the first one at
that depth) and pushes the lines of the new group.

A 2x2x2 array holding ``1.0`` at ``(0, 0, 0)`` and ``2.0`` at ``(1, 1, 1)``::

    >>> from ndsparse.sparse import CslBuilder
    >>> csl = (
    ...     CslBuilder(3)
    ...     .next_outermost_dim(2)   # axis 0
    ...     .next_outermost_dim(2)   # axis 1, first branch
    ...     .next_outermost_dim(2)   # axis 2, line length
    ...     .push_line([1.0], [0])   # (0, 0, :)
    ...     .push_empty_line()       # (0, 1, :)
    ...     .next_outermost_dim(2)   # axis 1, second branch
    ...     .next_outermost_dim(2)   # axis 2
    ...     .push_empty_line()       # (1, 0, :)
    ...     .push_line([2.0], [1])   # (1, 1, :)
    ...     .finalize()
    ... )
    >>> csl.value([1, 1, 1]) == 2.0
    True

The builder is not thread-safe; it expects a single writer.
"""

import logging
import operator

from ..errors import (
    BuilderConsumed,
    IncompleteStructure,
    InconsistentDimension,
    InvalidLine,
    InvalidShape,
    TooManyDimensions,
    TooManyLines,
)
from ._utils import as_data
from .csl import CSL

logger = logging.getLogger(__name__)


class CslBuilder:
    """Stateful constructor emitting a validated :class:`CSL`.

    Parameters
    ----------
    ndim : int
        Number of axes of the array being built.
    dtype : numpy.dtype, optional
        Value dtype of the finalized store.

    Attributes
    ----------
    ndim : int
        Number of axes.
    dims : tuple of int
        Sizes declared so far, outermost first.
    depth : int
        Number of depths declared on the current branch. Lines are accepted
        once it reaches ``ndim``.
    cursor : tuple of int
        Current slot at each depth ``0 .. ndim - 2``; the last one is the next
        line position.
    state : str
        One of ``"empty"``, ``"declaring"``, ``"filling"``, ``"complete"``,
        ``"finalized"``.

    Notes
    -----
    Every method validates its input before touching any state, so a failing
    call leaves the builder as it was.
    """

    def __init__(self, ndim, dtype=None):
        try:
            ndim = operator.index(ndim)
        except TypeError:
            raise InvalidShape(f"ndim must be an integer, got {ndim!r}") from None
        if ndim < 1:
            raise InvalidShape(f"ndim must be at least 1, got {ndim}")
        self.ndim = ndim
        self.dtype = dtype
        self._dims = []
        self._depth = 0
        self._cursor = [0] * (ndim - 1)
        self._data = []
        self._indcs = []
        self._offs = [[0] for _ in range(ndim - 1)]
        self._complete = False
        self._finalized = False

    @property
    def dims(self):
        return tuple(self._dims)

    @property
    def depth(self):
        return self._depth

    @property
    def cursor(self):
        return tuple(self._cursor)

    @property
    def nnz(self):
        return len(self._data)

    @property
    def state(self):
        if self._finalized:
            return "finalized"
        if self._complete:
            return "complete"
        if not self._dims:
            return "empty"
        if self._depth < self.ndim:
            return "declaring"
        return "filling"

    def _ensure_open(self):
        if self._finalized:
            raise BuilderConsumed("the builder has already been finalized")
        if self._complete:
            raise TooManyLines(
                f"every position of the {list(self._dims)} structure is already filled"
            )

    def next_outermost_dim(self, size):
        """Declare the size of the next depth and descend into it.

        The first declaration at a depth records its size; later ones must
        repeat it.

        Raises
        ------
        InvalidShape
            If ``size`` is not a positive integer.
        InconsistentDimension
            If ``size`` differs from the size recorded for this depth.
        TooManyDimensions
            If every depth of the current branch is already declared.
        """
        self._ensure_open()
        try:
            size = operator.index(size)
        except TypeError:
            raise InvalidShape(f"dimension sizes must be integers, got {size!r}") from None
        if size <= 0:
            raise InvalidShape(f"dimension sizes must be positive, got {size}")
        depth = self._depth
        if depth == self.ndim:
            raise TooManyDimensions(
                f"all {self.ndim} dimensions are declared; push lines instead"
            )
        if depth < len(self._dims):
            if self._dims[depth] != size:
                raise InconsistentDimension(
                    f"depth {depth} was declared with size {self._dims[depth]}, got {size}"
                )
        else:
            self._dims.append(size)
        self._depth = depth + 1
        return self

    def push_line(self, values, indices):
        """Append one line at the current position and advance to the next one.

        Parameters
        ----------
        values : iterable
            Stored values of the line.
        indices : iterable of int
            Innermost-axis index of each value, strictly ascending and below
            the innermost dimension size.

        Raises
        ------
        InvalidLine
            If the line is malformed, its values do not convert to ``dtype``,
            or some depth of the current branch is still undeclared.
        TooManyLines
            If the structure is already complete.
        """
        self._ensure_open()
        if self._depth < self.ndim:
            raise InvalidLine(
                f"declare all {self.ndim} dimensions before pushing lines "
                f"({self._depth} declared on this branch)"
            )
        values = list(values)
        try:
            indices = [operator.index(i) for i in indices]
        except TypeError:
            raise InvalidLine("line indices must be integers") from None
        if len(values) != len(indices):
            raise InvalidLine(f"got {len(values)} values for {len(indices)} indices")
        last = self._dims[-1]
        prev = -1
        for i in indices:
            if i < 0:
                raise InvalidLine(f"negative indices are not supported, got {i}")
            if i <= prev:
                raise InvalidLine(f"line indices must be strictly ascending, got {indices}")
            if i >= last:
                raise InvalidLine(
                    f"index {i} is out of bounds for the innermost axis with size {last}"
                )
            prev = i
        try:
            line = as_data(values, self.dtype)
        except (TypeError, ValueError) as exc:
            raise InvalidLine(f"line values cannot be stored as a 1-D array: {exc}") from None
        self._data.extend(line.tolist())
        self._indcs.extend(indices)
        self._close_line()
        return self

    def push_empty_line(self):
        """Record a line with no entries at the current position."""
        return self.push_line((), ())

    def _close_line(self):
        if self.ndim == 1:
            self._complete = True
            return
        self._offs[-1].append(len(self._data))
        level = self.ndim - 2
        while level >= 0:
            self._cursor[level] += 1
            if self._cursor[level] < self._dims[level]:
                break
            self._cursor[level] = 0
            if level > 0:
                self._offs[level - 1].append(len(self._offs[level]) - 1)
            level -= 1
        if level < 0:
            self._complete = True
        elif level < self.ndim - 2:
            # a new sibling group: its inner depths must be declared again
            self._depth = level + 1

    def finalize(self):
        """Emit the finished :class:`CSL` and consume the builder.

        Raises
        ------
        IncompleteStructure
            If some line position implied by the declared sizes is missing.
        BuilderConsumed
            If the builder was already finalized.
        """
        if self._finalized:
            raise BuilderConsumed("the builder has already been finalized")
        if not self._complete:
            raise IncompleteStructure(
                f"structure is incomplete: dims={list(self._dims)}, depth={self._depth}, "
                f"cursor={list(self._cursor)}"
            )
        csl = CSL(
            self._dims,
            as_data(self._data, self.dtype),
            self._indcs,
            self._offs,
            dtype=self.dtype,
            check=False,
        )
        self._finalized = True
        logger.debug("finalized CSL: shape=%s nnz=%d", list(csl.shape), csl.nnz)
        return csl

    def __repr__(self):
        return (
            f"CslBuilder(ndim={self.ndim}, dims={list(self._dims)}, "
            f"state={self.state!r}, cursor={list(self._cursor)})"
        )
