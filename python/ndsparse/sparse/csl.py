"""Compressed Sparse Line (CSL) store.

CSL generalizes the CSR layout to N dimensions. A *line* is the run of
entries sharing every index except the innermost one; lines are laid out in
ascending coordinate order in two flat arrays:

- ``data``: one value per stored cell;
- ``indcs``: the innermost-axis index of each value, strictly ascending within
  a line.

``offs`` holds ``ndim - 1`` offset levels, outermost first. Level ``l`` has
``1 + prod(dims[0..=l])`` entries and partitions the slot space of level
``l + 1`` (or, for the innermost level, the positions of ``data``): slot ``s``
of level ``l`` covers ``offs[l][s]:offs[l][s + 1]`` one level down. An empty
line is a zero-width range. Every combination of the non-innermost indices has
a slot, so the upper levels are arithmetic progressions of step
``dims[l + 1]`` and only the innermost level carries information about which
lines are empty.

A 1-D CSL is a single line: ``data`` plus ``indcs`` and no offset levels.

Examples
--------
The 2x2x2 array holding ``1.0`` at ``(0, 0, 0)`` and ``2.0`` at ``(1, 1, 1)``::

    >>> from ndsparse.sparse import CSL
    >>> a = CSL((2, 2, 2), [1.0, 2.0], [0, 1], [[0, 2, 4], [0, 1, 1, 1, 2]])
    >>> a.value([1, 1, 1]) == 2.0
    True
    >>> a.value([0, 1, 1]) is None
    True
"""

import logging
import operator

import numpy as np

from .._runtime import resolve_check
from ..errors import InvalidLine, InvalidOffsets, OutOfBounds
from ._utils import as_data, as_indices, readonly, slot_counts
from .base import SparseArray
from .coo import COO
from .shape import Coordinate, Shape

logger = logging.getLogger(__name__)


class CSL(SparseArray):
    """N-dimensional sparse array in Compressed Sparse Line format.

    Parameters
    ----------
    shape : iterable of int
        Array shape, outermost axis first.
    data : array_like, shape ``(nnz,)``
        Stored values in ascending coordinate order.
    indcs : array_like of int, shape ``(nnz,)``
        Innermost-axis index of each value.
    offs : sequence of array_like of int, optional
        ``ndim - 1`` offset levels, outermost first. Empty for a 1-D shape.
    dtype : numpy.dtype, optional
        Value dtype; ``None`` lets NumPy infer it.
    check : bool, optional
        Validate the structural invariants. ``None`` uses the process-wide
        default (see :func:`ndsparse.set_check_invariants`).

    Attributes
    ----------
    shape : Shape
        Array dimensions.
    data : numpy.ndarray
        Values, length ``nnz``.
    indcs : numpy.ndarray (int64)
        Innermost indices, length ``nnz``.
    offs : tuple of numpy.ndarray (int64)
        Offset levels.

    Raises
    ------
    InvalidShape
        If ``shape`` is empty or has a non-positive dimension.
    InvalidOffsets
        If the number, lengths or values of the offset levels do not match
        ``shape`` and ``nnz``.
    InvalidLine
        If ``data`` and ``indcs`` differ in length, an index is not an
        integer, or a line holds an index that is out of range, repeated or
        out of order.
    """

    def __init__(self, shape, data, indcs, offs=(), dtype=None, check=None):
        super().__init__(shape=shape)
        values = as_data(data, dtype)
        idx = as_indices(indcs, InvalidLine, "indcs")
        if idx.ndim != 1:
            raise InvalidLine("indcs must be one-dimensional")
        if offs is None:
            offs = ()
        levels = [as_indices(level, InvalidOffsets, "offsets") for level in offs]
        if resolve_check(check):
            self._validate(values, idx, levels)
        self.data = readonly(values)
        self.indcs = readonly(idx)
        self.offs = tuple(readonly(level) for level in levels)
        self.dtype = self.data.dtype

    def _validate(self, data, indcs, offs):
        dims = self.shape
        if len(offs) != self.ndim - 1:
            raise InvalidOffsets(
                f"a {self.ndim}-D shape needs {self.ndim - 1} offset levels, got {len(offs)}"
            )
        if data.shape[0] != indcs.shape[0]:
            raise InvalidLine(f"got {data.shape[0]} values for {indcs.shape[0]} indices")
        nnz = data.shape[0]
        for level, (level_offs, slots) in enumerate(zip(offs, slot_counts(dims))):
            if level_offs.ndim != 1 or level_offs.shape[0] != slots + 1:
                raise InvalidOffsets(
                    f"offset level {level} must have {slots + 1} entries, got {level_offs.size}"
                )
            if level_offs[0] != 0:
                raise InvalidOffsets(f"offset level {level} must start at 0")
            steps = np.diff(level_offs)
            if (steps < 0).any():
                raise InvalidOffsets(f"offset level {level} must be non-decreasing")
            if level < self.ndim - 2 and (steps != dims[level + 1]).any():
                raise InvalidOffsets(
                    f"each slot of offset level {level} must span {dims[level + 1]} "
                    f"slots of level {level + 1}"
                )
        if offs:
            bounds = offs[-1]
            if bounds[-1] != nnz:
                raise InvalidOffsets(f"last offset is {int(bounds[-1])}, expected nnz={nnz}")
        else:
            bounds = np.array([0, nnz], dtype=np.int64)
        if nnz == 0:
            return
        bad = (indcs < 0) | (indcs >= dims[-1])
        if bad.any():
            k = int(np.flatnonzero(bad)[0])
            raise InvalidLine(
                f"index {int(indcs[k])} at position {k} is out of bounds for the "
                f"innermost axis with size {dims[-1]}"
            )
        starts = np.zeros(nnz, dtype=bool)
        line_starts = bounds[:-1]
        starts[line_starts[line_starts < nnz]] = True
        unordered = (np.diff(indcs) <= 0) & ~starts[1:]
        if unordered.any():
            k = int(np.flatnonzero(unordered)[0]) + 1
            raise InvalidLine(
                f"indices within a line must be strictly ascending (position {k})"
            )

    @staticmethod
    def builder(ndim, dtype=None):
        """Return a :class:`~ndsparse.sparse.CslBuilder` for ``ndim`` axes."""
        from .builder import CslBuilder

        return CslBuilder(ndim, dtype=dtype)

    def _line_range(self, prefix):
        """Positions in ``data`` of the line addressed by ``prefix``."""
        if self.ndim == 1:
            return 0, self.nnz
        slot = prefix[0]
        for level in range(self.ndim - 2):
            level_offs = self.offs[level]
            start, stop = int(level_offs[slot]), int(level_offs[slot + 1])
            slot = start + prefix[level + 1]
            if slot >= stop:
                return 0, 0
        inner = self.offs[-1]
        return int(inner[slot]), int(inner[slot + 1])

    def value(self, coord):
        """Value stored at ``coord``, or None when the cell is empty.

        Descends the offset levels from the outermost axis, then binary-searches
        the innermost index within the selected line.

        Raises
        ------
        OutOfBounds
            If ``coord`` lies outside ``shape``.
        """
        pos = self._find(self.shape.check(coord))
        if pos is None:
            return None
        return self.data[pos]

    def _find(self, coord):
        """Position of ``coord`` in ``data``, or None."""
        start, stop = self._line_range(coord[:-1])
        if start == stop:
            return None
        line = self.indcs[start:stop]
        pos = int(np.searchsorted(line, coord[-1]))
        if pos < line.size and line[pos] == coord[-1]:
            return start + pos
        return None

    def line(self, prefix):
        """The line addressed by the first ``ndim - 1`` indices, as a 1-D CSL.

        Parameters
        ----------
        prefix : iterable of int
            Indices of every axis but the innermost; empty for a 1-D store.
        """
        prefix = Coordinate(prefix)
        if len(prefix) != self.ndim - 1:
            raise OutOfBounds(
                f"a line of a {self.ndim}-D array is addressed by {self.ndim - 1} indices, "
                f"got {len(prefix)}"
            )
        if prefix:
            Shape(self.shape[:-1]).check(prefix)
        start, stop = self._line_range(prefix)
        return CSL(
            (self.shape[-1],),
            self.data[start:stop],
            self.indcs[start:stop],
            dtype=self.dtype,
            check=False,
        )

    def lines(self):
        """Iterate over ``(prefix, line)`` for every line, empty ones included."""
        if self.ndim == 1:
            yield Coordinate(()), self.line(())
            return
        for prefix in np.ndindex(*self.shape[:-1]):
            yield Coordinate(prefix), self.line(prefix)

    def sub_dim(self, start, stop):
        """Slots ``[start, stop)`` of the outermost axis as a new CSL.

        The result keeps every inner dimension; its outermost size is
        ``stop - start`` and its indices along that axis start again at zero.

        Raises
        ------
        OutOfBounds
            If ``[start, stop)`` is empty or not within the outermost axis.
        """
        start, stop = operator.index(start), operator.index(stop)
        outer = self.shape[0]
        if not 0 <= start < stop <= outer:
            raise OutOfBounds(
                f"outermost range [{start}, {stop}) is not a non-empty part of [0, {outer})"
            )
        dims = (stop - start,) + tuple(self.shape[1:])
        if self.ndim == 1:
            lo = int(np.searchsorted(self.indcs, start, side="left"))
            hi = int(np.searchsorted(self.indcs, stop, side="left"))
            return CSL(
                dims, self.data[lo:hi], self.indcs[lo:hi] - start, dtype=self.dtype, check=False
            )
        offs = []
        stride = 1
        for level, level_offs in enumerate(self.offs):
            if level > 0:
                stride *= self.shape[level]
            piece = level_offs[start * stride : stop * stride + 1]
            offs.append(piece - piece[0])
        lo, hi = int(piece[0]), int(piece[-1])
        return CSL(
            dims, self.data[lo:hi], self.indcs[lo:hi], offs, dtype=self.dtype, check=False
        )

    def outermost_iter(self):
        """Iterate over each outermost slot as a CSL whose outermost size is 1."""
        for i in range(self.shape[0]):
            yield self.sub_dim(i, i + 1)

    def to_coo(self):
        """Rebuild full coordinates for every stored value.

        Each level maps a slot back to its parent slot with a binary search on
        the parent's offsets; the distance from the parent's first child is
        the index along that axis.

        Returns
        -------
        COO
            Store holding the same entries, already in ascending order.
        """
        nnz = self.nnz
        indices = np.empty((nnz, self.ndim), dtype=np.int64)
        indices[:, -1] = self.indcs
        if self.ndim > 1:
            positions = np.arange(nnz, dtype=np.int64)
            slots = np.searchsorted(self.offs[-1], positions, side="right") - 1
            for level in range(self.ndim - 3, -1, -1):
                parents = np.searchsorted(self.offs[level], slots, side="right") - 1
                indices[:, level + 1] = slots - self.offs[level][parents]
                slots = parents
            indices[:, 0] = slots
        logger.debug("CSL -> COO: shape=%s nnz=%d", list(self.shape), nnz)
        return COO(self.shape, indices, self.data, dtype=self.dtype, check=False)

    def _coords(self):
        return self.to_coo().indices

    def __eq__(self, other):
        if not isinstance(other, CSL):
            return NotImplemented
        return (
            self.shape == other.shape
            and np.array_equal(self.data, other.data)
            and np.array_equal(self.indcs, other.indcs)
            and len(self.offs) == len(other.offs)
            and all(np.array_equal(a, b) for a, b in zip(self.offs, other.offs))
        )

    def __repr__(self):
        return f"CSL(shape={list(self.shape)}, nnz={self.nnz}, dtype={self.dtype.name})"

    def __str__(self):
        return self.__repr__()
