"""N-dimensional coordinate-list (COO) sparse store.

The COO store is the "obviously correct" representation: an explicit
coordinate next to every value. It is used to build and cross-check the
compressed :class:`~ndsparse.sparse.CSL` layout.

Notes
-----
- Indices are stored as an ``(nnz, ndim)`` int64 array sorted lexicographically
  (axis 0 most significant); values follow the same order.
- Input order does not matter: entries are sorted once at construction, so two
  stores holding the same entries compare equal.
- Duplicated coordinates are rejected rather than aggregated.
"""

import logging
import math

import numpy as np

from .._runtime import resolve_check
from ..errors import DuplicateCoordinate, OutOfBounds
from ._utils import as_data, as_indices, first_duplicate_row, lex_order, readonly, search_rows
from .base import SparseArray
from .shape import Coordinate, Shape

logger = logging.getLogger(__name__)


class COO(SparseArray):
    """N-dimensional sparse array in COO format.

    Parameters
    ----------
    shape : iterable of int
        Overall array shape of length ``ndim``.
    indices : array_like of int, shape ``(nnz, ndim)`` or ``(nnz * ndim,)``
        Per-entry coordinates, either as rows of a 2D array or concatenated.
    data : array_like, shape ``(nnz,)``
        Stored values, in the same order as ``indices``.
    dtype : numpy.dtype, optional
        Value dtype. ``None`` lets NumPy infer it; ``object`` stores arbitrary
        payloads.
    check : bool, optional
        Validate bounds, sort and reject duplicates. ``None`` uses the
        process-wide default (see :func:`ndsparse.set_check_invariants`).
        With ``check=False`` the caller guarantees sorted, unique, in-bounds
        indices.

    Attributes
    ----------
    shape : Shape
        Array dimensions.
    ndim : int
        Number of dimensions (``len(shape)``).
    indices : numpy.ndarray (int64)
        Sorted coordinates, shape ``(nnz, ndim)``.
    data : numpy.ndarray
        Values, length ``nnz``.
    nnz : int
        Number of stored elements.

    Raises
    ------
    InvalidShape
        If ``shape`` is empty or has a non-positive dimension.
    OutOfBounds
        If an index is non-integral or outside ``[0, size)`` for its axis.
    DuplicateCoordinate
        If two entries share a coordinate.
    ValueError
        If ``indices`` and ``data`` disagree in length.

    Examples
    --------
    >>> from ndsparse.sparse import COO
    >>> a = COO((2, 3, 4), [[1, 2, 3], [0, 1, 2]], [3.0, 1.0])
    >>> a.indices.tolist()
    [[0, 1, 2], [1, 2, 3]]
    >>> a.value([1, 2, 3]) == 3.0
    True
    >>> a.value([0, 0, 0]) is None
    True
    """

    def __init__(self, shape, indices, data, dtype=None, check=None):
        super().__init__(shape=shape)
        idx = as_indices(indices, OutOfBounds, "coordinates")
        if idx.ndim == 2:
            if idx.shape[1] != self.ndim:
                raise ValueError(
                    f"indices have {idx.shape[1]} columns, shape has {self.ndim} dimensions"
                )
        elif idx.ndim == 1:
            if idx.size % self.ndim != 0:
                raise ValueError("indices length must be a multiple of ndim")
            idx = idx.reshape(-1, self.ndim)
        else:
            raise ValueError("indices must be 1D or 2D")
        values = as_data(data, dtype)
        if values.shape[0] != idx.shape[0]:
            raise ValueError(
                f"got {values.shape[0]} values for {idx.shape[0]} coordinates"
            )
        if resolve_check(check):
            idx, values = self._validated(idx, values)
        self.indices = readonly(idx)
        self.data = readonly(values)
        self.dtype = self.data.dtype

    def _validated(self, idx, values):
        bad = (idx < 0) | (idx >= np.asarray(self.shape, dtype=np.int64))
        if bad.any():
            row = int(np.flatnonzero(bad.any(axis=1))[0])
            # Shape.check names the offending axis
            self.shape.check(idx[row].tolist())
            raise OutOfBounds(f"coordinate {idx[row].tolist()} is out of bounds")
        order = lex_order(idx)
        if not np.array_equal(order, np.arange(order.size)):
            idx = idx[order]
            values = values[order]
        dup = first_duplicate_row(idx)
        if dup is not None:
            raise DuplicateCoordinate(f"coordinate {idx[dup].tolist()} appears more than once")
        return idx, values

    @classmethod
    def from_entries(cls, shape, entries, dtype=None, check=None):
        """Construct from ``(coordinate, value)`` pairs.

        Parameters
        ----------
        shape : iterable of int
            Array shape.
        entries : iterable of (coordinate, value)
            Cells to store, in any order.
        dtype, check
            See :class:`COO`.
        """
        shape = Shape(shape)
        coords = []
        values = []
        for coord, value in entries:
            coord = Coordinate(coord)
            if len(coord) != shape.ndim:
                raise OutOfBounds(
                    f"coordinate {list(coord)} has {len(coord)} components, shape has {shape.ndim}"
                )
            coords.append(coord)
            values.append(value)
        indices = np.array(coords, dtype=np.int64).reshape(-1, shape.ndim)
        return cls(shape, indices, as_data(values, dtype), dtype=dtype, check=check)

    @classmethod
    def from_arrays(cls, shape, indices, data, check=None):
        """Construct COO from raw arrays.

        Parameters
        ----------
        shape : iterable of int
            Array shape.
        indices : array_like of int64
            Flattened or 2D indices (nnz x ndim).
        data : array_like
            Values.
        check : bool, optional
            Validate invariants.
        """
        return cls(shape, indices, data, check=check)

    def _coords(self):
        return self.indices

    def value(self, coord):
        """Value stored at ``coord``, or None when the cell is empty.

        Parameters
        ----------
        coord : iterable of int
            One index per axis.

        Raises
        ------
        OutOfBounds
            If ``coord`` lies outside ``shape``.
        """
        row = self._find(self.shape.check(coord))
        if row is None:
            return None
        return self.data[row]

    def _find(self, coord):
        return search_rows(self.indices, coord)

    def entries(self):
        """Iterate over ``(Coordinate, value)`` pairs in ascending coordinate order."""
        for row, value in zip(self.indices.tolist(), self.data):
            yield Coordinate(row), value

    __iter__ = entries

    def __len__(self):
        return self.nnz

    def __eq__(self, other):
        if not isinstance(other, COO):
            return NotImplemented
        return (
            self.shape == other.shape
            and np.array_equal(self.indices, other.indices)
            and np.array_equal(self.data, other.data)
        )

    def to_csl(self):
        """Convert to the compressed :class:`~ndsparse.sparse.CSL` layout.

        Every combination of the non-innermost indices gets a line, empty or
        not, so each offset level spans the full index space of the axes above
        it.

        Returns
        -------
        CSL
            Store holding the same entries.
        """
        from .csl import CSL

        dims = self.shape
        offs = []
        if self.ndim > 1:
            for level in range(self.ndim - 2):
                slots = math.prod(dims[: level + 1])
                offs.append(np.arange(slots + 1, dtype=np.int64) * dims[level + 1])
            nlines = math.prod(dims[:-1])
            line_ids = np.ravel_multi_index(tuple(self.indices[:, :-1].T), dims[:-1])
            counts = np.bincount(line_ids, minlength=nlines)
            inner = np.zeros(nlines + 1, dtype=np.int64)
            np.cumsum(counts, out=inner[1:])
            offs.append(inner)
        logger.debug("COO -> CSL: shape=%s nnz=%d", list(dims), self.nnz)
        return CSL(dims, self.data, self.indices[:, -1], offs, dtype=self.dtype, check=False)

    def __repr__(self):
        return f"COO(shape={list(self.shape)}, nnz={self.nnz}, dtype={self.dtype.name})"

    def __str__(self):
        return self.__repr__()
