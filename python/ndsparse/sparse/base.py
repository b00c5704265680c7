"""Base class for the sparse stores.

It defines the minimal interface shared by :class:`~ndsparse.sparse.COO` and
:class:`~ndsparse.sparse.CSL`, including shape/dtype bookkeeping and dense
materialization.
"""

import numpy as np

from .shape import Coordinate, Shape


class SparseArray:
    """Abstract base class for sparse N-dimensional arrays.

    Parameters
    ----------
    shape : iterable of int
        Array shape. Stored as a :class:`Shape`.
    dtype : numpy.dtype, optional
        Element dtype metadata; concrete stores set it from their data.

    Attributes
    ----------
    shape : Shape
        Array shape.
    ndim : int
        Number of dimensions, equal to ``len(shape)``.
    dtype : numpy.dtype
        Element type of the stored values.

    Notes
    -----
    Stores are immutable once constructed: every backing array is flagged
    read-only, so concurrent readers need no locking.
    """

    def __init__(self, shape, dtype=None):
        self.shape = Shape(shape)
        self.ndim = len(self.shape)
        self.dtype = dtype

    @property
    def nnz(self):
        """Number of stored values."""
        return int(self.data.size)

    def value(self, coord):
        raise NotImplementedError

    def _coords(self):
        """Return the ``(nnz, ndim)`` index array matching ``self.data``."""
        raise NotImplementedError

    def _find(self, coord):
        """Storage position of an in-bounds ``coord``, or None when absent."""
        raise NotImplementedError

    def __contains__(self, coord):
        # a stored None payload still counts as present
        if not self.shape.contains(coord):
            return False
        return self._find(Coordinate(coord)) is not None

    __hash__ = None

    def toarray(self, fill_value=0):
        """Return a dense ``numpy.ndarray`` with the same shape and dtype.

        Parameters
        ----------
        fill_value : scalar, optional
            Value of the cells that hold no entry.
        """
        out = np.full(tuple(self.shape), fill_value, dtype=self.data.dtype)
        idx = self._coords()
        if idx.shape[0]:
            out[tuple(idx.T)] = self.data
        return out
