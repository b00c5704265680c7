import operator

import numpy as np


def as_data(values, dtype=None):
    """Copy ``values`` into a fresh 1-D array.

    ``dtype=object`` keeps each element as-is, even when the elements are
    themselves sequences.
    """
    if dtype is not None and np.dtype(dtype) == np.dtype(object):
        values = list(values)
        out = np.empty(len(values), dtype=object)
        for k, v in enumerate(values):
            out[k] = v
        return out
    out = np.array(values, dtype=dtype, copy=True)
    if out.ndim != 1:
        raise ValueError("data must be one-dimensional")
    return out


def as_indices(values, error, what="indices"):
    """Copy integer ``values`` into a fresh int64 array.

    Non-integral input raises ``error`` instead of being truncated, and so do
    integers that do not fit in int64. An empty input is accepted whatever its
    dtype.
    """
    try:
        arr = np.asarray(values)
    except OverflowError:
        raise error(f"{what} exceed the int64 range") from None
    if arr.size == 0:
        return np.zeros(arr.shape, dtype=np.int64)
    if arr.dtype.kind == "O":
        for v in arr.ravel():
            try:
                operator.index(v)
            except TypeError:
                raise error(f"{what} must be integers, got {v!r}") from None
    elif arr.dtype.kind not in "iu":
        raise error(f"{what} must be integers, got dtype {arr.dtype}")
    elif arr.dtype.kind == "u" and arr.max() > np.iinfo(np.int64).max:
        raise error(f"{what} exceed the int64 range")
    try:
        return np.array(arr, dtype=np.int64, copy=True)
    except OverflowError:
        raise error(f"{what} exceed the int64 range") from None


def readonly(arr):
    arr.setflags(write=False)
    return arr


def lex_order(indices):
    """Permutation that sorts the rows of ``indices`` lexicographically."""
    if indices.shape[0] == 0:
        return np.zeros(0, dtype=np.intp)
    # lexsort treats the last key as primary; column 0 is the most significant
    return np.lexsort(indices.T[::-1])


def search_rows(indices, coord):
    """Binary-search lexicographically sorted ``indices`` for ``coord``.

    The candidate range is narrowed one axis at a time: rows sharing a prefix
    are contiguous and sorted on the next column.

    Returns
    -------
    int or None
        Row position of ``coord``, or None when absent.
    """
    lo, hi = 0, indices.shape[0]
    for axis, c in enumerate(coord):
        column = indices[lo:hi, axis]
        start = lo + int(np.searchsorted(column, c, side="left"))
        stop = lo + int(np.searchsorted(column, c, side="right"))
        if start == stop:
            return None
        lo, hi = start, stop
    return lo


def first_duplicate_row(sorted_indices):
    """Position of the first row equal to its predecessor, or None."""
    if sorted_indices.shape[0] < 2:
        return None
    same = np.all(sorted_indices[1:] == sorted_indices[:-1], axis=1)
    hits = np.flatnonzero(same)
    if hits.size == 0:
        return None
    return int(hits[0]) + 1


def slot_counts(dims):
    """Number of slots at each offset level: ``prod(dims[0..=l])`` for l < ndim-1."""
    counts = []
    total = 1
    for d in dims[:-1]:
        total *= d
        counts.append(total)
    return counts
