import numpy as np
import pytest

from ndsparse import (
    BuilderConsumed,
    IncompleteStructure,
    InconsistentDimension,
    InvalidLine,
    InvalidShape,
    TooManyDimensions,
    TooManyLines,
)
from ndsparse.sparse import COO, CSL, CslBuilder


def build_cube():
    # shape [2,2,2] with (0,0,0)=1.0 and (1,1,1)=2.0
    b = CslBuilder(3)
    b.next_outermost_dim(2).next_outermost_dim(2).next_outermost_dim(2)
    b.push_line([1.0], [0]).push_empty_line()
    b.next_outermost_dim(2).next_outermost_dim(2)
    b.push_empty_line().push_line([2.0], [1])
    return b


def test_builder_cube_scenario():
    csl = build_cube().finalize()
    assert csl.shape == (2, 2, 2)
    assert csl.value([0, 0, 0]) == 1.0
    assert csl.value([1, 1, 1]) == 2.0
    assert csl.value([0, 1, 1]) is None
    np.testing.assert_array_equal(csl.offs[0], [0, 2, 4])
    np.testing.assert_array_equal(csl.offs[1], [0, 1, 1, 1, 2])
    coo = COO.from_entries((2, 2, 2), [((0, 0, 0), 1.0), ((1, 1, 1), 2.0)])
    assert csl == coo.to_csl()
    assert csl.to_coo() == coo


def test_builder_states_and_cursor():
    b = CslBuilder(3)
    assert b.state == "empty"
    b.next_outermost_dim(2)
    assert b.state == "declaring"
    assert b.depth == 1
    b.next_outermost_dim(3).next_outermost_dim(4)
    assert b.state == "filling"
    assert b.dims == (2, 3, 4)
    b.push_empty_line().push_empty_line()
    assert b.cursor == (0, 2)
    b.push_line([1.0, 2.0], [0, 3])
    # the group of axis 1 is full: the walk climbs back to axis 0
    assert b.cursor == (1, 0)
    assert b.depth == 1
    assert b.state == "declaring"


def test_builder_matrix():
    b = CslBuilder(2, dtype=np.int64)
    b.next_outermost_dim(3).next_outermost_dim(4)
    b.push_line([1, 2], [0, 3]).push_empty_line().push_line([3], [2])
    assert b.state == "complete"
    csl = b.finalize()
    assert csl.dtype == np.int64
    np.testing.assert_array_equal(csl.offs[0], [0, 2, 2, 3])
    np.testing.assert_array_equal(
        csl.toarray(), [[1, 0, 0, 2], [0, 0, 0, 0], [0, 0, 3, 0]]
    )


def test_builder_one_dimensional():
    b = CslBuilder(1)
    csl = b.next_outermost_dim(10).push_line([8.0, 9.0], [0, 5]).finalize()
    assert csl == CSL((10,), [8.0, 9.0], [0, 5])


def test_builder_single_empty_cell():
    csl = CslBuilder(1).next_outermost_dim(1).push_empty_line().finalize()
    assert csl.shape == (1,)
    assert csl.value([0]) is None


def test_builder_inconsistent_dimension():
    b = build_partial()
    with pytest.raises(InconsistentDimension):
        b.next_outermost_dim(3)
    # the failing call left the builder untouched
    assert b.depth == 1
    b.next_outermost_dim(2).next_outermost_dim(2)
    assert b.state == "filling"


def build_partial():
    b = CslBuilder(3)
    b.next_outermost_dim(2).next_outermost_dim(2).next_outermost_dim(2)
    b.push_empty_line().push_empty_line()
    return b


def test_builder_too_many_dimensions():
    b = CslBuilder(2).next_outermost_dim(2).next_outermost_dim(2)
    with pytest.raises(TooManyDimensions):
        b.next_outermost_dim(2)


def test_builder_invalid_size():
    b = CslBuilder(2)
    with pytest.raises(InvalidShape):
        b.next_outermost_dim(0)
    with pytest.raises(InvalidShape):
        b.next_outermost_dim(1.5)
    with pytest.raises(InvalidShape):
        CslBuilder(0)
    assert b.state == "empty"


def test_builder_invalid_lines():
    b = CslBuilder(2).next_outermost_dim(2).next_outermost_dim(3)
    with pytest.raises(InvalidLine):
        b.push_line([1.0, 2.0], [0])
    with pytest.raises(InvalidLine):
        b.push_line([1.0, 2.0], [2, 1])
    with pytest.raises(InvalidLine):
        b.push_line([1.0, 2.0], [1, 1])
    with pytest.raises(InvalidLine):
        b.push_line([1.0], [3])
    with pytest.raises(InvalidLine):
        b.push_line([1.0], [-1])
    assert b.cursor == (0,)
    assert b.nnz == 0
    b.push_line([1.0], [2])
    assert b.cursor == (1,)


def test_builder_lines_need_all_dimensions():
    b = CslBuilder(3).next_outermost_dim(2).next_outermost_dim(2)
    with pytest.raises(InvalidLine):
        b.push_empty_line()
    with pytest.raises(InvalidLine):
        CslBuilder(2).push_empty_line()


def test_builder_incomplete_structure():
    b = build_partial()
    with pytest.raises(IncompleteStructure):
        b.finalize()
    with pytest.raises(IncompleteStructure):
        CslBuilder(2).finalize()
    b.next_outermost_dim(2).next_outermost_dim(2)
    b.push_empty_line()
    with pytest.raises(IncompleteStructure):
        b.finalize()
    b.push_empty_line()
    csl = b.finalize()
    assert csl.nnz == 0


def test_builder_too_many_lines():
    b = CslBuilder(2).next_outermost_dim(1).next_outermost_dim(2)
    b.push_empty_line()
    with pytest.raises(TooManyLines):
        b.push_empty_line()
    with pytest.raises(TooManyLines):
        b.next_outermost_dim(1)


def test_builder_consumed():
    b = build_cube()
    b.finalize()
    assert b.state == "finalized"
    with pytest.raises(BuilderConsumed):
        b.finalize()
    with pytest.raises(BuilderConsumed):
        b.push_empty_line()


def test_builder_offsets_monotonic():
    rs = np.random.RandomState(7)
    dims = (3, 2, 4, 5)
    b = CslBuilder(len(dims))
    for prefix in np.ndindex(*dims[:-1]):
        # re-declare every depth below the last one that moved
        while b.depth < len(dims):
            b.next_outermost_dim(dims[b.depth])
        assert b.cursor == prefix
        mask = rs.rand(dims[-1]) < 0.3
        idx = np.flatnonzero(mask)
        b.push_line(rs.standard_normal(idx.size), idx)
    csl = b.finalize()
    for level, offs in enumerate(csl.offs):
        assert offs[0] == 0
        assert np.all(np.diff(offs) >= 0)
        expected_last = csl.nnz if level == len(csl.offs) - 1 else csl.offs[level + 1].size - 1
        assert offs[-1] == expected_last


def test_csl_builder_shortcut():
    b = CSL.builder(2, dtype=object)
    assert isinstance(b, CslBuilder)
    csl = b.next_outermost_dim(1).next_outermost_dim(2).push_line([("x", 1)], [1]).finalize()
    assert csl.value([0, 1]) == ("x", 1)


def test_builder_rejects_unstorable_values():
    b = CslBuilder(1).next_outermost_dim(3)
    with pytest.raises(InvalidLine):
        b.push_line([(1, 2)], [0])
    # the rejected line left nothing behind
    assert b.state == "filling"
    assert b.nnz == 0
    csl = b.push_line([4.0], [0]).finalize()
    assert csl.value([0]) == 4.0

    typed = CslBuilder(2, dtype=np.float64).next_outermost_dim(1).next_outermost_dim(2)
    with pytest.raises(InvalidLine):
        typed.push_line(["x"], [0])
    assert typed.cursor == (0,)
