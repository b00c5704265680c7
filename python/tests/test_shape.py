import pytest

from ndsparse import InvalidShape, OutOfBounds
from ndsparse.sparse import Coordinate, Shape


def test_shape_valid():
    s = Shape([2, 3, 4])
    assert s == (2, 3, 4)
    assert s.ndim == 3
    assert s.size == 24
    assert Shape(s) is s


@pytest.mark.parametrize("dims", [[], [0], [2, 0, 3], [-1, 2], [2.5, 3]])
def test_shape_invalid(dims):
    with pytest.raises(InvalidShape):
        Shape(dims)


def test_shape_size_does_not_overflow():
    s = Shape([2**40, 2**40, 2**40])
    assert s.size == 2**120


def test_shape_contains_and_check():
    s = Shape((2, 3))
    assert s.contains((1, 2))
    assert not s.contains((2, 0))
    assert not s.contains((0, 3))
    assert not s.contains((0,))
    assert not s.contains((-1, 0))
    assert s.check([1, 2]) == Coordinate((1, 2))
    with pytest.raises(OutOfBounds):
        s.check((0, 3))
    with pytest.raises(OutOfBounds):
        s.check((0, 0, 0))


def test_coordinate_order():
    coords = [Coordinate(c) for c in ([1, 0, 0], [0, 1, 1], [0, 0, 2], [0, 1, 0])]
    assert sorted(coords) == [(0, 0, 2), (0, 1, 0), (0, 1, 1), (1, 0, 0)]
    assert Coordinate([0, 2]) == Coordinate((0, 2))
    assert Coordinate(3) == (3,)


def test_coordinate_rejects_negative():
    with pytest.raises(OutOfBounds):
        Coordinate([0, -1])
    with pytest.raises(OutOfBounds):
        Coordinate([0.5])
