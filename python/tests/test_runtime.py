import os

import pytest

import ndsparse
from ndsparse import OutOfBounds, get_check_invariants, set_check_invariants
from ndsparse.sparse import COO


@pytest.fixture
def restore_check(monkeypatch):
    monkeypatch.delenv("NDSPARSE_CHECK", raising=False)
    yield
    set_check_invariants(True)
    os.environ.pop("NDSPARSE_CHECK", None)


def test_check_runtime(restore_check):
    set_check_invariants(False)
    assert get_check_invariants() is False
    assert os.environ.get("NDSPARSE_CHECK") == "0"
    # unchecked construction accepts what a checked one rejects
    COO((2, 2), [[5, 5]], [1.0])
    set_check_invariants(True)
    with pytest.raises(OutOfBounds):
        COO((2, 2), [[5, 5]], [1.0])


def test_check_env_override(restore_check, monkeypatch):
    monkeypatch.setenv("NDSPARSE_CHECK", "off")
    assert get_check_invariants() is False
    monkeypatch.setenv("NDSPARSE_CHECK", "1")
    assert get_check_invariants() is True


def test_explicit_check_wins(restore_check):
    set_check_invariants(False)
    with pytest.raises(OutOfBounds):
        COO((2, 2), [[5, 5]], [1.0], check=True)


def test_import():
    assert ndsparse.__version__
    assert issubclass(ndsparse.InvalidLine, ValueError)
    assert issubclass(ndsparse.InvalidLine, ndsparse.NdSparseError)
