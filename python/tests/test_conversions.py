import logging

import numpy as np
import pytest

from ndsparse.sparse import COO, CSL


def random_coo(dims, density, seed, dtype=np.float64):
    rs = np.random.RandomState(seed)
    size = int(np.prod(dims))
    nnz = int(size * density)
    flat = rs.choice(size, size=nnz, replace=False)
    indices = np.stack(np.unravel_index(flat, dims), axis=1)
    data = rs.standard_normal(nnz).astype(dtype)
    return COO(dims, indices, data)


SHAPES = [(7,), (1,), (4, 5), (3, 1, 4), (2, 3, 2, 3), (1, 1, 1, 6)]


@pytest.mark.parametrize("dims", SHAPES)
@pytest.mark.parametrize("density", [0.0, 0.3, 1.0])
def test_coo_csl_roundtrip(dims, density):
    coo = random_coo(dims, density, seed=len(dims))
    csl = coo.to_csl()
    assert csl.nnz == coo.nnz
    assert csl.to_coo() == coo
    # rebuilding from the raw arrays passes full validation
    assert CSL(csl.shape, csl.data, csl.indcs, csl.offs, check=True) == csl


@pytest.mark.parametrize("dims", SHAPES)
def test_lookup_agreement(dims):
    coo = random_coo(dims, 0.4, seed=11)
    csl = coo.to_csl()
    dense = coo.toarray()
    np.testing.assert_allclose(csl.toarray(), dense)
    for coord in np.ndindex(*dims):
        assert coo.value(coord) == csl.value(coord)


def test_offset_levels_cover_full_index_space():
    coo = random_coo((3, 4, 2, 5), 0.2, seed=3)
    csl = coo.to_csl()
    assert [o.size for o in csl.offs] == [1 + 3, 1 + 3 * 4, 1 + 3 * 4 * 2]
    np.testing.assert_array_equal(csl.offs[0], np.arange(4) * 4)
    np.testing.assert_array_equal(csl.offs[1], np.arange(13) * 2)
    assert csl.offs[-1][-1] == csl.nnz


def test_csl_coo_roundtrip_from_direct_csl():
    csl = CSL((3, 3), [1.0, 2.0, 3.0], [0, 2, 1], [[0, 2, 2, 3]])
    coo = csl.to_coo()
    assert coo.indices.tolist() == [[0, 0], [0, 2], [2, 1]]
    assert coo.to_csl() == csl


def test_conversion_keeps_object_payload():
    coo = COO.from_entries((2, 2), [((1, 0), {"k": 1}), ((0, 1), {"k": 0})], dtype=object)
    csl = coo.to_csl()
    assert csl.dtype == object
    assert csl.value((1, 0)) == {"k": 1}
    assert csl.to_coo() == coo


def test_sub_dim_matches_coo_slice():
    coo = random_coo((4, 3, 5), 0.3, seed=5)
    csl = coo.to_csl()
    part = csl.sub_dim(1, 3)
    dense = coo.toarray()[1:3]
    np.testing.assert_allclose(part.toarray(), dense)
    for i, outer in enumerate(csl.outermost_iter()):
        np.testing.assert_allclose(outer.toarray()[0], coo.toarray()[i])


def test_conversion_logging(caplog):
    coo = random_coo((2, 3), 0.5, seed=1)
    with caplog.at_level(logging.DEBUG, logger="ndsparse"):
        coo.to_csl().to_coo()
    messages = [r.getMessage() for r in caplog.records]
    assert any("COO -> CSL" in m for m in messages)
    assert any("CSL -> COO" in m for m in messages)
