"""
Indexing, reshaping, repetition and concatenation rules.
"""

import numpy as np
import pytest

import array_tracker.tracker as tr
from array_tracker.tracker import UnsupportedMutationError, back, gradcheck, param

rng = np.random.default_rng(0)


def test_getindex_scatter_with_repeated_indices():
    x = param([1.0, 2.0, 3.0])
    y = x[[0, 0, 2]]
    np.testing.assert_array_equal(y.data, [1.0, 1.0, 3.0])
    back(tr.sum(y))
    np.testing.assert_array_equal(x.grad, [2.0, 0.0, 1.0])


def test_getindex_slices_and_scalars():
    x = param(np.arange(6.0).reshape(2, 3))
    back(tr.sum(x[:, 1]) + x[1, 2] * 10.0)
    np.testing.assert_array_equal(x.grad, [[0.0, 1.0, 0.0], [0.0, 1.0, 10.0]])


def test_getindex_gradcheck():
    x0 = rng.standard_normal((3, 4))
    assert gradcheck(lambda x: tr.sum(tr.exp(x[1:, ::2])), x0)


def test_getindex_with_tracked_index():
    x = param([5.0, 6.0, 7.0])
    i = param([2.0, 0.0])
    y = x[i]
    np.testing.assert_array_equal(y.data, [7.0, 5.0])
    back(tr.sum(y))
    np.testing.assert_array_equal(x.grad, [1.0, 0.0, 1.0])
    np.testing.assert_array_equal(i.grad, [0.0, 0.0])


def test_reshape_round_trip():
    x = param(np.arange(6.0))
    y = tr.reshape(x, (2, -1))
    assert y.shape == (2, 3)
    w = np.arange(6.0).reshape(2, 3)
    back(tr.sum(y * w))
    np.testing.assert_array_equal(x.grad, np.arange(6.0))


def test_numpy_reshape_dispatch():
    x = param(np.arange(6.0))
    y = np.reshape(x, (3, 2))
    assert isinstance(y, tr.TrackedArray)
    assert y.shape == (3, 2)


def test_permutedims_inverse():
    x = param(rng.standard_normal((2, 3, 4)))
    perm = (2, 0, 1)
    y = tr.permutedims(x, perm)
    assert y.shape == (4, 2, 3)
    w = rng.standard_normal(y.shape)
    back(tr.sum(y * w))
    np.testing.assert_allclose(x.grad, np.transpose(w, np.argsort(perm)))


def test_transpose():
    x = param(np.arange(6.0).reshape(2, 3))
    w = rng.standard_normal((3, 2))
    back(tr.sum(x.T * w))
    np.testing.assert_allclose(x.grad, w.T)
    assert np.transpose(x).shape == (3, 2)
    assert np.transpose(param(np.ones((2, 3, 4))), (1, 2, 0)).shape == (3, 4, 2)


def test_repeat_inner():
    x = param([1.0, 2.0, 3.0])
    y = tr.repeat(x, inner=2)
    np.testing.assert_array_equal(y.data, [1.0, 1.0, 2.0, 2.0, 3.0, 3.0])
    back(tr.sum(y * np.arange(1.0, 7.0)))
    np.testing.assert_array_equal(x.grad, [3.0, 7.0, 11.0])


def test_repeat_outer():
    x = param([1.0, 2.0, 3.0])
    y = tr.repeat(x, outer=2)
    np.testing.assert_array_equal(y.data, [1.0, 2.0, 3.0, 1.0, 2.0, 3.0])
    back(tr.sum(y * np.arange(1.0, 7.0)))
    np.testing.assert_array_equal(x.grad, [5.0, 7.0, 9.0])


def test_repeat_2d_gradcheck():
    x0 = rng.standard_normal((2, 3))
    w = rng.standard_normal((8, 3))
    f = lambda x: tr.sum(tr.repeat(x, inner=(2, 1), outer=(2, 1)) * w)
    assert gradcheck(f, x0)


def test_repeat_adds_trailing_axes():
    x = param([1.0, 2.0])
    y = tr.repeat(x, inner=(1, 3))
    assert y.shape == (2, 3)
    back(tr.sum(y))
    np.testing.assert_array_equal(x.grad, [3.0, 3.0])


def test_tile_dispatch():
    x = param([1.0, 2.0])
    y = np.tile(x, 3)
    np.testing.assert_array_equal(y.data, [1.0, 2.0] * 3)
    back(tr.sum(y))
    np.testing.assert_array_equal(x.grad, [3.0, 3.0])


def test_vcat():
    a = param([1.0, 2.0])
    b = param([3.0, 4.0, 5.0])
    y = tr.vcat(a, b)
    np.testing.assert_array_equal(y.data, [1.0, 2.0, 3.0, 4.0, 5.0])
    back(tr.sum(y * np.arange(5.0)))
    np.testing.assert_array_equal(a.grad, [0.0, 1.0])
    np.testing.assert_array_equal(b.grad, [2.0, 3.0, 4.0])


def test_vcat_with_scalar_and_constant():
    s = param(1.0)
    v = param([2.0, 3.0])
    y = tr.vcat(s, np.array([9.0]), v)
    assert y.shape == (4,)
    back(tr.sum(y * np.array([1.0, 2.0, 3.0, 4.0])))
    assert s.grad.shape == ()
    np.testing.assert_array_equal(s.grad, 1.0)
    np.testing.assert_array_equal(v.grad, [3.0, 4.0])


def test_vcat_matrices():
    a = param(np.ones((1, 3)))
    b = param(np.ones((2, 3)))
    y = tr.vcat(a, b)
    assert y.shape == (3, 3)
    back(tr.sum(y))
    np.testing.assert_array_equal(a.grad, np.ones((1, 3)))
    np.testing.assert_array_equal(b.grad, np.ones((2, 3)))


def test_hcat():
    a = param(np.ones((2, 2)))
    b = param([5.0, 6.0])
    y = tr.hcat(a, b)
    np.testing.assert_array_equal(y.data, [[1.0, 1.0, 5.0], [1.0, 1.0, 6.0]])
    w = np.arange(6.0).reshape(2, 3)
    back(tr.sum(y * w))
    np.testing.assert_array_equal(a.grad, [[0.0, 1.0], [3.0, 4.0]])
    np.testing.assert_array_equal(b.grad, [2.0, 5.0])


def test_cat_single_axis():
    a = param(np.ones((2, 2)))
    b = param(np.full((2, 1), 2.0))
    y = tr.cat(1, a, b)
    np.testing.assert_array_equal(y.data, [[1.0, 1.0, 2.0], [1.0, 1.0, 2.0]])
    w = np.arange(6.0).reshape(2, 3)
    back(tr.sum(y * w))
    np.testing.assert_array_equal(a.grad, [[0.0, 1.0], [3.0, 4.0]])
    np.testing.assert_array_equal(b.grad, [[2.0], [5.0]])


def test_cat_block_diagonal():
    a = param([[7.0]])
    b = param(np.ones((2, 2)))
    y = tr.cat((0, 1), a, b)
    np.testing.assert_array_equal(
        y.data, [[7.0, 0.0, 0.0], [0.0, 1.0, 1.0], [0.0, 1.0, 1.0]]
    )
    w = np.arange(9.0).reshape(3, 3)
    back(tr.sum(y * w))
    np.testing.assert_array_equal(a.grad, [[0.0]])
    np.testing.assert_array_equal(b.grad, [[4.0, 5.0], [7.0, 8.0]])


def test_numpy_concatenate_dispatch():
    a = param([1.0, 2.0])
    y = np.concatenate([a, np.array([3.0])])
    assert isinstance(y, tr.TrackedArray)
    back(tr.sum(y * 2.0))
    np.testing.assert_array_equal(a.grad, [2.0, 2.0])


def test_numpy_vstack_and_hstack_dispatch():
    a = param([1.0, 2.0])
    b = param([3.0, 4.0])
    v = np.vstack([a, b])
    np.testing.assert_array_equal(v.data, [[1.0, 2.0], [3.0, 4.0]])
    h = np.hstack([a, b])
    np.testing.assert_array_equal(h.data, [1.0, 2.0, 3.0, 4.0])
    back(tr.sum(v * np.array([[1.0, 2.0], [3.0, 4.0]])) + tr.sum(h))
    np.testing.assert_array_equal(a.grad, [2.0, 3.0])
    np.testing.assert_array_equal(b.grad, [4.0, 5.0])


def test_numpy_hstack_matrices():
    a = param(np.ones((2, 1)))
    h = np.hstack([a, np.zeros((2, 2))])
    assert h.shape == (2, 3)
    back(tr.sum(h * 5.0))
    np.testing.assert_array_equal(a.grad, [[5.0], [5.0]])


def test_kron():
    a0 = rng.standard_normal((2, 3))
    b0 = rng.standard_normal((3, 2))
    y = tr.kron(param(a0), param(b0))
    np.testing.assert_allclose(y.data, np.kron(a0, b0))
    w = rng.standard_normal((6, 6))
    assert gradcheck(lambda a, b: tr.sum(tr.kron(a, b) * w), a0, b0)


def test_setitem_on_slice_result_is_rejected():
    y = param(np.ones(3))[1:]
    with pytest.raises(UnsupportedMutationError):
        y[0] = 2.0


def test_adjoint_of_real_matrix_is_transpose():
    x = param(np.arange(6.0).reshape(2, 3))
    y = tr.adjoint(x)
    np.testing.assert_array_equal(y.data, np.arange(6.0).reshape(2, 3).T)
    w = rng.standard_normal((3, 2))
    back(tr.sum(y * w))
    np.testing.assert_allclose(x.grad, w.T)


def test_numpy_concatenate_negative_axis():
    a = param(np.ones((2, 2)))
    b = param(np.full((2, 2), 2.0))
    y = np.concatenate([a, b], axis=-1)
    assert y.shape == (2, 4)
    np.testing.assert_array_equal(y.data, [[1.0, 1.0, 2.0, 2.0], [1.0, 1.0, 2.0, 2.0]])
    w = np.arange(8.0).reshape(2, 4)
    back(tr.sum(y * w))
    np.testing.assert_array_equal(a.grad, [[0.0, 1.0], [4.0, 5.0]])
    np.testing.assert_array_equal(b.grad, [[2.0, 3.0], [6.0, 7.0]])


def test_cat_negative_axis_with_unequal_widths():
    a = param(np.ones((2, 2)))
    b = param(np.full((2, 1), 2.0))
    y = tr.cat(-1, a, b)
    np.testing.assert_array_equal(y.data, [[1.0, 1.0, 2.0], [1.0, 1.0, 2.0]])
    w = np.arange(6.0).reshape(2, 3)
    back(tr.sum(y * w))
    np.testing.assert_array_equal(a.grad, [[0.0, 1.0], [3.0, 4.0]])
    np.testing.assert_array_equal(b.grad, [[2.0], [5.0]])


def test_cat_rejects_mismatched_extents():
    a = param(np.ones((2, 2)))
    b = param(np.ones((1, 2)))
    with pytest.raises(ValueError):
        np.concatenate([a, b], axis=-1)
    with pytest.raises(ValueError):
        tr.cat(1, a, b)
    with pytest.raises(ValueError):
        tr.cat(-3, a, a)


def test_numpy_concatenate_flattens_without_axis():
    a = param(np.arange(4.0).reshape(2, 2))
    b = param([4.0, 5.0, 6.0])
    y = np.concatenate([a, b], axis=None)
    assert y.shape == (7,)
    np.testing.assert_array_equal(y.data, np.arange(7.0))
    back(tr.sum(y * np.arange(7.0)))
    np.testing.assert_array_equal(a.grad, [[0.0, 1.0], [2.0, 3.0]])
    np.testing.assert_array_equal(b.grad, [4.0, 5.0, 6.0])
