"""
Reverse pass: accumulation, fan-out, cycles, seeding helpers and config.
"""

import numpy as np
import pytest

import array_tracker.tracker as tr
from array_tracker.tracker import (
    Call,
    CycleError,
    NotScalarError,
    TrackedArray,
    TrackerConfig,
    back,
    get_config,
    gradient,
    grads,
    grads_list,
    leaves,
    param,
    use_config,
    zero_grad,
)
from array_tracker.tracker.core import toposort


def test_diamond_accumulates_every_path():
    x = param([1.0, 2.0, 3.0])
    y = tr.sum(x) + tr.sum(x ** 2)
    back(y)
    # d/dx [sum(x) + sum(x^2)] = 1 + 2x
    np.testing.assert_allclose(x.grad, [3.0, 5.0, 7.0])


def test_shared_subexpression():
    x = param([0.5, -1.0])
    y = x * x
    back(tr.sum(y + y))
    np.testing.assert_allclose(x.grad, 4.0 * x.data)


def test_same_input_twice_in_one_call():
    x = param([1.0, 2.0, 3.0])
    back(tr.dot(x, x))
    np.testing.assert_allclose(x.grad, [2.0, 4.0, 6.0])


def test_repeated_back_accumulates():
    x = param([1.0, 2.0])
    y = tr.sum(x * 3.0)
    back(y)
    back(y)
    np.testing.assert_allclose(x.grad, [6.0, 6.0])


def test_zero_grad_resets_reachable_values():
    x = param([1.0, 2.0])
    h = x * 2.0
    y = tr.sum(h)
    back(y)
    zero_grad(y)
    np.testing.assert_array_equal(x.grad, [0.0, 0.0])
    np.testing.assert_array_equal(h.grad, [0.0, 0.0])
    np.testing.assert_array_equal(y.grad, 0.0)


def test_intermediate_values_receive_gradient():
    x = param([1.0, 2.0])
    h = x * 2.0
    back(tr.sum(h * h))
    np.testing.assert_allclose(h.grad, 2.0 * h.data)
    np.testing.assert_allclose(x.grad, 4.0 * h.data)


def test_explicit_delta():
    x = param([1.0, 2.0, 3.0])
    y = x * 2.0
    back(y, [1.0, 0.0, -1.0])
    np.testing.assert_allclose(x.grad, [2.0, 0.0, -2.0])


def test_back_rejects_plain_arrays():
    with pytest.raises(TypeError):
        back(np.ones(3))


def test_cycle_is_detected():
    a = param([1.0])
    b = param([2.0])
    a.producer = Call("loop", lambda d: (d,), (b,))
    b.producer = Call("loop", lambda d: (d,), (a,))
    with pytest.raises(CycleError):
        back(a, np.ones(1))


def test_wrong_gradient_shape_fails():
    x = param([1.0, 2.0])
    y = TrackedArray([5.0], Call("bad", lambda d: (np.ones(3),), (x,)))
    with pytest.raises(ValueError):
        back(y, np.ones(1))


def test_toposort_orders_inputs_first():
    x = param(1.0, name="x")
    h = x * 2.0
    y = h + x
    order = toposort(y)
    assert order[-1] is y
    assert order.index(x) < order.index(h) < order.index(y)
    assert len(order) == 3


def test_leaves():
    x = param([1.0], name="x")
    w = param([2.0], name="w")
    y = tr.sum(x * w + x)
    found = leaves(y)
    assert len(found) == 2
    assert any(v is x for v in found)
    assert any(v is w for v in found)


def test_gradient_single_and_multiple_inputs():
    g = gradient(lambda x: tr.sum(x ** 3), np.array([1.0, 2.0]))
    np.testing.assert_allclose(g, [3.0, 12.0])

    ga, gb = gradient(lambda a, b: tr.dot(a, b), np.array([1.0, 2.0]), np.array([3.0, 4.0]))
    np.testing.assert_allclose(ga, [3.0, 4.0])
    np.testing.assert_allclose(gb, [1.0, 2.0])


def test_gradient_uses_fresh_leaves():
    f = lambda x: tr.sum(x * x)
    x0 = np.array([1.0, -2.0])
    g1 = gradient(f, x0)
    g2 = gradient(f, x0)
    np.testing.assert_allclose(g1, g2)
    np.testing.assert_allclose(g1, [2.0, -4.0])


def test_gradient_requires_scalar_output():
    with pytest.raises(NotScalarError):
        gradient(lambda x: x * 2.0, np.ones(2))


def test_gradient_of_constant_function_is_zero():
    g = gradient(lambda x: 1.0, np.ones(3))
    np.testing.assert_array_equal(g, np.zeros(3))


def test_grads_dict():
    out = grads(lambda v: v["a"] * v["b"] + tr.exp(v["a"]), {"a": 0.0, "b": 2.0})
    assert list(out) == ["a", "b"]
    np.testing.assert_allclose(out["a"], 3.0)
    np.testing.assert_allclose(out["b"], 0.0)


def test_grads_list():
    out = grads_list(lambda xs: xs[0] * xs[0] + 3 * xs[1], [2.0, 4.0])
    np.testing.assert_allclose(out[0], 4.0)
    np.testing.assert_allclose(out[1], 3.0)


def test_config_defaults_and_override():
    assert get_config().broadcast_fallback == "warn"
    with use_config(broadcast_fallback="error", fd_eps=1e-4) as cfg:
        assert cfg.broadcast_fallback == "error"
        assert get_config() is cfg
        assert get_config().fd_eps == 1e-4
    assert get_config().broadcast_fallback == "warn"
    assert get_config().fd_eps == 1e-6


def test_config_restored_after_error():
    with pytest.raises(RuntimeError):
        with use_config(verbose=True):
            raise RuntimeError("boom")
    assert get_config().verbose is False


def test_config_validation():
    with pytest.raises(ValueError):
        TrackerConfig(broadcast_fallback="sometimes")
    with pytest.raises(ValueError):
        TrackerConfig(fd_eps=0.0)
    with pytest.raises(ValueError):
        with use_config(gradcheck_atol=-1.0):
            pass
