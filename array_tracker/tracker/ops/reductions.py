# tracker/ops/reductions.py
import numpy as np

from ..core.registry import grad_rule, implements, track
from .broadcast import broadcast


def _normalize_axis(axis, ndim):
    if axis is None:
        return tuple(range(ndim))
    axes = (axis,) if isinstance(axis, (int, np.integer)) else tuple(axis)
    return tuple(sorted(int(a) % ndim for a in axes)) if ndim else ()


def _expand(d, xs, axis, keepdims):
    """Bring a reduced gradient back to the full input shape."""
    d = np.asarray(d, dtype=np.float64)
    if not keepdims:
        d = np.expand_dims(d, _normalize_axis(axis, xs.ndim))
    return np.broadcast_to(d, xs.shape)


def _count(xs, axis):
    return int(np.prod([xs.shape[a] for a in _normalize_axis(axis, xs.ndim)]))


# ----------------------------- sum / mean ----------------------------- #


@grad_rule("sum")
def _sum(xs, axis=None, keepdims=False):
    xs = np.asarray(xs, dtype=np.float64)
    y = np.sum(xs, axis=axis, keepdims=keepdims)
    return y, lambda d: (np.array(_expand(d, xs, axis, keepdims)), None)


@grad_rule("mean")
def _mean(xs, axis=None, keepdims=False):
    xs = np.asarray(xs, dtype=np.float64)
    y = np.mean(xs, axis=axis, keepdims=keepdims)
    n = _count(xs, axis)
    return y, lambda d: (_expand(d, xs, axis, keepdims) / n, None)


def sum(x, axis=None, keepdims=False):
    return track("sum", x, axis, keepdims=keepdims)


def mean(x, axis=None, keepdims=False):
    return track("mean", x, axis, keepdims=keepdims)


# ----------------------------- prod ----------------------------- #


def _prod_of_others(xs, axis):
    """
    For every element, the product of all *other* elements along `axis`
    (flattened when axis is None), via exclusive cumulative products from
    both ends. No division, so zeros are handled exactly.
    """
    if axis is None:
        return _prod_of_others(xs.reshape(-1), 0).reshape(xs.shape)
    v = np.moveaxis(xs, axis, -1)
    ones = np.ones(v.shape[:-1] + (1,), dtype=np.float64)
    left = np.concatenate([ones, np.cumprod(v, axis=-1)[..., :-1]], axis=-1)
    right = np.concatenate(
        [np.cumprod(v[..., ::-1], axis=-1)[..., :-1][..., ::-1], ones], axis=-1
    )
    return np.moveaxis(left * right, -1, axis)


@grad_rule("prod")
def _prod(xs, axis=None, keepdims=False):
    xs = np.asarray(xs, dtype=np.float64)
    if axis is not None and not isinstance(axis, (int, np.integer)):
        raise ValueError("prod supports a single axis or the whole array")
    y = np.prod(xs, axis=axis, keepdims=keepdims)

    def back(d):
        return _prod_of_others(xs, axis) * _expand(d, xs, axis, keepdims), None
    return y, back


def prod(x, axis=None, keepdims=False):
    return track("prod", x, axis, keepdims=keepdims)


# ----------------------------- maximum / minimum ----------------------------- #


def _extremum_rule(reduce, arg):
    def rule(xs, axis=None):
        xs = np.asarray(xs, dtype=np.float64)
        y = reduce(xs, axis=axis)

        def back(d):
            d_xs = np.zeros_like(xs)
            # arg* returns the first occurrence, which decides ties
            if axis is None:
                d_xs.flat[arg(xs)] = d
            else:
                i = np.expand_dims(arg(xs, axis=axis), axis)
                np.put_along_axis(d_xs, i, np.expand_dims(d, axis), axis=axis)
            return d_xs, None
        return y, back
    return rule


grad_rule("maximum")(_extremum_rule(np.max, np.argmax))
grad_rule("minimum")(_extremum_rule(np.min, np.argmin))


def maximum(x, axis=None):
    return track("maximum", x, axis)


def minimum(x, axis=None):
    return track("minimum", x, axis)


# ----------------------------- statistics ----------------------------- #


def std(x, axis=None, ddof=1):
    """Standard deviation built from tracked primitives (sample std by default)."""
    mu = mean(x, axis, keepdims=True)
    n = _count(np.asarray(x), axis)
    return broadcast(np.sqrt, sum(broadcast(np.square, x - mu), axis) / (n - ddof))


def norm(x, p=2):
    """
    p-norm of all elements. A tiny epsilon keeps the derivative of the root
    finite at 0.
    """
    eps = np.finfo(np.float32).tiny
    s = sum(broadcast(np.power, broadcast(np.absolute, x), p) + eps)
    return broadcast(np.power, s, 1.0 / p)


# ----------------------------- NumPy entry points ----------------------------- #


@implements(np.sum)
def _np_sum(a, axis=None, keepdims=False):
    return sum(a, axis, keepdims=keepdims)


@implements(np.mean)
def _np_mean(a, axis=None, keepdims=False):
    return mean(a, axis, keepdims=keepdims)


@implements(np.prod)
def _np_prod(a, axis=None, keepdims=False):
    return prod(a, axis, keepdims=keepdims)


@implements(*{np.max, getattr(np, "amax", np.max)})
def _np_max(a, axis=None):
    return maximum(a, axis)


@implements(*{np.min, getattr(np, "amin", np.min)})
def _np_min(a, axis=None):
    return minimum(a, axis)


@implements(np.std)
def _np_std(a, axis=None, ddof=0):
    return std(a, axis, ddof=ddof)
