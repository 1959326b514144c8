# tracker/ops/shape.py
import numpy as np

from ..core.registry import grad_rule, implements, track
from ..core.var import TrackedArray
from .broadcast import broadcast

# ----------------------------- indexing ----------------------------- #


@grad_rule("getindex")
def _getindex(xs, index):
    def back(d):
        d_xs = np.zeros_like(xs)
        # add.at so that repeated fancy indices accumulate
        np.add.at(d_xs, index, d)
        return d_xs, None
    return np.array(xs[index], dtype=np.float64), back


def getindex(x, index):
    if isinstance(index, TrackedArray):
        index = index.data.astype(np.intp)
    return track("getindex", x, index)


# ----------------------------- transposes ----------------------------- #


@grad_rule("transpose")
def _transpose(xs):
    return np.transpose(xs), lambda d: (np.transpose(d).reshape(xs.shape),)


@grad_rule("adjoint")
def _adjoint(xs):
    return np.conj(np.transpose(xs)), lambda d: (np.conj(np.transpose(d)).reshape(xs.shape),)


def transpose(x):
    return track("transpose", x)


def adjoint(x):
    return track("adjoint", x)


# ----------------------------- reshaping ----------------------------- #


@grad_rule("reshape")
def _reshape(xs, shape):
    return np.reshape(xs, shape), lambda d: (np.reshape(d, xs.shape), None)


def reshape(x, shape):
    """Reshape `x`; one entry of `shape` may be -1 (inferred)."""
    if isinstance(shape, (int, np.integer)):
        shape = (shape,)
    return track("reshape", x, tuple(shape))


@grad_rule("permutedims")
def _permutedims(xs, perm):
    inverse = np.argsort(perm)
    return np.transpose(xs, perm), lambda d: (np.transpose(d, inverse), None)


def permutedims(x, perm):
    return track("permutedims", x, tuple(perm))


@implements(np.reshape)
def _np_reshape(a, newshape=None, order="C", **kwargs):
    if order != "C":
        raise NotImplementedError("tracked reshape only supports C order")
    shape = kwargs.pop("shape", newshape)
    return reshape(a, shape)


@implements(np.transpose)
def _np_transpose(a, axes=None):
    if axes is None:
        return transpose(a)
    return permutedims(a, axes)


# ----------------------------- repetition ----------------------------- #


def _multipliers(m, ndim):
    m = (1,) * ndim if m is None else tuple(int(k) for k in np.atleast_1d(m))
    return m + (1,) * (ndim - len(m))


@grad_rule("repeat")
def _repeat(xs, inner=None, outer=None):
    ndim = max(xs.ndim, len(np.atleast_1d(inner if inner is not None else 1)),
               len(np.atleast_1d(outer if outer is not None else 1)))
    inner, outer = _multipliers(inner, ndim), _multipliers(outer, ndim)
    src = xs.reshape(xs.shape + (1,) * (ndim - xs.ndim))
    y = src
    for axis, k in enumerate(inner):
        y = np.repeat(y, k, axis=axis)
    y = np.tile(y, outer)

    def back(d):
        d_src = np.zeros_like(src)
        S = src.shape
        # Each destination coordinate rounds down onto the inner grid, then
        # wraps around the source size for the outer tiling.
        dest = np.indices(d.shape)
        index = tuple((dest[k] // inner[k]) % S[k] for k in range(ndim))
        np.add.at(d_src, index, d)
        return (d_src.reshape(xs.shape),)
    return y, back


def repeat(x, inner=None, outer=None):
    """
    Repeat every element `inner[k]` times along axis k, then tile the result
    `outer[k]` times. Multipliers longer than x.ndim add trailing axes.
    """
    return track("repeat", x, inner=inner, outer=outer)


@implements(np.tile)
def _np_tile(A, reps):
    reps = tuple(np.atleast_1d(reps))
    if len(reps) < A.ndim:
        reps = (1,) * (A.ndim - len(reps)) + reps
    elif len(reps) > A.ndim:
        # np.tile prepends axes; repeat() appends them
        A = reshape(A, (1,) * (len(reps) - A.ndim) + A.shape)
    return repeat(A, outer=reps)


# ----------------------------- concatenation ----------------------------- #


@grad_rule("vcat")
def _vcat(*xs):
    shapes = [np.shape(x) for x in xs]
    xs = [np.atleast_1d(np.asarray(x, dtype=np.float64)) for x in xs]

    def back(d):
        start = 0
        ds = []
        for x, s in zip(xs, shapes):
            ds.append(d[start:start + x.shape[0]].reshape(s))
            start += x.shape[0]
        return tuple(ds)
    return np.concatenate(xs, axis=0), back


def vcat(*xs):
    """Concatenate along the first axis."""
    return track("vcat", *xs)


@grad_rule("hcat")
def _hcat(*xs):
    xs = [np.asarray(x, dtype=np.float64) for x in xs]

    def back(d):
        start = 0
        ds = []
        for x in xs:
            if x.ndim == 1:
                ds.append(d[:, start])
                start += 1
            else:
                ds.append(d[:, start:start + x.shape[1]])
                start += x.shape[1]
        return tuple(ds)
    return np.column_stack(xs), back


def hcat(*xs):
    """Concatenate along the second axis; 1-D inputs become columns."""
    return track("hcat", *xs)


def _cat_layout(dims, xs):
    dims = (dims,) if isinstance(dims, (int, np.integer)) else tuple(dims)
    ndim = max([x.ndim for x in xs] + [int(d) + 1 for d in dims if d >= 0])
    if any(not -ndim <= d for d in dims):
        raise ValueError(f"cat axes {dims} out of range for {ndim}-D inputs")
    dims = tuple(sorted({int(d) % ndim for d in dims}))
    # Missing trailing axes count as size 1
    shapes = [x.shape + (1,) * (ndim - x.ndim) for x in xs]
    for k in range(ndim):
        if k not in dims and any(s[k] != shapes[0][k] for s in shapes):
            raise ValueError(
                f"cat inputs must match on axis {k} outside {dims}, got shapes "
                f"{[x.shape for x in xs]}"
            )
    return dims, ndim, shapes


@grad_rule("cat")
def _cat(dims, *xs):
    xs = [np.asarray(x, dtype=np.float64) for x in xs]
    dims, ndim, shapes = _cat_layout(dims, xs)
    out_shape = tuple(
        sum(s[k] for s in shapes) if k in dims else shapes[0][k] for k in range(ndim)
    )
    y = np.zeros(out_shape, dtype=np.float64)
    blocks = []
    start = [0] * ndim
    for x, s in zip(xs, shapes):
        block = tuple(
            slice(start[k], start[k] + s[k]) if k in dims else slice(None)
            for k in range(ndim)
        )
        y[block] = x.reshape(s)
        blocks.append(block)
        for k in dims:
            start[k] += s[k]

    def back(d):
        return (None,) + tuple(d[b].reshape(x.shape) for b, x in zip(blocks, xs))
    return y, back


def cat(dims, *xs):
    """
    Concatenate along `dims` (an axis or a collection of axes). With several
    axes the inputs are laid out block-diagonally.
    """
    return track("cat", dims, *xs)


@implements(np.concatenate)
def _np_concatenate(arrays, axis=0):
    if axis is None:
        # NumPy flattens every input before joining
        return cat(0, *(reshape(a, (-1,)) for a in arrays))
    return cat(axis, *arrays)


@implements(np.vstack)
def _np_vstack(tup):
    # vstack stacks 1-D inputs as rows
    return vcat(*(reshape(x, (1, -1)) if np.ndim(x) < 2 else x for x in tup))


@implements(np.hstack)
def _np_hstack(tup):
    axis = 0 if all(np.ndim(x) <= 1 for x in tup) else 1
    return cat(axis, *(reshape(x, (1,)) if np.ndim(x) == 0 else x for x in tup))


# ----------------------------- kron ----------------------------- #


def kron(a, b):
    """Kronecker product of two matrices from reshapes and a broadcast product."""
    m1, n1 = np.shape(a)
    m2, n2 = np.shape(b)
    a4 = reshape(a, (m1, 1, n1, 1))
    b4 = reshape(b, (1, m2, 1, n2))
    return reshape(broadcast(np.multiply, a4, b4), (m1 * m2, n1 * n2))


@implements(np.kron)
def _np_kron(a, b):
    return kron(a, b)
