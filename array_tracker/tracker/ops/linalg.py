# tracker/ops/linalg.py
import numpy as np

from ..core.registry import grad_rule, implements, track


@grad_rule("dot")
def _dot(xs, ys):
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    return np.dot(xs, ys), lambda d: (d * ys, d * xs)


def dot(x, y):
    """Inner product of two vectors."""
    if np.ndim(x) != 1 or np.ndim(y) != 1:
        raise ValueError("dot expects two vectors; use matmul for matrices")
    return track("dot", x, y)


@grad_rule("matmul")
def _matmul(a, b):
    """
    a @ b for vectors and matrices. 1-D operands are treated as a row (left)
    or a column (right) so one pair of formulas covers every case:
        ∂/∂a = Δ · bᵀ,   ∂/∂b = aᵀ · Δ
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.ndim not in (1, 2) or b.ndim not in (1, 2):
        raise ValueError(f"matmul supports 1-D and 2-D operands, got {a.ndim}-D and {b.ndim}-D")
    a2 = a.reshape(1, -1) if a.ndim == 1 else a
    b2 = b.reshape(-1, 1) if b.ndim == 1 else b

    def back(d):
        d2 = np.reshape(d, (a2.shape[0], b2.shape[1]))
        return (d2 @ b2.T).reshape(a.shape), (a2.T @ d2).reshape(b.shape)
    return a @ b, back


def matmul(a, b):
    return track("matmul", a, b)


@grad_rule("diagm")
def _diagm(xs):
    return np.diag(xs), lambda d: (np.diag(d).copy(),)


def diagm(x):
    """Square matrix with `x` on its diagonal."""
    if np.ndim(x) != 1:
        raise ValueError("diagm expects a vector")
    return track("diagm", x)


@implements(np.dot)
def _np_dot(a, b):
    if np.ndim(a) == 1 and np.ndim(b) == 1:
        return dot(a, b)
    return matmul(a, b)


@implements(np.diag)
def _np_diag(v, k=0):
    if k != 0:
        raise NotImplementedError("tracked diag only supports the main diagonal")
    if np.ndim(v) == 1:
        return diagm(v)
    from .shape import getindex
    n = min(np.shape(v))
    i = np.arange(n)
    return getindex(v, (i, i))
