# tracker/core/var.py
from __future__ import annotations
import numbers
from typing import Any, Optional

import numpy as np

from .errors import UnsupportedMutationError, UnsupportedOptionError

# NumPy functions that only read a value; they run on raw data unchanged.
_PASSTHROUGH = {
    np.shape, np.ndim, np.size,
    np.allclose, np.isclose, np.array_equal,
    np.argmax, np.argmin,
}

# ufunc keywords whose default value leaves a float64 computation unchanged
_NEUTRAL_UFUNC_KWARGS = {
    "casting": "same_kind",
    "order": "K",
    "subok": True,
    "where": True,
}


def _neutral(key, value):
    if key == "dtype":
        return value is None or np.dtype(value) == np.float64
    if key not in _NEUTRAL_UFUNC_KWARGS:
        return False
    default = _NEUTRAL_UFUNC_KWARGS[key]
    return value is default if isinstance(default, bool) else value == default


def _raw(x):
    if isinstance(x, TrackedArray):
        return x.data
    if isinstance(x, (list, tuple)):
        return type(x)(_raw(v) for v in x)
    return x


class TrackedArray:
    """
    A node in the dynamic computation graph for reverse-mode AD.

    Attributes
    ----------
    data : np.ndarray
        Forward (primal) value, float64. Never mutated after construction.
    grad : np.ndarray
        Gradient accumulator; same shape as data, zero-initialised and only
        updated in place by the backward traversal.
    producer : Optional[Call]
        The Call record that computed `data`. None for leaf values.
    name : Optional[str]
        Optional debug/pretty-print name.
    """

    __array_priority__ = 1000  # ensures NumPy binary ops defer to TrackedArray

    def __init__(self, data: Any, producer=None, *, name: Optional[str] = None):
        if not isinstance(data, (numbers.Number, np.generic, list, tuple, np.ndarray)):
            raise TypeError(
                f"TrackedArray only accepts numeric types (number, list, tuple, ndarray), "
                f"but got {type(data)}"
            )
        # No copy when data already is a float64 ndarray
        self.data = np.asarray(data, dtype=np.float64)
        self.grad = np.zeros_like(self.data)
        self.producer = producer
        self.name = name

    def __repr__(self):
        fn = self.producer.op_tag if self.producer is not None else "leaf"
        return f"TrackedArray({self.data!r}, grad_fn={fn}, name={self.name!r})"

    # ---------------- raw-data delegation ---------------- #
    @property
    def shape(self):
        return self.data.shape

    @property
    def ndim(self):
        return self.data.ndim

    @property
    def size(self):
        return self.data.size

    @property
    def dtype(self):
        return self.data.dtype

    def __len__(self):
        return len(self.data)

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def __float__(self):
        return float(self.data)

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.data
        return self.data.astype(dtype)

    def __eq__(self, other):
        return self.data == _raw(other)

    def __ne__(self, other):
        return self.data != _raw(other)

    def __lt__(self, other):
        return self.data < _raw(other)

    def __le__(self, other):
        return self.data <= _raw(other)

    def __gt__(self, other):
        return self.data > _raw(other)

    def __ge__(self, other):
        return self.data >= _raw(other)

    __hash__ = None

    # ---------------- mutation is not differentiable ---------------- #
    def __setitem__(self, index, value):
        raise UnsupportedMutationError(
            "Can't differentiate `setitem`: tracked values are immutable"
        )

    # ---------------- NumPy protocols ---------------- #
    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        out = kwargs.pop("out", None)
        if out is not None:
            if any(isinstance(o, TrackedArray) for o in out):
                raise UnsupportedMutationError(
                    f"Can't differentiate in-place `{ufunc.__name__}` into a tracked value"
                )
            return NotImplemented
        if method != "__call__":
            return NotImplemented
        for key, value in kwargs.items():
            if not _neutral(key, value):
                raise UnsupportedOptionError(
                    f"Can't differentiate `{ufunc.__name__}` with {key}={value!r}"
                )
        if ufunc is np.matmul:
            # matmul is a gufunc, not an elementwise broadcast
            from ..ops.linalg import matmul
            return matmul(*inputs)
        from ..ops.broadcast import broadcast
        return broadcast(ufunc, *inputs)

    def __array_function__(self, func, types, args, kwargs):
        if func in _PASSTHROUGH:
            return func(*_raw(args), **kwargs)
        from .registry import HANDLED_FUNCTIONS
        impl = HANDLED_FUNCTIONS.get(func)
        if impl is None:
            return NotImplemented
        return impl(*args, **kwargs)

    # ---------------- operators ---------------- #
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __truediv__(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    def __rtruediv__(self, other):
        from ..ops.arithmetic import div
        return div(other, self)

    def __pow__(self, other):
        from ..ops.arithmetic import pow
        return pow(self, other)

    def __rpow__(self, other):
        from ..ops.arithmetic import pow
        return pow(other, self)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    def __matmul__(self, other):
        from ..ops.linalg import matmul
        return matmul(self, other)

    def __rmatmul__(self, other):
        from ..ops.linalg import matmul
        return matmul(other, self)

    def __getitem__(self, index):
        from ..ops.shape import getindex
        return getindex(self, index)

    # ---------------- array-style methods ---------------- #
    @property
    def T(self):
        from ..ops.shape import transpose
        return transpose(self)

    def reshape(self, *shape):
        from ..ops.shape import reshape
        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = shape[0]
        return reshape(self, tuple(shape))

    def sum(self, axis=None, keepdims=False):
        from ..ops.reductions import sum
        return sum(self, axis, keepdims=keepdims)

    def mean(self, axis=None, keepdims=False):
        from ..ops.reductions import mean
        return mean(self, axis, keepdims=keepdims)

    def prod(self, axis=None, keepdims=False):
        from ..ops.reductions import prod
        return prod(self, axis, keepdims=keepdims)

    def max(self, axis=None):
        from ..ops.reductions import maximum
        return maximum(self, axis)

    def min(self, axis=None):
        from ..ops.reductions import minimum
        return minimum(self, axis)

    def back(self, delta=None):
        from .engine import back
        back(self, delta)
