# tracker/dual.py
# First-order forward-mode dual numbers over arrays (independent from the graph)

import operator
import numpy as np
from scipy import special
from typing import Any, Tuple


class Dual:
    """
    Dual array:
    v = value + Σ_i partials[i] * ε_i     (ε_i ε_j = 0)
    value    = primal values (ndarray or scalar)
    partials = one derivative array per differentiated argument slot; each is
               broadcast-compatible with value (a plain 0.0 marks a zero slot)
    """
    __slots__ = ("value", "partials")
    __array_priority__ = 2000  # above TrackedArray; duals never mix with it

    def __init__(self, value, partials: Tuple[Any, ...] = ()):
        self.value = value
        self.partials = tuple(partials)

    def __repr__(self):
        return f"Dual({self.value!r}, partials={self.partials!r})"

    @property
    def shape(self):
        return np.shape(self.value)

    def __len__(self):
        return len(self.value)

    def _lift(self, b):
        if isinstance(b, Dual):
            return b
        return Dual(b, (0.0,) * len(self.partials))

    def __add__(a, b):
        b = a._lift(b)
        return Dual(a.value + b.value, (p + q for p, q in zip(a.partials, b.partials)))
    __radd__ = __add__

    def __sub__(a, b):
        b = a._lift(b)
        return Dual(a.value - b.value, (p - q for p, q in zip(a.partials, b.partials)))

    def __rsub__(b, a):
        return b._lift(a) - b

    def __mul__(a, b):
        b = a._lift(b)
        return Dual(a.value * b.value,
                    (p * b.value + a.value * q for p, q in zip(a.partials, b.partials)))
    __rmul__ = __mul__

    def recip(self):
        x = self.value
        r = 1.0 / x
        return Dual(r, (-p * r * r for p in self.partials))

    def __truediv__(a, b):
        if not isinstance(b, Dual):
            return Dual(a.value / b, (p / b for p in a.partials))
        return a * b.recip()

    def __rtruediv__(b, a):
        return b.recip() * a

    def __pow__(a, b):
        return np.power(a, b)

    def __rpow__(b, a):
        return np.power(a, b)

    def __neg__(a):
        return Dual(-a.value, (-p for p in a.partials))

    def __pos__(a):
        return a

    def __abs__(a):
        return np.absolute(a)

    # Comparisons act on primal values and give plain (non-dual) results
    def __lt__(a, b): return a.value < _val(b)
    def __le__(a, b): return a.value <= _val(b)
    def __gt__(a, b): return a.value > _val(b)
    def __ge__(a, b): return a.value >= _val(b)
    def __eq__(a, b): return a.value == _val(b)
    def __ne__(a, b): return a.value != _val(b)
    __hash__ = None

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        if method != "__call__" or kwargs:
            return NotImplemented
        if ufunc in _UNARY and len(inputs) == 1:
            x = inputs[0]
            y, dy = _UNARY[ufunc](x.value)
            return Dual(y, (dy * p for p in x.partials))
        if ufunc in _BINARY and len(inputs) == 2:
            return _BINARY[ufunc](*inputs)
        # Not differentiable through duals: evaluate on primal values only
        return ufunc(*(_val(x) for x in inputs))


def _val(x):
    return x.value if isinstance(x, Dual) else x


def _parts(x, n):
    return x.partials if isinstance(x, Dual) else (0.0,) * n


def _n(a, b):
    return len(a.partials) if isinstance(a, Dual) else len(b.partials)


# ----- Elementary functions: ufunc -> (value, derivative) -----
def _exp(x):
    e = np.exp(x)
    return e, e


def _sqrt(x):
    s = np.sqrt(x)
    return s, 0.5 / s


def _tan(x):
    t = np.tan(x)
    return t, 1.0 + t * t


def _tanh(x):
    t = np.tanh(x)
    return t, 1.0 - t * t


def _expit(x):
    s = special.expit(x)
    return s, s * (1.0 - s)


_UNARY = {
    np.negative: lambda x: (-x, -1.0),
    np.positive: lambda x: (x, 1.0),
    np.absolute: lambda x: (np.absolute(x), np.sign(x)),
    np.square:   lambda x: (np.square(x), 2.0 * x),
    np.sqrt:     _sqrt,
    np.exp:      _exp,
    np.expm1:    lambda x: (np.expm1(x), np.exp(x)),
    np.log:      lambda x: (np.log(x), 1.0 / x),
    np.log1p:    lambda x: (np.log1p(x), 1.0 / (1.0 + x)),
    np.sin:      lambda x: (np.sin(x), np.cos(x)),
    np.cos:      lambda x: (np.cos(x), -np.sin(x)),
    np.tan:      _tan,
    np.tanh:     _tanh,
    np.sinh:     lambda x: (np.sinh(x), np.cosh(x)),
    np.cosh:     lambda x: (np.cosh(x), np.sinh(x)),
    np.arctan:   lambda x: (np.arctan(x), 1.0 / (1.0 + x * x)),
    # d/dx erf(x) = (2/√π) * e^(-x²)
    special.erf: lambda x: (special.erf(x), (2.0 / np.sqrt(np.pi)) * np.exp(-x * x)),
    special.expit: _expit,
}


def _power(a, b):
    n = _n(a, b)
    x, p = _val(a), _val(b)
    y = np.power(x, p)
    # ∂y/∂x = p x^(p-1);  ∂y/∂p = x^p log x  (only where x > 0)
    dx = p * np.power(x, p - 1.0)
    if isinstance(b, Dual):
        with np.errstate(divide="ignore", invalid="ignore"):
            dp = np.where(np.asarray(x) > 0, y * np.log(np.where(np.asarray(x) > 0, x, 1.0)), 0.0)
    else:
        dp = 0.0
    return Dual(y, (dx * u + dp * v for u, v in zip(_parts(a, n), _parts(b, n))))


def _extremum(pick_left):
    def rule(a, b):
        n = _n(a, b)
        x, z = _val(a), _val(b)
        left = pick_left(x, z)
        y = np.where(left, x, z)
        return Dual(y, (np.where(left, u, v) for u, v in zip(_parts(a, n), _parts(b, n))))
    return rule


def _arith(op):
    def rule(a, b):
        if not isinstance(a, Dual):
            a = b._lift(a)
        return op(a, b)
    return rule


_BINARY = {
    np.add:         _arith(operator.add),
    np.subtract:    _arith(operator.sub),
    np.multiply:    _arith(operator.mul),
    np.true_divide: _arith(operator.truediv),
    np.power:       _power,
    # ties go to the first argument
    np.maximum:     _extremum(lambda x, z: x >= z),
    np.minimum:     _extremum(lambda x, z: x <= z),
}


def dualify(x, i: int, n: int):
    """
    Lift a numeric argument into slot `i` of `n`: derivative 1 in its own slot,
    0 in all others. Non-numeric arguments pass through unchanged.
    """
    if isinstance(x, (bool, np.bool_)) or not isinstance(x, (int, float, np.number, np.ndarray)):
        return x
    if isinstance(x, np.ndarray) and not np.issubdtype(x.dtype, np.floating):
        return x
    x = np.asarray(x, dtype=np.float64)
    return Dual(x, tuple(np.ones_like(x) if j == i else 0.0 for j in range(n)))


def value(x):
    """Primal part of a dual (plain values pass through)."""
    return x.value if isinstance(x, Dual) else x


def partial(x, i: int):
    """i-th partial part of a dual (0 for plain values)."""
    return x.partials[i] if isinstance(x, Dual) else 0.0
