# tracker/ops/arithmetic.py
import numpy as np

from ..core.registry import grad_rule, track
from .broadcast import broadcast

# Elementwise binary arithmetic goes through the dual-number broadcast bridge,
# so scalar/array broadcasting of both the value and the gradient comes for free.


def add(x, y): return broadcast(np.add, x, y)
def sub(x, y): return broadcast(np.subtract, x, y)
def mul(x, y): return broadcast(np.multiply, x, y)
def div(x, y): return broadcast(np.true_divide, x, y)


def pow(x, y):
    """
    Power (demo-level domain handling):
      out = x ** y
      ∂out/∂x = y * x^(y-1)
      ∂out/∂y = x^y * log(x)        (taken as 0 where x <= 0)
    """
    return broadcast(np.power, x, y)


@grad_rule("neg")
def _neg(xs):
    return -xs, lambda d: (-d,)


def neg(x):
    """Unary negation with its own rule: the gradient is simply -Δ."""
    return track("neg", x)
