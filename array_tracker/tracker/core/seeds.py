# tracker/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the scalar output and let gradients grow
# backwards through the recorded calls.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import numpy as np

from .var import TrackedArray
from .registry import data
from .engine import back
from .errors import NotScalarError


def param(x: Any, name: Optional[str] = None) -> TrackedArray:
    """Wrap raw data as a tracked leaf value."""
    return TrackedArray(x, name=name)


def grad(x: TrackedArray) -> np.ndarray:
    """Accumulated gradient of a tracked value."""
    return x.grad


def _ensure_tracked(v: Any, *, name: str) -> TrackedArray:
    """Wrap a plain value as a leaf if needed; otherwise return the value itself."""
    return v if isinstance(v, TrackedArray) else TrackedArray(v, name=name)


def _scalar_back(y: Any, who: str):
    if not isinstance(y, TrackedArray):
        # Output does not depend on any input: all gradients stay zero
        return
    if y.ndim != 0:
        raise NotScalarError(f"{who} expects scalar output, got shape {y.shape}.")
    back(y)


# ----------------------------- positional grads ----------------------------- #
def gradient(f: Callable[..., TrackedArray], *xs: Union[float, np.ndarray, TrackedArray]):
    """
    Gradient of a scalar-output function y=f(*xs) at xs.

    Returns a single array for one input, a tuple of arrays otherwise. Each
    call works on fresh leaves, so earlier results never leak in.
    """
    leaves = [TrackedArray(data(x), name=f"x{i}") for i, x in enumerate(xs)]
    _scalar_back(f(*leaves), "gradient(f, *xs)")
    gs = tuple(x.grad for x in leaves)
    return gs[0] if len(gs) == 1 else gs


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, TrackedArray]], TrackedArray],
          inputs: Dict[str, Union[float, np.ndarray]]) -> Dict[str, np.ndarray]:
    """
    Gradient of a scalar-output function y=f(vars) w.r.t. ALL inputs (dict form).
    Performs ONE reverse pass to obtain all ∂y/∂var simultaneously.

    Parameters
    ----------
    f       : function taking a dict {name: TrackedArray} and returning a scalar
    inputs  : dict {name: numeric}

    Returns
    -------
    dict {name: ndarray}  # gradients in the same key order as `inputs`
    """
    vars_t: Dict[str, TrackedArray] = {
        k: _ensure_tracked(v, name=k) for k, v in inputs.items()
    }
    _scalar_back(f(vars_t), "grads(f, inputs)")
    return {k: vars_t[k].grad for k in inputs.keys()}


def grads_list(f: Callable[[List[TrackedArray]], TrackedArray],
               x0_list: Iterable[Union[float, np.ndarray]]) -> List[np.ndarray]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a list
    of partials in the same order.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [4.0, 3.0]
    """
    xs: List[TrackedArray] = [
        _ensure_tracked(v, name=f"x{i}") for i, v in enumerate(x0_list)
    ]
    _scalar_back(f(xs), "grads_list(f, x0_list)")
    return [x.grad for x in xs]
