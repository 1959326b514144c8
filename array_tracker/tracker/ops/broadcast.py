# tracker/ops/broadcast.py
"""
Generic derivative of elementwise broadcasts via dual numbers.

`broadcast(f, *args)` evaluates `f` once over dual arrays, one partial slot per
argument, so any elementwise function built from the ufuncs that `Dual`
understands is differentiated without a hand-written rule. The per-argument
partials are multiplied by Δ and summed back ("unbroadcast") to the shape each
argument had before broadcasting.
"""
import logging
import warnings

import numpy as np

from ..core import config as config_mod
from ..core.errors import NonDifferentiableError, NonDifferentiableWarning
from ..core.registry import data, record
from ..core.var import TrackedArray
from ..dual import Dual, dualify, partial, value

logger = logging.getLogger(__name__)


def unbroadcast(shape, delta):
    """
    Sum `delta` over every axis that broadcasting added or stretched, so the
    result has exactly `shape`.
    """
    shape = tuple(shape)
    delta = np.asarray(delta)
    if delta.shape == shape:
        return delta
    if shape == ():
        return np.asarray(np.sum(delta))
    lead = delta.ndim - len(shape)
    axes = tuple(range(lead)) + tuple(
        lead + i for i, n in enumerate(shape) if n == 1 and delta.shape[lead + i] != 1
    )
    return np.sum(delta, axis=axes).reshape(shape)


def _getpartial(delta, out, i):
    return delta * partial(out, i)


def _structural(out):
    dt = np.asarray(out).dtype
    return np.issubdtype(dt, np.bool_) or np.issubdtype(dt, np.integer)


def _fallback(f, out, raw):
    name = getattr(f, "__name__", repr(f))
    if _structural(out):
        return out  # bool/int result: nothing to differentiate
    policy = config_mod.get_config().broadcast_fallback
    msg = (f"broadcast of {name!r} over tracked arguments did not produce dual "
           f"numbers; the result is not tracked")
    if policy == "error":
        raise NonDifferentiableError(msg)
    if policy == "warn":
        warnings.warn(msg, NonDifferentiableWarning, stacklevel=3)
    if np.asarray(out).dtype == object:
        # duals were swallowed into an object array; recompute on primal values
        return f(*raw)
    return out


def broadcast(f, *args):
    """
    Apply the elementwise function `f` to `args`, tracking the result when any
    argument is a TrackedArray.
    """
    if not any(isinstance(a, TrackedArray) for a in args):
        return f(*args)
    n = len(args)
    raw = [data(a) for a in args]
    out = f(*(dualify(x, i, n) for i, x in enumerate(raw)))
    if not isinstance(out, Dual):
        return _fallback(f, out, raw)

    y = np.asarray(value(out), dtype=np.float64)
    sizes = [np.shape(x) for x in raw]
    tracked = [isinstance(a, TrackedArray) for a in args]

    def back(delta):
        return tuple(
            unbroadcast(sizes[i], np.broadcast_to(_getpartial(delta, out, i), y.shape))
            if tracked[i] else None
            for i in range(n)
        )

    logger.debug("broadcast %s -> shape %s", getattr(f, "__name__", f), y.shape)
    return record("broadcast", y, back, args)
