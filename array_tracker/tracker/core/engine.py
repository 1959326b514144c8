# tracker/core/engine.py
from __future__ import annotations
import logging
from typing import Dict, List, Optional

import numpy as np

from .errors import CycleError, NotScalarError
from .var import TrackedArray

logger = logging.getLogger(__name__)

_ACTIVE, _DONE = 1, 2


def _inputs(v: TrackedArray):
    if v.producer is None:
        return ()
    return [p for p in v.producer.inputs if p is not None]


def toposort(*outputs: TrackedArray) -> List[TrackedArray]:
    """
    Return every tracked value reachable from `outputs`, inputs before users.

    Iterative depth-first walk with a per-node mark; reaching a node that is
    still on the walk stack means the producer graph is cyclic.
    """
    state: Dict[int, int] = {}
    order: List[TrackedArray] = []
    for root in outputs:
        if state.get(id(root)) == _DONE:
            continue
        state[id(root)] = _ACTIVE
        stack = [(root, iter(_inputs(root)))]
        while stack:
            v, children = stack[-1]
            for p in children:
                mark = state.get(id(p))
                if mark == _ACTIVE:
                    raise CycleError(
                        f"Cyclic producer graph detected at {p!r}"
                    )
                if mark is None:
                    state[id(p)] = _ACTIVE
                    stack.append((p, iter(_inputs(p))))
                    break
            else:
                stack.pop()
                state[id(v)] = _DONE
                order.append(v)
    return order


def back(x: TrackedArray, delta=None):
    """
    Run one reverse pass from `x`, accumulating into every reachable `.grad`.

    Args:
        x: tracked output to differentiate.
        delta: upstream gradient with the shape of `x`. May be omitted only
               when `x` is a scalar (0-d), in which case the seed is 1.

    Notes:
        - Each reachable value receives its total incoming gradient exactly
          once: grad += sum of contributions over all paths.
        - On failure accumulators may be partially updated; do not reuse them.
    """
    if not isinstance(x, TrackedArray):
        raise TypeError(f"back() expects a TrackedArray, got {type(x)}")
    if delta is None:
        if x.ndim != 0:
            raise NotScalarError(
                "Value is not scalar; use `back(sum(x))` or `back(x, delta)`"
            )
        delta = np.ones_like(x.data)
    else:
        delta = np.asarray(delta, dtype=np.float64)
        if delta.shape != x.shape:
            raise ValueError(
                f"Gradient of shape {delta.shape} does not match value of shape {x.shape}"
            )

    order = toposort(x)
    logger.debug("back: %d reachable values", len(order))

    pending: Dict[int, np.ndarray] = {id(x): delta}
    for v in reversed(order):
        d = pending.pop(id(v), None)
        if d is None:
            continue  # nothing flows into this value
        v.grad += d
        if v.producer is None:
            continue
        for p, g in zip(v.producer.inputs, v.producer.grads(d)):
            if p is None or g is None:
                continue
            g = np.asarray(g, dtype=np.float64)
            if g.shape != p.shape:
                raise ValueError(
                    f"backward of {v.producer.op_tag!r} produced gradient of shape "
                    f"{g.shape} for input of shape {p.shape}"
                )
            acc: Optional[np.ndarray] = pending.get(id(p))
            pending[id(p)] = g if acc is None else acc + g


def zero_grad(*outputs: TrackedArray):
    """
    Set the accumulators of all values reachable from `outputs` to zero.
    """
    for v in toposort(*outputs):
        v.grad.fill(0.0)


def leaves(*outputs: TrackedArray) -> List[TrackedArray]:
    """Reachable tracked values that have no producer, inputs first."""
    return [v for v in toposort(*outputs) if v.producer is None]
