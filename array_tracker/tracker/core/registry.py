# tracker/core/registry.py
"""
Rule registry and the `track` dispatch layer.

A rule is registered once per primitive under an op tag:

    @grad_rule("reshape")
    def _reshape(xs, shape):
        return xs.reshape(shape), lambda d: (d.reshape(xs.shape), None)

It receives raw arrays (tracked arguments already unwrapped) and returns
`(primal, backward)`, where `backward(Δ)` yields one gradient per positional
argument, or None for arguments that cannot carry one. Keyword arguments are
options: they reach the rule but never own a gradient slot.
"""
from __future__ import annotations
import logging
from types import MappingProxyType
from typing import Any, Callable, Dict

from .node import Call
from .var import TrackedArray

logger = logging.getLogger(__name__)

_RULES: Dict[str, Callable] = {}

# NumPy function -> tracked implementation, used by TrackedArray.__array_function__
HANDLED_FUNCTIONS: Dict[Callable, Callable] = {}


def grad_rule(op_tag: str):
    """Register `rule(*raw_args, **options) -> (primal, backward)` for `op_tag`."""
    def register(rule):
        if op_tag in _RULES:
            raise ValueError(f"A rule for {op_tag!r} is already registered")
        _RULES[op_tag] = rule
        return rule
    return register


def implements(*np_functions):
    """Route the given NumPy functions to the decorated tracked implementation."""
    def register(impl):
        for f in np_functions:
            HANDLED_FUNCTIONS[f] = impl
        return impl
    return register


def rules():
    """Read-only view of the registered rules."""
    return MappingProxyType(_RULES)


def istracked(x: Any) -> bool:
    return isinstance(x, TrackedArray)


def data(x: Any) -> Any:
    """Raw array of a tracked value; anything else passes through unchanged."""
    return x.data if isinstance(x, TrackedArray) else x


def record(op_tag: str, primal, backward, args) -> TrackedArray:
    """Wrap `primal` as a tracked value produced by `backward` over `args`."""
    inputs = tuple(a if isinstance(a, TrackedArray) else None for a in args)
    return TrackedArray(primal, Call(op_tag, backward, inputs))


def track(op_tag: str, *args, **options):
    """
    Apply the rule for `op_tag`.

    If no positional argument is tracked the plain primal is returned and no
    record is built; otherwise the primal is wrapped as a TrackedArray whose
    producer remembers the tracked arguments and the rule's backward closure.
    """
    rule = _RULES[op_tag]
    if not any(isinstance(a, TrackedArray) for a in args):
        y, _ = rule(*args, **options)
        return y
    y, back = rule(*(data(a) for a in args), **options)
    logger.debug("track %s -> shape %s", op_tag, getattr(y, "shape", ()))
    return record(op_tag, y, back, args)
