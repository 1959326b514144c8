# tracker/core/__init__.py

"""
Core public API for the tracker.

This module exposes the minimal set of symbols that users of the tracker
should import from `tracker.core`. The four operations a training loop relies
on are `param` (wrap raw data as a leaf), `data` (raw array of a value),
`back` (run the reverse pass) and `grad` (read the accumulated gradient).

Exports:
    TrackedArray  : The array wrapper that records how it was computed.
    Call          : Immutable record of one applied operation.
    track         : Apply a registered rule, recording it when inputs are tracked.
    grad_rule     : Decorator registering a primitive's (primal, backward) rule.
    back          : Run a single reverse pass to accumulate gradients.
    zero_grad     : Reset all gradients reachable from some outputs to zero.
    param, data, grad, gradient, grads, grads_list : convenience surface.
"""

from .var import TrackedArray
from .node import Call
from .registry import grad_rule, implements, track, rules, istracked, data
from .engine import back, zero_grad, leaves, toposort
from .seeds import param, grad, gradient, grads, grads_list
from .config import TrackerConfig, get_config, use_config
from .errors import (
    TrackerError,
    UnsupportedMutationError,
    UnsupportedOptionError,
    NotScalarError,
    CycleError,
    ArityError,
    NonDifferentiableError,
    NonDifferentiableWarning,
)

__all__ = [
    "TrackedArray", "Call",
    "grad_rule", "implements", "track", "rules", "istracked",
    "back", "zero_grad", "leaves", "toposort",
    "param", "data", "grad", "gradient", "grads", "grads_list",
    "TrackerConfig", "get_config", "use_config",
    "TrackerError", "UnsupportedMutationError", "UnsupportedOptionError", "NotScalarError",
    "CycleError", "ArityError", "NonDifferentiableError", "NonDifferentiableWarning",
]
