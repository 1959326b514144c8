# tracker/__init__.py
# Reverse-mode automatic differentiation for array computations

from .core.var import TrackedArray
from .core.node import Call
from .core.registry import grad_rule, track, istracked, data
from .core.engine import back, zero_grad, leaves
from .core.seeds import param, grad, gradient, grads, grads_list
from .core.bumping import ngradient, gradcheck
from .core.config import TrackerConfig, get_config, use_config
from .core.graph_utils import get_graph_stats, print_graph_summary, print_computation_graph
from .core.errors import (
    TrackerError,
    UnsupportedMutationError,
    UnsupportedOptionError,
    NotScalarError,
    CycleError,
    ArityError,
    NonDifferentiableError,
    NonDifferentiableWarning,
)

# Primitive rules (registers operators and NumPy entry points)
from . import ops
from .ops import *  # noqa: F401,F403

# Forward-mode dual numbers used by the broadcast bridge
from . import dual
from .dual import Dual

__all__ = [
    # Core
    'TrackedArray',
    'Call',
    'grad_rule',
    'track',
    'istracked',
    # Surface
    'param',
    'data',
    'back',
    'grad',
    'zero_grad',
    'leaves',
    'gradient',
    'grads',
    'grads_list',
    # Checks
    'ngradient',
    'gradcheck',
    # Graph inspection
    'get_graph_stats',
    'print_graph_summary',
    'print_computation_graph',
    # Config
    'TrackerConfig',
    'get_config',
    'use_config',
    # Errors
    'TrackerError',
    'UnsupportedMutationError',
    'UnsupportedOptionError',
    'NotScalarError',
    'CycleError',
    'ArityError',
    'NonDifferentiableError',
    'NonDifferentiableWarning',
    # Duals
    'dual',
    'Dual',
    'ops',
] + ops.__all__
