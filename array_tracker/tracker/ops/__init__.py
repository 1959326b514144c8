# tracker/ops/__init__.py

# Ensure every rule and NumPy entry point is registered
from . import arithmetic
from . import transcendental
from . import broadcast
from . import shape
from . import reductions
from . import linalg
from . import nn

# Convenience re-exports so users can do: from tracker.ops import reshape, softmax, ...
from .arithmetic import add, sub, mul, div, neg, pow
from .transcendental import exp, log, sqrt, tanh, sin, cos, abs, erf, sigmoid, relu, softplus
from .broadcast import broadcast, unbroadcast
from .shape import (
    getindex, transpose, adjoint, reshape, permutedims, repeat,
    vcat, hcat, cat, kron,
)
from .reductions import sum, mean, prod, maximum, minimum, std, norm
from .linalg import dot, matmul, diagm
from .nn import softmax, logsoftmax, conv, maxpool, meanpool

__all__ = [
    "add", "sub", "mul", "div", "neg", "pow",
    "exp", "log", "sqrt", "tanh", "sin", "cos", "abs", "erf", "sigmoid", "relu", "softplus",
    "broadcast", "unbroadcast",
    "getindex", "transpose", "adjoint", "reshape", "permutedims", "repeat",
    "vcat", "hcat", "cat", "kron",
    "sum", "mean", "prod", "maximum", "minimum", "std", "norm",
    "dot", "matmul", "diagm",
    "softmax", "logsoftmax", "conv", "maxpool", "meanpool",
]
