# tracker/ops/transcendental.py
import numpy as np
from scipy import special

from .broadcast import broadcast


def exp(x):  return broadcast(np.exp, x)
def log(x):  return broadcast(np.log, x)
def sqrt(x): return broadcast(np.sqrt, x)
def tanh(x): return broadcast(np.tanh, x)
def sin(x):  return broadcast(np.sin, x)
def cos(x):  return broadcast(np.cos, x)
def abs(x):  return broadcast(np.absolute, x)


def erf(x):
    """
    Error function: erf(x) = (2/√π) ∫₀ˣ e^(-t²) dt

    Derivative: d/dx erf(x) = (2/√π) * e^(-x²)
    """
    return broadcast(special.erf, x)


def sigmoid(x):
    return broadcast(special.expit, x)


def _relu(x):
    return np.maximum(0.0, x)


def relu(x):
    # maximum() sends ties to its first argument, so relu'(0) = 0
    return broadcast(_relu, x)


def softplus(x):
    return broadcast(lambda v: np.log1p(np.exp(v)), x)
