"""
Softmax kernels.

Forward passes use scipy.special; the backward passes are the closed-form
Jacobian-vector products of softmax and log-softmax along `axis`.
"""

import numpy as np
from scipy import special


def softmax(x: np.ndarray, axis: int = -1) -> np.ndarray:
    return special.softmax(x, axis=axis)


def logsoftmax(x: np.ndarray, axis: int = -1) -> np.ndarray:
    return special.log_softmax(x, axis=axis)


def grad_softmax(dy: np.ndarray, x: np.ndarray, axis: int = -1) -> np.ndarray:
    """
    Given dy = ∂L/∂softmax(x), return ∂L/∂x:

        s ⊙ (dy - Σ_axis(dy ⊙ s))
    """
    s = special.softmax(x, axis=axis)
    return s * (dy - np.sum(dy * s, axis=axis, keepdims=True))


def grad_logsoftmax(dy: np.ndarray, x: np.ndarray, axis: int = -1) -> np.ndarray:
    """
    Given dy = ∂L/∂logsoftmax(x), return ∂L/∂x:

        dy - softmax(x) ⊙ Σ_axis(dy)
    """
    s = special.softmax(x, axis=axis)
    return dy - s * np.sum(dy, axis=axis, keepdims=True)
