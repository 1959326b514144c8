# tracker/core/bumping.py
"""
Finite-difference (bumping) reference gradients.

Central differences, one bump per input element:

    ∂f/∂x_i ≈ [f(x + ε e_i) - f(x - ε e_i)] / (2ε)

Used to validate the reverse pass: `gradcheck` compares both on the same
inputs.
"""
from __future__ import annotations
import logging
from typing import Callable, Optional, Tuple

import numpy as np

from . import config as config_mod
from .registry import data
from .seeds import gradient

logger = logging.getLogger(__name__)


def ngradient(f: Callable[..., float], *xs, eps: Optional[float] = None) -> Tuple[np.ndarray, ...]:
    """
    Numerical gradient of a scalar function of raw arrays.

    Returns one array per input, with the input's shape.
    """
    eps = config_mod.get_config().fd_eps if eps is None else eps
    xs = [np.array(data(x), dtype=np.float64) for x in xs]
    out = []
    for x in xs:
        g = np.zeros_like(x)
        for i in range(x.size):
            tmp = x.flat[i]
            x.flat[i] = tmp + eps
            f_up = float(data(f(*xs)))
            x.flat[i] = tmp - eps
            f_dn = float(data(f(*xs)))
            x.flat[i] = tmp
            g.flat[i] = (f_up - f_dn) / (2.0 * eps)
        out.append(g)
    return tuple(out)


def gradcheck(f: Callable, *xs, rtol: Optional[float] = None, atol: Optional[float] = None) -> bool:
    """
    True when the reverse-mode gradient of `f` at `xs` matches the
    finite-difference one within tolerance.
    """
    cfg = config_mod.get_config()
    rtol = cfg.gradcheck_rtol if rtol is None else rtol
    atol = cfg.gradcheck_atol if atol is None else atol

    ad = gradient(f, *xs)
    ad = ad if isinstance(ad, tuple) else (ad,)
    fd = ngradient(f, *xs)

    ok = True
    for i, (g_ad, g_fd) in enumerate(zip(ad, fd)):
        err = float(np.max(np.abs(g_ad - g_fd))) if g_ad.size else 0.0
        match = np.allclose(g_ad, g_fd, rtol=rtol, atol=atol)
        logger.debug("gradcheck input %d: max abs error %.3e (%s)", i, err, "ok" if match else "FAIL")
        if cfg.verbose:
            print(f"  x{i}: shape={g_ad.shape}  max|AD - FD| = {err:.3e}  {'OK' if match else 'FAIL'}")
        ok = ok and match
    return ok
