"""
2-D convolution kernels (cross-correlation, as in most deep-learning libraries).

Layouts:
    x : (N, C_in, H, W)          input signal
    w : (C_out, C_in, kH, kW)    filters
    y : (N, C_out, outH, outW)   outH = (H + 2*pad - kH) // stride + 1

Per-channel work is delegated to scipy.signal.correlate2d / convolve2d.
"""

import numpy as np
from scipy import signal
from typing import Tuple, Union

IntPair = Union[int, Tuple[int, int]]


def _pair(v: IntPair) -> Tuple[int, int]:
    if isinstance(v, (tuple, list)):
        return int(v[0]), int(v[1])
    return int(v), int(v)


def _pad(x: np.ndarray, pad: IntPair, value: float = 0.0) -> np.ndarray:
    ph, pw = _pair(pad)
    if ph == 0 and pw == 0:
        return x
    return np.pad(x, ((0, 0), (0, 0), (ph, ph), (pw, pw)), "constant", constant_values=value)


def _check(x: np.ndarray, w: np.ndarray):
    if x.ndim != 4 or w.ndim != 4:
        raise ValueError(f"conv expects 4-D input and filters, got {x.ndim}-D and {w.ndim}-D")
    if x.shape[1] != w.shape[1]:
        raise ValueError(
            f"Input channels ({x.shape[1]}) and filter channels ({w.shape[1]}) must match"
        )


def conv(x: np.ndarray, w: np.ndarray, stride: IntPair = 1, pad: IntPair = 0) -> np.ndarray:
    _check(x, w)
    sh, sw = _pair(stride)
    xp = _pad(x, pad)
    N, C_in = x.shape[:2]
    C_out, _, kH, kW = w.shape
    outH = (xp.shape[2] - kH) // sh + 1
    outW = (xp.shape[3] - kW) // sw + 1
    if outH <= 0 or outW <= 0:
        raise ValueError("Filter is larger than the padded input")

    y = np.zeros((N, C_out, outH, outW))
    for n in range(N):
        for co in range(C_out):
            acc = np.zeros((xp.shape[2] - kH + 1, xp.shape[3] - kW + 1))
            for ci in range(C_in):
                acc += signal.correlate2d(xp[n, ci], w[co, ci], mode="valid")
            y[n, co] = acc[::sh, ::sw][:outH, :outW]
    return y


def _upsample(dy: np.ndarray, stride: IntPair) -> np.ndarray:
    """Spread a strided output gradient back onto the dense (stride 1) grid."""
    sh, sw = _pair(stride)
    if sh == 1 and sw == 1:
        return dy
    N, C, outH, outW = dy.shape
    up = np.zeros((N, C, (outH - 1) * sh + 1, (outW - 1) * sw + 1))
    up[:, :, ::sh, ::sw] = dy
    return up


def grad_conv_data(dy: np.ndarray, x: np.ndarray, w: np.ndarray,
                   stride: IntPair = 1, pad: IntPair = 0) -> np.ndarray:
    """∂L/∂x given dy = ∂L/∂conv(x, w)."""
    _check(x, w)
    ph, pw = _pair(pad)
    up = _upsample(dy, stride)
    N, C_in, H, W = x.shape
    C_out = w.shape[0]
    Hp, Wp = H + 2 * ph, W + 2 * pw

    dxp = np.zeros((N, C_in, Hp, Wp))
    for n in range(N):
        for ci in range(C_in):
            for co in range(C_out):
                full = signal.convolve2d(up[n, co], w[co, ci], mode="full")
                # rows/cols past the last strided window got no contribution
                dxp[n, ci, :full.shape[0], :full.shape[1]] += full
    return dxp[:, :, ph:ph + H, pw:pw + W]


def grad_conv_filter(dy: np.ndarray, x: np.ndarray, w: np.ndarray,
                     stride: IntPair = 1, pad: IntPair = 0) -> np.ndarray:
    """∂L/∂w given dy = ∂L/∂conv(x, w)."""
    _check(x, w)
    up = _upsample(dy, stride)
    xp = _pad(x, pad)
    N, C_in = x.shape[:2]
    C_out, _, kH, kW = w.shape
    uH, uW = up.shape[2:]

    dw = np.zeros_like(w, dtype=np.float64)
    for n in range(N):
        for co in range(C_out):
            for ci in range(C_in):
                region = xp[n, ci, :uH + kH - 1, :uW + kW - 1]
                dw[co, ci] += signal.correlate2d(region, up[n, co], mode="valid")
    return dw
