"""
2-D max / mean pooling kernels over (N, C, H, W) inputs.

`k`, `stride` and `pad` take an int or an (h, w) pair; `stride` defaults to
the window size. Max pooling pads with -inf, mean pooling with zeros (padded
cells count towards the mean).
"""

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .conv import IntPair, _pad, _pair


def _windows(x: np.ndarray, k: IntPair, stride, pad: IntPair, fill: float):
    kh, kw = _pair(k)
    sh, sw = _pair(k if stride is None else stride)
    if x.ndim != 4:
        raise ValueError(f"pooling expects a 4-D input, got {x.ndim}-D")
    xp = _pad(x, pad, fill)
    win = sliding_window_view(xp, (kh, kw), axis=(2, 3))[:, :, ::sh, ::sw]
    return xp, win, (kh, kw), (sh, sw)


def maxpool(x: np.ndarray, k: IntPair, stride=None, pad: IntPair = 0) -> np.ndarray:
    _, win, _, _ = _windows(x, k, stride, pad, -np.inf)
    return win.max(axis=(-2, -1))


def meanpool(x: np.ndarray, k: IntPair, stride=None, pad: IntPair = 0) -> np.ndarray:
    _, win, _, _ = _windows(x, k, stride, pad, 0.0)
    return win.mean(axis=(-2, -1))


def grad_maxpool(dy: np.ndarray, y: np.ndarray, x: np.ndarray, k: IntPair,
                 stride=None, pad: IntPair = 0) -> np.ndarray:
    """
    ∂L/∂x given dy = ∂L/∂maxpool(x). Each window routes its gradient to the
    first cell equal to the pooled maximum `y`.
    """
    xp, win, (kh, kw), (sh, sw) = _windows(x, k, stride, pad, -np.inf)
    N, C, outH, outW = y.shape
    ph, pw = _pair(pad)

    dxp = np.zeros(xp.shape)
    n_idx, c_idx = np.meshgrid(np.arange(N), np.arange(C), indexing="ij")
    for i in range(outH):
        for j in range(outW):
            cells = win[:, :, i, j].reshape(N, C, kh * kw)
            first = np.argmax(cells == y[:, :, i, j, None], axis=-1)
            r = i * sh + first // kw
            c = j * sw + first % kw
            dxp[n_idx, c_idx, r, c] += dy[:, :, i, j]
    return dxp[:, :, ph:ph + x.shape[2], pw:pw + x.shape[3]]


def grad_meanpool(dy: np.ndarray, y: np.ndarray, x: np.ndarray, k: IntPair,
                  stride=None, pad: IntPair = 0) -> np.ndarray:
    """∂L/∂x given dy = ∂L/∂meanpool(x): each window shares dy evenly."""
    xp, _, (kh, kw), (sh, sw) = _windows(x, k, stride, pad, 0.0)
    _, _, outH, outW = y.shape
    ph, pw = _pair(pad)

    dxp = np.zeros(xp.shape)
    share = dy / (kh * kw)
    for i in range(outH):
        for j in range(outW):
            dxp[:, :, i * sh:i * sh + kh, j * sw:j * sw + kw] += share[:, :, i, j, None, None]
    return dxp[:, :, ph:ph + x.shape[2], pw:pw + x.shape[3]]
