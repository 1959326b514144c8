# tracker/ops/nn.py
# Tracked wrappers over the array_tracker.nnlib kernels
from array_tracker import nnlib
from ..core.registry import grad_rule, track


@grad_rule("softmax")
def _softmax(xs, axis=-1):
    return nnlib.softmax(xs, axis), lambda d: (nnlib.grad_softmax(d, xs, axis),)


@grad_rule("logsoftmax")
def _logsoftmax(xs, axis=-1):
    return nnlib.logsoftmax(xs, axis), lambda d: (nnlib.grad_logsoftmax(d, xs, axis),)


def softmax(x, axis=-1):
    return track("softmax", x, axis=axis)


def logsoftmax(x, axis=-1):
    return track("logsoftmax", x, axis=axis)


@grad_rule("conv")
def _conv(x, w, stride=1, pad=0):
    def back(d):
        return (nnlib.grad_conv_data(d, x, w, stride, pad),
                nnlib.grad_conv_filter(d, x, w, stride, pad))
    return nnlib.conv(x, w, stride, pad), back


def conv(x, w, stride=1, pad=0):
    """2-D cross-correlation of (N, C_in, H, W) signals with (C_out, C_in, kH, kW) filters."""
    return track("conv", x, w, stride=stride, pad=pad)


@grad_rule("maxpool")
def _maxpool(x, k, stride=None, pad=0):
    y = nnlib.maxpool(x, k, stride, pad)
    return y, lambda d: (nnlib.grad_maxpool(d, y, x, k, stride, pad), None)


@grad_rule("meanpool")
def _meanpool(x, k, stride=None, pad=0):
    y = nnlib.meanpool(x, k, stride, pad)
    return y, lambda d: (nnlib.grad_meanpool(d, y, x, k, stride, pad), None)


def maxpool(x, k, stride=None, pad=0):
    return track("maxpool", x, k, stride=stride, pad=pad)


def meanpool(x, k, stride=None, pad=0):
    return track("meanpool", x, k, stride=stride, pad=pad)
