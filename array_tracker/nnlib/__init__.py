"""
Neural-network kernels on raw numpy arrays, forward and backward.

Implementations:
- softmax / logsoftmax along an axis (scipy.special)
- 2-D convolution, NCHW layout (scipy.signal)
- 2-D max and mean pooling (numpy sliding windows)

Every `grad_*` routine takes the upstream gradient first, followed by the
forward inputs (and the forward output where the kernel needs it).
"""

from .softmax import softmax, logsoftmax, grad_softmax, grad_logsoftmax
from .conv import conv, grad_conv_data, grad_conv_filter
from .pooling import maxpool, meanpool, grad_maxpool, grad_meanpool

__all__ = [
    'softmax', 'logsoftmax', 'grad_softmax', 'grad_logsoftmax',
    'conv', 'grad_conv_data', 'grad_conv_filter',
    'maxpool', 'meanpool', 'grad_maxpool', 'grad_meanpool',
]
