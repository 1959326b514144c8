# tracker/core/node.py
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

import numpy as np

from .errors import ArityError


@dataclass(frozen=True, eq=False)
class Call:
    """
    One applied primitive operation, produced when a rule runs on tracked data.

    Attributes
    ----------
    op_tag   : str
        Debug tag (e.g., "reshape", "broadcast").
    backward : Callable
        Maps an upstream gradient Δ (raw ndarray) to one gradient per input.
        A slot may be None, meaning "no gradient" (indices, shapes, axes ...).
    inputs   : Tuple[Optional[TrackedArray], ...]
        The forward call's positional arguments, in order. Untracked arguments
        are stored as None. The same TrackedArray may appear more than once.
    """
    op_tag: str
    backward: Callable[[np.ndarray], Sequence[Optional[np.ndarray]]]
    inputs: Tuple[Any, ...]

    def grads(self, delta) -> Tuple[Optional[np.ndarray], ...]:
        """Run the backward closure and align its result with `inputs`."""
        out = self.backward(delta)
        if out is None or len(out) != len(self.inputs):
            n = "None" if out is None else len(out)
            raise ArityError(
                f"backward of {self.op_tag!r} returned {n} gradients "
                f"for {len(self.inputs)} inputs"
            )
        return tuple(None if x is None else g for x, g in zip(self.inputs, out))
