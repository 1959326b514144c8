# tracker/core/errors.py
"""
Error kinds raised by the tracker.

Every error is a programmer-visible failure: nothing is retried, and a
traversal that raised leaves gradient accumulators in an undefined, partial
state.
"""


class TrackerError(Exception):
    """Base class for all tracker failures."""


class UnsupportedMutationError(TrackerError, TypeError):
    """In-place element assignment on a tracked value."""


class NotScalarError(TrackerError, ValueError):
    """Backward pass requested on a non-scalar value without an explicit gradient."""


class CycleError(TrackerError, RuntimeError):
    """The producer graph reachable from an output contains a cycle."""


class ArityError(TrackerError, RuntimeError):
    """A backward closure returned the wrong number of gradient slots."""


class NonDifferentiableError(TrackerError, TypeError):
    """A broadcast over tracked arguments produced a non-dual floating result."""


class UnsupportedOptionError(TrackerError, TypeError):
    """A NumPy keyword option that would change what a tracked call computes."""


class NonDifferentiableWarning(UserWarning):
    """Tracking was dropped by a broadcast that could not be differentiated."""
