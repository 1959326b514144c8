# tracker/core/config.py
from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass, replace

_FALLBACKS = ("silent", "warn", "error")


@dataclass
class TrackerConfig:
    """Runtime options for the tracker."""
    # Policy when a broadcast over tracked data yields a non-dual float result
    broadcast_fallback: str = "warn"  # 'silent', 'warn', 'error'

    # Finite differences (bumping)
    fd_eps: float = 1e-6
    gradcheck_rtol: float = 1e-5
    gradcheck_atol: float = 1e-6

    # Logging
    verbose: bool = False

    def __post_init__(self):
        if self.broadcast_fallback not in _FALLBACKS:
            raise ValueError(
                f"broadcast_fallback must be one of {_FALLBACKS}, "
                f"got {self.broadcast_fallback!r}"
            )
        if self.fd_eps <= 0:
            raise ValueError(f"fd_eps must be positive, got {self.fd_eps}")
        if self.gradcheck_rtol < 0 or self.gradcheck_atol < 0:
            raise ValueError("gradcheck tolerances must be non-negative")


# Process-wide active configuration
config = TrackerConfig()


def get_config() -> TrackerConfig:
    return config


@contextmanager
def use_config(**overrides):
    """
    Context manager to temporarily run with modified options:
        with use_config(broadcast_fallback="error"):
            ... build computation ...
            back(y)
    """
    global config
    prev = config
    try:
        config = replace(prev, **overrides)
        yield config
    finally:
        config = prev
