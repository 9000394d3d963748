"""Exception types raised by fprsim operations."""

from __future__ import annotations


class InvalidParameter(ValueError):
    """Caller-supplied configuration violates a precondition."""


class DegenerateSample(ValueError):
    """Generated data cannot support the two-sample test."""


class SimulationCancelled(RuntimeError):
    """A simulation run was aborted before all trials completed."""

    def __init__(self, n_completed: int, n_requested: int):
        self.n_completed = int(n_completed)
        self.n_requested = int(n_requested)
        super().__init__(
            f"Simulation cancelled after {self.n_completed}/{self.n_requested} trials."
        )
