"""Core value types and validation helpers."""

from fprsim.core.types import (
    CONTROL,
    GROUP_LABELS,
    TREATMENT,
    FamilySimulationResult,
    FamilyWiseResult,
    PopulationSpec,
    Sample,
    SimulationResult,
    TrialOutcome,
    TrialSpec,
)

__all__ = [
    "TREATMENT",
    "CONTROL",
    "GROUP_LABELS",
    "PopulationSpec",
    "Sample",
    "TrialSpec",
    "TrialOutcome",
    "SimulationResult",
    "FamilyWiseResult",
    "FamilySimulationResult",
]
