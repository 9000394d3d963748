"""fprsim public API."""

from fprsim._version import __version__
from fprsim.core.types import (
    FamilySimulationResult,
    FamilyWiseResult,
    PopulationSpec,
    Sample,
    SimulationResult,
    TrialOutcome,
    TrialSpec,
)
from fprsim.errors import DegenerateSample, InvalidParameter, SimulationCancelled
from fprsim.familywise import family_wise_rate, family_wise_result
from fprsim.sampling import generate_sample
from fprsim.simulation import (
    plan_trials,
    run_family_simulation,
    run_simulation,
    simulate_trials,
)
from fprsim.trial import run_trial, welch_p_value

__all__ = [
    "__version__",
    "PopulationSpec",
    "Sample",
    "TrialSpec",
    "TrialOutcome",
    "SimulationResult",
    "FamilyWiseResult",
    "FamilySimulationResult",
    "InvalidParameter",
    "DegenerateSample",
    "SimulationCancelled",
    "generate_sample",
    "run_trial",
    "welch_p_value",
    "plan_trials",
    "simulate_trials",
    "run_simulation",
    "run_family_simulation",
    "family_wise_rate",
    "family_wise_result",
]
