"""Typed value objects for fprsim simulations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np
import pandas as pd

from fprsim.core.utils import finite_float, open_unit_interval, positive_int
from fprsim.errors import InvalidParameter

TREATMENT = "treatment"
CONTROL = "control"
GROUP_LABELS = (TREATMENT, CONTROL)


@dataclass(frozen=True)
class PopulationSpec:
    """Normal population parameters for the treatment and control groups."""

    mean_treatment: float = 0.0
    mean_control: float = 0.0
    sd_treatment: float = 1.0
    sd_control: float = 1.0
    family: str = "normal"

    def __post_init__(self) -> None:
        if self.family != "normal":
            raise InvalidParameter(
                f"Unsupported distribution family '{self.family}'; only 'normal' is available."
            )
        for name in ("mean_treatment", "mean_control", "sd_treatment", "sd_control"):
            object.__setattr__(self, name, finite_float(name, getattr(self, name)))
        if self.sd_treatment <= 0.0 or self.sd_control <= 0.0:
            raise InvalidParameter(
                "Standard deviations must be positive "
                f"(sd_treatment={self.sd_treatment}, sd_control={self.sd_control})."
            )

    @classmethod
    def null(cls, mean: float = 0.0, sd: float = 1.0) -> "PopulationSpec":
        """Both groups drawn from the same population (no true effect)."""
        return cls(mean_treatment=mean, mean_control=mean, sd_treatment=sd, sd_control=sd)

    @property
    def effect(self) -> float:
        return self.mean_treatment - self.mean_control


@dataclass(frozen=True, eq=False)
class Sample:
    """One simulated two-group dataset.

    - `treatment`: scores of the treatment group.
    - `control`: scores of the control group.
    """

    treatment: np.ndarray
    control: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "treatment", np.asarray(self.treatment, dtype=float).ravel())
        object.__setattr__(self, "control", np.asarray(self.control, dtype=float).ravel())

    def __len__(self) -> int:
        return int(self.treatment.size + self.control.size)

    def records(self) -> Iterator[tuple[str, float]]:
        for score in self.treatment:
            yield TREATMENT, float(score)
        for score in self.control:
            yield CONTROL, float(score)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "group": [TREATMENT] * self.treatment.size + [CONTROL] * self.control.size,
                "score": np.concatenate([self.treatment, self.control]),
            }
        )

    @classmethod
    def from_frame(
        cls, df: pd.DataFrame, group_col: str = "group", score_col: str = "score"
    ) -> "Sample":
        for col in (group_col, score_col):
            if col not in df.columns:
                raise InvalidParameter(f"Sample frame missing required column '{col}'.")
        labels = df[group_col].astype(str)
        unknown = sorted(set(labels) - set(GROUP_LABELS))
        if unknown:
            raise InvalidParameter(
                f"Unknown group labels {unknown}; expected {list(GROUP_LABELS)}."
            )
        scores = df[score_col].to_numpy(dtype=float)
        return cls(
            treatment=scores[(labels == TREATMENT).to_numpy()],
            control=scores[(labels == CONTROL).to_numpy()],
        )


@dataclass(frozen=True)
class TrialSpec:
    """Handle on one trial's independent random stream."""

    index: int
    seed: int


@dataclass(frozen=True)
class TrialOutcome:
    p_value: float
    significant: bool


@dataclass(frozen=True)
class SimulationResult:
    """Aggregate of one simulation run.

    `n_trials` counts completed trials. It equals `n_requested` unless the run
    was cancelled with a partial result requested, in which case `partial` is True.
    """

    n_trials: int
    alpha: float
    n_participants: int
    empirical_rate: float
    n_significant: int
    seed: int
    n_requested: int
    partial: bool = False

    def confidence_interval(self, level: float = 0.95) -> tuple[float, float]:
        """Wilson interval for the empirical rate."""
        from fprsim.reporting import wilson_ci

        level_f = open_unit_interval("level", level)
        return wilson_ci(self.n_significant, self.n_trials, alpha=1.0 - level_f)


@dataclass(frozen=True)
class FamilyWiseResult:
    alpha: float
    k: int
    rate: float


@dataclass(frozen=True)
class FamilySimulationResult:
    """Empirical family-wise false-positive rate over repeated test families."""

    n_trials: int
    n_tests: int
    alpha: float
    n_participants: int
    empirical_rate: float
    analytic_rate: float
    n_families_significant: int
    seed: int


def validate_run_parameters(
    n_participants: object, alpha: object, n_trials: object
) -> tuple[int, float, int]:
    return (
        positive_int("n_participants", n_participants),
        open_unit_interval("alpha", alpha),
        positive_int("n_trials", n_trials),
    )
