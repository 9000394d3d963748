"""Sample generator: one simulated two-group dataset per call."""

from __future__ import annotations

import numpy as np

from fprsim.core.types import PopulationSpec, Sample
from fprsim.core.utils import positive_int
from fprsim.errors import InvalidParameter


def generate_sample(
    spec: PopulationSpec, n_participants: int, rng: np.random.Generator
) -> Sample:
    """Draw `n_participants` treatment and `n_participants` control scores.

    Args:
        spec: Population parameters. Both groups are normal.
        n_participants: Scores per group (>= 1).
        rng: Random source owned by the caller. Treatment scores are drawn
            first, then control scores.

    Returns:
        A fresh `Sample`.
    """
    n = positive_int("n_participants", n_participants)
    if not isinstance(spec, PopulationSpec):
        raise InvalidParameter(f"spec must be a PopulationSpec, got {type(spec).__name__}.")
    if not isinstance(rng, np.random.Generator):
        raise InvalidParameter(
            f"rng must be a numpy.random.Generator, got {type(rng).__name__}."
        )
    treatment = rng.normal(loc=spec.mean_treatment, scale=spec.sd_treatment, size=n)
    control = rng.normal(loc=spec.mean_control, scale=spec.sd_control, size=n)
    return Sample(treatment=treatment, control=control)
