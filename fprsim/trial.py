"""Trial runner: Welch's t-test on one sample, reduced to a significance flag."""

from __future__ import annotations

import math

import numpy as np
from scipy.stats import ttest_ind

from fprsim.core.types import CONTROL, TREATMENT, Sample, TrialOutcome
from fprsim.core.utils import open_unit_interval
from fprsim.errors import DegenerateSample


def _check_group(label: str, scores: np.ndarray) -> None:
    if scores.size < 2:
        raise DegenerateSample(
            f"Group '{label}' has {scores.size} observation(s); Welch's t-test needs at least 2."
        )
    if not np.isfinite(scores).all():
        raise DegenerateSample(f"Group '{label}' contains NaN/inf scores.")
    # rounding can leave a tiny non-zero variance on a constant group
    if float(np.ptp(scores)) == 0.0 or float(np.var(scores, ddof=1)) <= 0.0:
        raise DegenerateSample(f"Group '{label}' has zero variance.")


def welch_p_value(sample: Sample) -> float:
    """Two-tailed p-value of the unpaired, unequal-variance t-test."""
    _check_group(TREATMENT, sample.treatment)
    _check_group(CONTROL, sample.control)
    res = ttest_ind(sample.treatment, sample.control, equal_var=False)
    p = float(res.pvalue)
    if not math.isfinite(p):
        raise DegenerateSample(f"Welch's t-test returned a non-finite p-value ({p}).")
    return min(max(p, 0.0), 1.0)


def run_trial(sample: Sample, alpha: float) -> TrialOutcome:
    """Apply the test and threshold the unrounded p-value with `p < alpha`."""
    alpha_f = open_unit_interval("alpha", alpha)
    p = welch_p_value(sample)
    return TrialOutcome(p_value=p, significant=bool(p < alpha_f))
