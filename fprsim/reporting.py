"""Tabulation and presentation helpers for simulation results."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import asdict
from typing import Any

import pandas as pd
from scipy.stats import norm

from fprsim.core.types import PopulationSpec, SimulationResult
from fprsim.core.utils import open_unit_interval, positive_int
from fprsim.familywise import family_wise_rate
from fprsim.simulation import run_simulation

RESULT_COLUMNS = [
    "n_participants",
    "n_trials",
    "alpha",
    "empirical_rate",
    "n_significant",
    "ci_low",
    "ci_high",
    "seed",
    "partial",
]


def wilson_ci(k: int, n: int, alpha: float = 0.05) -> tuple[float, float]:
    """Wilson confidence interval for a proportion."""
    if int(n) <= 0:
        return float("nan"), float("nan")
    z = float(norm.ppf(1.0 - float(alpha) / 2.0))
    p_hat = float(k) / float(n)
    z2 = z * z
    denom = 1.0 + z2 / n
    center = (p_hat + z2 / (2.0 * n)) / denom
    half = (z / denom) * math.sqrt((p_hat * (1.0 - p_hat) / n) + (z2 / (4.0 * n * n)))
    return max(0.0, center - half), min(1.0, center + half)


def format_p_value(p: float, digits: int = 3) -> str:
    """Display form of a p-value. Never feed the rounded value back into a threshold."""
    p_f = float(p)
    floor = 10.0 ** (-int(digits))
    if p_f < floor:
        return f"< {floor:.{int(digits)}f}"
    return f"{p_f:.{int(digits)}f}"


def results_to_frame(results: Iterable[SimulationResult]) -> pd.DataFrame:
    rows: list[dict[str, Any]] = []
    for res in results:
        row = asdict(res)
        row["ci_low"], row["ci_high"] = res.confidence_interval()
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=RESULT_COLUMNS)
    return pd.DataFrame(rows)[RESULT_COLUMNS]


def power_sweep(
    population_spec: PopulationSpec,
    n_participants_values: Iterable[int],
    alpha: float,
    n_trials: int,
    seed: int = 0,
    **run_kwargs: Any,
) -> pd.DataFrame:
    """Run one simulation per participant count and tabulate the rates.

    Every count reuses the same master seed, so rows differ only in sample size.
    """
    values = [positive_int("n_participants", v) for v in n_participants_values]
    results = [
        run_simulation(population_spec, n, alpha, n_trials, seed, **run_kwargs)
        for n in values
    ]
    df = results_to_frame(results)
    df.insert(1, "effect", population_spec.effect)
    return df


def family_wise_table(alpha: float, ks: Iterable[int]) -> pd.DataFrame:
    alpha_f = open_unit_interval("alpha", alpha)
    rows = [
        {"k": int(k), "alpha": alpha_f, "family_wise_rate": family_wise_rate(alpha_f, k)}
        for k in ks
    ]
    return pd.DataFrame(rows, columns=["k", "alpha", "family_wise_rate"])
