"""Simulation driver: repeated generate -> test trials reduced to an empirical rate."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from functools import partial
from typing import TypeVar

from fprsim.core.types import (
    FamilySimulationResult,
    PopulationSpec,
    SimulationResult,
    TrialOutcome,
    TrialSpec,
    validate_run_parameters,
)
from fprsim.core.utils import positive_int, seed_value
from fprsim.errors import InvalidParameter, SimulationCancelled
from fprsim.familywise import family_wise_rate
from fprsim.parallel import parallel_map
from fprsim.sampling import generate_sample
from fprsim.seeding import rng_from_seed, seed_for_trial
from fprsim.trial import run_trial

R = TypeVar("R")

logger = logging.getLogger(__name__)


def plan_trials(seed: int, n_trials: int) -> list[TrialSpec]:
    """One independent seed per trial index, derived from the master seed."""
    seed_i = seed_value(seed)
    n = positive_int("n_trials", n_trials)
    return [TrialSpec(index=i, seed=seed_for_trial(seed_i, i)) for i in range(n)]


def _run_one(
    spec: PopulationSpec, n_participants: int, alpha: float, trial: TrialSpec
) -> TrialOutcome:
    rng = rng_from_seed(trial.seed)
    sample = generate_sample(spec, n_participants, rng)
    return run_trial(sample, alpha)


def _run_family(
    spec: PopulationSpec,
    n_participants: int,
    alpha: float,
    n_tests: int,
    family: TrialSpec,
) -> bool:
    for j in range(n_tests):
        test = TrialSpec(index=j, seed=seed_for_trial(family.seed, j))
        if _run_one(spec, n_participants, alpha, test).significant:
            return True
    return False


def _execute(
    func: Callable[[TrialSpec], R],
    trials: Sequence[TrialSpec],
    *,
    n_jobs: int,
    backend: str,
    chunk_size: int,
    progress: bool,
    progress_every: int,
    cancel: threading.Event | None,
) -> tuple[list[R], bool]:
    """Run `func` over `trials` in batches, checking `cancel` between batches.

    Returns the outcomes of completed trials (in input order) and whether the
    run was cancelled.
    """
    total = len(trials)
    jobs = max(1, int(n_jobs))
    step = 1 if jobs == 1 else max(1, int(chunk_size)) * jobs
    if cancel is None:
        step = max(step, int(progress_every)) if progress else max(1, total)

    out: list[R] = []
    next_report = int(progress_every)
    for start in range(0, total, step):
        if cancel is not None and cancel.is_set():
            logger.warning("Cancelled after %d/%d trials.", len(out), total)
            return out, True
        batch = trials[start : start + step]
        out.extend(
            parallel_map(
                func,
                batch,
                n_jobs=jobs,
                backend=backend,
                chunk_size=chunk_size,
                progress=False,
            )
        )
        if progress and (len(out) >= next_report or len(out) == total):
            logger.info("Completed %d/%d trials.", len(out), total)
            while next_report <= len(out):
                next_report += int(progress_every)
    return out, False


def simulate_trials(
    population_spec: PopulationSpec,
    n_participants: int,
    alpha: float,
    trials: Sequence[TrialSpec],
    *,
    n_jobs: int = 1,
    backend: str = "loky",
    chunk_size: int = 25,
    progress: bool = False,
    progress_every: int = 100,
    cancel: threading.Event | None = None,
) -> list[TrialOutcome]:
    """Run one trial per `TrialSpec`; outcomes align with the order of `trials`."""
    if not isinstance(population_spec, PopulationSpec):
        raise InvalidParameter(
            f"population_spec must be a PopulationSpec, got {type(population_spec).__name__}."
        )
    n, alpha_f, _ = validate_run_parameters(n_participants, alpha, max(1, len(trials)))
    outcomes, cancelled = _execute(
        partial(_run_one, population_spec, n, alpha_f),
        list(trials),
        n_jobs=n_jobs,
        backend=backend,
        chunk_size=chunk_size,
        progress=progress,
        progress_every=positive_int("progress_every", progress_every),
        cancel=cancel,
    )
    if cancelled:
        raise SimulationCancelled(len(outcomes), len(trials))
    return outcomes


def summarize_outcomes(
    outcomes: Sequence[TrialOutcome],
    *,
    alpha: float,
    n_participants: int,
    seed: int,
    n_requested: int | None = None,
) -> SimulationResult:
    if not outcomes:
        raise InvalidParameter("Cannot summarize an empty set of trial outcomes.")
    n_sig = int(sum(1 for o in outcomes if o.significant))
    n_done = len(outcomes)
    requested = n_done if n_requested is None else int(n_requested)
    return SimulationResult(
        n_trials=n_done,
        alpha=float(alpha),
        n_participants=int(n_participants),
        empirical_rate=float(n_sig) / float(n_done),
        n_significant=n_sig,
        seed=int(seed),
        n_requested=requested,
        partial=n_done < requested,
    )


def run_simulation(
    population_spec: PopulationSpec,
    n_participants: int,
    alpha: float,
    n_trials: int,
    seed: int = 0,
    *,
    n_jobs: int = 1,
    backend: str = "loky",
    chunk_size: int = 25,
    progress: bool = False,
    progress_every: int = 100,
    cancel: threading.Event | None = None,
    allow_partial: bool = False,
) -> SimulationResult:
    """Estimate the rate of significant Welch t-tests over `n_trials` samples.

    Under a null `population_spec` (equal means) the returned
    `empirical_rate` estimates the false-positive rate; under a true effect it
    estimates power.

    Args:
        population_spec: Treatment/control population parameters.
        n_participants: Scores drawn per group in each trial.
        alpha: Per-test significance level, strictly inside (0, 1).
        n_trials: Number of independent trials (>= 1).
        seed: Master seed. Trial `i` draws from its own generator seeded with
            `seed_for_trial(seed, i)`, so results do not depend on scheduling.
        n_jobs: Worker count; 1 runs serially.
        backend: joblib backend used when `n_jobs > 1`.
        chunk_size: joblib batch size.
        progress: Log progress every `progress_every` trials.
        cancel: Event checked between trial batches.
        allow_partial: On cancellation, return a `partial=True` result over the
            completed trials instead of raising `SimulationCancelled`.

    Returns:
        SimulationResult.

    Raises:
        InvalidParameter: A parameter violates its precondition.
        DegenerateSample: A generated sample cannot support the test.
        SimulationCancelled: `cancel` was set before all trials completed.
    """
    if not isinstance(population_spec, PopulationSpec):
        raise InvalidParameter(
            f"population_spec must be a PopulationSpec, got {type(population_spec).__name__}."
        )
    n, alpha_f, n_trials_i = validate_run_parameters(n_participants, alpha, n_trials)
    seed_i = seed_value(seed)

    logger.info(
        "Simulation start: n_trials=%d n_participants=%d alpha=%g effect=%g seed=%d n_jobs=%d",
        n_trials_i,
        n,
        alpha_f,
        population_spec.effect,
        seed_i,
        int(n_jobs),
    )
    started = time.time()
    outcomes, cancelled = _execute(
        partial(_run_one, population_spec, n, alpha_f),
        plan_trials(seed_i, n_trials_i),
        n_jobs=n_jobs,
        backend=backend,
        chunk_size=chunk_size,
        progress=progress,
        progress_every=positive_int("progress_every", progress_every),
        cancel=cancel,
    )
    if cancelled and not (allow_partial and outcomes):
        raise SimulationCancelled(len(outcomes), n_trials_i)

    result = summarize_outcomes(
        outcomes,
        alpha=alpha_f,
        n_participants=n,
        seed=seed_i,
        n_requested=n_trials_i,
    )
    logger.info(
        "Simulation done: rate=%.4f (%d/%d significant) in %.2fs%s",
        result.empirical_rate,
        result.n_significant,
        result.n_trials,
        time.time() - started,
        " [partial]" if result.partial else "",
    )
    return result


def run_family_simulation(
    population_spec: PopulationSpec,
    n_participants: int,
    alpha: float,
    n_tests: int,
    n_trials: int,
    seed: int = 0,
    *,
    n_jobs: int = 1,
    backend: str = "loky",
    chunk_size: int = 25,
    progress: bool = False,
    progress_every: int = 100,
    cancel: threading.Event | None = None,
) -> FamilySimulationResult:
    """Empirical probability that at least one of `n_tests` independent tests is significant."""
    if not isinstance(population_spec, PopulationSpec):
        raise InvalidParameter(
            f"population_spec must be a PopulationSpec, got {type(population_spec).__name__}."
        )
    n, alpha_f, n_trials_i = validate_run_parameters(n_participants, alpha, n_trials)
    k = positive_int("n_tests", n_tests)
    seed_i = seed_value(seed)

    flags, cancelled = _execute(
        partial(_run_family, population_spec, n, alpha_f, k),
        plan_trials(seed_i, n_trials_i),
        n_jobs=n_jobs,
        backend=backend,
        chunk_size=chunk_size,
        progress=progress,
        progress_every=positive_int("progress_every", progress_every),
        cancel=cancel,
    )
    if cancelled:
        raise SimulationCancelled(len(flags), n_trials_i)

    n_hit = int(sum(flags))
    return FamilySimulationResult(
        n_trials=n_trials_i,
        n_tests=k,
        alpha=alpha_f,
        n_participants=n,
        empirical_rate=float(n_hit) / float(n_trials_i),
        analytic_rate=family_wise_rate(alpha_f, k),
        n_families_significant=n_hit,
        seed=seed_i,
    )
