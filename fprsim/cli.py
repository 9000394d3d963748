"""Command-line interface for fprsim simulations."""

from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from fprsim.config import SimulationConfig, load_json_config, simulation_config_from_dict
from fprsim.errors import DegenerateSample, InvalidParameter, SimulationCancelled
from fprsim.logging_utils import setup_logger, teardown_logger
from fprsim.parallel import BACKENDS
from fprsim.reporting import family_wise_table, power_sweep
from fprsim.simulation import run_family_simulation, run_simulation

logger = logging.getLogger("fprsim")

_POPULATION_FLAGS = ("mean_treatment", "mean_control", "sd_treatment", "sd_control")
_RUN_FLAGS = ("n_participants", "alpha", "n_trials", "seed", "n_jobs", "backend", "chunk_size")


def _add_run_args(parser: argparse.ArgumentParser, *, sweep: bool = False) -> None:
    parser.add_argument("--config", default=None, help="Path to a .json run config")
    if sweep:
        parser.add_argument(
            "--n-participants",
            dest="n_participants_values",
            type=int,
            nargs="+",
            default=[13, 25, 50, 100],
            help="Participant counts per group to sweep",
        )
    else:
        parser.add_argument(
            "--n-participants", type=int, default=None, help="Participants per group"
        )
    parser.add_argument("--n-trials", type=int, default=None, help="Number of trials")
    parser.add_argument("--alpha", type=float, default=None, help="Significance level")
    parser.add_argument("--seed", type=int, default=None, help="Master random seed")
    parser.add_argument("--mean-treatment", type=float, default=None)
    parser.add_argument("--mean-control", type=float, default=None)
    parser.add_argument("--sd-treatment", type=float, default=None)
    parser.add_argument("--sd-control", type=float, default=None)
    parser.add_argument("--n-jobs", type=int, default=None, help="Worker count")
    parser.add_argument("--backend", choices=BACKENDS, default=None, help="joblib backend")
    parser.add_argument("--chunk-size", type=int, default=None, help="joblib batch size")
    parser.add_argument("--progress", action="store_true", help="Log trial progress")
    parser.add_argument("--log-file", default=None, help="Optional log file path")


def _resolve_config(args: argparse.Namespace) -> SimulationConfig:
    """Config file values, overridden by any flag given on the command line."""
    cfg = (
        simulation_config_from_dict(load_json_config(args.config))
        if args.config
        else SimulationConfig()
    )
    pop_over = {
        k: getattr(args, k) for k in _POPULATION_FLAGS if getattr(args, k) is not None
    }
    run_over = {
        k: getattr(args, k)
        for k in _RUN_FLAGS
        if getattr(args, k, None) is not None
    }
    population = dataclasses.replace(cfg.population, **pop_over)
    return dataclasses.replace(cfg, population=population, **run_over)


def _write_table(df: pd.DataFrame, out: str | None) -> None:
    print(df.to_string(index=False))
    if out:
        out_path = Path(out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(out_path.as_posix(), index=False)
        logger.info("Wrote %s", out_path)


def simulate_main(argv: Iterable[str] | None = None) -> int:
    """Estimate the rate of significant tests for one configuration.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(description="fprsim: one Monte Carlo run")
    _add_run_args(parser)
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logger(Path(args.log_file) if args.log_file else None)

    cfg = _resolve_config(args)
    res = run_simulation(
        cfg.population,
        cfg.n_participants,
        cfg.alpha,
        cfg.n_trials,
        cfg.seed,
        progress=args.progress,
        **cfg.run_kwargs(),
    )
    lo, hi = res.confidence_interval()
    print(f"effect={cfg.population.effect}")
    print(f"n_participants={res.n_participants}")
    print(f"n_trials={res.n_trials}")
    print(f"alpha={res.alpha}")
    print(f"n_significant={res.n_significant}")
    print(f"empirical_rate={res.empirical_rate:.4f}")
    print(f"ci95=[{lo:.3f}, {hi:.3f}]")
    return 0


def family_wise_main(argv: Iterable[str] | None = None) -> int:
    """Tabulate the analytic family-wise false-positive rate.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(description="fprsim: analytic family-wise rate")
    parser.add_argument("--alpha", type=float, default=0.05, help="Per-test alpha")
    parser.add_argument(
        "--k", type=int, nargs="+", default=[1, 2, 3, 5, 10, 20], help="Numbers of tests"
    )
    parser.add_argument("--out", default=None, help="Optional CSV output path")
    args = parser.parse_args(list(argv) if argv is not None else None)

    _write_table(family_wise_table(args.alpha, args.k), args.out)
    return 0


def family_sim_main(argv: Iterable[str] | None = None) -> int:
    """Simulate families of independent tests and compare with the analytic rate.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(description="fprsim: simulated family-wise rate")
    _add_run_args(parser)
    parser.add_argument("--n-tests", type=int, default=3, help="Tests per family")
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logger(Path(args.log_file) if args.log_file else None)

    cfg = _resolve_config(args)
    res = run_family_simulation(
        cfg.population,
        cfg.n_participants,
        cfg.alpha,
        args.n_tests,
        cfg.n_trials,
        cfg.seed,
        progress=args.progress,
        **cfg.run_kwargs(),
    )
    print(f"n_tests={res.n_tests}")
    print(f"n_trials={res.n_trials}")
    print(f"empirical_family_wise_rate={res.empirical_rate:.4f}")
    print(f"analytic_family_wise_rate={res.analytic_rate:.4f}")
    return 0


def power_sweep_main(argv: Iterable[str] | None = None) -> int:
    """Sweep participant counts and tabulate the rate of significant tests.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(description="fprsim: rate vs participants")
    _add_run_args(parser, sweep=True)
    parser.add_argument("--out", default=None, help="Optional CSV output path")
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logger(Path(args.log_file) if args.log_file else None)

    cfg = _resolve_config(args)
    df = power_sweep(
        cfg.population,
        args.n_participants_values,
        cfg.alpha,
        cfg.n_trials,
        cfg.seed,
        progress=args.progress,
        **cfg.run_kwargs(),
    )
    _write_table(df, args.out)
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(description="fprsim CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("simulate", help="Estimate the false-positive rate (or power)", add_help=False)
    sub.add_parser("family-wise", help="Analytic family-wise rate table", add_help=False)
    sub.add_parser("family-sim", help="Simulated family-wise rate", add_help=False)
    sub.add_parser("power-sweep", help="Rate across participant counts", add_help=False)

    args, remainder = parser.parse_known_args(list(argv) if argv is not None else None)
    commands = {
        "simulate": simulate_main,
        "family-wise": family_wise_main,
        "family-sim": family_sim_main,
        "power-sweep": power_sweep_main,
    }
    try:
        return commands[args.command](remainder)
    except (InvalidParameter, DegenerateSample, SimulationCancelled) as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return 2
    finally:
        teardown_logger()


if __name__ == "__main__":
    raise SystemExit(main())
