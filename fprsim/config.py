"""Configuration loading utilities for fprsim runs."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from fprsim.core.types import PopulationSpec, validate_run_parameters
from fprsim.core.utils import positive_int, seed_value
from fprsim.errors import InvalidParameter
from fprsim.parallel import BACKENDS


def load_json_config(path: str | Path) -> dict[str, Any]:
    """Load a run config from a JSON file."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError(
            f"Unsupported config format for '{config_path}'. Use a .json config file."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Invalid JSON in config '{config_path}' at line {exc.lineno}, "
            f"column {exc.colno}: {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid config root in '{config_path}': expected JSON object, got {type(data).__name__}."
        )
    return data


@dataclass(frozen=True)
class SimulationConfig:
    """Everything `run_simulation` needs, plus execution options."""

    population: PopulationSpec = field(default_factory=PopulationSpec)
    n_participants: int = 36
    alpha: float = 0.05
    n_trials: int = 1000
    seed: int = 0
    n_jobs: int = 1
    backend: str = "loky"
    chunk_size: int = 25

    def __post_init__(self) -> None:
        n, alpha, n_trials = validate_run_parameters(
            self.n_participants, self.alpha, self.n_trials
        )
        object.__setattr__(self, "n_participants", n)
        object.__setattr__(self, "alpha", alpha)
        object.__setattr__(self, "n_trials", n_trials)
        object.__setattr__(self, "seed", seed_value(self.seed))
        object.__setattr__(self, "n_jobs", positive_int("n_jobs", self.n_jobs))
        object.__setattr__(self, "chunk_size", positive_int("chunk_size", self.chunk_size))
        if self.backend not in BACKENDS:
            raise InvalidParameter(
                f"Unknown backend '{self.backend}'; choose one of {BACKENDS}."
            )

    def run_kwargs(self) -> dict[str, Any]:
        return {"n_jobs": self.n_jobs, "backend": self.backend, "chunk_size": self.chunk_size}


_POPULATION_KEYS = {"mean_treatment", "mean_control", "sd_treatment", "sd_control", "family"}


def simulation_config_from_dict(data: dict[str, Any]) -> SimulationConfig:
    """Build a validated `SimulationConfig` from a parsed JSON object."""
    allowed = {f.name for f in fields(SimulationConfig)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise InvalidParameter(f"Unknown config keys: {unknown}")

    pop_raw = data.get("population", {})
    if not isinstance(pop_raw, dict):
        raise InvalidParameter("Config 'population' must be a JSON object.")
    pop_unknown = sorted(set(pop_raw) - _POPULATION_KEYS)
    if pop_unknown:
        raise InvalidParameter(f"Unknown population keys: {pop_unknown}")

    kwargs = {k: v for k, v in data.items() if k != "population"}
    return SimulationConfig(population=PopulationSpec(**pop_raw), **kwargs)
