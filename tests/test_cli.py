from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from fprsim import cli
from fprsim.core.types import SimulationResult

ROOT = Path(__file__).resolve().parents[1]


def _kv_lines(text: str) -> dict[str, str]:
    out = {}
    for line in text.splitlines():
        if "=" in line:
            key, _, value = line.partition("=")
            out[key.strip()] = value.strip()
    return out


def test_simulate_prints_rate_and_interval(capsys):
    rc = cli.main(
        ["simulate", "--n-participants", "10", "--n-trials", "40", "--alpha", "0.05", "--seed", "3"]
    )
    assert rc == 0
    out = _kv_lines(capsys.readouterr().out)
    assert out["n_trials"] == "40"
    assert out["n_participants"] == "10"
    assert 0.0 <= float(out["empirical_rate"]) <= 1.0
    assert out["ci95"].startswith("[")


def test_simulate_flags_override_config_file(capsys):
    rc = cli.main(
        [
            "simulate",
            "--config",
            str(ROOT / "configs" / "null_n36.json"),
            "--n-trials",
            "25",
            "--mean-treatment",
            "-0.5",
        ]
    )
    assert rc == 0
    out = _kv_lines(capsys.readouterr().out)
    assert out["n_participants"] == "36"
    assert out["n_trials"] == "25"
    assert float(out["effect"]) == -0.5


def test_invalid_parameters_exit_with_code_2(caplog):
    caplog.set_level(logging.ERROR)
    rc = cli.main(["simulate", "--n-trials", "10", "--alpha", "1.0"])
    assert rc == 2
    assert "InvalidParameter" in caplog.text


def test_degenerate_sample_exit_with_code_2(caplog):
    caplog.set_level(logging.ERROR)
    rc = cli.main(["simulate", "--n-trials", "5", "--n-participants", "1"])
    assert rc == 2
    assert "DegenerateSample" in caplog.text


def test_family_wise_table_output(tmp_path, capsys):
    out_csv = tmp_path / "fw" / "table.csv"
    rc = cli.main(["family-wise", "--alpha", "0.05", "--k", "1", "2", "3", "--out", str(out_csv)])
    assert rc == 0
    assert "0.0975" in capsys.readouterr().out
    df = pd.read_csv(out_csv)
    assert df["k"].tolist() == [1, 2, 3]


def test_family_sim_reports_both_rates(capsys):
    rc = cli.main(
        ["family-sim", "--n-tests", "2", "--n-trials", "30", "--n-participants", "8", "--seed", "1"]
    )
    assert rc == 0
    out = _kv_lines(capsys.readouterr().out)
    assert out["n_tests"] == "2"
    assert float(out["analytic_family_wise_rate"]) == 0.0975


def test_power_sweep_writes_csv(tmp_path):
    out_csv = tmp_path / "sweep.csv"
    log_file = tmp_path / "logs" / "sweep.log"
    rc = cli.main(
        [
            "power-sweep",
            "--mean-treatment",
            "1.0",
            "--n-participants",
            "5",
            "10",
            "--n-trials",
            "30",
            "--out",
            str(out_csv),
            "--log-file",
            str(log_file),
        ]
    )
    assert rc == 0
    df = pd.read_csv(out_csv)
    assert df["n_participants"].tolist() == [5, 10]
    assert "Simulation done" in log_file.read_text(encoding="utf-8")


def test_simulate_prints_zero_rate_as_number(monkeypatch, capsys):
    def _no_hits(*_args, **_kwargs):
        return SimulationResult(
            n_trials=3,
            alpha=0.05,
            n_participants=10,
            empirical_rate=0.0,
            n_significant=0,
            seed=0,
            n_requested=3,
        )

    monkeypatch.setattr(cli, "run_simulation", _no_hits)
    rc = cli.main(["simulate", "--n-participants", "10", "--n-trials", "3"])
    assert rc == 0
    out = _kv_lines(capsys.readouterr().out)
    assert out["empirical_rate"] == "0.0000"
    assert float(out["empirical_rate"]) == 0.0


def test_main_detaches_log_handlers(tmp_path):
    log_file = tmp_path / "run.log"
    rc = cli.main(
        ["simulate", "--n-trials", "5", "--n-participants", "5", "--log-file", str(log_file)]
    )
    assert rc == 0
    assert logging.getLogger("fprsim").handlers == []
    assert "Simulation done" in log_file.read_text(encoding="utf-8")

    assert cli.main(["simulate", "--n-trials", "5", "--alpha", "2.0"]) == 2
    assert logging.getLogger("fprsim").handlers == []
