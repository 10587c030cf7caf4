"""Tests for the report generator."""

import json
import math

import numpy as np

from diffevo.config import StrategyConfiguration
from diffevo.core.constraints import Constraints
from diffevo.core.engine import DifferentialEvolution, EngineState
from diffevo.core.objective import ObjectiveFunction
from diffevo.export.report import ReportGenerator
from diffevo.functions import get_function


def _result(objective, generations=5):
    config = StrategyConfiguration(
        arguments_count=2,
        population_size=8,
        weight=0.7,
        crossover=0.8,
        max_generations=generations,
        seed=9,
    )
    engine = DifferentialEvolution(config, Constraints.uniform(2, -3.0, 3.0), objective)
    return engine.run()


def test_report_contains_summary_and_plot(tmp_path):
    result = _result(get_function("sphere"))
    summary_path = ReportGenerator(tmp_path).generate(result, metadata={"note": "unit"})

    summary = json.loads(summary_path.read_text())
    assert summary["state"] == EngineState.TERMINATED.value
    assert summary["best_cost"] == result.best_cost
    assert len(summary["best_genes"]) == 2
    assert summary["convergence_plot"] == "plots/convergence.png"
    assert summary["metadata"] == {"note": "unit"}
    assert [row["gen"] for row in summary["history"]] == list(range(6))
    assert (tmp_path / "plots" / "convergence.png").exists()


def test_report_for_failed_run(tmp_path):
    def broken(x):
        raise RuntimeError("offline")

    result = _result(ObjectiveFunction("broken", broken))
    summary = json.loads(ReportGenerator(tmp_path).generate(result).read_text())

    assert summary["state"] == "failed"
    assert "offline" in summary["error"]
    assert summary["best_cost"] is None
    assert summary["best_genes"] is None
    assert summary["convergence_plot"] is None
    assert summary["history"] == []


def test_make_serializable_handles_numpy_and_non_finite(tmp_path):
    generator = ReportGenerator(tmp_path)
    data = {
        "array": np.array([1.0, math.inf]),
        "scalar": np.float64(2.5),
        "integer": np.int64(4),
        "nan": math.nan,
        "path": tmp_path,
        "tuple": (1, 2),
    }
    converted = generator._make_serializable(data)
    assert converted == {
        "array": [1.0, None],
        "scalar": 2.5,
        "integer": 4,
        "nan": None,
        "path": str(tmp_path),
        "tuple": [1, 2],
    }
    json.dumps(converted)
