"""Tests for run defaults, settings and StrategyConfiguration."""

import os

import pytest
from pydantic import ValidationError

from diffevo import config as config_module
from diffevo.config import (
    DiffEvoSettings,
    StrategyConfiguration,
    get_run_defaults,
    resolve_workers,
)
from diffevo.errors import ConfigurationError


def _valid(**overrides):
    values = dict(arguments_count=3, population_size=10, weight=0.5, crossover=0.9)
    values.update(overrides)
    return values


def test_valid_configuration():
    cfg = StrategyConfiguration(**_valid())
    assert cfg.arguments_count == 3
    assert cfg.minimize is True
    assert cfg.workers == 1
    assert cfg.seed is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"population_size": 3},
        {"arguments_count": 0},
        {"weight": 1.5},
        {"weight": -0.1},
        {"crossover": 2.0},
        {"weight": float("nan")},
        {"workers": 0},
        {"max_generations": -1},
        {"unknown_field": 1},
    ],
)
def test_invalid_configuration_raises_configuration_error(overrides):
    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        StrategyConfiguration(**_valid(**overrides))


def test_boundary_values_accepted():
    cfg = StrategyConfiguration(**_valid(population_size=4, weight=0.0, crossover=1.0, max_generations=0))
    assert cfg.population_size == 4


def test_configuration_is_frozen():
    cfg = StrategyConfiguration(**_valid())
    with pytest.raises(ValidationError):
        cfg.weight = 0.1


def test_run_defaults_are_normalized_copies():
    defaults = get_run_defaults()
    assert set(defaults) >= {
        "function",
        "dimensions",
        "population_size",
        "weight",
        "crossover",
        "max_generations",
        "workers",
        "minimize",
        "mutation_strategy",
        "seed",
    }
    assert isinstance(defaults["workers"], int) and defaults["workers"] >= 1
    defaults["population_size"] = -1
    assert get_run_defaults()["population_size"] != -1


def test_normalize_run_defaults_fills_gaps():
    merged = config_module._normalize_run_defaults({"weight": "0.25", "minimize": "no", "seed": ""})
    assert merged["weight"] == 0.25
    assert merged["minimize"] is False
    assert merged["seed"] is None
    assert merged["function"] == "sphere"


def test_normalize_run_defaults_ignores_non_dict():
    merged = config_module._normalize_run_defaults(["not", "a", "dict"])
    assert merged["population_size"] == config_module._RUN_DEFAULTS_FALLBACK["population_size"]


def test_resolve_workers():
    cpu = max(1, os.cpu_count() or 1)
    assert resolve_workers("auto") == cpu
    assert resolve_workers(None) == cpu
    assert resolve_workers("3") == 3
    assert resolve_workers(0) == 1
    assert resolve_workers("lots") == cpu


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DIFFEVO_POPULATION_SIZE", "77")
    monkeypatch.setenv("DIFFEVO_WORKERS", "2")
    monkeypatch.setenv("DIFFEVO_MINIMIZE", "false")
    settings = DiffEvoSettings()
    assert settings.population_size == 77
    assert settings.workers == 2
    assert settings.minimize is False


def test_from_settings_overrides_win(monkeypatch):
    monkeypatch.setenv("DIFFEVO_DIMENSIONS", "4")
    monkeypatch.setenv("DIFFEVO_WEIGHT", "0.6")
    settings = DiffEvoSettings()

    cfg = StrategyConfiguration.from_settings(settings, weight=0.3, seed=None)
    assert cfg.arguments_count == 4
    assert cfg.weight == 0.3
    assert cfg.crossover == settings.crossover


def test_from_settings_rejects_bad_environment(monkeypatch):
    monkeypatch.setenv("DIFFEVO_POPULATION_SIZE", "2")
    with pytest.raises(ConfigurationError):
        StrategyConfiguration.from_settings(DiffEvoSettings())
