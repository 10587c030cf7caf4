"""
Configuration management for diffevo.
Handles packaged run defaults, environment settings and per-run strategy parameters.
"""
from copy import deepcopy
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from diffevo.errors import ConfigurationError

logger = logging.getLogger(__name__)


_RUN_DEFAULTS_FALLBACK: Dict[str, Any] = {
    "function": "sphere",
    "dimensions": 10,
    "population_size": 50,
    "weight": 0.8,
    "crossover": 0.9,
    "max_generations": 1000,
    "workers": "auto",
    "minimize": True,
    "mutation_strategy": "rand1",
    "seed": None,
}


def _as_bool(value: Any, default: bool) -> bool:
    """Coerce various JSON-like values to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    return bool(default)


def resolve_workers(value: Any) -> int:
    """Resolve a workers value (supports 'auto' = CPU count)."""
    auto_workers = max(1, os.cpu_count() or 1)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "auto":
            return auto_workers
        try:
            return max(1, int(lowered))
        except ValueError:
            return auto_workers
    if value is None:
        return auto_workers
    try:
        return max(1, int(value))
    except (TypeError, ValueError):
        return auto_workers


def _optional_int(value: Any) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _normalize_run_defaults(raw: Any) -> Dict[str, Any]:
    """Merge loaded JSON defaults with robust fallbacks and type coercion."""
    merged = deepcopy(_RUN_DEFAULTS_FALLBACK)
    if isinstance(raw, dict):
        merged.update(raw)

    merged["function"] = str(merged.get("function") or _RUN_DEFAULTS_FALLBACK["function"])
    merged["dimensions"] = int(merged.get("dimensions", _RUN_DEFAULTS_FALLBACK["dimensions"]))
    merged["population_size"] = int(
        merged.get("population_size", _RUN_DEFAULTS_FALLBACK["population_size"])
    )
    merged["weight"] = float(merged.get("weight", _RUN_DEFAULTS_FALLBACK["weight"]))
    merged["crossover"] = float(merged.get("crossover", _RUN_DEFAULTS_FALLBACK["crossover"]))
    merged["max_generations"] = int(
        merged.get("max_generations", _RUN_DEFAULTS_FALLBACK["max_generations"])
    )
    merged["workers"] = resolve_workers(merged.get("workers"))
    merged["minimize"] = _as_bool(merged.get("minimize"), _RUN_DEFAULTS_FALLBACK["minimize"])
    merged["mutation_strategy"] = str(
        merged.get("mutation_strategy") or _RUN_DEFAULTS_FALLBACK["mutation_strategy"]
    ).lower()
    merged["seed"] = _optional_int(merged.get("seed"))

    return merged


def _load_packaged_run_defaults() -> Dict[str, Any]:
    """Load packaged run defaults JSON with fallback behavior."""
    raw_defaults: Any = {}
    try:
        resource = files("diffevo.defaults").joinpath("run_defaults.json")
        raw_defaults = json.loads(resource.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load packaged run defaults, using built-in values: {e}")
        raw_defaults = {}
    return _normalize_run_defaults(raw_defaults)


_RUN_DEFAULTS = _load_packaged_run_defaults()


def get_run_defaults() -> Dict[str, Any]:
    """Return a copy of normalized run defaults shared by the CLI and the library."""
    return deepcopy(_RUN_DEFAULTS)


class DiffEvoSettings(BaseSettings):
    """Environment-overridable defaults (DIFFEVO_* variables or a .env file)."""

    model_config = SettingsConfigDict(
        env_prefix="DIFFEVO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    function: str = _RUN_DEFAULTS["function"]
    dimensions: int = _RUN_DEFAULTS["dimensions"]
    population_size: int = _RUN_DEFAULTS["population_size"]
    weight: float = _RUN_DEFAULTS["weight"]
    crossover: float = _RUN_DEFAULTS["crossover"]
    max_generations: int = _RUN_DEFAULTS["max_generations"]
    workers: int = _RUN_DEFAULTS["workers"]
    minimize: bool = _RUN_DEFAULTS["minimize"]
    mutation_strategy: str = _RUN_DEFAULTS["mutation_strategy"]
    seed: Optional[int] = _RUN_DEFAULTS["seed"]

    # Logging
    log_dir: Optional[Path] = None
    log_level: str = "INFO"

    @field_validator("workers", mode="before")
    @classmethod
    def _parse_workers(cls, value: Any) -> int:
        return resolve_workers(value)


_settings_instance: Optional[DiffEvoSettings] = None


def get_settings() -> DiffEvoSettings:
    """Get or create the global settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = DiffEvoSettings()
    return _settings_instance


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "configuration"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


class StrategyConfiguration(BaseModel):
    """
    Immutable scalars for one run.

    Raises ConfigurationError (not pydantic's ValidationError) on invalid values.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    arguments_count: int = Field(gt=0)
    population_size: int = Field(ge=4)
    weight: float = Field(ge=0.0, le=1.0, allow_inf_nan=False)
    crossover: float = Field(ge=0.0, le=1.0, allow_inf_nan=False)
    minimize: bool = True
    workers: int = Field(default=1, ge=1)
    max_generations: int = Field(default=_RUN_DEFAULTS["max_generations"], ge=0)
    seed: Optional[int] = None

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {_format_validation_error(e)}") from e

    @classmethod
    def from_settings(cls, settings: Optional[DiffEvoSettings] = None, **overrides: Any) -> "StrategyConfiguration":
        """Build a configuration from settings defaults, with explicit overrides winning."""
        settings = settings or get_settings()
        values = {
            "arguments_count": settings.dimensions,
            "population_size": settings.population_size,
            "weight": settings.weight,
            "crossover": settings.crossover,
            "minimize": settings.minimize,
            "workers": settings.workers,
            "max_generations": settings.max_generations,
            "seed": settings.seed,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
