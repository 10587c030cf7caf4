"""
diffevo: Parallel differential evolution for bounded black-box optimization.

diffevo minimizes or maximizes an objective function over a bounded real-valued
search space, evaluating each generation's candidates across a fixed pool of
worker threads while keeping results deterministic for a given seed.
"""

__version__ = "0.1.0"
__author__ = "diffevo developers"

VERSION_TEXT = (
    f"diffevo {__version__}\n"
    "Parallel differential evolution for bounded black-box optimization.\n"
)

from diffevo.errors import (  # noqa: E402
    BatchFailure,
    ConfigurationError,
    DiffEvoError,
    EvaluationError,
)
from diffevo.config import StrategyConfiguration  # noqa: E402
from diffevo.core.constraints import Constraint, Constraints  # noqa: E402
from diffevo.core.individual import Individual, Population  # noqa: E402
from diffevo.core.objective import ObjectiveFunction  # noqa: E402
from diffevo.core.processors import Processors  # noqa: E402
from diffevo.core.engine import (  # noqa: E402
    DifferentialEvolution,
    EngineState,
    OptimizationResult,
)

__all__ = [
    "BatchFailure",
    "ConfigurationError",
    "Constraint",
    "Constraints",
    "DiffEvoError",
    "DifferentialEvolution",
    "EngineState",
    "EvaluationError",
    "Individual",
    "ObjectiveFunction",
    "OptimizationResult",
    "Population",
    "Processors",
    "StrategyConfiguration",
]
