"""
Catalog of named test objective functions.

Each entry is an ObjectiveFunction with an arity (None = any dimensionality)
and a conventional search domain used as the default bounds by the CLI.
"""
import math
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from diffevo.core.objective import ObjectiveFunction
from diffevo.errors import ConfigurationError

_REGISTRY: Dict[str, ObjectiveFunction] = {}


def register(name: str, domain: Tuple[float, float], arity: Optional[int] = None):
    """Decorator adding a plain numpy function to the catalog."""

    def decorator(func: Callable[[np.ndarray], float]):
        _REGISTRY[name] = ObjectiveFunction(name, func, arity=arity, domain=domain)
        return func

    return decorator


def get_function(name: str) -> ObjectiveFunction:
    """Look up a catalog function by name (case-insensitive)."""
    key = str(name).strip().lower()
    if key not in _REGISTRY:
        raise ConfigurationError(
            f"Unknown objective function '{name}'; available: {', '.join(available_functions())}"
        )
    return _REGISTRY[key]


def available_functions() -> List[str]:
    return sorted(_REGISTRY)


@register("sphere", domain=(-5.12, 5.12))
def sphere(x: np.ndarray) -> float:
    """De Jong F1; minimum 0 at the origin."""
    return float(np.sum(x * x))


@register("rosenbrock", domain=(-2.048, 2.048))
def rosenbrock(x: np.ndarray) -> float:
    """De Jong F2 generalized; minimum 0 at (1, ..., 1)."""
    if len(x) < 2:
        return float((1.0 - x[0]) ** 2)
    return float(np.sum(100.0 * (x[1:] - x[:-1] ** 2) ** 2 + (1.0 - x[:-1]) ** 2))


@register("step", domain=(-5.12, 5.12))
def step(x: np.ndarray) -> float:
    """De Jong F3; plateau-shaped, minimum 0 on [-0.5, 0.5)^n."""
    return float(np.sum(np.floor(x + 0.5) ** 2))


@register("rastrigin", domain=(-5.12, 5.12))
def rastrigin(x: np.ndarray) -> float:
    """Highly multimodal; minimum 0 at the origin."""
    return float(10.0 * len(x) + np.sum(x * x - 10.0 * np.cos(2.0 * math.pi * x)))


@register("schwefel", domain=(-500.0, 500.0))
def schwefel(x: np.ndarray) -> float:
    """Deceptive; minimum ~0 at (420.9687, ..., 420.9687)."""
    return float(418.9828872724339 * len(x) - np.sum(x * np.sin(np.sqrt(np.abs(x)))))


@register("griewank", domain=(-600.0, 600.0))
def griewank(x: np.ndarray) -> float:
    """Minimum 0 at the origin."""
    idx = np.arange(1, len(x) + 1, dtype=float)
    return float(1.0 + np.sum(x * x) / 4000.0 - np.prod(np.cos(x / np.sqrt(idx))))


@register("ackley", domain=(-32.768, 32.768))
def ackley(x: np.ndarray) -> float:
    """Minimum 0 at the origin."""
    n = len(x)
    term1 = -20.0 * np.exp(-0.2 * np.sqrt(np.sum(x * x) / n))
    term2 = -np.exp(np.sum(np.cos(2.0 * math.pi * x)) / n)
    return float(term1 + term2 + 20.0 + math.e)


@register("michalewicz", domain=(0.0, math.pi))
def michalewicz(x: np.ndarray, m: int = 10) -> float:
    """Steep ridges; minimum -1.8013 for n=2."""
    idx = np.arange(1, len(x) + 1, dtype=float)
    return float(-np.sum(np.sin(x) * np.sin(idx * x * x / math.pi) ** (2 * m)))


@register("branin", domain=(-5.0, 15.0), arity=2)
def branin(x: np.ndarray) -> float:
    """Three global minima of 0.397887."""
    x1, x2 = x
    a, b, c = 1.0, 5.1 / (4.0 * math.pi ** 2), 5.0 / math.pi
    r, s, t = 6.0, 10.0, 1.0 / (8.0 * math.pi)
    return float(a * (x2 - b * x1 ** 2 + c * x1 - r) ** 2 + s * (1.0 - t) * math.cos(x1) + s)


@register("goldstein_price", domain=(-2.0, 2.0), arity=2)
def goldstein_price(x: np.ndarray) -> float:
    """Minimum 3 at (0, -1)."""
    x1, x2 = x
    part1 = 1.0 + (x1 + x2 + 1.0) ** 2 * (
        19.0 - 14.0 * x1 + 3.0 * x1 ** 2 - 14.0 * x2 + 6.0 * x1 * x2 + 3.0 * x2 ** 2
    )
    part2 = 30.0 + (2.0 * x1 - 3.0 * x2) ** 2 * (
        18.0 - 32.0 * x1 + 12.0 * x1 ** 2 + 48.0 * x2 - 36.0 * x1 * x2 + 27.0 * x2 ** 2
    )
    return float(part1 * part2)


@register("six_hump_camel", domain=(-3.0, 3.0), arity=2)
def six_hump_camel(x: np.ndarray) -> float:
    """Minimum -1.0316 at (0.0898, -0.7126) and (-0.0898, 0.7126)."""
    x1, x2 = x
    return float(
        (4.0 - 2.1 * x1 ** 2 + x1 ** 4 / 3.0) * x1 ** 2 + x1 * x2 + (-4.0 + 4.0 * x2 ** 2) * x2 ** 2
    )


@register("easom", domain=(-100.0, 100.0), arity=2)
def easom(x: np.ndarray) -> float:
    """Minimum -1 at (pi, pi)."""
    x1, x2 = x
    return float(-math.cos(x1) * math.cos(x2) * math.exp(-((x1 - math.pi) ** 2 + (x2 - math.pi) ** 2)))
