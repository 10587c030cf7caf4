"""Tests for the objective function catalog."""

import math

import numpy as np
import pytest

from diffevo.core.objective import ObjectiveFunction
from diffevo.errors import ConfigurationError
from diffevo.functions import available_functions, get_function


@pytest.mark.parametrize(
    "name, point, expected",
    [
        ("sphere", [0.0, 0.0, 0.0], 0.0),
        ("rosenbrock", [1.0, 1.0, 1.0], 0.0),
        ("step", [0.2, -0.4], 0.0),
        ("rastrigin", [0.0, 0.0], 0.0),
        ("griewank", [0.0, 0.0], 0.0),
        ("ackley", [0.0, 0.0], 0.0),
        ("schwefel", [420.9687, 420.9687], 0.0),
        ("branin", [math.pi, 2.275], 0.397887),
        ("goldstein_price", [0.0, -1.0], 3.0),
        ("six_hump_camel", [0.0898, -0.7126], -1.0316),
        ("easom", [math.pi, math.pi], -1.0),
    ],
)
def test_known_optima(name, point, expected):
    assert get_function(name)(point) == pytest.approx(expected, abs=1e-3)


def test_sphere_value():
    assert get_function("sphere")([1.0, 2.0]) == 5.0


def test_lookup_is_case_insensitive():
    assert get_function("  Rastrigin ").name == "rastrigin"


def test_unknown_function():
    with pytest.raises(ConfigurationError, match="Unknown objective function"):
        get_function("not_a_function")


def test_every_function_has_domain():
    for name in available_functions():
        objective = get_function(name)
        lower, upper = objective.domain
        assert lower < upper
        dims = objective.arity or 3
        midpoint = np.full(dims, (lower + upper) / 2.0)
        assert math.isfinite(objective(midpoint))


def test_fixed_arity_functions():
    assert get_function("branin").arity == 2
    assert get_function("sphere").arity is None


def test_objective_without_callable():
    with pytest.raises(NotImplementedError):
        ObjectiveFunction("empty")([1.0])


def test_objective_subclass():
    class Linear(ObjectiveFunction):
        def evaluate(self, genes):
            return genes.sum() * 2

    assert Linear("linear")([1, 2]) == 6.0
