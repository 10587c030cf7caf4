"""Tests for Individual and Population."""

import math

import numpy as np
import pytest

from diffevo.core.constraints import Constraints
from diffevo.core.individual import Individual, Population


def test_new_individual_is_unevaluated():
    ind = Individual([1.0, 2.0])
    assert not ind.valid
    assert math.isnan(ind.cost)
    assert len(ind) == 2


def test_set_cost_and_invalidate():
    ind = Individual([1.0])
    ind.set_cost(3.5)
    assert ind.valid and ind.cost == 3.5

    ind.invalidate("boom")
    assert not ind.valid
    assert math.isnan(ind.cost)
    assert ind.error == "boom"


def test_copy_is_independent():
    ind = Individual([1.0, 2.0], cost=4.0, valid=True)
    clone = ind.copy()
    ind.genes[0] = 99.0
    ind.set_cost(-1.0)
    assert clone.genes[0] == 1.0
    assert clone.cost == 4.0


def test_random_population_size_and_width():
    constraints = Constraints.uniform(3, -1.0, 1.0)
    pop = Population.random(7, constraints, np.random.RandomState(0))
    assert len(pop) == 7
    assert pop.arguments_count == 3
    assert pop.genes().shape == (7, 3)


def test_setitem_rejects_gene_count_mismatch():
    pop = Population([Individual([0.0, 0.0]) for _ in range(4)])
    with pytest.raises(ValueError):
        pop[0] = Individual([0.0])


def test_mixed_gene_counts_rejected():
    with pytest.raises(ValueError):
        Population([Individual([0.0]), Individual([0.0, 1.0])])


def test_best_respects_direction_and_skips_invalid():
    pop = Population([
        Individual([0.0], cost=3.0, valid=True),
        Individual([1.0]),
        Individual([2.0], cost=1.0, valid=True),
        Individual([3.0], cost=5.0, valid=True),
    ])
    assert pop.best(minimize=True).cost == 1.0
    assert pop.best(minimize=False).cost == 5.0


def test_best_ties_keep_lowest_slot():
    first = Individual([0.0], cost=1.0, valid=True)
    second = Individual([1.0], cost=1.0, valid=True)
    pop = Population([first, second])
    assert pop.best(minimize=True) is first


def test_best_none_when_nothing_valid():
    pop = Population([Individual([0.0]) for _ in range(4)])
    assert pop.best(minimize=True) is None


def test_costs_are_nan_for_invalid():
    pop = Population([Individual([0.0], cost=2.0, valid=True), Individual([1.0])])
    costs = pop.costs()
    assert costs[0] == 2.0
    assert math.isnan(costs[1])
