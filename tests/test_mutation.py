"""Tests for mutation strategies."""

import numpy as np
import pytest

from diffevo.core.constraints import Constraints
from diffevo.core.individual import Individual, Population
from diffevo.errors import ConfigurationError
from diffevo.strategies.mutation import (
    MUTATION_STRATEGIES,
    BestOneBin,
    RandOneBin,
    RandTwoBin,
    binomial_crossover,
    mutation_strategy,
    pick_distinct,
)


def _population(rows):
    return Population([Individual(row, cost=float(i), valid=True) for i, row in enumerate(rows)])


def test_pick_distinct_excludes_target_and_repeats():
    rng = np.random.RandomState(3)
    for target in range(5):
        for _ in range(50):
            picked = pick_distinct(5, target, 3, rng)
            assert target not in picked
            assert len(set(picked.tolist())) == 3


def test_pick_distinct_too_few_candidates():
    with pytest.raises(ConfigurationError):
        pick_distinct(3, 0, 3, np.random.RandomState(0))


def test_crossover_zero_takes_exactly_one_donor_gene():
    rng = np.random.RandomState(0)
    target = np.zeros(8)
    donor = np.ones(8)
    for _ in range(20):
        trial = binomial_crossover(target, donor, 0.0, rng)
        assert trial.sum() == 1.0


def test_crossover_one_takes_every_donor_gene():
    rng = np.random.RandomState(0)
    trial = binomial_crossover(np.zeros(5), np.arange(5.0), 1.0, rng)
    assert np.array_equal(trial, np.arange(5.0))


def test_rand_one_bin_donor_arithmetic():
    rows = [[float(i), float(10 * i)] for i in range(6)]
    pop = _population(rows)
    constraints = Constraints.uniform(2, -1000.0, 1000.0)
    strategy = RandOneBin(weight=0.5, crossover=1.0)

    r1, r2, r3 = pick_distinct(6, 2, 3, np.random.RandomState(11))
    expected = pop[r1].genes + 0.5 * (pop[r2].genes - pop[r3].genes)

    trial = strategy.mutate(pop, 2, constraints, np.random.RandomState(11), pop.best(True))
    assert np.allclose(trial.genes, expected)
    assert not trial.valid


def test_best_one_bin_uses_best_individual():
    rows = [[1.0], [2.0], [3.0], [4.0]]
    pop = _population(rows)
    constraints = Constraints.uniform(1, -100.0, 100.0)
    strategy = BestOneBin(weight=0.0, crossover=1.0)
    best = Individual([42.0], cost=-1.0, valid=True)
    trial = strategy.mutate(pop, 0, constraints, np.random.RandomState(0), best)
    assert trial.genes[0] == 42.0


@pytest.mark.parametrize("name", sorted(MUTATION_STRATEGIES))
def test_trials_always_within_bounds(name):
    constraints = Constraints.uniform(4, -1.0, 1.0)
    for seed in range(10):
        rng = np.random.RandomState(seed)
        pop = Population.random(8, constraints, rng)
        for i, ind in enumerate(pop):
            ind.set_cost(float(i))
        strategy = mutation_strategy(name, weight=1.0, crossover=0.7)
        for index in range(len(pop)):
            trial = strategy.mutate(pop, index, constraints, rng, pop.best(True))
            assert constraints.contains(trial.genes)
            assert len(trial) == 4


def test_mutate_does_not_touch_population():
    constraints = Constraints.uniform(3, -5.0, 5.0)
    rng = np.random.RandomState(5)
    pop = Population.random(6, constraints, rng)
    before = pop.genes()
    RandOneBin(0.8, 0.9).mutate(pop, 0, constraints, rng, pop[0])
    assert np.array_equal(pop.genes(), before)


def test_min_population_sizes():
    assert RandOneBin.min_population_size == 4
    assert RandTwoBin.min_population_size == 6


def test_unknown_strategy_name():
    with pytest.raises(ConfigurationError):
        mutation_strategy("rand7", 0.5, 0.5)


def test_strategy_lookup_is_case_insensitive():
    strategy = mutation_strategy(" Best1 ", 0.3, 0.4)
    assert isinstance(strategy, BestOneBin)
    assert strategy.weight == 0.3
    assert strategy.crossover == 0.4
