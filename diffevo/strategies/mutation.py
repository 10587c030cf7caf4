"""
Mutation strategies: build one trial individual for a population slot.

Every strategy computes a donor vector, applies binomial crossover against the
target slot's genes, and repairs the result into the constraint bounds. Only
the donor arithmetic differs between variants:

- rand1:       r1 + F * (r2 - r3)
- best1:       best + F * (r1 - r2)
- randtobest1: target + F * (best - target) + F * (r1 - r2)
- best2:       best + F * (r1 + r2 - r3 - r4)
- rand2:       r1 + F * (r2 + r3 - r4 - r5)

All random draws come from the engine's RandomState, so a seeded run produces
the same trials no matter how many worker threads evaluate them.
"""
from abc import ABC, abstractmethod
from typing import Dict, Type

import numpy as np

from diffevo.core.constraints import Constraints
from diffevo.core.individual import Individual, Population
from diffevo.errors import ConfigurationError


def pick_distinct(population_size: int, exclude: int, count: int, rng: np.random.RandomState) -> np.ndarray:
    """Pick `count` distinct indices uniformly, none equal to `exclude`."""
    candidates = np.delete(np.arange(population_size), exclude)
    if count > len(candidates):
        raise ConfigurationError(
            f"Cannot pick {count} distinct donors from a population of {population_size}"
        )
    return rng.choice(candidates, size=count, replace=False)


def binomial_crossover(
    target: np.ndarray,
    donor: np.ndarray,
    crossover: float,
    rng: np.random.RandomState,
) -> np.ndarray:
    """
    Take each gene from the donor with probability `crossover`.

    One uniformly drawn dimension always comes from the donor, so the trial
    never equals the target.
    """
    size = len(target)
    forced = rng.randint(size)
    mask = rng.random_sample(size) < crossover
    mask[forced] = True
    return np.where(mask, donor, target)


class MutationStrategy(ABC):
    """Base for DE/x/y/bin variants."""

    name = "base"
    # Target slot plus the distinct donors the variant needs.
    min_population_size = 4

    def __init__(self, weight: float, crossover: float):
        self.weight = float(weight)
        self.crossover = float(crossover)

    def mutate(
        self,
        population: Population,
        index: int,
        constraints: Constraints,
        rng: np.random.RandomState,
        best: Individual,
    ) -> Individual:
        """Return a fresh, unevaluated trial for slot `index`."""
        target = population[index].genes
        donor = self._donor(population, index, rng, best)
        trial = binomial_crossover(target, donor, self.crossover, rng)
        return Individual(constraints.repair(trial))

    @abstractmethod
    def _donor(
        self,
        population: Population,
        index: int,
        rng: np.random.RandomState,
        best: Individual,
    ) -> np.ndarray:
        """Compute the donor gene vector."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(weight={self.weight}, crossover={self.crossover})"


class RandOneBin(MutationStrategy):
    """DE/rand/1/bin, the classic default."""

    name = "rand1"
    min_population_size = 4

    def _donor(self, population, index, rng, best):
        r1, r2, r3 = pick_distinct(len(population), index, 3, rng)
        return population[r1].genes + self.weight * (population[r2].genes - population[r3].genes)


class BestOneBin(MutationStrategy):
    name = "best1"
    min_population_size = 3

    def _donor(self, population, index, rng, best):
        r1, r2 = pick_distinct(len(population), index, 2, rng)
        return best.genes + self.weight * (population[r1].genes - population[r2].genes)


class RandToBestOneBin(MutationStrategy):
    name = "randtobest1"
    min_population_size = 3

    def _donor(self, population, index, rng, best):
        r1, r2 = pick_distinct(len(population), index, 2, rng)
        target = population[index].genes
        return (
            target
            + self.weight * (best.genes - target)
            + self.weight * (population[r1].genes - population[r2].genes)
        )


class BestTwoBin(MutationStrategy):
    name = "best2"
    min_population_size = 5

    def _donor(self, population, index, rng, best):
        r1, r2, r3, r4 = pick_distinct(len(population), index, 4, rng)
        diff = population[r1].genes + population[r2].genes - population[r3].genes - population[r4].genes
        return best.genes + self.weight * diff


class RandTwoBin(MutationStrategy):
    name = "rand2"
    min_population_size = 6

    def _donor(self, population, index, rng, best):
        r1, r2, r3, r4, r5 = pick_distinct(len(population), index, 5, rng)
        diff = population[r2].genes + population[r3].genes - population[r4].genes - population[r5].genes
        return population[r1].genes + self.weight * diff


MUTATION_STRATEGIES: Dict[str, Type[MutationStrategy]] = {
    cls.name: cls for cls in (RandOneBin, BestOneBin, RandToBestOneBin, BestTwoBin, RandTwoBin)
}


def mutation_strategy(name: str, weight: float, crossover: float) -> MutationStrategy:
    """Build a mutation strategy by name (rand1, best1, randtobest1, best2, rand2)."""
    key = str(name).strip().lower()
    if key not in MUTATION_STRATEGIES:
        raise ConfigurationError(
            f"Unknown mutation strategy '{name}'; choose from {', '.join(MUTATION_STRATEGIES)}"
        )
    return MUTATION_STRATEGIES[key](weight, crossover)
