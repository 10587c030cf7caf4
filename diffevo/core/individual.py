"""
Candidate solutions and the fixed-size population that holds them.
"""
import math
from typing import Iterator, List, Optional, Sequence

import numpy as np

from diffevo.core.constraints import Constraints
from diffevo.strategies.selection import is_better


class Individual:
    """A gene vector plus its evaluated cost."""

    __slots__ = ("genes", "cost", "valid", "error")

    def __init__(self, genes: Sequence[float], cost: float = math.nan, valid: bool = False):
        self.genes = np.array(genes, dtype=float)
        self.cost = float(cost)
        self.valid = bool(valid)
        self.error: Optional[str] = None

    def __len__(self) -> int:
        return len(self.genes)

    def __repr__(self) -> str:
        state = f"{self.cost:.6g}" if self.valid else "invalid"
        return f"Individual(cost={state}, genes={np.array2string(self.genes, precision=4)})"

    def set_cost(self, cost: float):
        """Store an evaluated cost and mark the individual valid."""
        self.cost = float(cost)
        self.valid = True
        self.error = None

    def invalidate(self, error: Optional[str] = None):
        """Mark the cost as unusable (failed or not yet evaluated)."""
        self.cost = math.nan
        self.valid = False
        self.error = error

    @property
    def comparable_cost(self) -> float:
        """Cost used for ranking; NaN for invalid individuals."""
        return self.cost if self.valid else math.nan

    def copy(self) -> "Individual":
        """Independent snapshot; later changes to self never affect the copy."""
        clone = Individual(self.genes.copy(), self.cost, self.valid)
        clone.error = self.error
        return clone


class Population:
    """
    Fixed-size, order-stable sequence of individuals.

    Slots may be replaced but the population never grows or shrinks.
    """

    def __init__(self, individuals: Sequence[Individual]):
        self._individuals: List[Individual] = list(individuals)
        if self._individuals:
            width = len(self._individuals[0])
            if any(len(ind) != width for ind in self._individuals):
                raise ValueError("All individuals must have the same number of genes")

    @classmethod
    def random(cls, size: int, constraints: Constraints, rng: np.random.RandomState) -> "Population":
        """Seed a population uniformly within the constraint bounds."""
        return cls([Individual(constraints.random_genes(rng)) for _ in range(size)])

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(self._individuals)

    def __getitem__(self, index: int) -> Individual:
        return self._individuals[index]

    def __setitem__(self, index: int, individual: Individual):
        if len(individual) != len(self._individuals[index]):
            raise ValueError(
                f"Gene count mismatch: slot {index} holds {len(self._individuals[index])} genes, "
                f"got {len(individual)}"
            )
        self._individuals[index] = individual

    @property
    def arguments_count(self) -> int:
        return len(self._individuals[0]) if self._individuals else 0

    def costs(self) -> np.ndarray:
        """Costs by slot, NaN for invalid individuals."""
        return np.array([ind.comparable_cost for ind in self._individuals], dtype=float)

    def genes(self) -> np.ndarray:
        """(size, arguments_count) copy of all gene vectors."""
        return np.array([ind.genes for ind in self._individuals], dtype=float)

    def best(self, minimize: bool) -> Optional[Individual]:
        """Best valid individual, or None if nothing is valid. Ties keep the lowest slot."""
        best = None
        for ind in self._individuals:
            if not ind.valid:
                continue
            if best is None or is_better(ind, best, minimize):
                best = ind
        return best
