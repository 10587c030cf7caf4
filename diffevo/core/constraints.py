"""
Per-dimension bounds used to seed and repair gene vectors.
"""
import math
from dataclasses import dataclass
from typing import Iterator, List, Sequence

import numpy as np

from diffevo.errors import ConfigurationError


@dataclass(frozen=True)
class Constraint:
    """Closed [min, max] range for one gene; integer ranges round after repair."""
    min: float
    max: float
    integer: bool = False

    def __post_init__(self):
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise ConfigurationError(f"Constraint bounds must be finite, got [{self.min}, {self.max}]")
        if self.min > self.max:
            raise ConfigurationError(f"Constraint min {self.min} is greater than max {self.max}")
        if self.integer and math.ceil(self.min) > math.floor(self.max):
            raise ConfigurationError(
                f"Integer constraint [{self.min}, {self.max}] contains no integer value"
            )


class Constraints:
    """One Constraint per gene dimension."""

    def __init__(self, constraints: Sequence[Constraint]):
        self._constraints: List[Constraint] = list(constraints)
        if not self._constraints:
            raise ConfigurationError("At least one constraint is required")
        self.lower = np.array([c.min for c in self._constraints], dtype=float)
        self.upper = np.array([c.max for c in self._constraints], dtype=float)
        self._integer_mask = np.array([c.integer for c in self._constraints], dtype=bool)
        # Integer dimensions clip to the integers inside the range.
        self._lower_clip = np.where(self._integer_mask, np.ceil(self.lower), self.lower)
        self._upper_clip = np.where(self._integer_mask, np.floor(self.upper), self.upper)

    @classmethod
    def uniform(cls, count: int, min_value: float, max_value: float, integer: bool = False) -> "Constraints":
        """Same bounds on every one of `count` dimensions."""
        if count <= 0:
            raise ConfigurationError(f"Constraint count must be positive, got {count}")
        return cls([Constraint(min_value, max_value, integer) for _ in range(count)])

    def __len__(self) -> int:
        return len(self._constraints)

    def __iter__(self) -> Iterator[Constraint]:
        return iter(self._constraints)

    def __getitem__(self, index: int) -> Constraint:
        return self._constraints[index]

    def __repr__(self) -> str:
        return f"Constraints({self._constraints!r})"

    def random_genes(self, rng: np.random.RandomState) -> np.ndarray:
        """Draw one gene vector uniformly within bounds."""
        genes = rng.uniform(self.lower, self.upper)
        if self._integer_mask.any():
            genes = self.repair(genes)
        return genes

    def repair(self, genes: np.ndarray) -> np.ndarray:
        """Clip out-of-range genes to their bound; round integer dimensions."""
        repaired = np.asarray(genes, dtype=float).copy()
        if self._integer_mask.any():
            repaired[self._integer_mask] = np.round(repaired[self._integer_mask])
        return np.clip(repaired, self._lower_clip, self._upper_clip)

    def contains(self, genes: np.ndarray) -> bool:
        """True when every gene lies inside its [min, max] range."""
        genes = np.asarray(genes, dtype=float)
        if genes.shape != self.lower.shape:
            return False
        return bool(np.all(genes >= self.lower) and np.all(genes <= self.upper))
