"""
Objective function capability evaluated by the worker pool.
"""
from typing import Callable, Optional, Sequence, Tuple

import numpy as np


class ObjectiveFunction:
    """
    Named, arity-tagged mapping from a gene vector to a scalar cost.

    Implementations must be deterministic and safe to call from several
    threads at once; the worker pool calls them concurrently with no locking.

    Args:
        name: Display name
        func: Callable taking a 1-D numpy array and returning a number
        arity: Required number of genes, or None for any dimensionality
        domain: Optional default (min, max) search range per dimension
    """

    def __init__(
        self,
        name: str,
        func: Optional[Callable[[np.ndarray], float]] = None,
        arity: Optional[int] = None,
        domain: Optional[Tuple[float, float]] = None,
    ):
        self.name = name
        self._func = func
        self.arity = arity
        self.domain = domain

    def evaluate(self, genes: np.ndarray) -> float:
        """Override in subclasses that do not wrap a callable."""
        if self._func is None:
            raise NotImplementedError(f"Objective '{self.name}' has no evaluation function")
        return self._func(genes)

    def __call__(self, genes: Sequence[float]) -> float:
        return float(self.evaluate(np.asarray(genes, dtype=float)))

    def __repr__(self) -> str:
        arity = "any" if self.arity is None else self.arity
        return f"ObjectiveFunction(name={self.name!r}, arity={arity})"
