"""
Termination strategies, consulted once after the initial evaluation and once
after every completed generation.

A policy sees the number of completed generations and a copy of the best
individual so far; it never sees the population.
"""
import math
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

from diffevo.core.individual import Individual
from diffevo.errors import ConfigurationError


class TerminationStrategy(ABC):
    """Stop/continue predicate for the generation loop."""

    @abstractmethod
    def should_stop(self, generation: int, best: Optional[Individual]) -> bool:
        """Return True to end the run after `generation` completed generations."""

    def reset(self):
        """Forget state from a previous run. Stateless policies need nothing."""


class MaxGenerationTermination(TerminationStrategy):
    """Stop once `max_generations` generations have completed."""

    def __init__(self, max_generations: int):
        if int(max_generations) < 0:
            raise ConfigurationError(f"max_generations must be >= 0, got {max_generations}")
        self.max_generations = int(max_generations)

    def should_stop(self, generation, best):
        return generation >= self.max_generations

    def __repr__(self) -> str:
        return f"MaxGenerationTermination({self.max_generations})"


class PlateauTermination(TerminationStrategy):
    """
    Stop after `patience` consecutive checks without an improvement larger than `epsilon`.

    The first check only records a baseline.
    """

    def __init__(self, patience: int, epsilon: float = 0.0, minimize: bool = True):
        if int(patience) < 1:
            raise ConfigurationError(f"patience must be >= 1, got {patience}")
        if epsilon < 0:
            raise ConfigurationError(f"epsilon must be >= 0, got {epsilon}")
        self.patience = int(patience)
        self.epsilon = float(epsilon)
        self.minimize = minimize
        self._reference: Optional[float] = None
        self._stalled = 0

    def reset(self):
        self._reference = None
        self._stalled = 0

    def should_stop(self, generation, best):
        cost = best.cost if best is not None and best.valid else math.nan
        if math.isnan(cost):
            return False
        if self._reference is None:
            self._reference = cost
            return False

        gain = self._reference - cost if self.minimize else cost - self._reference
        if gain > self.epsilon:
            self._reference = cost
            self._stalled = 0
        else:
            self._stalled += 1
        return self._stalled >= self.patience


class TimeBudgetTermination(TerminationStrategy):
    """Stop once `seconds` of wall-clock time have passed since the first check."""

    def __init__(self, seconds: float, clock: Callable[[], float] = time.monotonic):
        if seconds <= 0:
            raise ConfigurationError(f"Time budget must be positive, got {seconds}")
        self.seconds = float(seconds)
        self._clock = clock
        self._started: Optional[float] = None

    def reset(self):
        self._started = None

    def should_stop(self, generation, best):
        now = self._clock()
        if self._started is None:
            self._started = now
        return now - self._started >= self.seconds


class AnyTermination(TerminationStrategy):
    """Stop when any member policy says stop. Every member sees every check."""

    def __init__(self, *policies: TerminationStrategy):
        if not policies:
            raise ConfigurationError("AnyTermination needs at least one policy")
        self.policies: List[TerminationStrategy] = list(policies)

    def reset(self):
        for policy in self.policies:
            policy.reset()

    def should_stop(self, generation, best):
        decisions = [policy.should_stop(generation, best) for policy in self.policies]
        return any(decisions)
