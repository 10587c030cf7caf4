"""
Selection strategies: decide, per population slot, whether the trial survives.

Ordering rules shared by every strategy and by best-so-far tracking:
    - an invalid individual (failed evaluation) or a NaN cost is worse than any real cost
    - two NaN/invalid individuals are equivalent
"""
import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from diffevo.core.individual import Individual


def _ranking_cost(individual: "Individual") -> float:
    cost = individual.cost if individual.valid else math.nan
    return cost


def is_better(candidate: "Individual", reference: "Individual", minimize: bool) -> bool:
    """True if `candidate` is strictly better than `reference`."""
    c_cost = _ranking_cost(candidate)
    r_cost = _ranking_cost(reference)
    if math.isnan(c_cost):
        return False
    if math.isnan(r_cost):
        return True
    return c_cost < r_cost if minimize else c_cost > r_cost


def is_equivalent(candidate: "Individual", reference: "Individual") -> bool:
    """True if neither individual ranks above the other."""
    c_cost = _ranking_cost(candidate)
    r_cost = _ranking_cost(reference)
    if math.isnan(c_cost) or math.isnan(r_cost):
        return math.isnan(c_cost) and math.isnan(r_cost)
    return c_cost == r_cost


class SelectionStrategy(ABC):
    """Chooses the survivor of an incumbent-versus-trial comparison."""

    @abstractmethod
    def select(self, incumbent: "Individual", trial: "Individual", minimize: bool) -> "Individual":
        """Return the individual that occupies the slot in the next generation."""


class GreedySelection(SelectionStrategy):
    """
    Trial replaces the incumbent only when strictly better.

    With accept_ties=True an equal-cost trial also replaces the incumbent
    (the "less than or equal" rule); a NaN trial never does.
    """

    def __init__(self, accept_ties: bool = False):
        self.accept_ties = accept_ties

    def select(self, incumbent, trial, minimize):
        if is_better(trial, incumbent, minimize):
            return trial
        if self.accept_ties and trial.valid and not math.isnan(trial.cost) and is_equivalent(trial, incumbent):
            return trial
        return incumbent

    def __repr__(self) -> str:
        return f"GreedySelection(accept_ties={self.accept_ties})"
