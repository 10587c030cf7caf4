"""
Differential evolution engine.
Fully seeded for reproducibility with parallel evaluation.

Generation loop:
- Initial population seeded uniformly within the constraints and evaluated (generation 0)
- Trials for every slot built from the unchanged population (deferred replacement)
- Trials evaluated in parallel by the worker pool (full barrier)
- Per-slot selection, best-so-far tracking, termination check

Only the engine thread draws random numbers, so the outcome of a seeded run
does not depend on the number of workers.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
from deap import tools

from diffevo.config import StrategyConfiguration
from diffevo.core.constraints import Constraints
from diffevo.core.individual import Individual, Population
from diffevo.core.objective import ObjectiveFunction
from diffevo.core.processors import Processors
from diffevo.errors import BatchFailure, ConfigurationError
from diffevo.listeners import Listener, ProcessorListener
from diffevo.strategies.mutation import MutationStrategy, RandOneBin
from diffevo.strategies.selection import GreedySelection, SelectionStrategy, is_better
from diffevo.strategies.termination import MaxGenerationTermination, TerminationStrategy

logger = logging.getLogger(__name__)


class EngineState(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    EVALUATING = "evaluating"
    MUTATING = "mutating"
    SELECTING = "selecting"
    CHECKING = "checking"
    TERMINATED = "terminated"
    FAILED = "failed"


@dataclass
class GenerationRecord:
    """Outcome of one generation (generation 0 is the initial evaluation)."""
    generation: int
    generation_best: Individual
    best: Individual
    evaluations: int
    failures: int


@dataclass
class OptimizationResult:
    """Final state of a run."""
    state: EngineState
    best: Optional[Individual]
    generations: int
    logbook: tools.Logbook
    error: Optional[str] = None
    elapsed: float = 0.0
    minimize: bool = True
    history: List[float] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.state == EngineState.TERMINATED

    @property
    def best_cost(self) -> float:
        return self.best.cost if self.best is not None else float("nan")

    @property
    def best_genes(self) -> Optional[np.ndarray]:
        return self.best.genes.copy() if self.best is not None else None

    def history_frame(self) -> pd.DataFrame:
        """Per-generation statistics as a DataFrame (one row per generation)."""
        return pd.DataFrame(list(self.logbook), columns=self.logbook.header)


def _build_statistics() -> tools.Statistics:
    stats = tools.Statistics(key=lambda ind: ind.cost)
    stats.register("min", np.min)
    stats.register("mean", np.mean)
    stats.register("max", np.max)
    stats.register("std", np.std)
    return stats


class DifferentialEvolution:
    """Seeded differential evolution with a fixed worker pool for evaluation."""

    def __init__(
        self,
        config: StrategyConfiguration,
        constraints: Constraints,
        objective: ObjectiveFunction,
        mutation: Optional[MutationStrategy] = None,
        selection: Optional[SelectionStrategy] = None,
        termination: Optional[TerminationStrategy] = None,
        listener: Optional[Listener] = None,
        processor_listener: Optional[ProcessorListener] = None,
        processors: Optional[Processors] = None,
        show_progress: bool = False,
    ):
        """
        Initialize the engine and validate the run configuration.

        Args:
            config: Immutable run parameters
            constraints: One bound per gene dimension
            objective: Deterministic, thread-safe objective function
            mutation: Trial builder (defaults to DE/rand/1/bin with config weight/crossover)
            selection: Survivor rule (defaults to greedy, ties keep the incumbent)
            termination: Stop rule (defaults to config.max_generations)
            listener: Engine event listener (called from the engine thread)
            processor_listener: Per-task listener (called from worker threads)
            processors: Pre-built worker pool (defaults to config.workers threads)
            show_progress: Show a tqdm bar for every evaluation batch

        Raises:
            ConfigurationError: before any evaluation, if the parameters are inconsistent
        """
        self.config = config
        self.constraints = constraints
        self.objective = objective
        self.mutation = mutation or RandOneBin(config.weight, config.crossover)
        self.selection = selection or GreedySelection()
        self.termination = termination or MaxGenerationTermination(config.max_generations)
        self.listener = listener or Listener()

        self._validate()

        self.processors = processors or Processors(
            config.workers,
            objective,
            listener=processor_listener,
            show_progress=show_progress,
        )

        self.state = EngineState.IDLE
        self.population: Optional[Population] = None
        self.best: Optional[Individual] = None
        self.generation = 0
        self.completed_generations = 0
        self.rng = np.random.RandomState(config.seed)
        self.stats = _build_statistics()
        self.logbook = self._new_logbook()

    @property
    def minimize(self) -> bool:
        return self.config.minimize

    def _validate(self):
        """Cross-check configuration, constraints, objective and strategies."""
        cfg = self.config
        if len(self.constraints) != cfg.arguments_count:
            raise ConfigurationError(
                f"Constraint count ({len(self.constraints)}) does not match "
                f"arguments count ({cfg.arguments_count})"
            )
        arity = getattr(self.objective, "arity", None)
        if arity is not None and arity != cfg.arguments_count:
            raise ConfigurationError(
                f"Objective '{self.objective.name}' takes {arity} arguments, "
                f"configured for {cfg.arguments_count}"
            )
        required = max(4, getattr(self.mutation, "min_population_size", 4))
        if cfg.population_size < required:
            raise ConfigurationError(
                f"Population size {cfg.population_size} is too small for "
                f"{type(self.mutation).__name__} (needs at least {required})"
            )
        weight = getattr(self.mutation, "weight", cfg.weight)
        crossover = getattr(self.mutation, "crossover", cfg.crossover)
        if weight != cfg.weight or crossover != cfg.crossover:
            raise ConfigurationError(
                f"{type(self.mutation).__name__} uses weight {weight} and crossover {crossover}, "
                f"configured weight {cfg.weight} and crossover {cfg.crossover}"
            )

    @staticmethod
    def _new_logbook() -> tools.Logbook:
        logbook = tools.Logbook()
        logbook.header = ["gen", "evals", "failures", "best", "min", "mean", "max", "std"]
        return logbook

    def run(self) -> OptimizationResult:
        """
        Run the generation loop until the termination strategy stops it.

        A batch in which every evaluation failed ends the run in the FAILED
        state; the result then carries the best individual recorded through the
        last successful generation. Other exceptions propagate.
        """
        started = time.perf_counter()
        self.rng = np.random.RandomState(self.config.seed)
        self.logbook = self._new_logbook()
        self.best = None
        self.generation = 0
        self.completed_generations = 0
        self.termination.reset()

        logger.info(
            f"Starting differential evolution on '{self.objective.name}' "
            f"({'minimize' if self.minimize else 'maximize'}, dims={self.config.arguments_count}, "
            f"pop={self.config.population_size}, workers={self.processors.count}, "
            f"mutation={self.mutation!r}, selection={self.selection!r})"
        )

        self.listener.start()
        try:
            with self.processors:
                self._initialize()
                while not self._should_stop():
                    self.generation += 1
                    self._evolve(self.generation)
        except BatchFailure as e:
            self.state = EngineState.FAILED
            logger.error(f"Generation {self.generation} failed: {e.message}")
            self.listener.error(e)
            return self._result(started, error=e.message)

        self.state = EngineState.TERMINATED
        logger.info(
            f"Differential evolution complete after {self.completed_generations} generations: "
            f"best cost = {self.best.cost:.10g}"
        )
        self.listener.end()
        return self._result(started)

    def _initialize(self):
        """Seed and evaluate generation 0."""
        self.state = EngineState.INITIALIZING
        self.population = Population.random(self.config.population_size, self.constraints, self.rng)

        self.listener.start_generation(0)
        individuals = list(self.population)
        self._evaluate(0, individuals)
        self._complete_generation(0, individuals)

    def _evolve(self, generation: int):
        """One mutate -> evaluate -> select cycle."""
        self.listener.start_generation(generation)

        self.state = EngineState.MUTATING
        current_best = self.population.best(self.minimize)
        trials = [
            self.mutation.mutate(self.population, index, self.constraints, self.rng, current_best)
            for index in range(len(self.population))
        ]

        self._evaluate(generation, trials)

        self.state = EngineState.SELECTING
        self.listener.start_selection(generation)
        for index, trial in enumerate(trials):
            survivor = self.selection.select(self.population[index], trial, self.minimize)
            if survivor is trial:
                self.population[index] = trial
        self.listener.end_selection(generation)

        self._complete_generation(generation, trials)

    def _evaluate(self, generation: int, individuals: Sequence[Individual]):
        self.state = EngineState.EVALUATING
        self.listener.start_processors(generation)
        self.processors.evaluate(individuals)
        self.listener.end_processors(generation)

    def _complete_generation(self, generation: int, evaluated: Sequence[Individual]) -> GenerationRecord:
        """Update best-so-far, record statistics and notify listeners."""
        generation_best = self.population.best(self.minimize)
        if self.best is None or is_better(generation_best, self.best, self.minimize):
            self.best = generation_best.copy()

        record = GenerationRecord(
            generation=generation,
            generation_best=generation_best.copy(),
            best=self.best,
            evaluations=len(evaluated),
            failures=sum(1 for ind in evaluated if not ind.valid),
        )
        self.completed_generations = generation

        valid = [ind for ind in self.population if ind.valid]
        summary = self.stats.compile(valid)
        self.logbook.record(
            gen=record.generation,
            evals=record.evaluations,
            failures=record.failures,
            best=record.best.cost,
            **summary,
        )

        failure_str = f", failures={record.failures}" if record.failures else ""
        logger.info(
            f"Gen {generation}: best={record.best.cost:.6g}, "
            f"gen_best={record.generation_best.cost:.6g}, mean={summary['mean']:.6g}{failure_str}"
        )

        self.listener.end_generation(generation, record.generation_best, record.best)
        return record

    def _should_stop(self) -> bool:
        self.state = EngineState.CHECKING
        return self.termination.should_stop(self.generation, self.best.copy())

    def _result(self, started: float, error: Optional[str] = None) -> OptimizationResult:
        return OptimizationResult(
            state=self.state,
            best=self.best.copy() if self.best is not None else None,
            generations=self.completed_generations,
            logbook=self.logbook,
            error=error,
            elapsed=time.perf_counter() - started,
            minimize=self.minimize,
            history=[float(row["best"]) for row in self.logbook],
        )
