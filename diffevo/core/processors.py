"""
Fixed-size worker pool for parallel objective evaluation.

The pool is created once and reused for every batch. A batch is split into
contiguous index ranges, one per worker; each worker writes costs only into
the individuals of its own range, so results land in the slot they were
dispatched from regardless of completion order.
"""
import logging
import threading
from multiprocessing.pool import ThreadPool
from typing import List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from diffevo.core.individual import Individual
from diffevo.core.objective import ObjectiveFunction
from diffevo.errors import BatchFailure, ConfigurationError, EvaluationError
from diffevo.listeners import ProcessorListener

logger = logging.getLogger(__name__)


def partition(count: int, workers: int) -> List[Tuple[int, int]]:
    """
    Split range(count) into at most `workers` contiguous, near-equal [start, stop) ranges.

    The first `count % workers` ranges get one extra item. Empty ranges are dropped.
    """
    if count <= 0:
        return []
    workers = max(1, min(workers, count))
    base, extra = divmod(count, workers)
    ranges = []
    start = 0
    for idx in range(workers):
        stop = start + base + (1 if idx < extra else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


class Processors:
    """Seeded-run friendly worker pool: evaluation order never affects results."""

    def __init__(
        self,
        count: int,
        objective: ObjectiveFunction,
        listener: Optional[ProcessorListener] = None,
        show_progress: bool = False,
    ):
        """
        Initialize the pool (threads are started lazily).

        Args:
            count: Number of worker threads (>= 1)
            objective: Thread-safe objective function
            listener: Optional per-task listener (must synchronize internally)
            show_progress: Show a tqdm bar for each batch
        """
        if int(count) < 1:
            raise ConfigurationError(f"Worker count must be at least 1, got {count}")
        self.count = int(count)
        self.objective = objective
        self.listener = listener or ProcessorListener()
        self.show_progress = show_progress
        self._pool: Optional[ThreadPool] = None
        self._bar: Optional[tqdm] = None
        self._bar_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._pool is not None

    def start(self):
        """Create the worker threads if they are not running yet."""
        if self._pool is None:
            logger.debug(f"Starting {self.count} worker threads")
            self._pool = ThreadPool(processes=self.count)

    def close(self):
        """Stop the worker threads; a later evaluate() starts a fresh pool."""
        if self._pool is not None:
            self._pool.close()
            self._pool.join()
            self._pool = None
            logger.debug("Worker threads stopped")

    def __enter__(self) -> "Processors":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def evaluate(self, individuals: Sequence[Individual]) -> Sequence[Individual]:
        """
        Evaluate every individual in place and block until all workers finish.

        Failed evaluations invalidate their individual and are reported through
        the listener's error hook; the rest of the batch still completes.

        Raises:
            BatchFailure: if every individual of a non-empty batch failed
        """
        ranges = partition(len(individuals), self.count)
        if not ranges:
            return individuals

        self.start()
        tasks = [(worker, individuals[start:stop]) for worker, (start, stop) in enumerate(ranges)]

        with tqdm(
            total=len(individuals),
            desc="  Evaluating",
            leave=False,
            disable=not self.show_progress,
        ) as bar:
            self._bar = bar
            try:
                failures_by_worker = self._pool.map(self._run_worker, tasks)
            finally:
                self._bar = None

        errors = [message for failures in failures_by_worker for message in failures]
        if len(errors) == len(individuals):
            raise BatchFailure(
                f"All {len(individuals)} evaluations failed (first error: {errors[0]})",
                errors=errors,
            )
        return individuals

    def _run_worker(self, task: Tuple[int, Sequence[Individual]]) -> List[str]:
        """Evaluate one contiguous slice; returns the error messages of failed individuals."""
        worker, chunk = task
        failures = []
        self.listener.start(worker)
        for individual in chunk:
            self.listener.start_of(worker, individual)
            try:
                cost = self._evaluate_one(worker, individual.genes)
            except EvaluationError as e:
                individual.invalidate(e.message)
                failures.append(e.message)
                self.listener.error(worker, e.message)
            else:
                individual.set_cost(cost)
                self.listener.end_of(worker, individual)
            self._advance_progress()
        self.listener.end(worker)
        return failures

    def _evaluate_one(self, worker: int, genes: np.ndarray) -> float:
        try:
            return self.objective(genes.copy())
        except Exception as e:
            message = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
            logger.warning(f"Worker {worker} evaluation of '{self.objective.name}' failed: {message}")
            raise EvaluationError(message, worker=worker) from e

    def _advance_progress(self):
        if self._bar is None or self._bar.disable:
            return
        with self._bar_lock:
            self._bar.update(1)
