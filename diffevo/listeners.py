"""
Engine-level and worker-level listeners.

Engine listener hooks run on the engine thread only. Processor listener hooks
run on whichever worker thread evaluated the individual, so implementations
that touch shared state must lock it themselves (see ProcessorStats).
"""
import logging
import threading
from collections import defaultdict
from typing import TYPE_CHECKING, Dict, List, Optional

from tqdm import tqdm

if TYPE_CHECKING:
    from diffevo.core.individual import Individual

logger = logging.getLogger(__name__)


class Listener:
    """No-op engine listener; subclass and override the events you need."""

    def start(self):
        pass

    def end(self):
        pass

    def error(self, error: Exception):
        pass

    def start_generation(self, generation: int):
        pass

    def end_generation(self, generation: int, generation_best: "Individual", best: "Individual"):
        pass

    def start_selection(self, generation: int):
        pass

    def end_selection(self, generation: int):
        pass

    def start_processors(self, generation: int):
        pass

    def end_processors(self, generation: int):
        pass


class ProcessorListener:
    """No-op per-task listener. Hooks may be called concurrently."""

    def start(self, worker: int):
        pass

    def start_of(self, worker: int, individual: "Individual"):
        pass

    def end_of(self, worker: int, individual: "Individual"):
        pass

    def error(self, worker: int, message: str):
        pass

    def end(self, worker: int):
        pass


class CompositeListener(Listener):
    """Fan engine events out to several listeners, in order."""

    def __init__(self, *listeners: Listener):
        self.listeners: List[Listener] = [listener for listener in listeners if listener is not None]

    def start(self):
        for listener in self.listeners:
            listener.start()

    def end(self):
        for listener in self.listeners:
            listener.end()

    def error(self, error):
        for listener in self.listeners:
            listener.error(error)

    def start_generation(self, generation):
        for listener in self.listeners:
            listener.start_generation(generation)

    def end_generation(self, generation, generation_best, best):
        for listener in self.listeners:
            listener.end_generation(generation, generation_best, best)

    def start_selection(self, generation):
        for listener in self.listeners:
            listener.start_selection(generation)

    def end_selection(self, generation):
        for listener in self.listeners:
            listener.end_selection(generation)

    def start_processors(self, generation):
        for listener in self.listeners:
            listener.start_processors(generation)

    def end_processors(self, generation):
        for listener in self.listeners:
            listener.end_processors(generation)


class LoggingListener(Listener):
    """Log the best cost after every generation."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def start(self):
        logger.log(self.level, "Optimization started")

    def end(self):
        logger.log(self.level, "Optimization finished")

    def error(self, error):
        logger.error(f"Optimization failed: {error}")

    def end_generation(self, generation, generation_best, best):
        logger.log(self.level, f"genCount: {generation}, cost: {best.cost:.10g}")


class ProgressListener(Listener):
    """tqdm bar over generations with the best cost as postfix."""

    def __init__(self, total: Optional[int] = None, desc: str = "Generations", leave: bool = True):
        self.total = total
        self.desc = desc
        self.leave = leave
        self._bar: Optional[tqdm] = None

    def start(self):
        self._bar = tqdm(total=self.total, desc=self.desc, leave=self.leave)

    def end_generation(self, generation, generation_best, best):
        if self._bar is None:
            return
        # Generation 0 is the initial evaluation, not an evolution step.
        if generation > 0:
            self._bar.update(1)
        self._bar.set_postfix(best=f"{best.cost:.6g}")

    def end(self):
        self._close()

    def error(self, error):
        self._close()

    def _close(self):
        if self._bar is not None:
            self._bar.close()
            self._bar = None


class ProcessorStats(ProcessorListener):
    """Thread-safe per-worker counts of evaluations and failures."""

    def __init__(self):
        self._lock = threading.Lock()
        self.evaluations: Dict[int, int] = defaultdict(int)
        self.failures: Dict[int, int] = defaultdict(int)
        self.batches: Dict[int, int] = defaultdict(int)
        self.errors: List[str] = []

    def start(self, worker):
        with self._lock:
            self.batches[worker] += 1

    def end_of(self, worker, individual):
        with self._lock:
            self.evaluations[worker] += 1

    def error(self, worker, message):
        with self._lock:
            self.failures[worker] += 1
            self.errors.append(message)

    @property
    def total_evaluations(self) -> int:
        with self._lock:
            return sum(self.evaluations.values())

    @property
    def total_failures(self) -> int:
        with self._lock:
            return sum(self.failures.values())
