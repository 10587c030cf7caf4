"""
Parallel stress test.
Runs the same seeded optimization with one worker and with several workers on a
deliberately slow objective, then checks that both runs agree generation by
generation and reports the wall-clock speedup.
"""
import logging
import sys
import time

import numpy as np

from diffevo import Constraints, DifferentialEvolution, ObjectiveFunction, StrategyConfiguration
from diffevo.listeners import ProcessorStats
from diffevo.utils.logger import setup_logging

DELAY_SECONDS = 0.002


def slow_rastrigin(x: np.ndarray) -> float:
    time.sleep(DELAY_SECONDS)
    return float(10.0 * len(x) + np.sum(x * x - 10.0 * np.cos(2.0 * np.pi * x)))


def run_once(workers: int):
    config = StrategyConfiguration(
        arguments_count=5,
        population_size=40,
        weight=0.6,
        crossover=0.9,
        workers=workers,
        max_generations=20,
        seed=42,
    )
    stats = ProcessorStats()
    engine = DifferentialEvolution(
        config,
        Constraints.uniform(5, -5.12, 5.12),
        ObjectiveFunction("slow_rastrigin", slow_rastrigin),
        processor_listener=stats,
    )
    return engine.run(), stats


def run_experiment(workers: int = 4) -> int:
    print(f"🧪 Parallel stress test (Pop=40, Gen=20, Workers=1 vs {workers})")
    setup_logging(level=logging.WARNING)

    serial, serial_stats = run_once(1)
    parallel, parallel_stats = run_once(workers)

    print(f"   1 worker:  {serial.elapsed:.2f}s, best={serial.best_cost:.6g}, evals={serial_stats.total_evaluations}")
    print(
        f"   {workers} workers: {parallel.elapsed:.2f}s, best={parallel.best_cost:.6g}, "
        f"evals={parallel_stats.total_evaluations}, per worker={dict(parallel_stats.evaluations)}"
    )

    if serial.history != parallel.history or not np.array_equal(serial.best_genes, parallel.best_genes):
        print("   ❌ Results differ between worker counts")
        return 1

    speedup = serial.elapsed / parallel.elapsed if parallel.elapsed > 0 else float("inf")
    print(f"   ✅ Identical results, speedup x{speedup:.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(run_experiment(int(sys.argv[1]) if len(sys.argv) > 1 else 4))
