"""
Command-line interface for diffevo.

    diffevo run -f rastrigin -n 10 -p 60 -w 0.5 -c 0.9 -g 500 -t 4
    diffevo functions
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from diffevo import VERSION_TEXT
from diffevo.config import StrategyConfiguration, get_settings, resolve_workers
from diffevo.core.constraints import Constraints
from diffevo.core.engine import DifferentialEvolution, OptimizationResult
from diffevo.errors import ConfigurationError
from diffevo.functions import available_functions, get_function
from diffevo.listeners import Listener, ProcessorStats, ProgressListener
from diffevo.strategies.mutation import MUTATION_STRATEGIES, mutation_strategy
from diffevo.utils.logger import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_RUN_FAILED = 2
EXIT_UNEXPECTED_ERROR = 3


class ConsoleReporter(Listener):
    """Print the generation count and best cost after every generation."""

    def __init__(self, stream=None):
        self.stream = stream

    def end_generation(self, generation, generation_best, best):
        print(f"genCount: {generation}, cost: {best.cost:.10g}", file=self.stream or sys.stdout)


class ParameterParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad arguments with the configuration-error exit status."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"Command line parameter error: {message}")
        self.exit(EXIT_CONFIG_ERROR)


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = ParameterParser(
        prog="diffevo",
        description="Parallel differential evolution for bounded black-box optimization.",
    )
    parser.add_argument("--version", action="store_true", help="Show version information and exit")
    subparsers = parser.add_subparsers(dest="command")

    run = subparsers.add_parser("run", help="Optimize a catalog function")
    run.add_argument("-f", "--function", default=settings.function, help="Objective function name")
    run.add_argument("-n", "--dimensions", type=int, default=None,
                     help=f"Number of arguments (default: {settings.dimensions}, or the function's arity)")
    run.add_argument("-p", "--population", type=int, default=settings.population_size, help="Population size")
    run.add_argument("-w", "--weight", type=float, default=settings.weight, help="Weight factor [0, 1]")
    run.add_argument("-c", "--crossover", type=float, default=settings.crossover, help="Crossover factor [0, 1]")
    run.add_argument("-g", "--generations", type=int, default=settings.max_generations,
                     help="Maximum number of generations")
    run.add_argument("-t", "--workers", default=settings.workers,
                     help="Worker threads (integer or 'auto')")
    run.add_argument("-m", "--mutation", default=settings.mutation_strategy,
                     choices=sorted(MUTATION_STRATEGIES), help="Mutation strategy")
    run.add_argument("--maximize", action=argparse.BooleanOptionalAction, default=not settings.minimize,
                     help="Maximize instead of minimize")
    run.add_argument("--lower", type=float, default=None, help="Lower bound for every dimension")
    run.add_argument("--upper", type=float, default=None, help="Upper bound for every dimension")
    run.add_argument("-s", "--seed", type=int, default=settings.seed, help="Random seed")
    run.add_argument("--progress", action="store_true", help="Show progress bars instead of per-generation lines")
    run.add_argument("--report", type=Path, default=None, help="Write convergence plot and summary to this directory")
    run.add_argument("--log-dir", type=Path, default=settings.log_dir, help="Also write a log file here")
    run.add_argument("-v", "--verbose", action="store_true", help="Log generation details to stderr")

    subparsers.add_parser("functions", help="List available objective functions")
    return parser


def _build_engine(args, listener: Listener, processor_listener: ProcessorStats) -> DifferentialEvolution:
    """Translate parsed arguments into a configured engine."""
    objective = get_function(args.function)

    dimensions = args.dimensions
    if dimensions is None:
        dimensions = objective.arity or get_settings().dimensions

    lower, upper = objective.domain or (None, None)
    lower = args.lower if args.lower is not None else lower
    upper = args.upper if args.upper is not None else upper
    if lower is None or upper is None:
        raise ConfigurationError(f"No default bounds for '{objective.name}'; pass --lower and --upper")

    config = StrategyConfiguration(
        arguments_count=dimensions,
        population_size=args.population,
        weight=args.weight,
        crossover=args.crossover,
        minimize=not args.maximize,
        workers=resolve_workers(args.workers),
        max_generations=args.generations,
        seed=args.seed,
    )

    return DifferentialEvolution(
        config,
        Constraints.uniform(dimensions, lower, upper),
        objective,
        mutation=mutation_strategy(args.mutation, config.weight, config.crossover),
        listener=listener,
        processor_listener=processor_listener,
        show_progress=args.progress,
    )


def cmd_run(args) -> int:
    """Run one optimization; returns the process exit status."""
    level = logging.INFO if args.verbose else logging.WARNING
    setup_logging(run_dir=args.log_dir, level=level)

    stats = ProcessorStats()
    if args.progress:
        listener = ProgressListener(total=args.generations)
    else:
        listener = ConsoleReporter()

    try:
        engine = _build_engine(args, listener, stats)
    except ConfigurationError as e:
        print(f"Command line parameter error: {e}")
        return EXIT_CONFIG_ERROR

    print(
        f"{'minimizing' if engine.minimize else 'maximizing'} \"{engine.objective.name}\" "
        f"with weight factor {engine.config.weight} and crossover factor {engine.config.crossover}\n"
    )

    try:
        result = engine.run()
    except Exception as e:
        logger.exception("Unexpected error during optimization")
        print(f"Unexpected error: {e}")
        return EXIT_UNEXPECTED_ERROR

    _print_result(result, stats)

    if args.report is not None:
        from diffevo.export.report import ReportGenerator

        try:
            ReportGenerator(args.report).generate(
                result,
                metadata={
                    "function": engine.objective.name,
                    "configuration": engine.config.model_dump(),
                    "mutation": engine.mutation.name,
                    "evaluations": stats.total_evaluations,
                    "failed_evaluations": stats.total_failures,
                },
            )
        except Exception as e:
            logger.exception("Report generation failed")
            print(f"Unexpected error while writing report: {e}")
            return EXIT_UNEXPECTED_ERROR
        print(f"Report written to {args.report}")

    return EXIT_OK if result.success else EXIT_RUN_FAILED


def _print_result(result: OptimizationResult, stats: ProcessorStats):
    if not result.success:
        print(f"\nOptimization failed: {result.error}")
    if result.best is not None:
        genes = ", ".join(f"{g:.10g}" for g in result.best.genes)
        print(f"\nbest cost: {result.best.cost:.10g}")
        print(f"best individual: [{genes}]")
    print(
        f"generations: {result.generations}, evaluations: {stats.total_evaluations}, "
        f"failed evaluations: {stats.total_failures}, elapsed: {result.elapsed:.2f}s"
    )


def cmd_functions(args) -> int:
    for name in available_functions():
        objective = get_function(name)
        arity = "any" if objective.arity is None else str(objective.arity)
        lower, upper = objective.domain
        print(f"{name:<16} arity={arity:<4} domain=[{lower:g}, {upper:g}]")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(VERSION_TEXT)
        return EXIT_OK
    if args.command == "run":
        return cmd_run(args)
    if args.command == "functions":
        return cmd_functions(args)

    parser.print_help()
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
