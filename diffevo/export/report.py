"""
Convergence plot and JSON summary for optimization runs.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging
import math

import numpy as np
import matplotlib

matplotlib.use("Agg")  # Non-interactive backend
import matplotlib.pyplot as plt

from diffevo.core.engine import OptimizationResult

logger = logging.getLogger(__name__)


class ReportGenerator:
    """Write a convergence plot and a run summary for an OptimizationResult."""

    def __init__(self, output_dir: Path):
        """
        Initialize report generator.

        Args:
            output_dir: Directory to save the report into
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def generate(self, result: OptimizationResult, metadata: Optional[Dict[str, Any]] = None) -> Path:
        """
        Generate the report.

        Args:
            result: Finished (or failed) run
            metadata: Extra run information stored verbatim in the summary

        Returns:
            Path to summary.json
        """
        logger.info("Generating optimization report")

        plot_path = None
        history = result.history_frame()
        if not history.empty:
            plot_path = self._create_convergence_plot(history, minimize=result.minimize)

        summary = {
            "generated_at": datetime.now(),
            "state": result.state.value,
            "error": result.error,
            "generations": result.generations,
            "elapsed_seconds": result.elapsed,
            "minimize": result.minimize,
            "best_cost": result.best_cost,
            "best_genes": result.best_genes,
            "convergence_plot": plot_path,
            "metadata": metadata or {},
            "history": history.to_dict(orient="records"),
        }

        summary_file = self.output_dir / "summary.json"
        with open(summary_file, "w") as f:
            json.dump(self._make_serializable(summary), f, indent=2)

        logger.info(f"Report generated: {summary_file}")
        return summary_file

    def _create_convergence_plot(self, history, minimize: bool = True) -> str:
        """Best-so-far cost per generation with the population mean ± std band."""
        fig, ax = plt.subplots(figsize=(8, 4))

        generations = history["gen"].to_numpy()

        ax.plot(
            generations,
            history["best"].to_numpy(),
            marker="o",
            linewidth=2,
            color="#2563eb",
            markersize=4,
            label="Best Cost",
            zorder=3,
        )

        mean = history["mean"].to_numpy(dtype=float)
        std = history["std"].to_numpy(dtype=float)
        ax.plot(
            generations,
            mean,
            linewidth=1.5,
            linestyle="--",
            color="#f59e0b",
            label="Mean Cost",
            zorder=2,
        )
        ax.fill_between(
            generations, mean - std, mean + std, alpha=0.15, color="#f59e0b", label="±1 Std Dev"
        )

        ax.set_xlabel("Generation")
        ax.set_ylabel("Cost")
        ax.set_title("Convergence (minimizing)" if minimize else "Convergence (maximizing)")
        ax.legend(loc="upper right" if minimize else "lower right", fontsize=9)
        ax.grid(True, alpha=0.3)

        plot_dir = self.output_dir / "plots"
        plot_dir.mkdir(exist_ok=True)
        plot_path = plot_dir / "convergence.png"

        fig.savefig(plot_path, dpi=100, bbox_inches="tight")
        plt.close(fig)

        return "plots/convergence.png"

    def _make_serializable(self, obj):
        """Make object JSON serializable (non-finite floats become None)."""
        if isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, dict):
            return {str(k): self._make_serializable(v) for k, v in obj.items()}
        elif isinstance(obj, (list, tuple)):
            return [self._make_serializable(item) for item in obj]
        elif isinstance(obj, np.ndarray):
            return [self._make_serializable(item) for item in obj.tolist()]
        elif isinstance(obj, Path):
            return str(obj)
        elif isinstance(obj, np.generic):
            return self._make_serializable(obj.item())
        elif isinstance(obj, float) and not math.isfinite(obj):
            return None
        else:
            return obj
