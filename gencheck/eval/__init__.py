"""
Evaluation and Visualization Module.

Modules:
    plots: Richardson convergence, case error and throughput figures
"""

from .plots import (
    plot_case_errors,
    plot_richardson_convergence,
    plot_throughput,
    save_figure,
)

__all__ = [
    "plot_richardson_convergence",
    "plot_case_errors",
    "plot_throughput",
    "save_figure",
]
