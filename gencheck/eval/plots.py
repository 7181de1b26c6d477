"""
Visualization Utilities for Verification Runs.

This module provides plotting functions for Richardson convergence,
per-case error summaries and reference/generated throughput.

All functions return matplotlib Figure objects for flexible display/saving.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from gencheck.verify.richardson import diagonal_spread
from gencheck.verify.types import CaseResult, EquivalenceResult, JacobianResult

# Floor for log-scale axes; exact zeros are drawn at this value
LOG_FLOOR = 1e-18


def plot_richardson_convergence(
    result: JacobianResult,
    column: int = 0,
    initial_step: float = 2.0,
    title: Optional[str] = None,
) -> plt.Figure:
    """
    Plot diagonal spread of the Richardson tables for one input coordinate.

    Args:
        result: Jacobian check result carrying its tables
        column: Input coordinate within the Jacobian block
        initial_step: Step size of the first table row
        title: Plot title (defaults to the result name)

    Returns:
        fig: Matplotlib figure

    Raises:
        ValueError: If the result has no tables or column is out of range
    """
    if result.tables is None:
        raise ValueError(f"{result.name} carries no Richardson tables")
    n_columns = result.tables.shape[0]
    if not 0 <= column < n_columns:
        raise ValueError(f"column must be in [0, {n_columns}), got {column}")

    spread = diagonal_spread(result.tables[column])
    rows = spread.shape[-1] + 1
    steps = initial_step / 2.0 ** np.arange(1, rows)

    fig, ax = plt.subplots(figsize=(10, 6))

    for n, series in enumerate(spread):
        ax.loglog(
            steps,
            np.maximum(series, LOG_FLOOR),
            "o-",
            linewidth=1.5,
            markersize=4,
            label=f"output {n}",
        )

    ax.invert_xaxis()
    ax.set_xlabel("Step size H", fontsize=12)
    ax.set_ylabel("|D[m][m] - D[m-1][m-1]|", fontsize=12)
    ax.set_title(title or f"Richardson convergence: {result.name}[{column}]", fontsize=14)
    ax.legend(loc="best")
    ax.grid(True, alpha=0.3, which="both")

    plt.tight_layout()
    return fig


def plot_case_errors(
    results: Sequence[CaseResult],
    tolerance: float = 1e-5,
    title: str = "Verification Errors",
) -> plt.Figure:
    """
    Bar chart of value and Jacobian RMS errors for each case.

    Args:
        results: Case results to summarize
        tolerance: Pass threshold, drawn as a horizontal line
        title: Plot title

    Returns:
        fig: Matplotlib figure
    """
    labels: List[str] = []
    errors: List[float] = []
    colors: List[str] = []
    for case in results:
        labels.append(case.name)
        errors.append(case.equivalence.error)
        colors.append("steelblue")
        for jac in case.jacobians:
            labels.append(jac.name)
            errors.append(jac.error)
            colors.append("darkorange")

    fig, ax = plt.subplots(figsize=(max(8, 0.5 * len(labels)), 6))

    x = np.arange(len(labels))
    ax.bar(x, np.maximum(errors, LOG_FLOOR), color=colors, alpha=0.8, edgecolor="black")
    ax.axhline(tolerance, color="red", linestyle="--", linewidth=1.5, label=f"tolerance {tolerance:g}")

    ax.set_yscale("log")
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=60, ha="right", fontsize=9)
    ax.set_ylabel("RMS error", fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.legend(loc="best")
    ax.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()
    return fig


def plot_throughput(
    results: Sequence[EquivalenceResult],
    title: str = "Kernel Throughput",
) -> plt.Figure:
    """
    Grouped bar chart of generated vs reference throughput.

    Results without benchmark figures are skipped.

    Args:
        results: Equivalence results with generated_hz/reference_hz set
        title: Plot title

    Returns:
        fig: Matplotlib figure
    """
    timed = [r for r in results if r.generated_hz is not None and r.reference_hz is not None]

    fig, ax = plt.subplots(figsize=(max(8, 0.8 * len(timed)), 6))

    x = np.arange(len(timed))
    width = 0.4
    ax.bar(
        x - width / 2,
        [r.generated_hz / 1000.0 for r in timed],
        width,
        label="generated",
        color="steelblue",
        alpha=0.8,
    )
    ax.bar(
        x + width / 2,
        [r.reference_hz / 1000.0 for r in timed],
        width,
        label="reference",
        color="gray",
        alpha=0.8,
    )

    ax.set_xticks(x)
    ax.set_xticklabels([r.name for r in timed], rotation=45, ha="right")
    ax.set_ylabel("Throughput [kHz]", fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.legend(loc="best")
    ax.grid(True, alpha=0.3, axis="y")

    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Tuple[str, ...] = ("svg", "png"),
) -> List[Path]:
    """
    Save figure in multiple formats.

    Args:
        fig: Matplotlib figure to save
        out_dir: Output directory
        name: Base filename (without extension)
        formats: Tuple of format extensions

    Returns:
        paths: List of saved file paths
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for fmt in formats:
        filepath = out_dir / f"{name}.{fmt}"
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        paths.append(filepath)

    return paths
