"""Check generated kernels against their reference implementations.

Runs the registered verification cases:
    - Value equivalence over random inputs
    - Analytic Jacobians vs Richardson-extrapolated finite differences
    - Reference vs generated throughput
    - Fixed-value reprojection and Jacobian speed scenarios

Optionally saves Richardson convergence, error summary and throughput
figures.

Exit status: 0 when every selected case passes, 1 otherwise.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from gencheck.eval.plots import (
    plot_case_errors,
    plot_richardson_convergence,
    plot_throughput,
    save_figure,
)
from gencheck.verify.cases import CASE_PREFIX, FUNCTIONS_BY_NAME, TEST_CASES, run_case
from gencheck.verify.config import DEFAULT_CONFIG, PRESETS, VerifyConfig, config_from_preset
from gencheck.verify.types import CaseResult


def run_selected(
    names: Sequence[str],
    config: VerifyConfig,
    progress: bool = False,
    stream: Optional[TextIO] = None,
) -> Tuple[List[Tuple[str, int]], List[CaseResult]]:
    """Run registered cases by name.

    Descriptor-backed cases run through run_case so their detailed results
    are available for plotting; standalone scenarios run through their
    registry entry.

    Returns:
        Tuple (statuses, case_results).
    """
    stream = stream or sys.stdout
    statuses = []
    case_results = []
    for name in names:
        fut = FUNCTIONS_BY_NAME.get(name[len(CASE_PREFIX):]) if name.startswith(CASE_PREFIX) else None
        if fut is not None:
            result = run_case(fut, config, stream=stream, progress=progress)
            case_results.append(result)
            statuses.append((name, result.status))
        else:
            statuses.append((name, TEST_CASES[name](config=config, stream=stream)))
    return statuses, case_results


def save_plots(case_results: Sequence[CaseResult], plot_dir: Path, config: VerifyConfig) -> None:
    figures = [("case_errors", plot_case_errors(case_results, tolerance=config.tolerance))]
    if any(r.equivalence.generated_hz is not None for r in case_results):
        figures.append(("throughput", plot_throughput([r.equivalence for r in case_results])))
    for case in case_results:
        for jac in case.jacobians:
            figures.append((
                f"richardson_{jac.name}",
                plot_richardson_convergence(jac, initial_step=config.initial_step),
            ))

    for name, fig in figures:
        save_figure(fig, plot_dir, name, formats=("png",))
        plt.close(fig)
    print(f"Saved {len(figures)} figures to {plot_dir}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point with CLI argument parsing."""
    parser = argparse.ArgumentParser(
        description="Check generated kernels against reference implementations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run every registered case with default parameters
  python %(prog)s

  # Quick smoke run of two cases
  python %(prog)s --preset quick --case Generated.quatrotateabout --case Generated.reproject_gen2

  # Reproducible run with figures
  python %(prog)s --seed 7 --no-bench --plot-dir out/gencheck

  # List registered cases
  python %(prog)s --list

Available presets: """ + ", ".join(PRESETS.keys())
    )

    parser.add_argument(
        '--case',
        action='append',
        choices=list(TEST_CASES.keys()),
        metavar='NAME',
        help='Registered case to run (repeatable, default: all)'
    )
    parser.add_argument(
        '--preset',
        type=str,
        choices=PRESETS.keys(),
        help='Use preset configuration (individual options still override it)'
    )
    parser.add_argument(
        '--list',
        action='store_true',
        help='List registered cases and exit'
    )

    run_group = parser.add_argument_group('Run Parameters')
    run_group.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducibility (default: fresh entropy)'
    )
    run_group.add_argument(
        '--trials',
        type=int,
        default=None,
        dest='n_trials',
        help=f'Random trials per value sweep (default: {DEFAULT_CONFIG.n_trials})'
    )
    run_group.add_argument(
        '--bench-window',
        type=float,
        default=None,
        help=f'Seconds spent timing each implementation (default: {DEFAULT_CONFIG.bench_window})'
    )
    run_group.add_argument(
        '--no-bench',
        action='store_true',
        help='Skip throughput measurement'
    )
    run_group.add_argument(
        '--progress',
        action='store_true',
        help='Show a progress bar over value-sweep trials'
    )

    out_group = parser.add_argument_group('Output')
    out_group.add_argument(
        '--plot-dir',
        type=Path,
        default=None,
        help='Save convergence, error and throughput figures to this directory'
    )

    args = parser.parse_args(argv)

    if args.list:
        for name in TEST_CASES:
            print(name)
        return 0

    # Validate parameters
    if args.n_trials is not None and args.n_trials < 0:
        parser.error("Trial count must be non-negative")
    if args.bench_window is not None and args.bench_window < 0:
        parser.error("Benchmark window must be non-negative")

    if args.preset:
        print(f"\nUsing preset: '{args.preset}'")
        print(f"Description: {PRESETS[args.preset]['description']}\n")
        config = config_from_preset(args.preset)
    else:
        config = DEFAULT_CONFIG

    config = config.with_overrides(
        seed=args.seed,
        n_trials=args.n_trials,
        bench_window=0.0 if args.no_bench else args.bench_window,
    )

    names = args.case or list(TEST_CASES.keys())
    statuses, case_results = run_selected(names, config, progress=args.progress)

    if args.plot_dir is not None and case_results:
        save_plots(case_results, args.plot_dir, config)

    print("\n" + "=" * 70)
    print("Summary")
    print("=" * 70)
    n_failed = 0
    for name, status in statuses:
        print(f"  {'PASS' if status == 0 else 'FAIL'}  {name}")
        n_failed += status != 0
    print(f"\n{len(statuses) - n_failed}/{len(statuses)} cases passed")

    return 0 if n_failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
