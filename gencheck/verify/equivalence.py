"""Value-equivalence checking between reference and generated kernels.

A sweep draws n_trials random inputs and compares both kernels on each. A
trial whose RMS difference exceeds the tolerance gets a full mismatch report
but does not stop the sweep. The pass/fail figure is the RMS difference on
one further sample drawn after the sweep; the failure count and the worst
trial error are returned alongside it so callers can gate on the whole sweep
instead.
"""

import sys
from typing import Optional, TextIO

import numpy as np
from tqdm import tqdm

from gencheck.verify.benchmark import benchmark_pair
from gencheck.verify.config import DEFAULT_CONFIG, VerifyConfig
from gencheck.verify.report import diff_array, print_array, print_diff_array, rms_error
from gencheck.verify.types import EquivalenceResult, FunctionUnderTest


def _outputs(fut: FunctionUnderTest, x: np.ndarray):
    reference = np.asarray(fut.reference.evaluate(x), dtype=np.float64).reshape(-1)
    generated = np.asarray(fut.generated.evaluate(x), dtype=np.float64).reshape(-1)
    for label, out in (("reference", reference), ("generated", generated)):
        if out.shape != (fut.n_outputs,):
            raise ValueError(
                f"{fut.name}: {label} kernel returned {out.shape[0]} values, expected {fut.n_outputs}"
            )
    return reference, generated


def check_equivalence(
    fut: FunctionUnderTest,
    rng: Optional[np.random.Generator] = None,
    config: VerifyConfig = DEFAULT_CONFIG,
    stream: Optional[TextIO] = None,
    progress: bool = False,
) -> EquivalenceResult:
    """Compare generated and reference kernels on random inputs.

    Args:
        fut: Function under test.
        rng: Random source. Defaults to config.make_rng().
        config: Tolerance, trial count and benchmark window.
        stream: Where reports are written. Defaults to sys.stdout.
        progress: Show a progress bar over the trials.

    Returns:
        EquivalenceResult for the sweep and the final sample.
    """
    stream = stream or sys.stdout
    rng = rng if rng is not None else config.make_rng()

    n_failures = 0
    max_trial_error = 0.0
    trials = range(config.n_trials)
    if progress:
        trials = tqdm(trials, desc=f"Checking {fut.name}", unit="trial", leave=False)

    for _ in trials:
        x = fut.generator.sample(rng)
        reference, generated = _outputs(fut, x)
        err = rms_error(reference, generated)
        max_trial_error = max(max_trial_error, err)
        if err > config.tolerance:
            n_failures += 1
            print(f"{fut.name} eval mismatch:", file=stream)
            print_diff_array(fut.name, x, reference, generated, stream=stream)

    x = fut.generator.sample(rng)
    reference, generated = _outputs(fut, x)

    generated_hz = reference_hz = None
    if config.bench_window > 0:
        generated_hz, reference_hz = benchmark_pair(fut, x, config.bench_window)
        print("Testing generated %-32s gen: %8.2fkHz nongen: %8.2fkHz"
              % (fut.name, generated_hz / 1000.0, reference_hz / 1000.0), file=stream)
    else:
        print(f"Testing generated {fut.name}", file=stream)

    print_array("inputs", x, stream=stream)
    print_array("gen outputs", generated, stream=stream)
    print_array("outputs", reference, stream=stream)
    diff, err = diff_array(reference, generated)
    print_array("Differences", diff, stream=stream)
    print(f"Difference: {err:.6e}", file=stream)

    if n_failures:
        print(f"{fut.name}: {n_failures}/{config.n_trials} trials above tolerance "
              f"(worst {max_trial_error:.3e})", file=stream)

    return EquivalenceResult(
        name=fut.name,
        error=err,
        n_trials=config.n_trials,
        n_failures=n_failures,
        max_trial_error=max_trial_error,
        x=x,
        reference_output=reference,
        generated_output=generated,
        generated_hz=generated_hz,
        reference_hz=reference_hz,
    )
