"""Richardson-extrapolated numerical Jacobians.

For each input coordinate in a Jacobian's range, a table of central
differences is built with step H = initial_step / 2^m for rows
m = 0..rows-1 and then extrapolated column by column:

    D[m][0] = (f(x + H e_i) - f(x - H e_i)) / (2H)
    D[m][d] = (4^d D[m][d-1] - D[m-1][d-1]) / (4^d - 1),   d >= 1, m >= d

The bottom-right entry D[rows-1][rows-1] is the estimate. Entries with
m < d are left as NaN.

While probing, the generated value kernel is evaluated alongside the
reference at every perturbed point. Disagreements are reported and counted
but do not change the estimate, which always comes from the reference
kernel.
"""

import sys
from typing import Callable, Optional, TextIO, Tuple

import numpy as np

from gencheck.verify.config import DEFAULT_CONFIG, VerifyConfig
from gencheck.verify.report import diff_array, print_array, rms_error
from gencheck.verify.types import FunctionUnderTest, JacobianDef, JacobianResult


def richardson_table(
    f: Callable[[np.ndarray], np.ndarray],
    x: np.ndarray,
    index: int,
    n_outputs: int,
    rows: int = 10,
    initial_step: float = 2.0,
    on_probe: Optional[Callable[[np.ndarray, np.ndarray], None]] = None,
) -> np.ndarray:
    """Build the extrapolation tables for one input coordinate.

    Args:
        f: Function of the full input block returning n_outputs values.
        x: Base input block (not modified).
        index: Coordinate of x to perturb.
        n_outputs: Number of outputs of f.
        rows: Rows and columns of each table.
        initial_step: Step of the first row.
        on_probe: Called as on_probe(x_perturbed, f(x_perturbed)) for every
                  evaluation, e.g. to cross-check another implementation.

    Returns:
        Array of shape (n_outputs, rows, rows); entry [n, m, d] is D[m][d]
        for output n.
    """
    x = np.asarray(x, dtype=np.float64)
    if not 0 <= index < x.shape[0]:
        raise ValueError(f"index {index} outside input block of {x.shape[0]} scalars")

    D = np.full((n_outputs, rows, rows), np.nan)

    H = initial_step
    x_probe = x.copy()
    for m in range(rows):
        samples = []
        for sign in (1.0, -1.0):
            x_probe[:] = x
            x_probe[index] += sign * H
            y = np.asarray(f(x_probe), dtype=np.float64).reshape(n_outputs)
            if on_probe is not None:
                on_probe(x_probe, y)
            samples.append(y)
        D[:, m, 0] = (samples[0] - samples[1]) / 2.0 / H
        H /= 2.0

    for d in range(1, rows):
        weight = 4.0 ** d
        for m in range(d, rows):
            D[:, m, d] = (weight * D[:, m, d - 1] - D[:, m - 1, d - 1]) / (weight - 1.0)

    return D


def estimate_jacobian(
    f: Callable[[np.ndarray], np.ndarray],
    x: np.ndarray,
    start: int,
    length: int,
    n_outputs: int,
    rows: int = 10,
    initial_step: float = 2.0,
    on_probe: Optional[Callable[[np.ndarray, np.ndarray], None]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Numerical Jacobian of f with respect to x[start:start + length].

    Returns:
        Tuple (jacobian, tables): jacobian has shape (n_outputs, length);
        tables has shape (length, n_outputs, rows, rows).
    """
    tables = np.stack([
        richardson_table(f, x, start + i, n_outputs, rows, initial_step, on_probe)
        for i in range(length)
    ])
    jacobian = tables[:, :, rows - 1, rows - 1].T.copy()
    return jacobian, tables


def diagonal_spread(table: np.ndarray) -> np.ndarray:
    """|D[m][m] - D[m-1][m-1]| along the table diagonal.

    A quickly shrinking spread means the extrapolation converged; a spread
    that stalls or grows points at a step range where the function is not
    smooth (or at round-off dominating the smallest steps).

    Args:
        table: Array of shape (..., rows, rows).

    Returns:
        Array of shape (..., rows - 1).
    """
    diag = np.diagonal(table, axis1=-2, axis2=-1)
    return np.abs(np.diff(diag, axis=-1))


def check_jacobian(
    fut: FunctionUnderTest,
    jdef: JacobianDef,
    rng: Optional[np.random.Generator] = None,
    config: VerifyConfig = DEFAULT_CONFIG,
    stream: Optional[TextIO] = None,
    x: Optional[np.ndarray] = None,
) -> JacobianResult:
    """Compare a generated Jacobian against its Richardson estimate.

    Args:
        fut: Function under test.
        jdef: Which Jacobian to check.
        rng: Random source for the base input. Defaults to config.make_rng().
        config: Tolerance, table size and initial step.
        stream: Where the report is written. Defaults to sys.stdout.
        x: Base input block. Drawn from fut.generator when omitted.

    Returns:
        JacobianResult with the RMS error over all entries.
    """
    stream = stream or sys.stdout
    name = f"{fut.name}_{jdef.suffix}"

    if x is None:
        rng = rng if rng is not None else config.make_rng()
        x = fut.generator.sample(rng)
    else:
        x = np.asarray(x, dtype=np.float64)
        if x.shape != (fut.n_inputs,):
            raise ValueError(f"x must have shape ({fut.n_inputs},), got {x.shape}")

    generated = np.asarray(fut.generated.evaluate_jacobian(x, jdef.suffix), dtype=np.float64)
    if generated.shape != (fut.n_outputs, jdef.length):
        raise ValueError(
            f"{name}: generated Jacobian has shape {generated.shape}, "
            f"expected ({fut.n_outputs}, {jdef.length})"
        )

    mismatches = 0

    def cross_check(x_probe, reference_out):
        nonlocal mismatches
        generated_out = np.asarray(fut.generated.evaluate(x_probe), dtype=np.float64).reshape(-1)
        if rms_error(generated_out, reference_out) > config.tolerance:
            print("Gen/nongen mismatch", file=stream)
            mismatches += 1

    estimated, tables = estimate_jacobian(
        fut.reference.evaluate, x, jdef.start, jdef.length, fut.n_outputs,
        rows=config.richardson_rows, initial_step=config.initial_step, on_probe=cross_check,
    )

    print(f"Testing generated jacobian {name}", file=stream)
    print_array("inputs", x, stream=stream)
    print_array("gen jacobian outputs", generated, jdef.length, stream)
    print_array("jacobian outputs", estimated, jdef.length, stream)
    diff, err = diff_array(estimated, generated)
    print_array("Differences", diff, jdef.length, stream)
    print(f"RMS: {err:.6e}", file=stream)

    return JacobianResult(
        name=name,
        error=err,
        estimated=estimated,
        generated=generated,
        x=x,
        n_value_mismatches=mismatches,
        tables=tables,
    )
