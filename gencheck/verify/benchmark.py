"""Throughput benchmark for kernel implementations.

Each implementation is called repeatedly on one fixed input for a wall-clock
window; the result is calls per second. The loop always runs at least once,
so a zero window still yields a (noisy) estimate from the calls made
before the clock first ticks.
"""

import time
from typing import Callable, Optional, Tuple

import numpy as np

from gencheck.verify.types import FunctionUnderTest, JacobianDef


def run_cycles(fn: Callable[[np.ndarray], object], x: np.ndarray, window: float = 1.0,
               clock: Callable[[], float] = time.perf_counter) -> float:
    """Call fn(x) until `window` seconds have elapsed.

    Args:
        fn: Function to time.
        x: Input passed to every call.
        window: Minimum measurement time in seconds.
        clock: Monotonic time source (injectable for tests).

    Returns:
        Calls per second, positive and finite. Keeps calling until the
        clock advances, even with a zero window.
    """
    cycles = 0
    start = clock()
    while True:
        fn(x)
        cycles += 1
        stop = clock()
        # A coarse clock may not tick within one call
        if start + window <= stop and stop > start:
            break

    return cycles / (stop - start)


def benchmark_pair(fut: FunctionUnderTest, x: np.ndarray, window: float = 1.0,
                   clock: Callable[[], float] = time.perf_counter) -> Tuple[float, float]:
    """Throughput of the generated and the reference kernel on the same input.

    Returns:
        Tuple (generated_hz, reference_hz).
    """
    generated_hz = run_cycles(fut.generated.evaluate, x, window, clock)
    reference_hz = run_cycles(fut.reference.evaluate, x, window, clock)
    return generated_hz, reference_hz


def benchmark_jacobian(fut: FunctionUnderTest, jdef: JacobianDef, x: np.ndarray,
                       window: float = 1.0,
                       clock: Optional[Callable[[], float]] = None) -> float:
    """Throughput of one analytic Jacobian of the generated kernel."""
    clock = clock or time.perf_counter
    return run_cycles(lambda v: fut.generated.evaluate_jacobian(v, jdef.suffix), x, window, clock)
