"""Kernel interface, test descriptors and result records.

A function under test pairs a hand-written reference kernel with a generated
kernel of the same signature: both consume one flat input block and return
one output vector. The generated kernel additionally provides analytic
Jacobians for named argument groups; a JacobianDef says where in the input
block each group lives.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np

from gencheck.verify.generators import InputGenerator

MAX_JACOBIANS = 16


class Kernel(ABC):
    """A vector-valued function of one input block."""

    name: str = ""

    @abstractmethod
    def evaluate(self, x: np.ndarray) -> np.ndarray:
        """Evaluate on input block x and return the output vector."""

    def __call__(self, x: np.ndarray) -> np.ndarray:
        return self.evaluate(x)


class GeneratedKernel(Kernel):
    """A generated kernel that also provides analytic Jacobians."""

    @abstractmethod
    def evaluate_jacobian(self, x: np.ndarray, wrt: str) -> np.ndarray:
        """Jacobian with respect to argument group `wrt`.

        Returns:
            Array of shape (outputs, group size), output-major.

        Raises:
            ValueError: If `wrt` is not a group this kernel differentiates.
        """


@dataclass(frozen=True)
class JacobianDef:
    """One Jacobian to verify.

    Attributes:
        suffix: Argument-group name passed to evaluate_jacobian (e.g. 'q').
        start: Offset of the group's first scalar in the input block.
        length: Number of scalars in the group.
    """

    suffix: str
    start: int = 0
    length: int = 0

    def __post_init__(self) -> None:
        if not self.suffix:
            raise ValueError("JacobianDef suffix must be a non-empty string")
        if self.start < 0:
            raise ValueError(f"start must be non-negative, got {self.start}")
        if self.length < 1:
            raise ValueError(f"length must be >= 1, got {self.length}")


@dataclass(frozen=True)
class FunctionUnderTest:
    """Reference/generated kernel pair with its input generator.

    Attributes:
        name: Case name used in reports.
        reference: Hand-written reference kernel.
        generated: Generated kernel under test.
        generator: Produces valid input blocks for both kernels.
        n_outputs: Size of the output vector.
        jacobians: Jacobians to verify, in order.
    """

    name: str
    reference: Kernel
    generated: GeneratedKernel
    generator: InputGenerator
    n_outputs: int
    jacobians: Tuple[JacobianDef, ...] = ()

    def __post_init__(self) -> None:
        """Validate output count and Jacobian ranges."""
        if self.n_outputs < 1:
            raise ValueError(f"n_outputs must be >= 1, got {self.n_outputs}")
        if len(self.jacobians) > MAX_JACOBIANS:
            raise ValueError(
                f"At most {MAX_JACOBIANS} Jacobians per function, got {len(self.jacobians)}"
            )

        suffixes = [j.suffix for j in self.jacobians]
        if len(set(suffixes)) != len(suffixes):
            raise ValueError(f"Duplicate Jacobian suffixes in {self.name}: {suffixes}")

        n_inputs = self.generator.length
        for jdef in self.jacobians:
            if jdef.start + jdef.length > n_inputs:
                raise ValueError(
                    f"Jacobian '{jdef.suffix}' range [{jdef.start}, {jdef.start + jdef.length}) "
                    f"exceeds input block of {n_inputs} scalars"
                )

    @property
    def n_inputs(self) -> int:
        return self.generator.length


@dataclass
class EquivalenceResult:
    """Outcome of a value-equivalence sweep.

    `error` is the headline metric: the RMS difference on one final sample
    drawn after the trial loop. `n_failures` and `max_trial_error`
    summarize the sweep itself.
    """

    name: str
    error: float
    n_trials: int
    n_failures: int
    max_trial_error: float
    x: np.ndarray
    reference_output: np.ndarray
    generated_output: np.ndarray
    generated_hz: Optional[float] = None
    reference_hz: Optional[float] = None

    def passed(self, tolerance: float) -> bool:
        return bool(self.error <= tolerance)


@dataclass
class JacobianResult:
    """Outcome of one Richardson-vs-analytic Jacobian comparison.

    Attributes:
        name: '<function>_<suffix>'.
        error: RMS difference between the two Jacobians.
        estimated: Richardson estimate, shape (outputs, length).
        generated: Analytic Jacobian, shape (outputs, length).
        x: Base input block.
        n_value_mismatches: Perturbed points where the generated value kernel
                            disagreed with the reference.
        tables: Richardson tables, shape (length, outputs, rows, rows).
    """

    name: str
    error: float
    estimated: np.ndarray
    generated: np.ndarray
    x: np.ndarray
    n_value_mismatches: int = 0
    tables: Optional[np.ndarray] = None

    def passed(self, tolerance: float) -> bool:
        return bool(self.error <= tolerance)


@dataclass
class CaseResult:
    """Verdict of one function under test."""

    name: str
    equivalence: EquivalenceResult
    jacobians: list = field(default_factory=list)
    tolerance: float = 1e-5

    @property
    def failed(self) -> bool:
        failed = not self.equivalence.passed(self.tolerance)
        for jac in self.jacobians:
            failed |= not jac.passed(self.tolerance)
        return failed

    @property
    def status(self) -> int:
        """0 on pass, -1 on failure."""
        return -1 if self.failed else 0
