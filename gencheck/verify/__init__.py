"""
Verification Framework for Generated Kernels.

Checks generated math kernels against hand-written references: value
equivalence over random inputs, analytic Jacobians against Richardson
extrapolated finite differences, and throughput.

Modules:
    config: Run parameters and presets
    generators: Randomized input blocks
    types: Kernel interfaces, descriptors and result records
    records: Flat layout of composite reprojection inputs
    report: Diagnostic printing
    equivalence: Value-equivalence sweep
    richardson: Numerical Jacobians and their comparison
    benchmark: Throughput measurement
    cases: Kernel bindings and the test-case registry
"""

from .benchmark import benchmark_jacobian, benchmark_pair, run_cycles
from .cases import (
    FUNCTIONS,
    FUNCTIONS_BY_NAME,
    REPROJECT_ALL_JACOBIANS,
    TEST_CASES,
    register,
    run_case,
    run_registered,
)
from .config import DEFAULT_CONFIG, PRESETS, VerifyConfig, config_from_preset
from .equivalence import check_equivalence
from .generators import CompositeGenerator, InputGenerator
from .report import diff_array, format_array, format_scalar, print_array, print_diff_array, rms_error
from .richardson import check_jacobian, diagonal_spread, estimate_jacobian, richardson_table
from .types import (
    CaseResult,
    EquivalenceResult,
    FunctionUnderTest,
    GeneratedKernel,
    JacobianDef,
    JacobianResult,
    Kernel,
)

__all__ = [
    # Configuration
    "VerifyConfig",
    "DEFAULT_CONFIG",
    "PRESETS",
    "config_from_preset",
    # Types
    "Kernel",
    "GeneratedKernel",
    "JacobianDef",
    "FunctionUnderTest",
    "EquivalenceResult",
    "JacobianResult",
    "CaseResult",
    "InputGenerator",
    "CompositeGenerator",
    # Checks
    "check_equivalence",
    "check_jacobian",
    "richardson_table",
    "estimate_jacobian",
    "diagonal_spread",
    "run_cycles",
    "benchmark_pair",
    "benchmark_jacobian",
    # Reporting
    "format_scalar",
    "format_array",
    "print_array",
    "diff_array",
    "print_diff_array",
    "rms_error",
    # Registry
    "FUNCTIONS",
    "FUNCTIONS_BY_NAME",
    "REPROJECT_ALL_JACOBIANS",
    "TEST_CASES",
    "register",
    "run_case",
    "run_registered",
]
