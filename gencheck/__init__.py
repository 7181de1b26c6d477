"""Verification of generated numerical kernels for pose tracking.

This package checks machine-generated math kernels against hand-written
reference implementations:
- linmath: Reference quaternion, pose and base-station reprojection math
- generated: Flattened closed-form kernels with analytic Jacobians
- verify: Equivalence checker, Richardson Jacobian estimator, benchmarks
- eval: Diagnostic figures
"""

__version__ = "0.1.0"
