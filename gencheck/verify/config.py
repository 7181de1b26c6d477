"""Verification run configuration.

Thresholds, trial counts and step sizes shared by the equivalence checker,
the Jacobian estimator and the benchmark harness, plus named presets for the
command-line runner.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import numpy as np


@dataclass(frozen=True)
class VerifyConfig:
    """Parameters of one verification pass.

    Attributes:
        tolerance: RMS error above which a value or Jacobian comparison fails.
        n_trials: Random trials per value-equivalence sweep.
        richardson_rows: Rows (and columns) of the Richardson table.
        initial_step: Largest finite-difference step; halved at each row.
        bench_window: Seconds spent timing each implementation. 0 disables
                      the benchmark.
        seed: Seed for the random generator. None draws fresh entropy, so
              every run samples different inputs.

    Example:
        >>> config = VerifyConfig(n_trials=100, seed=7)
        >>> rng = config.make_rng()
    """

    tolerance: float = 1e-5
    n_trials: int = 1000
    richardson_rows: int = 10
    initial_step: float = 2.0
    bench_window: float = 1.0
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate parameter ranges."""
        if not self.tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if self.n_trials < 0:
            raise ValueError(f"n_trials must be non-negative, got {self.n_trials}")
        if self.richardson_rows < 1:
            raise ValueError(f"richardson_rows must be >= 1, got {self.richardson_rows}")
        if not self.initial_step > 0:
            raise ValueError(f"initial_step must be positive, got {self.initial_step}")
        if self.bench_window < 0:
            raise ValueError(f"bench_window must be non-negative, got {self.bench_window}")

    def make_rng(self) -> np.random.Generator:
        """Create the random generator for one case run."""
        return np.random.default_rng(self.seed)

    def with_overrides(self, **overrides: Any) -> "VerifyConfig":
        """Return a copy with the given fields replaced (None values ignored)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


DEFAULT_CONFIG = VerifyConfig()


PRESETS: Dict[str, Dict[str, Any]] = {
    'baseline': {
        'description': 'Full sweep: 1000 trials per kernel, 1 s benchmark window',
        'n_trials': 1000,
        'bench_window': 1.0,
    },
    'quick': {
        'description': 'Smoke run: 100 trials, short benchmark window',
        'n_trials': 100,
        'bench_window': 0.05,
    },
    'replay': {
        'description': 'Deterministic replay with a fixed seed and no benchmark',
        'n_trials': 1000,
        'bench_window': 0.0,
        'seed': 42,
    },
}


def config_from_preset(name: str) -> VerifyConfig:
    """Build a VerifyConfig from a named preset.

    Raises:
        KeyError: If the preset does not exist.
    """
    if name not in PRESETS:
        raise KeyError(f"Unknown preset '{name}', available: {', '.join(PRESETS)}")
    params = {k: v for k, v in PRESETS[name].items() if k != 'description'}
    return VerifyConfig(**params)
