"""Unit tests for verification configuration and presets."""

import unittest

import numpy as np

from gencheck.verify.config import DEFAULT_CONFIG, PRESETS, VerifyConfig, config_from_preset


class TestVerifyConfig(unittest.TestCase):
    """Test cases for VerifyConfig."""

    def test_defaults(self) -> None:
        self.assertEqual(DEFAULT_CONFIG.tolerance, 1e-5)
        self.assertEqual(DEFAULT_CONFIG.n_trials, 1000)
        self.assertEqual(DEFAULT_CONFIG.richardson_rows, 10)
        self.assertEqual(DEFAULT_CONFIG.initial_step, 2.0)
        self.assertEqual(DEFAULT_CONFIG.bench_window, 1.0)
        self.assertIsNone(DEFAULT_CONFIG.seed)

    def test_invalid_values(self) -> None:
        invalid = [
            {"tolerance": 0.0},
            {"n_trials": -1},
            {"richardson_rows": 0},
            {"initial_step": -1.0},
            {"bench_window": -0.5},
        ]
        for kwargs in invalid:
            with self.subTest(**kwargs):
                with self.assertRaises(ValueError):
                    VerifyConfig(**kwargs)

    def test_seeded_rng_is_reproducible(self) -> None:
        config = VerifyConfig(seed=3)
        np.testing.assert_array_equal(
            config.make_rng().uniform(size=5), config.make_rng().uniform(size=5),
        )

    def test_with_overrides_ignores_none(self) -> None:
        config = DEFAULT_CONFIG.with_overrides(seed=None, n_trials=10)
        self.assertEqual(config.n_trials, 10)
        self.assertIsNone(config.seed)
        self.assertEqual(config.bench_window, DEFAULT_CONFIG.bench_window)

    def test_with_overrides_validates(self) -> None:
        with self.assertRaises(ValueError):
            DEFAULT_CONFIG.with_overrides(n_trials=-5)


class TestPresets(unittest.TestCase):
    """Test cases for named presets."""

    def test_all_presets_build(self) -> None:
        for name in PRESETS:
            with self.subTest(preset=name):
                self.assertIsInstance(config_from_preset(name), VerifyConfig)

    def test_replay_is_seeded_without_benchmark(self) -> None:
        config = config_from_preset("replay")
        self.assertIsNotNone(config.seed)
        self.assertEqual(config.bench_window, 0.0)

    def test_unknown_preset(self) -> None:
        with self.assertRaises(KeyError):
            config_from_preset("nonexistent")


if __name__ == "__main__":
    unittest.main()
