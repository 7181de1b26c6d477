"""Unit tests for the value-equivalence sweep."""

import io
import unittest

import numpy as np

from gencheck.verify.config import VerifyConfig
from gencheck.verify.equivalence import check_equivalence
from gencheck.verify.generators import PointGenerator
from gencheck.verify.types import FunctionUnderTest, GeneratedKernel, JacobianDef, Kernel


class Cube(Kernel):
    name = "cube"

    def evaluate(self, x):
        return x ** 3


class GenCube(GeneratedKernel):
    name = "gen_cube"

    def evaluate(self, x):
        return x * x * x

    def evaluate_jacobian(self, x, wrt):
        return np.diag(3.0 * x * x)


class GenCubeOffByOneHalfSpace(GenCube):
    """Wrong whenever the first coordinate is positive."""

    def evaluate(self, x):
        out = x * x * x
        if x[0] > 0:
            out = out + 1e-3
        return out


class GenCubeShifted(GenCube):
    """Every output one larger than the reference."""

    def evaluate(self, x):
        return x * x * x + 1.0


class GenCubeWrongSize(GenCube):
    def evaluate(self, x):
        return np.zeros(2)


def make_fut(generated):
    return FunctionUnderTest(
        name="cube",
        reference=Cube(),
        generated=generated,
        generator=PointGenerator(1.0),
        n_outputs=3,
        jacobians=(JacobianDef("x", 0, 3),),
    )


class TestCheckEquivalence(unittest.TestCase):
    """Test cases for check_equivalence."""

    def setUp(self) -> None:
        self.config = VerifyConfig(n_trials=50, bench_window=0.0, seed=0)
        self.stream = io.StringIO()

    def test_matching_kernels(self) -> None:
        result = check_equivalence(make_fut(GenCube()), config=self.config, stream=self.stream)

        self.assertLess(result.error, 1e-12)
        self.assertEqual(result.n_failures, 0)
        self.assertEqual(result.n_trials, 50)
        self.assertTrue(result.passed(self.config.tolerance))
        self.assertIsNone(result.generated_hz)
        self.assertNotIn("eval mismatch", self.stream.getvalue())

    def test_mismatches_are_counted_not_fatal(self) -> None:
        result = check_equivalence(
            make_fut(GenCubeOffByOneHalfSpace()), config=self.config, stream=self.stream,
        )

        # Roughly half of the trials land in the wrong half-space
        self.assertGreater(result.n_failures, 5)
        self.assertLess(result.n_failures, 45)
        self.assertAlmostEqual(result.max_trial_error, 1e-3, places=9)
        self.assertIn("cube eval mismatch:", self.stream.getvalue())

    def test_headline_error_comes_from_final_sample(self) -> None:
        result = check_equivalence(
            make_fut(GenCubeOffByOneHalfSpace()), config=self.config, stream=self.stream,
        )
        expected = 1e-3 if result.x[0] > 0 else 0.0
        self.assertAlmostEqual(result.error, expected, places=9)
        np.testing.assert_allclose(result.reference_output, result.x ** 3)

    def test_same_seed_same_result(self) -> None:
        fut = make_fut(GenCubeOffByOneHalfSpace())
        a = check_equivalence(fut, config=self.config, stream=io.StringIO())
        b = check_equivalence(fut, config=self.config, stream=io.StringIO())
        self.assertEqual(a.n_failures, b.n_failures)
        np.testing.assert_array_equal(a.x, b.x)

    def test_benchmark_summary_line(self) -> None:
        config = VerifyConfig(n_trials=5, bench_window=0.01, seed=1)
        result = check_equivalence(make_fut(GenCube()), config=config, stream=self.stream)

        self.assertGreater(result.generated_hz, 0.0)
        self.assertGreater(result.reference_hz, 0.0)
        line = self.stream.getvalue().splitlines()[0]
        self.assertTrue(line.startswith("Testing generated cube"))
        self.assertIn("kHz nongen:", line)

    def test_zero_trials_still_checks_final_sample(self) -> None:
        config = VerifyConfig(n_trials=0, bench_window=0.0, seed=2)
        result = check_equivalence(make_fut(GenCube()), config=config, stream=self.stream)
        self.assertEqual(result.n_failures, 0)
        self.assertEqual(result.x.shape, (3,))

    def test_differences_row_is_absolute(self) -> None:
        config = VerifyConfig(n_trials=0, bench_window=0.0, seed=2)
        result = check_equivalence(make_fut(GenCubeShifted()), config=config, stream=self.stream)

        row = next(line for line in self.stream.getvalue().splitlines()
                   if line.strip().startswith("Differences:"))
        diffs = [float(tok) for tok in row.split("\t")[1:] if tok.strip()]
        self.assertEqual(diffs, [1.0, 1.0, 1.0])
        self.assertAlmostEqual(result.error, 1.0)

    def test_progress_bar(self) -> None:
        result = check_equivalence(
            make_fut(GenCube()), config=self.config, stream=self.stream, progress=True,
        )
        self.assertEqual(result.n_failures, 0)

    def test_output_size_is_checked(self) -> None:
        with self.assertRaises(ValueError):
            check_equivalence(make_fut(GenCubeWrongSize()), config=self.config, stream=self.stream)


if __name__ == "__main__":
    unittest.main()
