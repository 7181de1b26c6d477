"""Unit tests for lighthouse reprojection models."""

import unittest

import numpy as np

from gencheck.linmath.poses import Pose
from gencheck.linmath.reproject import (
    CAL_SIZE,
    GEN2_CURVE_COEFFS,
    BaseStationCal,
    CalibrationConfig,
    enforce_range,
    gen2_curve_series,
    reproject_axis_x_gen2,
    reproject_axis_y_gen2,
    reproject_full,
    reproject_full_gen2,
    reproject_xy,
    reproject_xy_gen2,
)

ZERO_CAL = (BaseStationCal(), BaseStationCal())


class TestBaseStationCal(unittest.TestCase):
    """Test cases for the calibration record."""

    def test_field_order(self) -> None:
        cal = BaseStationCal.from_array(np.arange(CAL_SIZE, dtype=float))
        self.assertEqual(cal.phase, 0.0)
        self.assertEqual(cal.tilt, 1.0)
        self.assertEqual(cal.curve, 2.0)
        self.assertEqual(cal.gibpha, 3.0)
        self.assertEqual(cal.gibmag, 4.0)
        self.assertEqual(cal.ogeephase, 5.0)
        self.assertEqual(cal.ogeemag, 6.0)
        np.testing.assert_array_equal(cal.to_array(), np.arange(CAL_SIZE))

    def test_wrong_size(self) -> None:
        with self.assertRaises(ValueError):
            BaseStationCal.from_array(np.zeros(6))


class TestHelpers(unittest.TestCase):
    """Test cases for range clamping and the curvature series."""

    def test_enforce_range(self) -> None:
        self.assertEqual(enforce_range(1.5), 1.0)
        self.assertEqual(enforce_range(-3.0), -1.0)
        self.assertEqual(enforce_range(0.25), 0.25)

    def test_curve_series_at_zero(self) -> None:
        mod, acc = gen2_curve_series(0.0)
        self.assertEqual(mod, GEN2_CURVE_COEFFS[-1])
        self.assertEqual(acc, GEN2_CURVE_COEFFS[-2])

    def test_curve_series_is_polynomial(self) -> None:
        """mod is the polynomial with a leading coefficient repeated (Horner form)."""
        s = 0.3
        coeffs = (GEN2_CURVE_COEFFS[0],) + GEN2_CURVE_COEFFS
        mod, acc = gen2_curve_series(s)
        self.assertAlmostEqual(mod, np.polyval(coeffs, s), places=15)
        self.assertAlmostEqual(acc, np.polyval(np.polyder(coeffs), s), places=15)


class TestGen1(unittest.TestCase):
    """Test cases for the gen1 model."""

    def test_point_on_axis(self) -> None:
        np.testing.assert_allclose(reproject_xy(ZERO_CAL, np.array([0.0, 0.0, -1.0])), [0.0, 0.0])

    def test_uncalibrated_angles_are_atan(self) -> None:
        pt = np.array([0.3, -0.2, -2.0])
        np.testing.assert_allclose(
            reproject_xy(ZERO_CAL, pt), [np.arctan(-0.3 / 2.0), np.arctan(-0.2 / 2.0)], atol=1e-15,
        )

    def test_phase_offsets_angle(self) -> None:
        cal = (BaseStationCal(phase=0.1), BaseStationCal(phase=-0.2))
        np.testing.assert_allclose(reproject_xy(cal, np.array([0.0, 0.0, -1.0])), [-0.1, 0.2])

    def test_config_scales(self) -> None:
        cal = (BaseStationCal(phase=0.1), BaseStationCal())
        config = CalibrationConfig(phase_scale=2.0)
        out = reproject_xy(cal, np.array([0.0, 0.0, -1.0]), config)
        self.assertAlmostEqual(out[0], -0.2)

    def test_full_chain_applies_both_poses(self) -> None:
        obj2world = Pose(pos=np.array([0.0, 0.0, 1.0]), rot=np.array([1.0, 0.0, 0.0, 0.0]))
        world2lh = Pose(pos=np.array([0.0, 0.0, -3.0]), rot=np.array([1.0, 0.0, 0.0, 0.0]))
        sensor = np.array([0.2, 0.0, 0.0])

        expected = reproject_xy(ZERO_CAL, np.array([0.2, 0.0, -2.0]))
        np.testing.assert_allclose(reproject_full(ZERO_CAL, world2lh, obj2world, sensor), expected)


class TestGen2(unittest.TestCase):
    """Test cases for the gen2 model."""

    def test_point_on_axis(self) -> None:
        pt = np.array([0.0, 0.0, -1.0])
        self.assertAlmostEqual(reproject_axis_x_gen2(ZERO_CAL[0], pt), 0.0, places=12)
        self.assertAlmostEqual(reproject_axis_y_gen2(ZERO_CAL[1], pt), 0.0, places=12)

    def test_recorded_calibration(self) -> None:
        """Angle recorded from a real base station calibration."""
        cal = BaseStationCal(
            phase=0.0,
            tilt=-0.047119140625,
            curve=0.15478515625,
            gibpha=2.369140625,
            gibmag=-0.00440216064453125,
            ogeephase=0.4765625,
            ogeemag=-0.1766357421875,
        )
        pt = np.array([0.37831748940152643, -0.29826620924843278, -3.0530035758130878])

        ang = reproject_axis_x_gen2(cal, pt) + 2.0 * np.pi / 3.0
        self.assertAlmostEqual(ang, 2.024090911337, delta=1e-5)

    def test_sweeps_are_mirrored_in_y(self) -> None:
        """The ±30° planes swap roles when the point is mirrored across y = 0."""
        pt = np.array([0.3, 0.4, -2.0])
        mirrored = pt * np.array([1.0, -1.0, 1.0])
        self.assertAlmostEqual(
            reproject_axis_x_gen2(ZERO_CAL[0], pt), reproject_axis_y_gen2(ZERO_CAL[1], mirrored), places=12,
        )

    def test_extreme_elevation_is_clamped(self) -> None:
        """Points far above the sweep fan keep asin in its domain."""
        out = reproject_xy_gen2(ZERO_CAL, np.array([0.0, 50.0, -0.01]))
        self.assertTrue(np.all(np.isfinite(out)))

    def test_full_chain(self) -> None:
        identity = Pose.identity()
        pt = np.array([0.1, -0.1, -2.0])
        np.testing.assert_allclose(
            reproject_full_gen2(ZERO_CAL, identity, identity, pt), reproject_xy_gen2(ZERO_CAL, pt),
        )


if __name__ == "__main__":
    unittest.main()
