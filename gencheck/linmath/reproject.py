"""Lighthouse (base station) reprojection models.

Maps a sensor point on a tracked object into the sweep angles a base station
would measure for it. Two sensor models are provided:

- Gen1: two orthogonal sweeps; each angle is atan of the normalized image
  coordinate corrected by phase, tilt, curve and gibbous terms.
- Gen2: two slanted sweeps (±30° planes) read by a single rotor; each angle is
  the rotor angle at which the slanted plane hits the point, corrected by
  tilt, curvature (polynomial series), ogee and gibbous terms.

Lighthouse frame convention: the station looks down its -Z axis.

Calibration layout: [phase, tilt, curve, gibpha, gibmag, ogeephase, ogeemag].
"""

from dataclasses import dataclass, fields
from typing import Sequence, Tuple

import numpy as np

from gencheck.linmath.poses import Pose, apply_pose_to_point

CAL_SIZE = 7

# Polynomial for the gen2 curvature correction, highest order first.
GEN2_CURVE_COEFFS = (-8.0108022e-06, 0.0028679863, 5.3685255e-06, 0.0076069798, 0.0, 0.0)


@dataclass(frozen=True)
class BaseStationCal:
    """Per-axis calibration of a base station.

    Attributes:
        phase: Angular offset of the sweep (rad).
        tilt: Tilt of the sweep plane (rad).
        curve: Curvature of the sweep plane.
        gibpha: Phase of the gibbous (sinusoidal) error term (rad).
        gibmag: Magnitude of the gibbous error term.
        ogeephase: Phase of the ogee error term (gen2 only, rad).
        ogeemag: Magnitude of the ogee error term (gen2 only).
    """

    phase: float = 0.0
    tilt: float = 0.0
    curve: float = 0.0
    gibpha: float = 0.0
    gibmag: float = 0.0
    ogeephase: float = 0.0
    ogeemag: float = 0.0

    @classmethod
    def from_array(cls, values: np.ndarray) -> "BaseStationCal":
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (CAL_SIZE,):
            raise ValueError(f"BaseStationCal needs shape ({CAL_SIZE},), got {values.shape}")
        return cls(*(float(v) for v in values))

    def to_array(self) -> np.ndarray:
        return np.array([getattr(self, f.name) for f in fields(self)], dtype=np.float64)


@dataclass(frozen=True)
class CalibrationConfig:
    """Scale factors applied to the gen1 calibration terms."""

    phase_scale: float = 1.0
    tilt_scale: float = 1.0 / 10.0
    curve_scale: float = 1.0 / 10.0
    gib_scale: float = -1.0 / 10.0


DEFAULT_CALIBRATION_CONFIG = CalibrationConfig()


def enforce_range(value: float, lower: float = -1.0, upper: float = 1.0) -> float:
    """Clamp value into [lower, upper] (keeps asin arguments in its domain)."""
    return float(np.clip(value, lower, upper))


# ---------------------------------------------------------------------------
# Gen1
# ---------------------------------------------------------------------------


def reproject_xy(
    cal: Sequence[BaseStationCal],
    pt_lh: np.ndarray,
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
) -> np.ndarray:
    """Gen1 sweep angles for a point already in the lighthouse frame.

    Args:
        cal: Calibration for the x sweep and the y sweep.
        pt_lh: Point in lighthouse frame, shape (3,).
        config: Scale factors for the calibration terms.

    Returns:
        [angle_x, angle_y] in radians.
    """
    X, Y, Z = np.asarray(pt_lh, dtype=np.float64)

    xy = np.array([-X / -Z, Y / -Z])
    ang = np.arctan(xy)

    out = np.empty(2)
    for axis in range(2):
        opp = 1 - axis
        c = cal[axis]

        out[axis] = ang[axis]
        out[axis] -= config.phase_scale * c.phase
        out[axis] -= np.tan(config.tilt_scale * c.tilt) * xy[opp]
        out[axis] -= config.curve_scale * c.curve * xy[opp] * xy[opp]
        out[axis] -= config.gib_scale * np.sin(c.gibpha + ang[axis]) * c.gibmag

    return out


def reproject_full(
    cal: Sequence[BaseStationCal],
    world2lh: Pose,
    obj2world: Pose,
    sensor_pt: np.ndarray,
    config: CalibrationConfig = DEFAULT_CALIBRATION_CONFIG,
) -> np.ndarray:
    """Gen1 reprojection of an object-frame sensor point."""
    world_pt = apply_pose_to_point(obj2world, sensor_pt)
    pt_lh = apply_pose_to_point(world2lh, world_pt)
    return reproject_xy(cal, pt_lh, config)


# ---------------------------------------------------------------------------
# Gen2
# ---------------------------------------------------------------------------


def gen2_curve_series(s: float) -> Tuple[float, float]:
    """Evaluate the gen2 curvature polynomial and its companion series.

    Returns:
        Tuple (mod, acc): the curvature correction at s and the accumulated
        series used in the denominator of the correction.
    """
    m = GEN2_CURVE_COEFFS[0]
    a = 0.0
    for coeff in GEN2_CURVE_COEFFS:
        a = a * s + m
        m = m * s + coeff
    return m, a


def reproject_axis_gen2(cal: BaseStationCal, X: float, Y: float, Z: float, axis: int) -> float:
    """Gen2 sweep angle for one axis.

    X, Y, Z are lighthouse coordinates with Z already flipped to point out of
    the station (positive in front).

    Args:
        cal: Calibration for this sweep.
        X, Y, Z: Point coordinates.
        axis: 0 for the first (+30°) sweep, 1 for the second (-30°) sweep.

    Returns:
        Angle in radians.
    """
    B = np.arctan2(Z, X)

    Ydeg = cal.tilt + (-1.0 if axis else 1.0) * np.pi / 6.0
    tanA = np.tan(Ydeg)
    normXZ = np.sqrt(X * X + Z * Z)

    asinArg = enforce_range(tanA * Y / normXZ)

    sinYdeg = np.sin(Ydeg)
    cosYdeg = np.cos(Ydeg)

    sinPart = np.sin(B - np.arcsin(asinArg) + cal.ogeephase) * cal.ogeemag

    normXYZ = np.sqrt(X * X + Y * Y + Z * Z)

    modAsinArg = enforce_range(Y / normXYZ / cosYdeg)
    asinOut = np.arcsin(modAsinArg)

    mod, acc = gen2_curve_series(asinOut)

    BcalCurved = sinPart + cal.curve
    asinArg2 = enforce_range(asinArg + mod * BcalCurved / (cosYdeg - acc * BcalCurved * sinYdeg))

    asinOut2 = np.arcsin(asinArg2)
    sinOut2 = np.sin(B - asinOut2 + cal.gibpha)

    return float(B - asinOut2 + sinOut2 * cal.gibmag - cal.phase - np.pi / 2.0)


def reproject_axis_x_gen2(cal: BaseStationCal, pt_lh: np.ndarray) -> float:
    """Gen2 first-sweep angle for a point in the lighthouse frame."""
    X, Y, Z = np.asarray(pt_lh, dtype=np.float64)
    return reproject_axis_gen2(cal, X, Y, -Z, 0)


def reproject_axis_y_gen2(cal: BaseStationCal, pt_lh: np.ndarray) -> float:
    """Gen2 second-sweep angle for a point in the lighthouse frame."""
    X, Y, Z = np.asarray(pt_lh, dtype=np.float64)
    return reproject_axis_gen2(cal, X, Y, -Z, 1)


def reproject_xy_gen2(cal: Sequence[BaseStationCal], pt_lh: np.ndarray) -> np.ndarray:
    """Gen2 sweep angles [angle_x, angle_y] for a lighthouse-frame point."""
    return np.array([
        reproject_axis_x_gen2(cal[0], pt_lh),
        reproject_axis_y_gen2(cal[1], pt_lh),
    ])


def reproject_full_gen2(
    cal: Sequence[BaseStationCal],
    world2lh: Pose,
    obj2world: Pose,
    sensor_pt: np.ndarray,
) -> np.ndarray:
    """Gen2 reprojection of an object-frame sensor point."""
    world_pt = apply_pose_to_point(obj2world, sensor_pt)
    pt_lh = apply_pose_to_point(world2lh, world_pt)
    return reproject_xy_gen2(cal, pt_lh)
