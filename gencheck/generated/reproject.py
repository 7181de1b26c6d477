"""Flattened reprojection kernels and analytic Jacobians.

Arguments are flat arrays:
- obj_p, lh_p: poses [px, py, pz, qw, qi, qj, qk] (object-to-world and
  world-to-lighthouse)
- sensor_pt: sensor position in the object frame [x, y, z]
- bsc0, bsc1: calibration [phase, tilt, curve, gibpha, gibmag, ogeephase, ogeemag]
  for the first and second sweep

Jacobians are taken with respect to one argument group and returned as
(outputs, group size) arrays. They are assembled stage by stage: the
derivative of the lighthouse-frame point with respect to the group, then the
gradient of each sweep angle with respect to that point.
"""

import math

import numpy as np

from gencheck.generated.poses import gen_apply_pose_to_pt
from gencheck.generated.rotations import gen_quatrotatevector_jac_pt, gen_quatrotatevector_jac_q

_PI_6 = 0.5235987755982988
_HALF_PI = 1.5707963267948966

_PHASE_SCALE = 1.0
_TILT_SCALE = 0.1
_CURVE_SCALE = 0.1
_GIB_SCALE = -0.1

_CURVE_COEFFS = (-8.0108022e-06, 0.0028679863, 5.3685255e-06, 0.0076069798, 0.0, 0.0)

_EY = np.array([0.0, 1.0, 0.0])


def _clamp(v: float) -> float:
    if v < -1.0:
        return -1.0
    if v > 1.0:
        return 1.0
    return v


def _asin_with_grad(raw: float, d_raw: np.ndarray):
    # Clamped arguments have zero derivative
    if -1.0 < raw < 1.0:
        return math.asin(raw), d_raw / math.sqrt(1.0 - raw * raw)
    return math.asin(_clamp(raw)), np.zeros_like(d_raw)


def _lh_point(obj_p: np.ndarray, sensor_pt: np.ndarray, lh_p: np.ndarray) -> np.ndarray:
    return gen_apply_pose_to_pt(lh_p, gen_apply_pose_to_pt(obj_p, sensor_pt))


def _lh_point_jac(obj_p: np.ndarray, sensor_pt: np.ndarray, lh_p: np.ndarray, wrt: str) -> np.ndarray:
    """d(lighthouse-frame point) / d(group), shape (3, group size)."""
    obj_rot = obj_p[3:7]
    lh_rot = lh_p[3:7]

    if wrt == "obj":
        d_world = np.hstack((np.eye(3), gen_quatrotatevector_jac_q(obj_rot, sensor_pt)))
        return gen_quatrotatevector_jac_pt(lh_rot, sensor_pt) @ d_world
    if wrt == "lh":
        world_pt = gen_apply_pose_to_pt(obj_p, sensor_pt)
        return np.hstack((np.eye(3), gen_quatrotatevector_jac_q(lh_rot, world_pt)))
    if wrt == "pt":
        return gen_quatrotatevector_jac_pt(lh_rot, sensor_pt) @ gen_quatrotatevector_jac_pt(obj_rot, sensor_pt)

    raise ValueError(f"Unknown argument group '{wrt}', expected 'obj', 'lh' or 'pt'")


# ---------------------------------------------------------------------------
# Gen1
# ---------------------------------------------------------------------------


def _gen1_angles(X, Y, Z, bsc0, bsc1) -> np.ndarray:
    x0 = -X / -Z
    x1 = Y / -Z
    x2 = math.atan(x0)
    x3 = math.atan(x1)
    return np.array([
        x2 - (_PHASE_SCALE * bsc0[0]) - (math.tan(_TILT_SCALE * bsc0[1]) * x1)
        - (_CURVE_SCALE * bsc0[2] * x1 * x1) - (_GIB_SCALE * math.sin(bsc0[3] + x2) * bsc0[4]),
        x3 - (_PHASE_SCALE * bsc1[0]) - (math.tan(_TILT_SCALE * bsc1[1]) * x0)
        - (_CURVE_SCALE * bsc1[2] * x0 * x0) - (_GIB_SCALE * math.sin(bsc1[3] + x3) * bsc1[4]),
    ])


def _gen1_angles_grad(X, Y, Z, bsc0, bsc1) -> np.ndarray:
    x0 = -X / -Z
    x1 = Y / -Z
    x2 = math.atan(x0)
    x3 = math.atan(x1)
    d0 = np.array([1.0 / Z, 0.0, -x0 / Z])
    d1 = np.array([0.0, -1.0 / Z, -x1 / Z])
    d2 = d0 / (1 + x0 * x0)
    d3 = d1 / (1 + x1 * x1)
    return np.vstack((
        d2 * (1 - _GIB_SCALE * bsc0[4] * math.cos(bsc0[3] + x2))
        - (math.tan(_TILT_SCALE * bsc0[1]) + 2 * _CURVE_SCALE * bsc0[2] * x1) * d1,
        d3 * (1 - _GIB_SCALE * bsc1[4] * math.cos(bsc1[3] + x3))
        - (math.tan(_TILT_SCALE * bsc1[1]) + 2 * _CURVE_SCALE * bsc1[2] * x0) * d0,
    ))


def gen_reproject(obj_p, sensor_pt, lh_p, bsc0, bsc1) -> np.ndarray:
    X, Y, Z = _lh_point(obj_p, sensor_pt, lh_p)
    return _gen1_angles(X, Y, Z, bsc0, bsc1)


def _gen_reproject_jac(obj_p, sensor_pt, lh_p, bsc0, bsc1, wrt: str) -> np.ndarray:
    X, Y, Z = _lh_point(obj_p, sensor_pt, lh_p)
    return _gen1_angles_grad(X, Y, Z, bsc0, bsc1) @ _lh_point_jac(obj_p, sensor_pt, lh_p, wrt)


def gen_reproject_jac_obj_p(obj_p, sensor_pt, lh_p, bsc0, bsc1) -> np.ndarray:
    return _gen_reproject_jac(obj_p, sensor_pt, lh_p, bsc0, bsc1, "obj")


def gen_reproject_jac_lh_p(obj_p, sensor_pt, lh_p, bsc0, bsc1) -> np.ndarray:
    return _gen_reproject_jac(obj_p, sensor_pt, lh_p, bsc0, bsc1, "lh")


def gen_reproject_jac_sensor_pt(obj_p, sensor_pt, lh_p, bsc0, bsc1) -> np.ndarray:
    return _gen_reproject_jac(obj_p, sensor_pt, lh_p, bsc0, bsc1, "pt")


# ---------------------------------------------------------------------------
# Gen2
# ---------------------------------------------------------------------------


def _gen2_axis(bsc, X, Y, Z, axis: int) -> float:
    phase, tilt, curve, gibpha, gibmag, ogeephase, ogeemag = bsc
    x0 = math.atan2(Z, X)
    x1 = tilt + (-_PI_6 if axis else _PI_6)
    x2 = math.cos(x1)
    x3 = math.sin(x1)
    x4 = math.sqrt((X * X) + (Z * Z))
    x5 = _clamp(math.tan(x1) * Y / x4)
    x6 = ogeemag * math.sin(x0 - math.asin(x5) + ogeephase)
    x7 = math.sqrt((X * X) + (Y * Y) + (Z * Z))
    x8 = math.asin(_clamp(Y / x7 / x2))
    x9 = _CURVE_COEFFS[0]
    x10 = 0.0
    for c in _CURVE_COEFFS:
        x10 = (x10 * x8) + x9
        x9 = (x9 * x8) + c
    x11 = x6 + curve
    x12 = math.asin(_clamp(x5 + (x9 * x11 / (x2 - (x10 * x11 * x3)))))
    return x0 - x12 + (math.sin(x0 - x12 + gibpha) * gibmag) - phase - _HALF_PI


def _gen2_axis_grad(bsc, X, Y, Z, axis: int) -> np.ndarray:
    """Gradient of _gen2_axis with respect to (X, Y, Z)."""
    phase, tilt, curve, gibpha, gibmag, ogeephase, ogeemag = bsc
    x0 = math.atan2(Z, X)
    n2 = (X * X) + (Z * Z)
    d0 = np.array([-Z / n2, 0.0, X / n2])

    x1 = tilt + (-_PI_6 if axis else _PI_6)
    x2 = math.cos(x1)
    x3 = math.sin(x1)
    tan_a = math.tan(x1)

    x4 = math.sqrt(n2)
    d4 = np.array([X / x4, 0.0, Z / x4])

    raw5 = tan_a * Y / x4
    d5 = tan_a * (_EY / x4 - Y * d4 / (x4 * x4)) if -1.0 < raw5 < 1.0 else np.zeros(3)
    x5 = _clamp(raw5)
    x6, d6 = _asin_with_grad(raw5, d5)

    x7 = math.cos(x0 - x6 + ogeephase)
    s_part = ogeemag * math.sin(x0 - x6 + ogeephase)
    d_s_part = ogeemag * x7 * (d0 - d6)

    x8 = math.sqrt((X * X) + (Y * Y) + (Z * Z))
    d8 = np.array([X, Y, Z]) / x8
    raw9 = Y / x8 / x2
    d9 = (_EY / x8 - Y * d8 / (x8 * x8)) / x2
    s, ds = _asin_with_grad(raw9, d9)

    m = _CURVE_COEFFS[0]
    a = 0.0
    dm = 0.0
    da = 0.0
    for c in _CURVE_COEFFS:
        da = (da * s) + a + dm
        a = (a * s) + m
        dm = (dm * s) + m
        m = (m * s) + c
    d_mod = dm * ds
    d_acc = da * ds

    x11 = s_part + curve
    x13 = x2 - (a * x11 * x3)
    d13 = -x3 * ((d_acc * x11) + (a * d_s_part))

    raw12 = x5 + (m * x11 / x13)
    d12 = d5 + ((d_mod * x11) + (m * d_s_part)) / x13 - (m * x11 * d13) / (x13 * x13)
    x12, d12 = _asin_with_grad(raw12, d12)

    x14 = math.cos(x0 - x12 + gibpha)
    return d0 - d12 + gibmag * x14 * (d0 - d12)


def gen_reproject_axis_x_gen2(obj_p, sensor_pt, lh_p, bsc0) -> float:
    X, Y, Z = _lh_point(obj_p, sensor_pt, lh_p)
    return _gen2_axis(bsc0, X, Y, -Z, 0)


def gen_reproject_axis_x_gen2_jac_obj_p(obj_p, sensor_pt, lh_p, bsc0) -> np.ndarray:
    X, Y, Z = _lh_point(obj_p, sensor_pt, lh_p)
    g = _gen2_axis_grad(bsc0, X, Y, -Z, 0) * np.array([1.0, 1.0, -1.0])
    return (g @ _lh_point_jac(obj_p, sensor_pt, lh_p, "obj"))[np.newaxis, :]


def gen_reproject_gen2(obj_p, sensor_pt, lh_p, bsc0, bsc1) -> np.ndarray:
    X, Y, Z = _lh_point(obj_p, sensor_pt, lh_p)
    return np.array([
        _gen2_axis(bsc0, X, Y, -Z, 0),
        _gen2_axis(bsc1, X, Y, -Z, 1),
    ])


def _gen_reproject_gen2_jac(obj_p, sensor_pt, lh_p, bsc0, bsc1, wrt: str) -> np.ndarray:
    X, Y, Z = _lh_point(obj_p, sensor_pt, lh_p)
    flip = np.array([1.0, 1.0, -1.0])
    grad = np.vstack((
        _gen2_axis_grad(bsc0, X, Y, -Z, 0) * flip,
        _gen2_axis_grad(bsc1, X, Y, -Z, 1) * flip,
    ))
    return grad @ _lh_point_jac(obj_p, sensor_pt, lh_p, wrt)


def gen_reproject_gen2_jac_obj_p(obj_p, sensor_pt, lh_p, bsc0, bsc1) -> np.ndarray:
    return _gen_reproject_gen2_jac(obj_p, sensor_pt, lh_p, bsc0, bsc1, "obj")


def gen_reproject_gen2_jac_lh_p(obj_p, sensor_pt, lh_p, bsc0, bsc1) -> np.ndarray:
    return _gen_reproject_gen2_jac(obj_p, sensor_pt, lh_p, bsc0, bsc1, "lh")


def gen_reproject_gen2_jac_sensor_pt(obj_p, sensor_pt, lh_p, bsc0, bsc1) -> np.ndarray:
    return _gen_reproject_gen2_jac(obj_p, sensor_pt, lh_p, bsc0, bsc1, "pt")
