"""Flattened quaternion kernels and their analytic Jacobians.

Layout follows code-generator output: scalar unpacking, one temporary per
shared subexpression, explicit component formulas and no calls into the
reference library. Jacobians are returned as (outputs, inputs) arrays, i.e.
output-major rows of per-input partial derivatives.

Quaternions are [qw, qi, qj, qk].
"""

import math

import numpy as np


def gen_quatrotateabout(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    w1, i1, j1, k1 = q1
    w2, i2, j2, k2 = q2
    return np.array([
        (w1 * w2) - (i1 * i2) - (j1 * j2) - (k1 * k2),
        (w1 * i2) + (i1 * w2) + (j1 * k2) - (k1 * j2),
        (w1 * j2) - (i1 * k2) + (j1 * w2) + (k1 * i2),
        (w1 * k2) + (i1 * j2) - (j1 * i2) + (k1 * w2),
    ])


def gen_quatrotateabout_jac_q1(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    w2, i2, j2, k2 = q2
    return np.array([
        [w2, -i2, -j2, -k2],
        [i2, w2, k2, -j2],
        [j2, -k2, w2, i2],
        [k2, j2, -i2, w2],
    ])


def gen_quatrotateabout_jac_q2(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    w1, i1, j1, k1 = q1
    return np.array([
        [w1, -i1, -j1, -k1],
        [i1, w1, -k1, j1],
        [j1, k1, w1, -i1],
        [k1, -j1, i1, w1],
    ])


def gen_quatrotatevector(q: np.ndarray, pt: np.ndarray) -> np.ndarray:
    qw, qi, qj, qk = q
    px, py, pz = pt
    x0 = (qi * px) + (qj * py) + (qk * pz)
    x1 = (qi * qi) + (qj * qj) + (qk * qk)
    x2 = (qj * pz) - (qk * py)
    x3 = (qk * px) - (qi * pz)
    x4 = (qi * py) - (qj * px)
    return np.array([
        px + 2 * ((qw * x2) + (qi * x0) - (px * x1)),
        py + 2 * ((qw * x3) + (qj * x0) - (py * x1)),
        pz + 2 * ((qw * x4) + (qk * x0) - (pz * x1)),
    ])


def gen_quatrotatevector_jac_q(q: np.ndarray, pt: np.ndarray) -> np.ndarray:
    qw, qi, qj, qk = q
    px, py, pz = pt
    x0 = (qi * px) + (qj * py) + (qk * pz)
    x1 = 2 * qw
    return np.array([
        [
            2 * ((qj * pz) - (qk * py)),
            2 * (x0 - (qi * px)),
            (x1 * pz) + 2 * ((qi * py) - 2 * (px * qj)),
            (-x1 * py) + 2 * ((qi * pz) - 2 * (px * qk)),
        ],
        [
            2 * ((qk * px) - (qi * pz)),
            (-x1 * pz) + 2 * ((qj * px) - 2 * (py * qi)),
            2 * (x0 - (qj * py)),
            (x1 * px) + 2 * ((qj * pz) - 2 * (py * qk)),
        ],
        [
            2 * ((qi * py) - (qj * px)),
            (x1 * py) + 2 * ((qk * px) - 2 * (pz * qi)),
            (-x1 * px) + 2 * ((qk * py) - 2 * (pz * qj)),
            2 * (x0 - (qk * pz)),
        ],
    ])


def gen_quatrotatevector_jac_pt(q: np.ndarray, pt: np.ndarray) -> np.ndarray:
    qw, qi, qj, qk = q
    x0 = 1 - 2 * ((qi * qi) + (qj * qj) + (qk * qk))
    x1 = 2 * qw
    return np.array([
        [x0 + 2 * (qi * qi), (-x1 * qk) + 2 * (qi * qj), (x1 * qj) + 2 * (qi * qk)],
        [(x1 * qk) + 2 * (qj * qi), x0 + 2 * (qj * qj), (-x1 * qi) + 2 * (qj * qk)],
        [(-x1 * qj) + 2 * (qk * qi), (x1 * qi) + 2 * (qk * qj), x0 + 2 * (qk * qk)],
    ])


def _axis_angle_quat(rx: float, ry: float, rz: float):
    x0 = math.sqrt((rx * rx) + (ry * ry) + (rz * rz))
    if x0 == 0:
        return 1.0, 0.0, 0.0, 0.0, x0
    x1 = 0.5 * x0
    x2 = math.sin(x1) / x0
    return math.cos(x1), x2 * rx, x2 * ry, x2 * rz, x0


def gen_apply_ang_velocity(omega: np.ndarray, t: float, q: np.ndarray) -> np.ndarray:
    wx, wy, wz = omega
    dw, di, dj, dk, _ = _axis_angle_quat(wx * t, wy * t, wz * t)
    return gen_quatrotateabout((dw, di, dj, dk), q)


def gen_imu_rot_f(t: float, state: np.ndarray) -> np.ndarray:
    qw, qi, qj, qk, wx, wy, wz = state
    dw, di, dj, dk, _ = _axis_angle_quat(wx * t, wy * t, wz * t)
    return np.array([
        (dw * qw) - (di * qi) - (dj * qj) - (dk * qk),
        (dw * qi) + (di * qw) + (dj * qk) - (dk * qj),
        (dw * qj) - (di * qk) + (dj * qw) + (dk * qi),
        (dw * qk) + (di * qj) - (dj * qi) + (dk * qw),
        wx,
        wy,
        wz,
    ])


def gen_imu_rot_f_jac_q(t: float, state: np.ndarray) -> np.ndarray:
    wx, wy, wz = state[4:7]
    dw, di, dj, dk, _ = _axis_angle_quat(wx * t, wy * t, wz * t)
    return np.array([
        [dw, -di, -dj, -dk],
        [di, dw, -dk, dj],
        [dj, dk, dw, -di],
        [dk, -dj, di, dw],
        [0.0, 0.0, 0.0, 0.0],
        [0.0, 0.0, 0.0, 0.0],
        [0.0, 0.0, 0.0, 0.0],
    ])


def gen_imu_rot_f_jac_vel(t: float, state: np.ndarray) -> np.ndarray:
    qw, qi, qj, qk, wx, wy, wz = state
    r = np.array([wx * t, wy * t, wz * t])
    x0 = math.sqrt(float(r @ r))
    if x0 < 1e-8:
        # Series limits of sin(h)/theta and its derivative as theta -> 0
        x1, x2 = 0.5, -1.0 / 24.0
    else:
        x3 = 0.5 * x0
        x1 = math.sin(x3) / x0
        x2 = ((math.cos(x3) * x3) - math.sin(x3)) / (x0 * x0 * x0)

    # d(delta quaternion) / d(r), shape (4, 3)
    d_delta = np.vstack((-0.5 * x1 * r, x1 * np.eye(3) + x2 * np.outer(r, r)))

    # d(delta ⊗ q) / d(delta), shape (4, 4)
    d_prod = np.array([
        [qw, -qi, -qj, -qk],
        [qi, qw, qk, -qj],
        [qj, -qk, qw, qi],
        [qk, qj, -qi, qw],
    ])

    return np.vstack((t * (d_prod @ d_delta), np.eye(3)))
