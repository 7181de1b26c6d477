"""Flattened pose kernels and analytic Jacobians.

Poses are flat [px, py, pz, qw, qi, qj, qk] arrays.
"""

import numpy as np

from gencheck.generated.rotations import (
    gen_quatrotateabout_jac_q1,
    gen_quatrotateabout_jac_q2,
    gen_quatrotatevector,
    gen_quatrotatevector_jac_pt,
    gen_quatrotatevector_jac_q,
)

# d(conjugate) / d(q)
_CONJ = np.diag([1.0, -1.0, -1.0, -1.0])


def gen_apply_pose_to_pt(pose: np.ndarray, pt: np.ndarray) -> np.ndarray:
    px, py, pz, qw, qi, qj, qk = pose
    sx, sy, sz = pt
    x0 = (qi * sx) + (qj * sy) + (qk * sz)
    x1 = (qi * qi) + (qj * qj) + (qk * qk)
    return np.array([
        px + sx + 2 * ((qw * ((qj * sz) - (qk * sy))) + (qi * x0) - (sx * x1)),
        py + sy + 2 * ((qw * ((qk * sx) - (qi * sz))) + (qj * x0) - (sy * x1)),
        pz + sz + 2 * ((qw * ((qi * sy) - (qj * sx))) + (qk * x0) - (sz * x1)),
    ])


def gen_apply_pose_to_pt_jac_pose(pose: np.ndarray, pt: np.ndarray) -> np.ndarray:
    return np.hstack((np.eye(3), gen_quatrotatevector_jac_q(pose[3:7], pt)))


def gen_apply_pose_to_pt_jac_pt(pose: np.ndarray, pt: np.ndarray) -> np.ndarray:
    return gen_quatrotatevector_jac_pt(pose[3:7], pt)


def gen_invert_pose(pose: np.ndarray) -> np.ndarray:
    px, py, pz, qw, qi, qj, qk = pose
    x0 = (qi * px) + (qj * py) + (qk * pz)
    x1 = (qi * qi) + (qj * qj) + (qk * qk)
    return np.array([
        -px + 2 * ((qw * ((qj * pz) - (qk * py))) - (qi * x0) + (px * x1)),
        -py + 2 * ((qw * ((qk * px) - (qi * pz))) - (qj * x0) + (py * x1)),
        -pz + 2 * ((qw * ((qi * py) - (qj * px))) - (qk * x0) + (pz * x1)),
        qw,
        -qi,
        -qj,
        -qk,
    ])


def gen_invert_pose_jac_pose(pose: np.ndarray) -> np.ndarray:
    pos = pose[0:3]
    conj = _CONJ @ pose[3:7]

    jac = np.zeros((7, 7))
    jac[0:3, 0:3] = -gen_quatrotatevector_jac_pt(conj, pos)
    jac[0:3, 3:7] = -gen_quatrotatevector_jac_q(conj, pos) @ _CONJ
    jac[3:7, 3:7] = _CONJ
    return jac


def gen_apply_pose_to_pose(lhs: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    lw, li, lj, lk = lhs[3:7]
    rw, ri, rj, rk = rhs[3:7]
    return np.concatenate((
        gen_quatrotatevector(lhs[3:7], rhs[0:3]) + lhs[0:3],
        [
            (lw * rw) - (li * ri) - (lj * rj) - (lk * rk),
            (lw * ri) + (li * rw) + (lj * rk) - (lk * rj),
            (lw * rj) - (li * rk) + (lj * rw) + (lk * ri),
            (lw * rk) + (li * rj) - (lj * ri) + (lk * rw),
        ],
    ))


def gen_apply_pose_to_pose_jac_lhs(lhs: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    jac = np.zeros((7, 7))
    jac[0:3, 0:3] = np.eye(3)
    jac[0:3, 3:7] = gen_quatrotatevector_jac_q(lhs[3:7], rhs[0:3])
    jac[3:7, 3:7] = gen_quatrotateabout_jac_q1(lhs[3:7], rhs[3:7])
    return jac


def gen_apply_pose_to_pose_jac_rhs(lhs: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    jac = np.zeros((7, 7))
    jac[0:3, 0:3] = gen_quatrotatevector_jac_pt(lhs[3:7], rhs[0:3])
    jac[3:7, 3:7] = gen_quatrotateabout_jac_q2(lhs[3:7], rhs[3:7])
    return jac
