"""Reference quaternion math.

Hand-written reference implementations of the rotation kernels that the
generated code is checked against:
- Euler angles to quaternion (used by the random input generators)
- Quaternion product ("rotate about")
- Rotating a vector by a quaternion
- Axis-angle to quaternion and angular-velocity application

Conventions:
- Quaternions: [qw, qx, qy, qz] where qw is the scalar part
- Euler angles: [roll, pitch, yaw] in radians (ZYX/3-2-1 convention)
- Axis-angle: 3-vector whose direction is the axis and whose norm is the angle

The functions here deliberately do not normalize their quaternion inputs, so
they stay smooth polynomials away from the unit sphere. That is what lets the
Jacobian checks perturb quaternion components independently.
"""

import numpy as np
from numpy.typing import NDArray


def _elementary_quat(angle: float, axis: int) -> NDArray[np.float64]:
    q = np.zeros(4, dtype=np.float64)
    q[0] = np.cos(angle / 2.0)
    q[axis] = np.sin(angle / 2.0)
    return q


def euler_to_quat(
    roll: float,
    pitch: float,
    yaw: float,
) -> NDArray[np.float64]:
    """Unit quaternion for a yaw, then pitch, then roll rotation sequence.

    Built as the product q_z(yaw) ⊗ q_y(pitch) ⊗ q_x(roll) of single-axis
    rotations. The input generators draw all three angles uniformly, so
    sampled orientations are not uniform over the rotation group.
    """
    return quat_rotate_about(
        _elementary_quat(yaw, 3),
        quat_rotate_about(_elementary_quat(pitch, 2), _elementary_quat(roll, 1)),
    )


def quat_conjugate(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Return the conjugate [qw, -qx, -qy, -qz] (the inverse of a unit quaternion)."""
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.float64)


def quat_rotate_about(
    q1: NDArray[np.float64],
    q2: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Hamilton product q1 ⊗ q2.

    Composes two rotations: rotating by the result is the same as rotating
    by q2 first and then by q1.

    Args:
        q1: Left quaternion [qw, qx, qy, qz].
        q2: Right quaternion [qw, qx, qy, qz].

    Returns:
        Product quaternion, shape (4,).
    """
    w1, v1 = q1[0], np.asarray(q1[1:4], dtype=np.float64)
    w2, v2 = q2[0], np.asarray(q2[1:4], dtype=np.float64)

    w = w1 * w2 - np.dot(v1, v2)
    v = w1 * v2 + w2 * v1 + np.cross(v1, v2)

    return np.concatenate(([w], v))


def quat_rotate_vector(
    q: NDArray[np.float64],
    v: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Rotate a 3-vector by a quaternion.

    Uses the two-cross-product form

        t = u × v + qw * v
        v' = v + 2 * u × t

    where u = [qx, qy, qz].

    Args:
        q: Quaternion [qw, qx, qy, qz].
        v: Vector, shape (3,).

    Returns:
        Rotated vector, shape (3,).

    Raises:
        ValueError: If v is not a 3-element array.
    """
    v = np.asarray(v, dtype=np.float64)
    if v.shape != (3,):
        raise ValueError(f"v must have shape (3,), got {v.shape}")

    u = np.asarray(q[1:4], dtype=np.float64)
    t = np.cross(u, v) + q[0] * v

    return v + 2.0 * np.cross(u, t)


def quat_from_axis_angle(axis_angle: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert an axis-angle 3-vector to a unit quaternion.

    Args:
        axis_angle: Rotation vector; its norm is the angle in radians.

    Returns:
        Unit quaternion [qw, qx, qy, qz]. The zero vector maps to identity.
    """
    axis_angle = np.asarray(axis_angle, dtype=np.float64)
    angle = np.linalg.norm(axis_angle)

    if angle == 0.0:
        return np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)

    half = angle / 2.0
    return np.concatenate(([np.cos(half)], np.sin(half) / angle * axis_angle))


def apply_ang_velocity(
    omega: NDArray[np.float64],
    t: float,
    q0: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Propagate an orientation under constant angular velocity.

    Computes exp(ω t) ⊗ q0, i.e. the rotation accumulated over t seconds is
    applied on the left of the starting orientation.

    Args:
        omega: Angular velocity as an axis-angle rate, shape (3,). Units: rad/s.
        t: Elapsed time in seconds (may be negative).
        q0: Starting orientation [qw, qx, qy, qz].

    Returns:
        Propagated orientation, shape (4,).
    """
    q_delta = quat_from_axis_angle(np.asarray(omega, dtype=np.float64) * t)
    return quat_rotate_about(q_delta, q0)


def rot_predict_quat(
    t: float,
    state: NDArray[np.float64],
) -> NDArray[np.float64]:
    """Rotation-only IMU process model.

    Args:
        t: Prediction interval in seconds.
        state: [qw, qx, qy, qz, wx, wy, wz] orientation plus angular velocity.

    Returns:
        Predicted state with the same layout; the angular velocity is carried
        over unchanged.

    Raises:
        ValueError: If state is not a 7-element array.
    """
    state = np.asarray(state, dtype=np.float64)
    if state.shape != (7,):
        raise ValueError(f"state must have shape (7,), got {state.shape}")

    rot = state[0:4]
    vel = state[4:7]

    return np.concatenate((apply_ang_velocity(vel, t, rot), vel))
