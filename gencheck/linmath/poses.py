"""Rigid-body poses (position + quaternion).

A pose maps points from a child frame into a parent frame:

    p_parent = R(rot) @ p_child + pos

Poses are named "<child>2<parent>" throughout the package, e.g. obj2world
maps object-frame sensor positions into the world frame and world2lh maps
world points into a lighthouse (tracking base station) frame.

Flat layout: [px, py, pz, qw, qx, qy, qz] (position first).
"""

from dataclasses import dataclass

import numpy as np

from gencheck.linmath.rotations import (
    quat_conjugate,
    quat_rotate_about,
    quat_rotate_vector,
)

POSE_SIZE = 7


@dataclass(frozen=True)
class Pose:
    """Position and orientation of a frame.

    Attributes:
        pos: Translation, shape (3,).
        rot: Orientation quaternion [qw, qx, qy, qz], shape (4,).
    """

    pos: np.ndarray
    rot: np.ndarray

    def __post_init__(self) -> None:
        """Validate field shapes."""
        if np.shape(self.pos) != (3,):
            raise ValueError(f"pos must have shape (3,), got {np.shape(self.pos)}")
        if np.shape(self.rot) != (4,):
            raise ValueError(f"rot must have shape (4,), got {np.shape(self.rot)}")

    @classmethod
    def identity(cls) -> "Pose":
        return cls(pos=np.zeros(3), rot=np.array([1.0, 0.0, 0.0, 0.0]))

    @classmethod
    def from_array(cls, values: np.ndarray) -> "Pose":
        """Build a pose from its 7-element flat layout."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (POSE_SIZE,):
            raise ValueError(f"Pose needs shape ({POSE_SIZE},), got {values.shape}")
        return cls(pos=values[0:3].copy(), rot=values[3:7].copy())

    def to_array(self) -> np.ndarray:
        """Serialize to the 7-element flat layout."""
        return np.concatenate((self.pos, self.rot)).astype(np.float64)


def apply_pose_to_point(pose: Pose, pt: np.ndarray) -> np.ndarray:
    """Transform a point from the pose's child frame into its parent frame."""
    return quat_rotate_vector(pose.rot, pt) + pose.pos


def invert_pose(pose: Pose) -> Pose:
    """Inverse transform (parent to child).

    Uses the quaternion conjugate, so the result is exact for unit
    quaternions.
    """
    rot = quat_conjugate(pose.rot)
    pos = -quat_rotate_vector(rot, pose.pos)
    return Pose(pos=pos, rot=rot)


def apply_pose_to_pose(lhs: Pose, rhs: Pose) -> Pose:
    """Compose two poses: the result applies rhs first, then lhs."""
    return Pose(
        pos=apply_pose_to_point(lhs, rhs.pos),
        rot=quat_rotate_about(lhs.rot, rhs.rot),
    )
