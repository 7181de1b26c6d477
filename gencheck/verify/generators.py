"""Randomized input generators.

An input generator produces one complete argument list for a kernel as a
flat array (an "input block"). Every generator reports a constant `length`
and fills a buffer of exactly that length with one fresh, valid sample.

Composite generators fill contiguous sub-ranges of one buffer by running
simpler field generators in order, so the layout of an input block is the
concatenation of its fields.

Sampling ranges:
    - Quaternions: random Euler angles in [-π, π], converted to a unit
      quaternion (not drawn uniformly on the 4-sphere)
    - Axis-angle vectors: each component in [-2π, 0]
    - Points: unit cube [-0.5, 0.5]³ or ten-unit cube [-5, 5]³
    - Calibration fields: [-0.25, 0.25]
"""

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

from gencheck.linmath.poses import POSE_SIZE
from gencheck.linmath.reproject import CAL_SIZE
from gencheck.linmath.rotations import euler_to_quat

SCALAR_DTYPE = np.float64


def next_rand(rng: np.random.Generator, span: float) -> float:
    """Uniform sample in [-span/2, span/2]."""
    return float(rng.uniform(-span / 2.0, span / 2.0))


class InputGenerator(ABC):
    """Produces randomized input blocks of a fixed length."""

    @property
    @abstractmethod
    def length(self) -> int:
        """Number of scalars in one input block."""

    @abstractmethod
    def _fill(self, buffer: np.ndarray, rng: np.random.Generator) -> None:
        pass

    def fill(self, buffer: np.ndarray, rng: np.random.Generator) -> None:
        """Write one fresh sample into buffer.

        Raises:
            ValueError: If buffer is not a 1-D array of `length` scalars.
        """
        if buffer.shape != (self.length,):
            raise ValueError(f"buffer must have shape ({self.length},), got {buffer.shape}")
        self._fill(buffer, rng)

    def sample(self, rng: np.random.Generator) -> np.ndarray:
        """Allocate and fill a new input block."""
        buffer = np.full(self.length, np.nan, dtype=SCALAR_DTYPE)
        self.fill(buffer, rng)
        return buffer


class QuatGenerator(InputGenerator):
    """Unit quaternion from random Euler angles."""

    length = 4

    def _fill(self, buffer, rng):
        roll, pitch, yaw = (next_rand(rng, 2 * np.pi) for _ in range(3))
        buffer[:] = euler_to_quat(roll, pitch, yaw)


class AxisAngleGenerator(InputGenerator):
    """Axis-angle vector with components in [-2π, 0]."""

    length = 3

    def _fill(self, buffer, rng):
        for i in range(3):
            buffer[i] = next_rand(rng, 2 * np.pi) - np.pi


class PointGenerator(InputGenerator):
    """Point uniformly distributed in a cube of side `scale` centered at the origin."""

    length = 3

    def __init__(self, scale: float = 1.0):
        if not scale > 0:
            raise ValueError(f"scale must be positive, got {scale}")
        self.scale = scale

    def _fill(self, buffer, rng):
        for i in range(3):
            buffer[i] = next_rand(rng, self.scale)


class PoseGenerator(InputGenerator):
    """Pose with position in the ten-unit cube and a random orientation."""

    length = POSE_SIZE

    def __init__(self):
        self._position = PointGenerator(10.0)
        self._rotation = QuatGenerator()

    def _fill(self, buffer, rng):
        self._position.fill(buffer[0:3], rng)
        self._rotation.fill(buffer[3:7], rng)


class CalibrationGenerator(InputGenerator):
    """Base-station calibration record with every field in [-0.25, 0.25]."""

    length = CAL_SIZE

    def _fill(self, buffer, rng):
        for i in range(CAL_SIZE):
            buffer[i] = next_rand(rng, 0.5)


class ScalarGenerator(InputGenerator):
    """Single scalar in [-span/2, span/2]."""

    length = 1

    def __init__(self, span: float):
        self.span = span

    def _fill(self, buffer, rng):
        buffer[0] = next_rand(rng, self.span)


class CompositeGenerator(InputGenerator):
    """Concatenation of field generators in one buffer.

    Args:
        fields: Field generators, filled in order into consecutive ranges.

    Example:
        >>> gen = CompositeGenerator([QuatGenerator(), AxisAngleGenerator()])
        >>> x = gen.sample(np.random.default_rng(0))
        >>> x.shape
        (7,)
    """

    def __init__(self, fields: Sequence[InputGenerator]):
        if not fields:
            raise ValueError("CompositeGenerator needs at least one field")
        self.fields = tuple(fields)
        self._length = sum(f.length for f in self.fields)

    @property
    def length(self) -> int:
        return self._length

    def _fill(self, buffer, rng):
        offset = 0
        for f in self.fields:
            f.fill(buffer[offset:offset + f.length], rng)
            offset += f.length


def quat_quat_generator() -> CompositeGenerator:
    return CompositeGenerator([QuatGenerator(), QuatGenerator()])


def quat_vec3_generator() -> CompositeGenerator:
    return CompositeGenerator([QuatGenerator(), AxisAngleGenerator()])


def pose_point_generator() -> CompositeGenerator:
    return CompositeGenerator([PoseGenerator(), PointGenerator(1.0)])


def pose_pose_generator() -> CompositeGenerator:
    return CompositeGenerator([PoseGenerator(), PoseGenerator()])


def imu_rot_generator() -> CompositeGenerator:
    """Orientation, angular velocity and prediction interval t in [-2.5, 2.5]."""
    return CompositeGenerator([QuatGenerator(), AxisAngleGenerator(), ScalarGenerator(5.0)])


def reproject_input_generator() -> CompositeGenerator:
    """Object pose, two calibration records, world-to-lighthouse pose and sensor point.

    Matches the layout of gencheck.verify.records.ReprojectInput.
    """
    return CompositeGenerator([
        PoseGenerator(),
        CalibrationGenerator(),
        CalibrationGenerator(),
        PoseGenerator(),
        PointGenerator(1.0),
    ])
