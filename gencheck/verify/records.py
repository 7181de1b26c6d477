"""Fixed-layout composite records for kernel input blocks.

Reprojection kernels take an object pose, two calibration records, a
world-to-lighthouse pose and a sensor point. The checker only deals in flat
input blocks, so the record carries an explicit serialize/deserialize pair
with named offsets instead of reinterpreting the buffer in place.

Flat layout (31 scalars):
    [0:7]    obj2world pose
    [7:14]   calibration, first sweep
    [14:21]  calibration, second sweep
    [21:28]  world2lh pose
    [28:31]  sensor point in the object frame
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from gencheck.linmath.poses import POSE_SIZE, Pose
from gencheck.linmath.reproject import CAL_SIZE, BaseStationCal

OBJ_OFFSET = 0
CAL_OFFSET = OBJ_OFFSET + POSE_SIZE
LH_OFFSET = CAL_OFFSET + 2 * CAL_SIZE
PT_OFFSET = LH_OFFSET + POSE_SIZE
REPROJECT_INPUT_SIZE = PT_OFFSET + 3


@dataclass(frozen=True)
class ReprojectInput:
    """Arguments of one reprojection evaluation.

    Attributes:
        obj2world: Pose of the tracked object.
        fcal: Calibration of the first and second sweep.
        world2lh: Pose mapping world points into the lighthouse frame.
        pt: Sensor position in the object frame, shape (3,).
    """

    obj2world: Pose
    fcal: Tuple[BaseStationCal, BaseStationCal]
    world2lh: Pose
    pt: np.ndarray

    @classmethod
    def from_array(cls, values: np.ndarray) -> "ReprojectInput":
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (REPROJECT_INPUT_SIZE,):
            raise ValueError(
                f"ReprojectInput needs shape ({REPROJECT_INPUT_SIZE},), got {values.shape}"
            )
        return cls(
            obj2world=Pose.from_array(values[OBJ_OFFSET:CAL_OFFSET]),
            fcal=(
                BaseStationCal.from_array(values[CAL_OFFSET:CAL_OFFSET + CAL_SIZE]),
                BaseStationCal.from_array(values[CAL_OFFSET + CAL_SIZE:LH_OFFSET]),
            ),
            world2lh=Pose.from_array(values[LH_OFFSET:PT_OFFSET]),
            pt=values[PT_OFFSET:REPROJECT_INPUT_SIZE].copy(),
        )

    def to_array(self) -> np.ndarray:
        return np.concatenate((
            self.obj2world.to_array(),
            self.fcal[0].to_array(),
            self.fcal[1].to_array(),
            self.world2lh.to_array(),
            np.asarray(self.pt, dtype=np.float64),
        ))
