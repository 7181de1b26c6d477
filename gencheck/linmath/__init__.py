"""Reference math for the kernels under test.

These are the hand-written implementations that generated code is checked
against:
- rotations: Quaternion product, vector rotation, axis-angle, angular velocity
- poses: Pose record and apply/invert/compose operations
- reproject: Base-station calibration record and gen1/gen2 reprojection
"""

from gencheck.linmath.poses import (
    POSE_SIZE,
    Pose,
    apply_pose_to_point,
    apply_pose_to_pose,
    invert_pose,
)
from gencheck.linmath.reproject import (
    CAL_SIZE,
    DEFAULT_CALIBRATION_CONFIG,
    BaseStationCal,
    CalibrationConfig,
    reproject_axis_x_gen2,
    reproject_axis_y_gen2,
    reproject_full,
    reproject_full_gen2,
    reproject_xy,
    reproject_xy_gen2,
)
from gencheck.linmath.rotations import (
    apply_ang_velocity,
    euler_to_quat,
    quat_conjugate,
    quat_from_axis_angle,
    quat_rotate_about,
    quat_rotate_vector,
    rot_predict_quat,
)

__all__ = [
    # Rotations
    "euler_to_quat",
    "quat_conjugate",
    "quat_rotate_about",
    "quat_rotate_vector",
    "quat_from_axis_angle",
    "apply_ang_velocity",
    "rot_predict_quat",
    # Poses
    "POSE_SIZE",
    "Pose",
    "apply_pose_to_point",
    "apply_pose_to_pose",
    "invert_pose",
    # Reprojection
    "CAL_SIZE",
    "BaseStationCal",
    "CalibrationConfig",
    "DEFAULT_CALIBRATION_CONFIG",
    "reproject_xy",
    "reproject_full",
    "reproject_axis_x_gen2",
    "reproject_axis_y_gen2",
    "reproject_xy_gen2",
    "reproject_full_gen2",
]
