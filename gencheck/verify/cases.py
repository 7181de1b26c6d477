"""Bindings of reference/generated kernel pairs into runnable test cases.

Each math kernel gets a reference class (wrapping gencheck.linmath) and a
generated class (wrapping gencheck.generated) that unpack the same flat input
block into named arguments. FUNCTIONS lists the resulting descriptors;
every descriptor, plus a few standalone scenarios, is registered in
TEST_CASES under "Generated.<name>" as a callable returning 0 on pass and
-1 on failure.
"""

import math
import sys
from typing import Callable, Dict, Iterable, List, Optional, TextIO, Tuple

import numpy as np

from gencheck.generated.poses import (
    gen_apply_pose_to_pose,
    gen_apply_pose_to_pose_jac_lhs,
    gen_apply_pose_to_pose_jac_rhs,
    gen_apply_pose_to_pt,
    gen_apply_pose_to_pt_jac_pose,
    gen_apply_pose_to_pt_jac_pt,
    gen_invert_pose,
    gen_invert_pose_jac_pose,
)
from gencheck.generated.reproject import (
    gen_reproject,
    gen_reproject_axis_x_gen2,
    gen_reproject_axis_x_gen2_jac_obj_p,
    gen_reproject_gen2,
    gen_reproject_gen2_jac_lh_p,
    gen_reproject_gen2_jac_obj_p,
    gen_reproject_gen2_jac_sensor_pt,
    gen_reproject_jac_lh_p,
    gen_reproject_jac_obj_p,
    gen_reproject_jac_sensor_pt,
)
from gencheck.generated.rotations import (
    gen_imu_rot_f,
    gen_imu_rot_f_jac_q,
    gen_imu_rot_f_jac_vel,
    gen_quatrotateabout,
    gen_quatrotateabout_jac_q1,
    gen_quatrotateabout_jac_q2,
    gen_quatrotatevector,
    gen_quatrotatevector_jac_pt,
    gen_quatrotatevector_jac_q,
)
from gencheck.linmath.poses import Pose, apply_pose_to_point, apply_pose_to_pose, invert_pose
from gencheck.linmath.reproject import (
    BaseStationCal,
    reproject_axis_x_gen2,
    reproject_full,
    reproject_full_gen2,
)
from gencheck.linmath.rotations import quat_rotate_about, quat_rotate_vector, rot_predict_quat
from gencheck.verify.benchmark import benchmark_jacobian
from gencheck.verify.config import DEFAULT_CONFIG, VerifyConfig
from gencheck.verify.equivalence import check_equivalence
from gencheck.verify.generators import (
    PoseGenerator,
    imu_rot_generator,
    pose_point_generator,
    pose_pose_generator,
    quat_quat_generator,
    quat_vec3_generator,
    reproject_input_generator,
)
from gencheck.verify.records import (
    CAL_OFFSET,
    LH_OFFSET,
    OBJ_OFFSET,
    PT_OFFSET,
    REPROJECT_INPUT_SIZE,
    ReprojectInput,
)
from gencheck.verify.richardson import check_jacobian
from gencheck.verify.types import (
    CaseResult,
    FunctionUnderTest,
    GeneratedKernel,
    JacobianDef,
    Kernel,
)

CASE_PREFIX = "Generated."


# ---------------------------------------------------------------------------
# Argument unpacking, shared by reference and generated bindings
# ---------------------------------------------------------------------------


class _QuatPairArgs:
    def unpack(self, x):
        return x[0:4], x[4:8]


class _QuatVecArgs:
    def unpack(self, x):
        return x[0:4], x[4:7]


class _PosePointArgs:
    def unpack(self, x):
        return x[0:7], x[7:10]


class _PoseArgs:
    def unpack(self, x):
        return (x[0:7],)


class _PosePairArgs:
    def unpack(self, x):
        return x[0:7], x[7:14]


class _ImuRotArgs:
    # Input block is [q, w, t]; kernels take (t, [q, w])
    def unpack(self, x):
        return x[7], x[0:7]


class _ReprojectArgs:
    def unpack(self, x):
        return (
            x[OBJ_OFFSET:CAL_OFFSET],
            x[PT_OFFSET:REPROJECT_INPUT_SIZE],
            x[LH_OFFSET:PT_OFFSET],
            x[CAL_OFFSET:CAL_OFFSET + 7],
            x[CAL_OFFSET + 7:LH_OFFSET],
        )


class _ReprojectAxisArgs(_ReprojectArgs):
    def unpack(self, x):
        return super().unpack(x)[:4]


class _Generated(GeneratedKernel):
    """Dispatches evaluate/evaluate_jacobian to flattened kernel functions."""

    _value: Callable = None
    _jacobians: Dict[str, Callable] = {}

    def evaluate(self, x):
        return np.atleast_1d(np.asarray(self._value(*self.unpack(x)), dtype=np.float64))

    def evaluate_jacobian(self, x, wrt):
        if wrt not in self._jacobians:
            raise ValueError(
                f"{self.name} has no Jacobian with respect to '{wrt}', "
                f"available: {', '.join(self._jacobians)}"
            )
        return np.asarray(self._jacobians[wrt](*self.unpack(x)), dtype=np.float64)


# ---------------------------------------------------------------------------
# Reference kernels
# ---------------------------------------------------------------------------


class QuatRotateAbout(_QuatPairArgs, Kernel):
    name = "quatrotateabout"

    def evaluate(self, x):
        return quat_rotate_about(*self.unpack(x))


class QuatRotateVector(_QuatVecArgs, Kernel):
    name = "quatrotatevector"

    def evaluate(self, x):
        return quat_rotate_vector(*self.unpack(x))


class ApplyPoseToPoint(_PosePointArgs, Kernel):
    name = "apply_pose_to_point"

    def evaluate(self, x):
        pose, pt = self.unpack(x)
        return apply_pose_to_point(Pose.from_array(pose), pt)


class InvertPose(_PoseArgs, Kernel):
    name = "invert_pose"

    def evaluate(self, x):
        (pose,) = self.unpack(x)
        return invert_pose(Pose.from_array(pose)).to_array()


class ApplyPoseToPose(_PosePairArgs, Kernel):
    name = "apply_pose_to_pose"

    def evaluate(self, x):
        lhs, rhs = self.unpack(x)
        return apply_pose_to_pose(Pose.from_array(lhs), Pose.from_array(rhs)).to_array()


class RotPredictQuat(_ImuRotArgs, Kernel):
    name = "rot_predict_quat"

    def evaluate(self, x):
        return rot_predict_quat(*self.unpack(x))


class Reproject(Kernel):
    name = "reproject"

    def evaluate(self, x):
        r = ReprojectInput.from_array(x)
        return reproject_full(r.fcal, r.world2lh, r.obj2world, r.pt)


class ReprojectGen2(Kernel):
    name = "reproject_gen2"

    def evaluate(self, x):
        r = ReprojectInput.from_array(x)
        return reproject_full_gen2(r.fcal, r.world2lh, r.obj2world, r.pt)


class ReprojectAxisXGen2(Kernel):
    name = "reproject_axis_x_gen2"

    def evaluate(self, x):
        r = ReprojectInput.from_array(x)
        pt_lh = apply_pose_to_point(r.world2lh, apply_pose_to_point(r.obj2world, r.pt))
        return np.array([reproject_axis_x_gen2(r.fcal[0], pt_lh)])


# ---------------------------------------------------------------------------
# Generated kernels
# ---------------------------------------------------------------------------


class GenQuatRotateAbout(_QuatPairArgs, _Generated):
    name = "gen_quatrotateabout"
    _value = staticmethod(gen_quatrotateabout)
    _jacobians = {"q1": gen_quatrotateabout_jac_q1, "q2": gen_quatrotateabout_jac_q2}


class GenQuatRotateVector(_QuatVecArgs, _Generated):
    name = "gen_quatrotatevector"
    _value = staticmethod(gen_quatrotatevector)
    _jacobians = {"q": gen_quatrotatevector_jac_q, "pt": gen_quatrotatevector_jac_pt}


class GenApplyPoseToPoint(_PosePointArgs, _Generated):
    name = "gen_apply_pose_to_pt"
    _value = staticmethod(gen_apply_pose_to_pt)
    _jacobians = {"pose": gen_apply_pose_to_pt_jac_pose, "pt": gen_apply_pose_to_pt_jac_pt}


class GenInvertPose(_PoseArgs, _Generated):
    name = "gen_invert_pose"
    _value = staticmethod(gen_invert_pose)
    _jacobians = {"pose": gen_invert_pose_jac_pose}


class GenApplyPoseToPose(_PosePairArgs, _Generated):
    name = "gen_apply_pose_to_pose"
    _value = staticmethod(gen_apply_pose_to_pose)
    _jacobians = {"lhs": gen_apply_pose_to_pose_jac_lhs, "rhs": gen_apply_pose_to_pose_jac_rhs}


class GenRotPredictQuat(_ImuRotArgs, _Generated):
    name = "gen_imu_rot_f"
    _value = staticmethod(gen_imu_rot_f)
    _jacobians = {"q": gen_imu_rot_f_jac_q, "vel": gen_imu_rot_f_jac_vel}


class GenReproject(_ReprojectArgs, _Generated):
    name = "gen_reproject"
    _value = staticmethod(gen_reproject)
    _jacobians = {
        "obj": gen_reproject_jac_obj_p,
        "lh": gen_reproject_jac_lh_p,
        "pt": gen_reproject_jac_sensor_pt,
    }


class GenReprojectGen2(_ReprojectArgs, _Generated):
    name = "gen_reproject_gen2"
    _value = staticmethod(gen_reproject_gen2)
    _jacobians = {
        "obj": gen_reproject_gen2_jac_obj_p,
        "lh": gen_reproject_gen2_jac_lh_p,
        "pt": gen_reproject_gen2_jac_sensor_pt,
    }


class GenReprojectAxisXGen2(_ReprojectAxisArgs, _Generated):
    name = "gen_reproject_axis_x_gen2"
    _value = staticmethod(gen_reproject_axis_x_gen2)
    _jacobians = {"obj": gen_reproject_axis_x_gen2_jac_obj_p}


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

# Object pose only: ±2 steps on the lighthouse pose or the sensor point cross
# the lighthouse image plane on random inputs.
_REPROJECT_JACOBIANS = (JacobianDef("obj", OBJ_OFFSET, 7),)

# Every group the reprojection kernels differentiate, for well-conditioned inputs
REPROJECT_ALL_JACOBIANS = _REPROJECT_JACOBIANS + (
    JacobianDef("lh", LH_OFFSET, 7),
    JacobianDef("pt", PT_OFFSET, 3),
)

FUNCTIONS: Tuple[FunctionUnderTest, ...] = (
    FunctionUnderTest(
        name="quatrotateabout",
        reference=QuatRotateAbout(),
        generated=GenQuatRotateAbout(),
        generator=quat_quat_generator(),
        n_outputs=4,
        jacobians=(JacobianDef("q1", 0, 4), JacobianDef("q2", 4, 4)),
    ),
    FunctionUnderTest(
        name="quatrotatevector",
        reference=QuatRotateVector(),
        generated=GenQuatRotateVector(),
        generator=quat_vec3_generator(),
        n_outputs=3,
        jacobians=(JacobianDef("q", 0, 4), JacobianDef("pt", 4, 3)),
    ),
    FunctionUnderTest(
        name="apply_pose_to_point",
        reference=ApplyPoseToPoint(),
        generated=GenApplyPoseToPoint(),
        generator=pose_point_generator(),
        n_outputs=3,
        jacobians=(JacobianDef("pose", 0, 7), JacobianDef("pt", 7, 3)),
    ),
    FunctionUnderTest(
        name="invert_pose",
        reference=InvertPose(),
        generated=GenInvertPose(),
        generator=PoseGenerator(),
        n_outputs=7,
        jacobians=(JacobianDef("pose", 0, 7),),
    ),
    FunctionUnderTest(
        name="apply_pose_to_pose",
        reference=ApplyPoseToPose(),
        generated=GenApplyPoseToPose(),
        generator=pose_pose_generator(),
        n_outputs=7,
        jacobians=(JacobianDef("lhs", 0, 7), JacobianDef("rhs", 7, 7)),
    ),
    FunctionUnderTest(
        name="rot_predict_quat",
        reference=RotPredictQuat(),
        generated=GenRotPredictQuat(),
        generator=imu_rot_generator(),
        n_outputs=7,
        jacobians=(JacobianDef("q", 0, 4), JacobianDef("vel", 4, 3)),
    ),
    FunctionUnderTest(
        name="reproject",
        reference=Reproject(),
        generated=GenReproject(),
        generator=reproject_input_generator(),
        n_outputs=2,
        jacobians=_REPROJECT_JACOBIANS,
    ),
    FunctionUnderTest(
        name="reproject_gen2",
        reference=ReprojectGen2(),
        generated=GenReprojectGen2(),
        generator=reproject_input_generator(),
        n_outputs=2,
        jacobians=_REPROJECT_JACOBIANS,
    ),
    FunctionUnderTest(
        name="reproject_axis_x_gen2",
        reference=ReprojectAxisXGen2(),
        generated=GenReprojectAxisXGen2(),
        generator=reproject_input_generator(),
        n_outputs=1,
        jacobians=(JacobianDef("obj", OBJ_OFFSET, 7),),
    ),
)

FUNCTIONS_BY_NAME: Dict[str, FunctionUnderTest] = {fut.name: fut for fut in FUNCTIONS}


# ---------------------------------------------------------------------------
# Running and registration
# ---------------------------------------------------------------------------


def run_case(
    fut: FunctionUnderTest,
    config: VerifyConfig = DEFAULT_CONFIG,
    rng: Optional[np.random.Generator] = None,
    stream: Optional[TextIO] = None,
    progress: bool = False,
) -> CaseResult:
    """Value sweep followed by every declared Jacobian check.

    All checks run even after one fails, so the report shows every problem
    of the case at once. The same random generator feeds the sweep and the
    Jacobian base inputs.
    """
    stream = stream or sys.stdout
    rng = rng if rng is not None else config.make_rng()

    equivalence = check_equivalence(fut, rng, config, stream, progress)
    jacobians = [check_jacobian(fut, jdef, rng, config, stream) for jdef in fut.jacobians]

    result = CaseResult(
        name=fut.name,
        equivalence=equivalence,
        jacobians=jacobians,
        tolerance=config.tolerance,
    )
    if result.failed:
        print(f"FAILED {fut.name}", file=stream)
    return result


TEST_CASES: Dict[str, Callable[..., int]] = {}


def register(name: str) -> Callable:
    """Register an entry point `fn(config=None, stream=None) -> int` as "Generated.<name>".

    Raises:
        ValueError: If the name is already registered.
    """
    key = CASE_PREFIX + name

    def decorator(fn):
        if key in TEST_CASES:
            raise ValueError(f"Test case '{key}' is already registered")
        TEST_CASES[key] = fn
        return fn

    return decorator


def _register_function(fut: FunctionUnderTest) -> None:
    @register(fut.name)
    def entry(config: Optional[VerifyConfig] = None, stream: Optional[TextIO] = None) -> int:
        return run_case(fut, config or DEFAULT_CONFIG, stream=stream).status


for _fut in FUNCTIONS:
    _register_function(_fut)


# Calibration and lighthouse-frame point recorded from a real base station
GEN2_FIXED_CAL = BaseStationCal(
    phase=0.0,
    tilt=-0.047119140625,
    curve=0.15478515625,
    gibpha=2.369140625,
    gibmag=-0.00440216064453125,
    ogeephase=0.4765625,
    ogeemag=-0.1766357421875,
)
GEN2_FIXED_POINT = np.array([0.37831748940152643, -0.29826620924843278, -3.0530035758130878])
GEN2_FIXED_ANGLE = 2.024090911337


@register("reproject_gen2_vals")
def reproject_gen2_vals(config: Optional[VerifyConfig] = None, stream: Optional[TextIO] = None) -> int:
    """Gen2 first-sweep angle at a recorded calibration and point."""
    config = config or DEFAULT_CONFIG
    stream = stream or sys.stdout

    ang = reproject_axis_x_gen2(GEN2_FIXED_CAL, GEN2_FIXED_POINT)
    ang += 2.0 * math.pi / 3.0
    print("%.16f" % ang, file=stream)
    return 0 if abs(ang - GEN2_FIXED_ANGLE) < config.tolerance else -1


@register("speed")
def speed(config: Optional[VerifyConfig] = None, stream: Optional[TextIO] = None) -> int:
    """Throughput of the gen1 object-pose Jacobian. Informational, never fails."""
    config = config or DEFAULT_CONFIG
    stream = stream or sys.stdout
    rng = config.make_rng()

    fut = FUNCTIONS_BY_NAME["reproject"]
    x = fut.generator.sample(rng)
    # 180 degrees about x
    x[OBJ_OFFSET + 3:OBJ_OFFSET + 7] = (0.0, 1.0, 0.0, 0.0)

    jdef = fut.jacobians[0]
    hz = benchmark_jacobian(fut, jdef, x, config.bench_window)
    print("Speed of %-32s %8.2fkHz" % (f"{fut.name}_{jdef.suffix}", hz / 1000.0), file=stream)
    return 0


def run_registered(
    names: Optional[Iterable[str]] = None,
    config: Optional[VerifyConfig] = None,
    stream: Optional[TextIO] = None,
) -> List[Tuple[str, int]]:
    """Run registered entries in registration order (or the given order).

    Raises:
        KeyError: If a name is not registered.
    """
    names = list(TEST_CASES) if names is None else list(names)
    for name in names:
        if name not in TEST_CASES:
            raise KeyError(f"Unknown test case '{name}'")
    return [(name, TEST_CASES[name](config=config, stream=stream)) for name in names]
