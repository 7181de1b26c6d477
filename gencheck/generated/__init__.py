"""Generated kernels under test.

Flattened closed-form versions of the reference math together with analytic
Jacobians:
- rotations: quaternion product, vector rotation, IMU rotation prediction
- poses: apply/invert/compose poses
- reproject: gen1 and gen2 base-station reprojection
"""
