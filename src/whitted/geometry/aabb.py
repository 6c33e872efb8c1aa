"""Axis-aligned bounding boxes and the ray-box slab test.

The slab test treats the box as the intersection of three pairs of parallel
planes. For each axis the ray enters the slab at (min - o) / d and leaves at
(max - o) / d (swapped when d is negative); the ray hits the box iff the
three per-axis intervals overlap. Each axis narrows the running interval
with its own entry/exit values only.

A direction component of exactly zero means the ray runs parallel to that
slab. Instead of relying on infinities from the division, the test then
checks directly whether the origin lies between the two planes.

The test is conservative: a ray grazing an edge or face counts as a hit,
since callers use it only to skip work.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class AABB:
    """An axis-aligned bounding box.

    Attributes:
        min_corner: Component-wise minimum of the enclosed points.
        max_corner: Component-wise maximum of the enclosed points.
    """

    min_corner: vec3
    max_corner: vec3


@ti.func
def hit_aabb(
    ray_origin: vec3,
    ray_direction: vec3,
    box: AABB,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test whether a ray passes through a box within [t_min, t_max].

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray. Components may be zero.
        box: The box to test.
        t_min: Start of the ray interval of interest.
        t_max: End of the ray interval of interest.

    Returns:
        1 if the ray interval overlaps the box, 0 otherwise.
    """
    t_enter = t_min
    t_exit = t_max
    outside_slab = 0

    for axis in ti.static(range(3)):
        o = ray_origin[axis]
        d = ray_direction[axis]
        lo = box.min_corner[axis]
        hi = box.max_corner[axis]

        if d == 0.0:
            if o < lo or o > hi:
                outside_slab = 1
        else:
            inv_d = 1.0 / d
            t0 = (lo - o) * inv_d
            t1 = (hi - o) * inv_d
            if t0 > t1:
                temp = t0
                t0 = t1
                t1 = temp
            t_enter = ti.max(t_enter, t0)
            t_exit = ti.min(t_exit, t1)

    return outside_slab == 0 and t_enter <= t_exit


def bounds_of_points(
    points: npt.NDArray[np.float32],
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Compute the bounding box of a set of points.

    Args:
        points: Array of shape (N, 3) with N >= 1.

    Returns:
        Tuple of (min_corner, max_corner).

    Raises:
        ValueError: If the array is empty or not of shape (N, 3).
    """
    if points.ndim != 2 or points.shape[1] != 3 or points.shape[0] == 0:
        raise ValueError(f"Expected a non-empty (N, 3) array, got shape {points.shape}")
    lo = points.min(axis=0)
    hi = points.max(axis=0)
    return (
        (float(lo[0]), float(lo[1]), float(lo[2])),
        (float(hi[0]), float(hi[1]), float(hi[2])),
    )
