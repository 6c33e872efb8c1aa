"""Sphere primitive and the hit record shared by every primitive.

A ray o + t*d meets a sphere (center c, radius r) where

    dot(d, d) t^2 + 2 dot(o - c, d) t + dot(o - c, o - c) - r^2 = 0

hit_sphere() takes the smallest root inside (t_min, t_max). A negative
discriminant misses; a zero discriminant is a single tangent point. Roots
behind the origin never count, so a ray starting inside the sphere reports
the far wall.
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class Sphere:
    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Result of intersecting a ray with one primitive.

    Attributes:
        hit: 1 on a hit, 0 on a miss. The other fields are meaningful only
            when hit == 1.
        t: Ray parameter of the hit, a distance for unit directions.
        point: World-space hit point.
        normal: Unit normal turned toward the incoming ray.
        front_face: 1 if the ray arrived from the outside (or, for a
            triangle, from the side its winding normal points to).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_miss_hit_record() -> HitRecord:
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Intersect a ray with a sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: Unit direction of the ray.
        sphere: The sphere to test.
        t_min: Hits at t <= t_min are ignored (keep it >= 0).
        t_max: Hits at t >= t_max are ignored.

    Returns:
        The nearest hit in range, or a miss record.
    """
    result = make_miss_hit_record()

    to_origin = ray_origin - sphere.center
    qa = tm.dot(ray_direction, ray_direction)
    qb = 2.0 * tm.dot(to_origin, ray_direction)
    qc = tm.dot(to_origin, to_origin) - sphere.radius * sphere.radius
    disc = qb * qb - 4.0 * qa * qc

    if disc >= 0.0:
        root = ti.sqrt(disc)
        near = (-qb - root) / (2.0 * qa)
        far = (-qb + root) / (2.0 * qa)

        t = near
        if near <= t_min or near >= t_max:
            t = far

        if t > t_min and t < t_max:
            point = ray_origin + t * ray_direction
            outward = (point - sphere.center) / sphere.radius
            front = 1
            if tm.dot(ray_direction, outward) > 0.0:
                front = 0
                outward = -outward
            result = HitRecord(hit=1, t=t, point=point, normal=tm.normalize(outward), front_face=front)

    return result


def sphere_bounds(
    center: tuple[float, float, float], radius: float
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Compute the axis-aligned bounding box of a sphere.

    Args:
        center: The sphere center as (x, y, z).
        radius: The sphere radius.

    Returns:
        Tuple of (min_corner, max_corner).
    """
    lo = (center[0] - radius, center[1] - radius, center[2] - radius)
    hi = (center[0] + radius, center[1] + radius, center[2] + radius)
    return lo, hi
