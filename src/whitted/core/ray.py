"""Rays and 3-component vector algebra.

Everything here is a @ti.func working on taichi.math.vec3 in 32-bit floats,
callable from any kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 2.0)
    >>> ray = make_ray(origin, direction)  # direction is normalized
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Tolerance for approximate vector equality. Kernels run in 32-bit floats, so
# this is far looser than a double-precision comparison would be.
VEC_EPSILON = 1e-6


@ti.dataclass
class Ray:
    """Half-line origin + t * direction, t >= 0.

    Rays built with make_ray() carry a unit direction, so t is a distance.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Build a ray, normalizing direction (which must be non-zero)."""
    return Ray(origin=origin, direction=normalize(direction))


# =============================================================================
# Vector Algebra
# =============================================================================
#
# Named wrappers over taichi.math. All are pure.


@ti.func
def add(a: vec3, b: vec3) -> vec3:
    return a + b


@ti.func
def subtract(a: vec3, b: vec3) -> vec3:
    return a - b


@ti.func
def scale(v: vec3, s: ti.f32) -> vec3:
    return v * s


@ti.func
def negate(v: vec3) -> vec3:
    return -v


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    return ti.sqrt(length_squared(v))


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale v to unit length.

    The zero vector has no direction; it is returned unchanged rather than
    producing NaNs, so callers that can see one must check for it.
    """
    result = v
    n = length(v)
    if n > 0.0:
        result = v / n
    return result


@ti.func
def approx_equal(a: vec3, b: vec3, eps: ti.f32) -> ti.i32:
    """1 if no component of a and b differs by more than eps, else 0.

    Intentionally loose: rendering code asks "close enough", never exact
    float equality. VEC_EPSILON is the usual tolerance.
    """
    d = ti.abs(a - b)
    return d.x <= eps and d.y <= eps and d.z <= eps


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror a direction about a unit normal: i - 2 dot(i, n) n."""
    return incident - 2.0 * tm.dot(incident, normal) * normal
