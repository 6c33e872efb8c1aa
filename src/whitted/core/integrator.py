"""Whitted-style ray tracing integrator.

For every ray the integrator finds the nearest surface, evaluates the local
Phong lighting there and, for reflective materials, follows the mirror ray:

    color(ray, budget) =
        background                                   if nothing is hit
        local                                        if reflectivity == 0
        local * (1 - r) + color(mirror, budget - 1) * r   while budget > 0
        local * (1 - r)                              once budget is exhausted

with r the material's reflectivity and every level clamped to [0, 1].

Taichi functions cannot recurse, so the reflection chain is unrolled into a
bounded loop over at most MAX_REFLECTION_DEPTH + 1 levels. Each level
records its own term (local color times (1 - r), or the background) and the
weight r handed down to the next level; the chain is then folded from the
deepest level upward, which reproduces the recursive formula exactly,
including the per-level clamp.

Local lighting sums the diffuse and specular contributions of every light.
Point lights are skipped when a shadow ray from the hit point toward them
is blocked by geometry closer than the light. Directional and ambient
lights never cast shadows.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.integrator import trace_ray
    >>> # ... build a scene with SceneManager ...
    >>> trace_ray((0, 0, 0), (0, 0, 1), depth_budget=3, background=(1, 1, 1))
"""

import taichi as ti
import taichi.math as tm

from whitted.camera.pinhole import get_pixel_ray
from whitted.core.ray import reflect
from whitted.core.settings import MAX_REFLECTION_DEPTH
from whitted.lights.sources import (
    LightType,
    diffuse_contribution,
    light_distance,
    light_types,
    num_lights,
    specular_contribution,
    to_light,
)
from whitted.materials.phong import PhongMaterial, get_material
from whitted.scene.intersection import intersect_scene, intersect_scene_any

vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Offset along the normal for secondary ray origins, avoids self-intersection
SHADOW_BIAS = 1e-4

# t_min and t_max for ray intersection
T_MIN = 1e-4
T_MAX = 1e10

# Number of tracing levels: the primary hit plus one per reflection
MAX_BOUNCES = MAX_REFLECTION_DEPTH + 1


# =============================================================================
# Local Lighting
# =============================================================================


@ti.func
def is_occluded(light_index: ti.i32, point: vec3, normal: vec3) -> ti.i32:
    """Check whether a point light is blocked as seen from a surface point.

    The shadow ray starts at point + normal * SHADOW_BIAS and the light is
    occluded iff something is hit strictly closer than the light itself.
    Non-point lights are never occluded.

    Args:
        light_index: Index of the light.
        point: The surface point.
        normal: Unit surface normal on the side the light is tested from.

    Returns:
        1 if the light is blocked, 0 otherwise.
    """
    blocked = 0
    if light_types[light_index] == int(LightType.POINT):
        origin = point + normal * SHADOW_BIAS
        direction = to_light(light_index, origin)
        distance = light_distance(light_index, origin)
        blocked = intersect_scene_any(origin, direction, T_MIN, distance)
    return blocked


@ti.func
def local_intensity(point: vec3, normal: vec3, view_dir: vec3, material: PhongMaterial) -> ti.f32:
    """Phong intensity at a surface point from all unoccluded lights.

    Args:
        point: The surface point.
        normal: Unit surface normal facing the viewer.
        view_dir: Unit vector from the point toward the viewer.
        material: The surface material.

    Returns:
        diffuse * sum(diffuse terms) + specular * sum(specular terms).
    """
    diffuse_sum = 0.0
    specular_sum = 0.0

    for i in range(num_lights[None]):
        if is_occluded(i, point, normal) == 0:
            diffuse_sum += diffuse_contribution(i, point, normal)
            specular_sum += specular_contribution(i, point, normal, view_dir, material.shininess)

    return material.diffuse * diffuse_sum + material.specular * specular_sum


# =============================================================================
# Ray Casting
# =============================================================================


@ti.func
def cast_ray(
    ray_origin: vec3,
    ray_direction: vec3,
    depth_budget: ti.i32,
    background: vec3,
) -> vec3:
    """Compute the color seen along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        depth_budget: Number of mirror bounces still allowed
            (0 to MAX_REFLECTION_DEPTH).
        background: Color returned for rays that hit nothing.

    Returns:
        RGB color with every component in [0, 1].
    """
    # Per-level term and the weight of the level below it
    bases = ti.Matrix.zero(ti.f32, MAX_BOUNCES, 3)
    weights = ti.Vector.zero(ti.f32, MAX_BOUNCES)

    origin = ray_origin
    direction = ray_direction
    active = 1

    for level in ti.static(range(MAX_BOUNCES)):
        if active == 1:
            base = background
            weight = 0.0
            active = 0

            rec = intersect_scene(origin, direction, T_MIN, T_MAX)
            if rec.hit == 1:
                material = get_material(rec.material_id)
                view_dir = tm.normalize(origin - rec.point)
                intensity = local_intensity(rec.point, rec.normal, view_dir, material)
                local = material.color * intensity

                base = local
                r = material.reflectivity
                if r > 0.0:
                    base = local * (1.0 - r)
                    if level < depth_budget:
                        weight = r
                        direction = reflect(direction, rec.normal)
                        origin = rec.point + rec.normal * SHADOW_BIAS
                        active = 1

            for c in ti.static(range(3)):
                bases[level, c] = base[c]
            weights[level] = weight

    result = vec3(0.0, 0.0, 0.0)
    for k in ti.static(range(MAX_BOUNCES)):
        level = MAX_BOUNCES - 1 - k
        row = vec3(bases[level, 0], bases[level, 1], bases[level, 2])
        result = tm.clamp(row + weights[level] * result, 0.0, 1.0)

    return result


@ti.func
def render_pixel_impl(
    row: ti.i32,
    col: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    depth_budget: ti.i32,
    background: vec3,
) -> vec3:
    """Average exactly `samples` primary rays through a pixel.

    A single sample aims at the pixel center; several samples are jittered
    uniformly inside the pixel.
    """
    jitter = 0
    if samples > 1:
        jitter = 1

    total = vec3(0.0, 0.0, 0.0)
    for _ in range(samples):
        ray = get_pixel_ray(row, col, width, height, jitter)
        total += cast_ray(ray.origin, ray.direction, depth_budget, background)

    return total / ti.cast(samples, ti.f32)


# =============================================================================
# Host Helpers (testing and debugging)
# =============================================================================


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, depth_budget: ti.i32, background: vec3) -> vec3:
    return cast_ray(origin, tm.normalize(direction), depth_budget, background)


@ti.kernel
def _render_pixel_kernel(
    row: ti.i32,
    col: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    depth_budget: ti.i32,
    background: vec3,
) -> vec3:
    return render_pixel_impl(row, col, width, height, samples, depth_budget, background)


def _check_depth(depth_budget: int) -> None:
    if not 0 <= depth_budget <= MAX_REFLECTION_DEPTH:
        raise ValueError(f"depth_budget = {depth_budget} is outside [0, {MAX_REFLECTION_DEPTH}]")


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth_budget: int = 3,
    background: tuple[float, float, float] = (1.0, 1.0, 1.0),
) -> tuple[float, float, float]:
    """Trace a single ray against the current scene.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized here, must be non-zero).
        depth_budget: Mirror bounces allowed.
        background: Color for rays that escape.

    Returns:
        Tuple of (R, G, B) in [0, 1].

    Raises:
        ValueError: If depth_budget is out of range.
    """
    _check_depth(depth_budget)
    color = _trace_ray_kernel(vec3(*origin), vec3(*direction), depth_budget, vec3(*background))
    return (float(color[0]), float(color[1]), float(color[2]))


def render_pixel(
    row: int,
    col: int,
    width: int,
    height: int,
    samples: int = 1,
    depth_budget: int = 3,
    background: tuple[float, float, float] = (1.0, 1.0, 1.0),
) -> tuple[float, float, float]:
    """Render one pixel with the camera set up by setup_camera().

    Args:
        row: Pixel row (0 = top).
        col: Pixel column (0 = left).
        width: Image width in pixels.
        height: Image height in pixels.
        samples: Rays averaged for the pixel.
        depth_budget: Mirror bounces allowed.
        background: Color for rays that escape.

    Returns:
        Tuple of (R, G, B) in [0, 1].
    """
    _check_depth(depth_budget)
    if samples < 1:
        raise ValueError(f"samples must be at least 1, got {samples}")
    color = _render_pixel_kernel(row, col, width, height, samples, depth_budget, vec3(*background))
    return (float(color[0]), float(color[1]), float(color[2]))
