"""Light sources for Phong shading.

Three kinds of light are supported, tagged by LightType:

    POINT        emits from a position in all directions; the only kind
                 that casts shadows
    DIRECTIONAL  parallel light travelling along a fixed direction, as from
                 a very distant source
    AMBIENT      constant light reaching every surface regardless of
                 orientation

Lights are stored in Taichi fields and evaluated per hit point. The
contribution functions return scalar intensities; the material's diffuse
and specular coefficients and its color are applied by the integrator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.lights.sources import add_point_light, add_ambient_light
    >>> add_point_light(1.0, (0.0, 8.0, 4.0))
    >>> add_ambient_light(0.2)
"""

import math
from enum import IntEnum

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


class LightType(IntEnum):
    """Integer tags identifying the kind of a light."""

    POINT = 0
    DIRECTIONAL = 1
    AMBIENT = 2


# Distance reported for lights that have no position
INFINITE_DISTANCE = 1e30

# =============================================================================
# Light Field Storage
# =============================================================================

MAX_LIGHTS = 64

light_types = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
# Position for point lights, direction of travel for directional lights
light_vectors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights from the registry."""
    num_lights[None] = 0


def _add_light(light_type: LightType, intensity: float, vector: tuple[float, float, float]) -> int:
    if intensity < 0.0:
        raise ValueError(f"Light intensity must be non-negative, got {intensity}")

    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    light_types[idx] = int(light_type)
    light_intensities[idx] = intensity
    light_vectors[idx] = vec3(vector[0], vector[1], vector[2])
    num_lights[None] = idx + 1
    return idx


def add_point_light(intensity: float, position: tuple[float, float, float]) -> int:
    """Add a point light.

    Args:
        intensity: Non-negative light intensity.
        position: World-space position of the light.

    Returns:
        The light index.

    Raises:
        ValueError: If the intensity is negative.
        RuntimeError: If the light registry is full.
    """
    return _add_light(LightType.POINT, intensity, position)


def add_directional_light(intensity: float, direction: tuple[float, float, float]) -> int:
    """Add a directional light.

    Args:
        intensity: Non-negative light intensity.
        direction: Direction the light travels in (need not be normalized).
            Surfaces facing against this direction are lit.

    Returns:
        The light index.

    Raises:
        ValueError: If the intensity is negative or the direction is zero.
        RuntimeError: If the light registry is full.
    """
    norm = math.sqrt(sum(c * c for c in direction))
    if norm == 0.0:
        raise ValueError("Directional light direction must be non-zero")
    unit = (direction[0] / norm, direction[1] / norm, direction[2] / norm)
    return _add_light(LightType.DIRECTIONAL, intensity, unit)


def add_ambient_light(intensity: float) -> int:
    """Add an ambient light.

    Raises:
        ValueError: If the intensity is negative.
        RuntimeError: If the light registry is full.
    """
    return _add_light(LightType.AMBIENT, intensity, (0.0, 0.0, 0.0))


def get_light_count() -> int:
    """Get the number of lights in the registry."""
    return int(num_lights[None])


def get_light_type(light_index: int) -> LightType:
    """Get the kind of a registered light."""
    if not 0 <= light_index < num_lights[None]:
        raise IndexError(f"Light index {light_index} out of range")
    return LightType(int(light_types[light_index]))


# =============================================================================
# Light Evaluation
# =============================================================================


@ti.func
def to_light(light_index: ti.i32, point: vec3) -> vec3:
    """Unit vector from a surface point toward a light.

    Args:
        light_index: Index of the light.
        point: The surface point.

    Returns:
        normalize(position - point) for point lights, the reversed direction
        of travel for directional lights, and the zero vector for ambient
        lights.
    """
    result = vec3(0.0, 0.0, 0.0)
    light_type = light_types[light_index]
    if light_type == int(LightType.POINT):
        offset = light_vectors[light_index] - point
        length = tm.length(offset)
        if length > 0.0:
            result = offset / length
    elif light_type == int(LightType.DIRECTIONAL):
        result = -light_vectors[light_index]
    return result


@ti.func
def light_distance(light_index: ti.i32, point: vec3) -> ti.f32:
    """Distance from a point to a light, infinite for lights without a position."""
    result = INFINITE_DISTANCE
    if light_types[light_index] == int(LightType.POINT):
        result = tm.length(light_vectors[light_index] - point)
    return result


@ti.func
def diffuse_contribution(light_index: ti.i32, point: vec3, normal: vec3) -> ti.f32:
    """Lambertian intensity a light delivers to a surface point.

    Ambient lights return their intensity unconditionally. Other lights
    return intensity * max(0, dot(L, n)), so surfaces facing away get
    nothing.
    """
    intensity = light_intensities[light_index]
    result = intensity
    if light_types[light_index] != int(LightType.AMBIENT):
        to_l = to_light(light_index, point)
        result = intensity * ti.max(0.0, tm.dot(to_l, normal))
    return result


@ti.func
def specular_contribution(
    light_index: ti.i32,
    point: vec3,
    normal: vec3,
    view_dir: vec3,
    exponent: ti.f32,
) -> ti.f32:
    """Phong specular intensity a light delivers toward the viewer.

    The light vector L is mirrored about the normal, R = 2 dot(L, n) n - L,
    and compared with the view direction:
        intensity * max(0, dot(normalize(R), view_dir)) ^ exponent

    Args:
        light_index: Index of the light.
        point: The surface point.
        normal: Unit surface normal facing the viewer's side.
        view_dir: Unit vector from the point toward the ray origin.
        exponent: The material's shininess.

    Returns:
        The specular intensity, 0 for ambient lights.
    """
    result = 0.0
    if light_types[light_index] != int(LightType.AMBIENT):
        to_l = to_light(light_index, point)
        mirrored = 2.0 * tm.dot(to_l, normal) * normal - to_l
        length = tm.length(mirrored)
        if length > 0.0:
            cos_angle = ti.max(0.0, tm.dot(mirrored / length, view_dir))
            result = light_intensities[light_index] * ti.pow(cos_angle, exponent)
    return result
