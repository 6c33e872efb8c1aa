"""Phong material registry.

A material holds the coefficients the local lighting model consumes:

    color         base RGB color, each channel in [0, 1]
    diffuse       weight of the summed diffuse light contributions
    specular      weight of the summed specular light contributions
    shininess     Phong exponent applied to the specular lobe
    reflectivity  fraction of the outgoing color taken from the mirror
                  bounce (0 = matte, 1 = perfect mirror)

The total light reflected at a hit is
    diffuse * sum(diffuse_contribution) + specular * sum(specular_contribution)
over all unoccluded lights. diffuse + specular need not sum to 1, though
keeping it at or below 1 looks plausible.

Materials live in Taichi fields indexed by material id so that primitives
only carry an integer reference and hit records never copy material data.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.materials.phong import add_material
    >>> red = add_material((1.0, 0.0, 0.0), diffuse=0.7, specular=0.3, shininess=10.0)
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3


@ti.dataclass
class PhongMaterial:
    """Phong material properties.

    Attributes:
        color: Base RGB color, each component in [0, 1].
        diffuse: Diffuse coefficient (>= 0).
        specular: Specular coefficient (>= 0).
        shininess: Specular exponent (>= 0).
        reflectivity: Mirror blend factor in [0, 1].
    """

    color: vec3
    diffuse: ti.f32
    specular: ti.f32
    shininess: ti.f32
    reflectivity: ti.f32


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 1024

material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffuse = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_specular = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_reflectivity = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def validate_material(
    color: tuple[float, float, float],
    diffuse: float,
    specular: float,
    shininess: float,
    reflectivity: float,
) -> None:
    """Check material parameters without registering them.

    Raises:
        ValueError: If a color channel is outside [0, 1], a coefficient is
            negative, or reflectivity is outside [0, 1].
    """
    if len(color) != 3:
        raise ValueError(f"Material color needs 3 components, got {len(color)}")
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(f"Color component {i} = {component} is outside [0, 1]")
    for name, value in (("diffuse", diffuse), ("specular", specular), ("shininess", shininess)):
        if value < 0.0:
            raise ValueError(f"Material {name} coefficient must be non-negative, got {value}")
    if reflectivity < 0.0 or reflectivity > 1.0:
        raise ValueError(f"Reflectivity {reflectivity} is outside [0, 1]")


def add_material(
    color: tuple[float, float, float],
    diffuse: float = 1.0,
    specular: float = 0.0,
    shininess: float = 0.0,
    reflectivity: float = 0.0,
) -> int:
    """Add a material to the material registry.

    Args:
        color: The base color as (R, G, B), each component in [0, 1].
        diffuse: Diffuse coefficient.
        specular: Specular coefficient.
        shininess: Phong specular exponent.
        reflectivity: Mirror blend factor in [0, 1].

    Returns:
        The material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any parameter is out of range.
    """
    validate_material(color, diffuse, specular, shininess, reflectivity)

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_colors[idx] = vec3(color[0], color[1], color[2])
    material_diffuse[idx] = diffuse
    material_specular[idx] = specular
    material_shininess[idx] = shininess
    material_reflectivity[idx] = reflectivity
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material(material_id: ti.i32) -> PhongMaterial:
    """Get all properties of a material by id.

    Args:
        material_id: The id returned by add_material().

    Returns:
        The PhongMaterial stored under that id.
    """
    return PhongMaterial(
        color=material_colors[material_id],
        diffuse=material_diffuse[material_id],
        specular=material_specular[material_id],
        shininess=material_shininess[material_id],
        reflectivity=material_reflectivity[material_id],
    )
