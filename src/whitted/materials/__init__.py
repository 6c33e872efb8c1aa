"""Materials module for surface shading properties.

This module provides the Phong material model used by the Whitted
integrator:

Components:
    phong: Material registry (color, diffuse, specular, shininess,
        reflectivity) stored in Taichi fields

Materials are referenced by integer id from primitives and hit records.
"""

from .phong import (
    MAX_MATERIALS,
    PhongMaterial,
    add_material,
    clear_materials,
    get_material,
    get_material_count,
    validate_material,
)

__all__ = [
    "PhongMaterial",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "validate_material",
]
