"""Lights module: point, directional and ambient light sources."""

from .sources import (
    MAX_LIGHTS,
    LightType,
    add_ambient_light,
    add_directional_light,
    add_point_light,
    clear_lights,
    diffuse_contribution,
    get_light_count,
    get_light_type,
    light_distance,
    specular_contribution,
    to_light,
)

__all__ = [
    "LightType",
    "MAX_LIGHTS",
    "add_point_light",
    "add_directional_light",
    "add_ambient_light",
    "clear_lights",
    "get_light_count",
    "get_light_type",
    "to_light",
    "light_distance",
    "diffuse_contribution",
    "specular_contribution",
]
