"""Core rendering module.

Components:
    ray: Ray data structure and vector algebra
    settings: RenderSettings and Taichi runtime initialization
    integrator: Whitted-style shading with shadow rays and bounded
        mirror reflection
    framebuffer: Float RGB image container
    render: Parallel row-band render loop

All compute-intensive operations run as Taichi kernels on the CPU backend.
"""

from .framebuffer import Framebuffer
from .ray import (
    VEC_EPSILON,
    Ray,
    add,
    approx_equal,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    negate,
    normalize,
    ray_at,
    reflect,
    scale,
    subtract,
    vec3,
)
from .settings import MAX_REFLECTION_DEPTH, RenderSettings, init_taichi

# Note: integrator and render are NOT imported here to avoid circular imports.
# Import directly from whitted.core.integrator or whitted.core.render when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "VEC_EPSILON",
    "add",
    "subtract",
    "scale",
    "negate",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "approx_equal",
    "reflect",
    "Framebuffer",
    "RenderSettings",
    "MAX_REFLECTION_DEPTH",
    "init_taichi",
]
