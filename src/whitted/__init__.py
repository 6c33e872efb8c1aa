"""Taichi implementation of a Whitted-style ray tracer.

This package renders scenes of spheres and triangle meshes lit by point,
directional and ambient lights, with support for:
- Phong local shading with shadow rays toward point lights
- Bounded recursive mirror reflection
- Jittered multi-sample anti-aliasing
- Parallel per-pixel rendering on the Taichi CPU backend

Subpackages:
    core: Vector utilities, the Whitted integrator and the render loop
    geometry: Sphere and triangle-mesh primitives, AABB slab test, OBJ loading
    materials: Phong material registry
    lights: Point, directional and ambient light sources
    scene: Primitive table, scene intersection and the scene manager
    camera: Pinhole camera with look-at orientation
    preview: PPM/PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
