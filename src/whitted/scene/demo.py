"""Reference demo scene.

Three spheres resting above a large ground sphere, lit by one point light,
one directional light and ambient light:

- red sphere on the left (diffuse 0.7, specular 0.5)
- yellow-green sphere on the right, slightly higher (diffuse 0.7, specular 0.7)
- green mirror-like sphere at the top (reflectivity 0.6)
- purple ground sphere of radius 20

The camera sits at the origin looking down +Z with a 60 degree vertical
field of view. Colors are given as 8-bit triples and scaled to [0, 1].

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.demo import create_demo_scene
    >>> scene = create_demo_scene(samples_per_pixel=4)
"""

from __future__ import annotations

from pathlib import Path

from whitted.camera.pinhole import PinholeCamera
from whitted.geometry.mesh import MeshTransform
from whitted.scene.manager import SceneManager


def _rgb(r: int, g: int, b: int) -> tuple[float, float, float]:
    return (r / 255.0, g / 255.0, b / 255.0)


def create_demo_scene(
    samples_per_pixel: int = 1,
    field_of_view: float = 60.0,
    mesh_path: Path | str | None = None,
    mesh_transform: MeshTransform | None = None,
) -> SceneManager:
    """Create the demo scene.

    Args:
        samples_per_pixel: Rays averaged per pixel.
        field_of_view: Vertical field of view in degrees.
        mesh_path: Optional OBJ file added to the scene with a light gray
            material.
        mesh_transform: Placement of the optional mesh.

    Returns:
        A SceneManager with primitives, lights and camera set.

    Raises:
        MeshLoadError: If mesh_path cannot be loaded.
    """
    scene = SceneManager()

    red = scene.add_material(_rgb(210, 0, 0), diffuse=0.7, specular=0.5, shininess=7.0)
    lime = scene.add_material(_rgb(190, 255, 0), diffuse=0.7, specular=0.7, shininess=5.0)
    mirror_green = scene.add_material(
        _rgb(20, 190, 20), diffuse=0.7, specular=0.0, shininess=5.0, reflectivity=0.6
    )
    purple = scene.add_material(_rgb(125, 0, 125), diffuse=1.0, specular=0.0, shininess=0.0)

    scene.add_sphere((-1.0, 0.0, 4.0), 1.0, red)
    scene.add_sphere((1.0, 1.0, 5.0), 1.0, lime)
    scene.add_sphere((0.0, 2.5, 6.0), 1.0, mirror_green)
    scene.add_sphere((1.0, -20.0, 10.0), 20.0, purple)

    if mesh_path is not None:
        gray = scene.add_material(_rgb(200, 200, 200), diffuse=0.8, specular=0.3, shininess=10.0)
        scene.add_mesh_from_obj(mesh_path, gray, mesh_transform)

    scene.add_point_light(1.0, (0.0, 8.0, 4.0))
    scene.add_directional_light(0.5, (-2.0, 0.0, 1.0))
    scene.add_ambient_light(0.2)

    scene.camera = PinholeCamera(
        position=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, 1.0),
        up=(0.0, 1.0, 0.0),
        field_of_view=field_of_view,
        samples_per_pixel=samples_per_pixel,
    )
    return scene
