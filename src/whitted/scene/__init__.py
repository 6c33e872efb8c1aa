"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Primitive storage in Taichi fields and closest-hit /
        any-hit queries over all primitives
    manager: SceneManager coordinating primitives, materials, lights and
        the camera, with dict serialization
    demo: The reference demo scene

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for geometric data
    - A unified primitive table preserving insertion order
    - World-space mesh triangles with per-mesh bounding boxes
"""

from .demo import create_demo_scene
from .intersection import (
    MAX_FACES,
    MAX_MESHES,
    MAX_PRIMITIVES,
    MAX_SPHERES,
    PrimitiveType,
    SceneHitRecord,
    clear_scene,
    get_face_count,
    get_mesh_count,
    get_primitive_count,
    get_sphere_count,
    hit_mesh,
    intersect_scene,
    intersect_scene_any,
)
from .manager import LightInfo, MaterialInfo, MeshInfo, SceneManager, SphereInfo

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "PrimitiveType",
    "clear_scene",
    "get_sphere_count",
    "get_mesh_count",
    "get_face_count",
    "get_primitive_count",
    "hit_mesh",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_PRIMITIVES",
    "MAX_SPHERES",
    "MAX_MESHES",
    "MAX_FACES",
    # Manager module
    "SceneManager",
    "MaterialInfo",
    "SphereInfo",
    "MeshInfo",
    "LightInfo",
    # Demo scene
    "create_demo_scene",
]
