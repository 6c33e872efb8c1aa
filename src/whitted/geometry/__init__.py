"""Geometry module for shape primitives and bounding volumes.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive, the shared HitRecord and ray-sphere intersection
    mesh: Ray-triangle intersection and host-side mesh transforms
    aabb: Axis-aligned bounding boxes and the slab test
    obj_loader: Wavefront OBJ subset reader for triangle meshes

All intersection routines are implemented as Taichi functions (@ti.func)
for parallel intersection testing. Mesh transforms, face normals and
bounding boxes are computed on the host with NumPy before upload.
"""

from .aabb import AABB, bounds_of_points, hit_aabb
from .mesh import (
    MeshTransform,
    compute_face_normals,
    hit_triangle,
    quaternion_to_matrix,
    rotation_from_axis_angle,
    transform_vertices,
)
from .obj_loader import MeshLoadError, load_obj, parse_obj_lines
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_hit_record, sphere_bounds

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_hit_record",
    "sphere_bounds",
    "AABB",
    "hit_aabb",
    "bounds_of_points",
    "MeshTransform",
    "hit_triangle",
    "transform_vertices",
    "compute_face_normals",
    "quaternion_to_matrix",
    "rotation_from_axis_angle",
    "MeshLoadError",
    "load_obj",
    "parse_obj_lines",
]
