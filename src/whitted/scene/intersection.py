"""Primitive storage and ray-scene queries.

Every sphere and mesh of the scene lives in Taichi fields declared here;
intersect_scene() returns the closest hit over all of them and
intersect_scene_any() answers shadow-ray visibility.

Primitives live in a unified table. prim_types[p] tags primitive p as a
sphere or a mesh, and prim_indices[p] is its index in the type-specific
storage. The table is iterated in insertion order and a hit only replaces
the current closest one when it is strictly nearer, so on exactly equal
distances the primitive added first wins.

Meshes are stored as world-space triangles. Each mesh owns a contiguous
range of the face arrays plus its bounding box; the box is slab-tested
before any of its faces are visited.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere(ti.math.vec3(0, 0, 3), 1.0, material_id=0)
    >>> # intersect_scene() is then called from kernels
"""

from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from whitted.geometry.aabb import AABB, hit_aabb
from whitted.geometry.mesh import hit_triangle
from whitted.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_hit_record

vec3 = tm.vec3


class PrimitiveType(IntEnum):
    """Tags of the primitive table."""

    SPHERE = 0
    MESH = 1


@ti.dataclass
class SceneHitRecord:
    """A HitRecord extended with the material of the primitive that was hit.

    Attributes:
        hit: 1 if any primitive was hit, 0 otherwise.
        t: Distance along the ray to the hit. Only valid if hit == 1.
        point: World-space hit point. Only valid if hit == 1.
        normal: Unit surface normal facing the ray origin side.
            Only valid if hit == 1.
        front_face: 1 if the outward side was hit. Only valid if hit == 1.
        material_id: Material of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


# Capacities, fixed when the fields are allocated
MAX_PRIMITIVES = 2048
MAX_SPHERES = 1024
MAX_MESHES = 256
MAX_FACES = 65536

# Unified primitive table
prim_types = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
prim_indices = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Mesh storage: each mesh owns faces [offset, offset + count)
mesh_face_offsets = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_face_counts = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_bbox_min = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESHES)
mesh_bbox_max = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESHES)
mesh_material_ids = ti.field(dtype=ti.i32, shape=MAX_MESHES)
num_meshes = ti.field(dtype=ti.i32, shape=())

# World-space triangle storage shared by all meshes
face_a = ti.Vector.field(3, dtype=ti.f32, shape=MAX_FACES)
face_b = ti.Vector.field(3, dtype=ti.f32, shape=MAX_FACES)
face_c = ti.Vector.field(3, dtype=ti.f32, shape=MAX_FACES)
face_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_FACES)
num_faces = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Forget every primitive. Only the counters are reset."""
    num_primitives[None] = 0
    num_spheres[None] = 0
    num_meshes[None] = 0
    num_faces[None] = 0


def _register_primitive(prim_type: PrimitiveType, type_index: int) -> int:
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    prim_types[idx] = int(prim_type)
    prim_indices[idx] = type_index
    num_primitives[None] = idx + 1
    return idx


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Append a sphere to the sphere storage and the primitive table.

    Returns:
        The sphere index (its position among spheres, not among all
        primitives).

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    _register_primitive(PrimitiveType.SPHERE, idx)
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


@ti.kernel
def _write_faces(
    offset: ti.i32,
    triangles: ti.types.ndarray(),
    normals: ti.types.ndarray(),
):
    for f in range(triangles.shape[0]):
        face_a[offset + f] = vec3(triangles[f, 0, 0], triangles[f, 0, 1], triangles[f, 0, 2])
        face_b[offset + f] = vec3(triangles[f, 1, 0], triangles[f, 1, 1], triangles[f, 1, 2])
        face_c[offset + f] = vec3(triangles[f, 2, 0], triangles[f, 2, 1], triangles[f, 2, 2])
        face_normals[offset + f] = vec3(normals[f, 0], normals[f, 1], normals[f, 2])


def _check_mesh_arrays(
    triangles: npt.NDArray[np.float32], normals: npt.NDArray[np.float32]
) -> None:
    if triangles.ndim != 3 or triangles.shape[1:] != (3, 3):
        raise ValueError(f"Expected triangles of shape (F, 3, 3), got {triangles.shape}")
    if normals.shape != (triangles.shape[0], 3):
        raise ValueError(f"Expected normals of shape ({triangles.shape[0]}, 3), got {normals.shape}")
    if triangles.shape[0] == 0:
        raise ValueError("A mesh needs at least one face")


def add_mesh(
    triangles: npt.NDArray[np.float32],
    normals: npt.NDArray[np.float32],
    bbox_min: tuple[float, float, float],
    bbox_max: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add a world-space triangle mesh to the scene.

    Args:
        triangles: Array of shape (F, 3, 3): the three vertices of each face.
        normals: Array of shape (F, 3) of unit face normals.
        bbox_min: Minimum corner of the mesh bounding box.
        bbox_max: Maximum corner of the mesh bounding box.
        material_id: The material ID to associate with this mesh.

    Returns:
        The index of the added mesh.

    Raises:
        ValueError: If the arrays have the wrong shape or are empty.
        RuntimeError: If the mesh or face capacity is exceeded.
    """
    _check_mesh_arrays(triangles, normals)

    idx = num_meshes[None]
    if idx >= MAX_MESHES:
        raise RuntimeError(f"Maximum number of meshes ({MAX_MESHES}) exceeded")
    offset = num_faces[None]
    count = triangles.shape[0]
    if offset + count > MAX_FACES:
        raise RuntimeError(f"Maximum number of mesh faces ({MAX_FACES}) exceeded")

    _register_primitive(PrimitiveType.MESH, idx)
    mesh_face_offsets[idx] = offset
    mesh_face_counts[idx] = count
    mesh_material_ids[idx] = material_id
    num_meshes[None] = idx + 1
    num_faces[None] = offset + count
    update_mesh(idx, triangles, normals, bbox_min, bbox_max)
    return idx


def update_mesh(
    mesh_index: int,
    triangles: npt.NDArray[np.float32],
    normals: npt.NDArray[np.float32],
    bbox_min: tuple[float, float, float],
    bbox_max: tuple[float, float, float],
) -> None:
    """Overwrite the faces and bounding box of an existing mesh.

    The face count must stay the same, since each mesh owns a fixed range
    of the face arrays.

    Raises:
        IndexError: If mesh_index does not name a mesh.
        ValueError: If the face count differs from the stored one.
    """
    if not 0 <= mesh_index < num_meshes[None]:
        raise IndexError(f"Mesh index {mesh_index} out of range")
    _check_mesh_arrays(triangles, normals)
    if triangles.shape[0] != mesh_face_counts[mesh_index]:
        raise ValueError(
            f"Mesh {mesh_index} has {mesh_face_counts[mesh_index]} faces, "
            f"got {triangles.shape[0]}"
        )

    _write_faces(
        mesh_face_offsets[mesh_index],
        np.ascontiguousarray(triangles, dtype=np.float32),
        np.ascontiguousarray(normals, dtype=np.float32),
    )
    mesh_bbox_min[mesh_index] = vec3(bbox_min[0], bbox_min[1], bbox_min[2])
    mesh_bbox_max[mesh_index] = vec3(bbox_max[0], bbox_max[1], bbox_max[2])


def get_sphere_count() -> int:
    """Spheres stored so far."""
    return int(num_spheres[None])


def get_mesh_count() -> int:
    """Get the number of meshes in the scene."""
    return int(num_meshes[None])


def get_face_count() -> int:
    """Get the total number of mesh faces in the scene."""
    return int(num_faces[None])


def get_primitive_count() -> int:
    """Get the number of primitives (spheres and meshes) in the scene."""
    return int(num_primitives[None])


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        front_face=rec.front_face,
        material_id=material_id,
    )


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_mesh(
    ray_origin: vec3,
    ray_direction: vec3,
    mesh_index: ti.i32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test a ray against every face of one mesh.

    The mesh bounding box is tested first; only rays passing through it
    visit the faces. Among the faces the smallest t wins.

    Args:
        ray_origin: Where the ray starts.
        ray_direction: The unit direction of the ray.
        mesh_index: Index of the mesh in the mesh storage.
        t_min: Hits at or below this distance are ignored.
        t_max: Hits at or beyond this distance are ignored.

    Returns:
        The closest face hit, or a miss record.
    """
    result = make_miss_hit_record()
    box = AABB(min_corner=mesh_bbox_min[mesh_index], max_corner=mesh_bbox_max[mesh_index])

    if hit_aabb(ray_origin, ray_direction, box, t_min, t_max):
        closest_t = t_max
        offset = mesh_face_offsets[mesh_index]
        for f in range(offset, offset + mesh_face_counts[mesh_index]):
            rec = hit_triangle(
                ray_origin,
                ray_direction,
                face_a[f],
                face_b[f],
                face_c[f],
                face_normals[f],
                t_min,
                closest_t,
            )
            if rec.hit == 1:
                closest_t = rec.t
                result = rec

    return result


@ti.func
def _hit_primitive(
    ray_origin: vec3,
    ray_direction: vec3,
    prim: ti.i32,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    result = _make_miss_record()
    type_index = prim_indices[prim]

    if prim_types[prim] == int(PrimitiveType.SPHERE):
        sphere = Sphere(center=sphere_centers[type_index], radius=sphere_radii[type_index])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
        result = _to_scene_hit_record(rec, sphere_material_ids[type_index])
    else:
        rec = hit_mesh(ray_origin, ray_direction, type_index, t_min, t_max)
        result = _to_scene_hit_record(rec, mesh_material_ids[type_index])

    return result


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the closest intersection of a ray with the scene.

    Iterates over the primitive table in insertion order, narrowing the
    search interval to the closest hit found so far.

    Args:
        ray_origin: Where the ray starts.
        ray_direction: The unit direction of the ray.
        t_min: Hits at or below this distance are ignored.
        t_max: Hits at or beyond this distance are ignored.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record
        (hit == 0, material_id == -1).
    """
    closest_t = t_max
    result = _make_miss_record()

    for p in range(num_primitives[None]):
        rec = _hit_primitive(ray_origin, ray_direction, p, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test if a ray hits any primitive within (t_min, t_max).

    Used for shadow rays: stops testing further primitives once something
    blocks the ray.

    Returns:
        1 if any primitive was hit, 0 otherwise.
    """
    hit_any = 0

    for p in range(num_primitives[None]):
        if hit_any == 0:
            rec = _hit_primitive(ray_origin, ray_direction, p, t_min, t_max)
            if rec.hit == 1:
                hit_any = 1

    return hit_any
