"""Triangle mesh primitive with ray-triangle intersection.

A mesh is a list of object-space vertices, a list of triangular faces
(vertex index triples) and an affine transform applied as
translate(scale(rotate(v))). The renderer stores meshes in world space: the
transform is applied on the host whenever the mesh is added or its
transform changes, and the per-face normals and the bounding box are
recomputed from the transformed vertices at the same time. They are derived
data and never edited by hand.

Ray-triangle intersection works in two steps:
1. Intersect the ray with the triangle's plane:
       t = dot(n, a - o) / dot(n, d)
   Rays (nearly) parallel to the plane miss.
2. Check that the plane hit point p lies inside the triangle. The cross
   products of each edge with the vector from that edge's start to p,
   projected onto the normal, must all share one sign. A small tolerance
   relative to the triangle's area keeps points on an edge inside, so rays
   grazing a shared edge do not slip between two faces.

Example:
    >>> import numpy as np
    >>> from whitted.geometry.mesh import MeshTransform, transform_vertices
    >>> verts = np.array([[0, 0, 0], [1, 0, 0], [0, 1, 0]], dtype=np.float32)
    >>> moved = transform_vertices(verts, MeshTransform(translation=(0, 0, 5)))
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss_hit_record

vec3 = tm.vec3

# |dot(n, d)| below this counts as parallel to the triangle plane
PARALLEL_EPSILON = 1e-8

# Edge tolerance as a fraction of twice the triangle area
EDGE_EPSILON = 1e-5


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    v0: vec3,
    v1: vec3,
    v2: vec3,
    normal: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-triangle intersection against a precomputed face normal.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        v0: First vertex (world space).
        v1: Second vertex (world space).
        v2: Third vertex (world space).
        normal: Unit face normal, normalize(cross(v1 - v0, v2 - v0)).
        t_min: Hits at t <= t_min are ignored.
        t_max: Hits at t >= t_max are ignored.

    Returns:
        A HitRecord whose normal is the face normal flipped to face the ray
        origin. front_face is 1 when the ray hits the side the winding
        order's normal points to.
    """
    result = make_miss_hit_record()

    denom = tm.dot(normal, ray_direction)
    if ti.abs(denom) > PARALLEL_EPSILON:
        t = tm.dot(normal, v0 - ray_origin) / denom

        if t > t_min and t < t_max:
            p = ray_origin + t * ray_direction

            s0 = tm.dot(normal, tm.cross(v1 - v0, p - v0))
            s1 = tm.dot(normal, tm.cross(v2 - v1, p - v1))
            s2 = tm.dot(normal, tm.cross(v0 - v2, p - v2))

            double_area = ti.abs(tm.dot(normal, tm.cross(v1 - v0, v2 - v0)))
            tol = EDGE_EPSILON * double_area

            all_positive = s0 >= -tol and s1 >= -tol and s2 >= -tol
            all_negative = s0 <= tol and s1 <= tol and s2 <= tol

            if all_positive or all_negative:
                front = 1
                facing_normal = normal
                if denom > 0.0:
                    front = 0
                    facing_normal = -normal
                result = HitRecord(
                    hit=1,
                    t=t,
                    point=p,
                    normal=facing_normal,
                    front_face=front,
                )

    return result


# =============================================================================
# Host-side Mesh Transform
# =============================================================================


@dataclass
class MeshTransform:
    """Affine transform of a mesh: translate(scale(rotate(v))).

    Attributes:
        translation: Offset added after scaling, as (x, y, z).
        scale: Per-axis scale factors, as (sx, sy, sz).
        rotation: Unit quaternion (w, x, y, z). The identity is (1, 0, 0, 0).
    """

    translation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0)
    rotation: tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        norm = math.sqrt(sum(c * c for c in self.rotation))
        if norm == 0.0:
            raise ValueError("Rotation quaternion must be non-zero")
        w, x, y, z = self.rotation
        self.rotation = (w / norm, x / norm, y / norm, z / norm)

    def to_dict(self) -> dict[str, list[float]]:
        return {
            "translation": list(self.translation),
            "scale": list(self.scale),
            "rotation": list(self.rotation),
        }


def rotation_from_axis_angle(
    axis: tuple[float, float, float], angle_degrees: float
) -> tuple[float, float, float, float]:
    """Build a unit quaternion rotating by angle_degrees about axis.

    Args:
        axis: Rotation axis (need not be normalized, must be non-zero).
        angle_degrees: Counter-clockwise rotation angle in degrees.

    Returns:
        Quaternion as (w, x, y, z).

    Raises:
        ValueError: If the axis has zero length.
    """
    ax = np.asarray(axis, dtype=np.float64)
    norm = float(np.linalg.norm(ax))
    if norm == 0.0:
        raise ValueError("Rotation axis must be non-zero")
    ax = ax / norm
    half = math.radians(angle_degrees) / 2.0
    s = math.sin(half)
    return (math.cos(half), float(ax[0] * s), float(ax[1] * s), float(ax[2] * s))


def quaternion_to_matrix(q: tuple[float, float, float, float]) -> npt.NDArray[np.float64]:
    """Convert a unit quaternion (w, x, y, z) to a 3x3 rotation matrix."""
    w, x, y, z = q
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ],
        dtype=np.float64,
    )


def transform_vertices(
    vertices: npt.NDArray[np.floating], transform: MeshTransform
) -> npt.NDArray[np.float32]:
    """Apply a mesh transform to object-space vertices.

    Args:
        vertices: Array of shape (N, 3).
        transform: The transform to apply.

    Returns:
        World-space vertices of shape (N, 3), float32.
    """
    rotation = quaternion_to_matrix(transform.rotation)
    rotated = np.asarray(vertices, dtype=np.float64) @ rotation.T
    world = rotated * np.asarray(transform.scale) + np.asarray(transform.translation)
    return world.astype(np.float32)


def compute_face_normals(
    vertices: npt.NDArray[np.floating], faces: npt.NDArray[np.integer]
) -> npt.NDArray[np.float32]:
    """Compute unit face normals following each face's winding order.

    Degenerate (zero-area) faces get a zero normal, which makes every ray
    parallel to them, so they are never hit.

    Args:
        vertices: Array of shape (N, 3).
        faces: Array of shape (F, 3) of vertex indices.

    Returns:
        Array of shape (F, 3) of normals, float32.
    """
    v = np.asarray(vertices, dtype=np.float64)
    a = v[faces[:, 0]]
    b = v[faces[:, 1]]
    c = v[faces[:, 2]]
    n = np.cross(b - a, c - a)
    lengths = np.linalg.norm(n, axis=1, keepdims=True)
    safe = np.where(lengths > 0.0, lengths, 1.0)
    return np.where(lengths > 0.0, n / safe, 0.0).astype(np.float32)
