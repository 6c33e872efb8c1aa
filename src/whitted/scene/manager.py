"""Host-side scene assembly: primitives, materials, lights and the camera.

The SceneManager is the host-side view of a scene. It writes primitives,
materials and lights into the Taichi field registries the kernels read, and
keeps Python-side records of everything it added so the scene can be
inspected, edited and serialized.

Meshes are kept twice: the object-space vertices and faces with their
MeshTransform live in a MeshInfo on the host, and the transformed
world-space triangles, face normals and bounding box are uploaded to the
scene fields. Changing a mesh's transform or vertices recomputes and
re-uploads the derived data.

A scene is built before rendering and left untouched while a render runs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.manager import SceneManager
    >>> from whitted.camera.pinhole import PinholeCamera
    >>> scene = SceneManager()
    >>> red = scene.add_material(color=(1.0, 0.0, 0.0), diffuse=0.7, specular=0.3, shininess=10)
    >>> scene.add_sphere(center=(0, 0, 3), radius=1.0, material_id=red)
    >>> scene.add_ambient_light(0.2)
    >>> scene.camera = PinholeCamera(position=(0, 0, 0), look_at=(0, 0, 1))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi.math as tm

from whitted.camera.pinhole import PinholeCamera
from whitted.geometry.aabb import bounds_of_points
from whitted.geometry.mesh import MeshTransform, compute_face_normals, transform_vertices
from whitted.geometry.obj_loader import load_obj
from whitted.geometry.sphere import sphere_bounds
from whitted.lights.sources import (
    LightType,
    add_ambient_light,
    add_directional_light,
    add_point_light,
    clear_lights,
    get_light_count,
)
from whitted.materials.phong import (
    MAX_MATERIALS,
    add_material,
    clear_materials,
    get_material_count,
)
from whitted.scene.intersection import (
    MAX_FACES,
    MAX_MESHES,
    MAX_SPHERES,
    add_mesh,
    add_sphere,
    clear_scene,
    get_mesh_count,
    get_primitive_count,
    get_sphere_count,
    update_mesh,
)

logger = logging.getLogger(__name__)

vec3 = tm.vec3

Bounds = tuple[tuple[float, float, float], tuple[float, float, float]]


@dataclass
class MaterialInfo:
    """Host-side copy of a material stored in the material fields.

    Attributes:
        material_id: The id returned by add_material().
        color: Base RGB color in [0, 1].
        diffuse: Diffuse coefficient.
        specular: Specular coefficient.
        shininess: Phong exponent.
        reflectivity: Mirror blend factor in [0, 1].
    """

    material_id: int
    color: tuple[float, float, float]
    diffuse: float
    specular: float
    shininess: float
    reflectivity: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "color": list(self.color),
            "diffuse": self.diffuse,
            "specular": self.specular,
            "shininess": self.shininess,
            "reflectivity": self.reflectivity,
        }


@dataclass
class SphereInfo:
    """A sphere as it was handed to the scene, indexed like the sphere fields."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int

    @property
    def bounds(self) -> Bounds:
        """Axis-aligned bounding box of the sphere."""
        return sphere_bounds(self.center, self.radius)


@dataclass
class MeshInfo:
    """A mesh kept in object space together with its placement.

    Attributes:
        mesh_index: The index in the mesh storage arrays.
        vertices: Object-space vertices, shape (N, 3).
        faces: Vertex index triples, shape (F, 3), 0-based.
        transform: Placement of the mesh in the world.
        material_id: The material ID assigned to the mesh.
        source: Path of the OBJ file the mesh came from, if any.
        bounds: World-space bounding box, recomputed by
            update_bounding_volume().
    """

    mesh_index: int
    vertices: npt.NDArray[np.float32]
    faces: npt.NDArray[np.int32]
    transform: MeshTransform
    material_id: int
    source: str | None = None
    bounds: Bounds = ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def world_vertices(self) -> npt.NDArray[np.float32]:
        """Vertices with the mesh transform applied."""
        return transform_vertices(self.vertices, self.transform)

    def world_triangles(self) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
        """World-space triangles (F, 3, 3) and their unit normals (F, 3)."""
        world = self.world_vertices()
        return world[self.faces], compute_face_normals(world, self.faces)

    def update_bounding_volume(self) -> Bounds:
        """Recompute the world-space bounding box from the vertices."""
        self.bounds = bounds_of_points(self.world_vertices())
        return self.bounds


@dataclass
class LightInfo:
    """Host-side copy of a registered light.

    Attributes:
        light_index: The index in the light registry.
        light_type: Kind of light.
        intensity: Light intensity.
        vector: Position for point lights, direction of travel for
            directional lights, None for ambient lights.
    """

    light_index: int
    light_type: LightType
    intensity: float
    vector: tuple[float, float, float] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.light_type.name.lower(), "intensity": self.intensity}
        if self.light_type == LightType.POINT:
            data["position"] = list(self.vector)
        elif self.light_type == LightType.DIRECTIONAL:
            data["direction"] = list(self.vector)
        return data


def _as_vec3(values: Any) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Scene manager coordinating primitives, materials, lights and camera.

    Creating a SceneManager clears the global registries: only one scene is
    active at a time.

    Attributes:
        materials: MaterialInfo for all registered materials.
        spheres: SphereInfo for all spheres in the scene.
        meshes: MeshInfo for all meshes in the scene.
        lights: LightInfo for all lights in the scene.
        camera: The camera to render from, or None until one is set.

    Example:
        >>> scene = SceneManager()
        >>> mirror = scene.add_material((0.9, 0.9, 0.9), diffuse=0.2, reflectivity=0.8)
        >>> scene.add_sphere((0, -20, 10), 20.0, mirror)
        >>> scene.add_point_light(1.0, (0, 8, 4))
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.meshes: list[MeshInfo] = []
        self.lights: list[LightInfo] = []
        self.camera: PinholeCamera | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_materials()
        clear_lights()
        self.materials.clear()
        self.spheres.clear()
        self.meshes.clear()
        self.lights.clear()
        self.camera = None

    def clear(self) -> None:
        """Reset the scene to empty, camera included."""
        self._clear_all()

    # Materials

    def add_material(
        self,
        color: tuple[float, float, float],
        diffuse: float = 1.0,
        specular: float = 0.0,
        shininess: float = 0.0,
        reflectivity: float = 0.0,
    ) -> int:
        """Add a Phong material to the scene.

        Args:
            color: Base color as (R, G, B), each component in [0, 1].
            diffuse: Diffuse coefficient (>= 0).
            specular: Specular coefficient (>= 0).
            shininess: Phong exponent (>= 0).
            reflectivity: Mirror blend factor in [0, 1].

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any parameter is out of range.
        """
        material_id = add_material(color, diffuse, specular, shininess, reflectivity)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                color=_as_vec3(color),
                diffuse=diffuse,
                specular=specular,
                shininess=shininess,
                reflectivity=reflectivity,
            )
        )
        return material_id

    def get_material_count(self) -> int:
        """Number of registered materials."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

    # Primitives

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Place a sphere using a registered material.

        Args:
            center: World-space center.
            radius: The radius of the sphere (must be positive).
            material_id: The material ID to assign to the sphere.

        Returns:
            Index of the sphere among spheres.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or the radius not positive.
        """
        self._check_material_id(material_id)

        center = _as_vec3(center)
        sphere_index = add_sphere(vec3(center[0], center[1], center[2]), radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_mesh(
        self,
        vertices: npt.ArrayLike,
        faces: npt.ArrayLike,
        material_id: int,
        transform: MeshTransform | None = None,
        source: str | None = None,
    ) -> int:
        """Add a triangle mesh to the scene.

        Args:
            vertices: Object-space vertices, shape (N, 3).
            faces: 0-based vertex index triples, shape (F, 3).
            material_id: The material ID to assign to the mesh.
            transform: Placement of the mesh. Defaults to the identity.
            source: Optional file path recorded for serialization.

        Returns:
            The index of the added mesh.

        Raises:
            RuntimeError: If the mesh or face capacity is exceeded.
            ValueError: If material_id is invalid, the arrays are malformed
                or a face index does not name a vertex.
        """
        self._check_material_id(material_id)

        verts = np.asarray(vertices, dtype=np.float32).reshape(-1, 3)
        tris = np.asarray(faces, dtype=np.int32).reshape(-1, 3)
        if tris.size and (tris.min() < 0 or tris.max() >= len(verts)):
            raise ValueError("Mesh face index out of range")

        info = MeshInfo(
            mesh_index=-1,
            vertices=verts,
            faces=tris,
            transform=transform if transform is not None else MeshTransform(),
            material_id=material_id,
            source=source,
        )
        bbox_min, bbox_max = info.update_bounding_volume()
        triangles, normals = info.world_triangles()
        info.mesh_index = add_mesh(triangles, normals, bbox_min, bbox_max, material_id)
        self.meshes.append(info)

        logger.debug(
            "Added mesh %d: %d vertices, %d faces, bounds %s",
            info.mesh_index,
            len(verts),
            len(tris),
            info.bounds,
        )
        return info.mesh_index

    def add_mesh_from_obj(
        self,
        path: Path | str,
        material_id: int,
        transform: MeshTransform | None = None,
    ) -> int:
        """Load an OBJ file and add it as a mesh.

        Raises:
            MeshLoadError: If the file cannot be read or parsed.
        """
        vertices, faces = load_obj(path)
        logger.info("Loaded %s (%d vertices, %d faces)", path, len(vertices), len(faces))
        return self.add_mesh(vertices, faces, material_id, transform, source=str(path))

    def _get_mesh(self, mesh_index: int) -> MeshInfo:
        if not 0 <= mesh_index < len(self.meshes):
            raise IndexError(f"Mesh index {mesh_index} out of range")
        return self.meshes[mesh_index]

    def _upload_mesh(self, info: MeshInfo) -> None:
        bbox_min, bbox_max = info.update_bounding_volume()
        triangles, normals = info.world_triangles()
        update_mesh(info.mesh_index, triangles, normals, bbox_min, bbox_max)

    def set_mesh_transform(self, mesh_index: int, transform: MeshTransform) -> None:
        """Replace a mesh's transform and recompute its world-space data."""
        info = self._get_mesh(mesh_index)
        info.transform = transform
        self._upload_mesh(info)

    def set_mesh_vertices(self, mesh_index: int, vertices: npt.ArrayLike) -> None:
        """Replace a mesh's object-space vertices, keeping its faces.

        Raises:
            ValueError: If a face index does not name one of the new vertices.
        """
        info = self._get_mesh(mesh_index)
        verts = np.asarray(vertices, dtype=np.float32).reshape(-1, 3)
        if info.faces.max() >= len(verts):
            raise ValueError("Mesh faces reference vertices missing from the new vertex array")
        info.vertices = verts
        self._upload_mesh(info)

    # Lights

    def add_point_light(self, intensity: float, position: tuple[float, float, float]) -> int:
        """Add a point light. Returns the light index."""
        position = _as_vec3(position)
        index = add_point_light(intensity, position)
        self.lights.append(LightInfo(index, LightType.POINT, intensity, position))
        return index

    def add_directional_light(self, intensity: float, direction: tuple[float, float, float]) -> int:
        """Add a directional light travelling along direction."""
        direction = _as_vec3(direction)
        index = add_directional_light(intensity, direction)
        self.lights.append(LightInfo(index, LightType.DIRECTIONAL, intensity, direction))
        return index

    def add_ambient_light(self, intensity: float) -> int:
        """Add an ambient light."""
        index = add_ambient_light(intensity)
        self.lights.append(LightInfo(index, LightType.AMBIENT, intensity))
        return index

    def get_light_count(self) -> int:
        return get_light_count()

    # Queries

    def get_sphere_count(self) -> int:
        """Number of spheres, meshes excluded."""
        return get_sphere_count()

    def get_mesh_count(self) -> int:
        """Get the number of meshes in the scene."""
        return get_mesh_count()

    def get_primitive_count(self) -> int:
        """Spheres plus meshes."""
        return get_primitive_count()

    # Serialization

    def to_dict(self) -> dict[str, Any]:
        """Describe the scene as plain data that json.dumps() accepts.

        Meshes loaded from a file are stored by path; other meshes carry
        their vertices and faces inline.
        """
        meshes = []
        for mesh in self.meshes:
            mesh_config: dict[str, Any] = {
                "material_id": mesh.material_id,
                "transform": mesh.transform.to_dict(),
            }
            if mesh.source is not None:
                mesh_config["path"] = mesh.source
            else:
                mesh_config["vertices"] = mesh.vertices.tolist()
                mesh_config["faces"] = mesh.faces.tolist()
            meshes.append(mesh_config)

        return {
            "materials": [mat.to_dict() for mat in self.materials],
            "spheres": [
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
                for sphere in self.spheres
            ],
            "meshes": meshes,
            "lights": [light.to_dict() for light in self.lights],
            "camera": self.camera.to_dict() if self.camera is not None else None,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Clears the current scene first. Materials are loaded before
        primitives so that material ids in the dictionary stay valid.

        Args:
            data: Dictionary with 'materials', 'spheres', 'meshes', 'lights'
                and 'camera' keys. Missing keys mean empty lists / no camera.

        Raises:
            ValueError: If the dictionary contains invalid data.
            MeshLoadError: If a referenced mesh file cannot be loaded.
        """
        self.clear()

        for mat_config in data.get("materials", []):
            self.add_material(
                color=_as_vec3(mat_config.get("color", (0.5, 0.5, 0.5))),
                diffuse=mat_config.get("diffuse", 1.0),
                specular=mat_config.get("specular", 0.0),
                shininess=mat_config.get("shininess", 0.0),
                reflectivity=mat_config.get("reflectivity", 0.0),
            )

        for sphere_config in data.get("spheres", []):
            self.add_sphere(
                _as_vec3(sphere_config.get("center", (0.0, 0.0, 0.0))),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

        for mesh_config in data.get("meshes", []):
            transform_config = mesh_config.get("transform", {})
            transform = MeshTransform(
                translation=_as_vec3(transform_config.get("translation", (0.0, 0.0, 0.0))),
                scale=_as_vec3(transform_config.get("scale", (1.0, 1.0, 1.0))),
                rotation=tuple(transform_config.get("rotation", (1.0, 0.0, 0.0, 0.0))),
            )
            material_id = mesh_config.get("material_id", 0)
            if "path" in mesh_config:
                self.add_mesh_from_obj(mesh_config["path"], material_id, transform)
            else:
                self.add_mesh(
                    mesh_config["vertices"], mesh_config["faces"], material_id, transform
                )

        for light_config in data.get("lights", []):
            light_type = light_config.get("type", "").lower()
            intensity = light_config.get("intensity", 1.0)
            if light_type == "point":
                self.add_point_light(intensity, _as_vec3(light_config["position"]))
            elif light_type == "directional":
                self.add_directional_light(intensity, _as_vec3(light_config["direction"]))
            elif light_type == "ambient":
                self.add_ambient_light(intensity)
            else:
                raise ValueError(f"Unknown light type: {light_type}")

        camera_config = data.get("camera")
        if camera_config is not None:
            self.camera = PinholeCamera.from_dict(camera_config)

    # Capacities

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_meshes() -> int:
        return MAX_MESHES

    @staticmethod
    def get_max_faces() -> int:
        return MAX_FACES

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
