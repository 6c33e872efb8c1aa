"""Look-at pinhole camera and primary ray generation.

A PinholeCamera is plain host-side configuration. setup_camera() turns it
into a CameraFrame stored in a Taichi field: an orthonormal basis (u right,
v up, w backward) and a viewport one unit in front of the eye, 2 tan(fov/2)
tall and as wide as the aspect ratio demands. Kernels then build rays from
the eye through viewport points.

World axes are x right, y up and z into the screen, so a camera at the
origin looking down +z sees +x on the right of the image.

Pixels are addressed as (row, col) with row 0 at the top. get_pixel_ray()
aims at the pixel center, or at a uniform random point inside the pixel
when jittering for anti-aliasing.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(position=(0.0, 0.0, 0.0), look_at=(0.0, 0.0, 1.0))
    >>> setup_camera(camera, aspect_ratio=1.0)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import taichi as ti

from whitted.core.ray import Ray, make_ray, vec3

logger = logging.getLogger(__name__)

# |cross(w, up)| below this means up is parallel to the view direction
_PARALLEL_TOLERANCE = 1e-9

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        position: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        up: Up direction vector for camera orientation.
        field_of_view: Vertical field of view in degrees, in (0, 180).
        samples_per_pixel: Number of rays averaged per pixel. Values above 1
            enable jittered anti-aliasing.
    """

    position: tuple[float, float, float]
    look_at: tuple[float, float, float]
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    field_of_view: float = 60.0
    samples_per_pixel: int = 1

    def validate(self) -> None:
        """Check the configuration for degenerate values.

        Raises:
            ValueError: If position equals look_at, up is parallel to the
                view direction, the field of view is outside (0, 180) or
                samples_per_pixel is below 1.
        """
        if not 0.0 < self.field_of_view < 180.0:
            raise ValueError(f"field_of_view = {self.field_of_view} is outside (0, 180) degrees")
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")

        w = np.subtract(self.position, self.look_at).astype(np.float64)
        if np.linalg.norm(w) == 0.0:
            raise ValueError("Camera position and look_at must differ")
        u = np.cross(w / np.linalg.norm(w), np.asarray(self.up, dtype=np.float64))
        if np.linalg.norm(u) < _PARALLEL_TOLERANCE:
            raise ValueError("Camera up vector must not be parallel to the view direction")

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": list(self.position),
            "look_at": list(self.look_at),
            "up": list(self.up),
            "field_of_view": self.field_of_view,
            "samples_per_pixel": self.samples_per_pixel,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PinholeCamera":
        return cls(
            position=tuple(data["position"]),
            look_at=tuple(data["look_at"]),
            up=tuple(data.get("up", (0.0, 1.0, 0.0))),
            field_of_view=data.get("field_of_view", 60.0),
            samples_per_pixel=data.get("samples_per_pixel", 1),
        )


# =============================================================================
# Camera Frame
# =============================================================================


@ti.dataclass
class CameraFrame:
    """World-space camera state read by the ray generation functions.

    Attributes:
        origin: Eye position.
        u: Unit vector toward the right of the image.
        v: Unit vector toward the top of the image.
        w: Unit vector pointing backward, away from look_at.
        horizontal: Viewport edge spanning the image width.
        vertical: Viewport edge spanning the image height.
        lower_left: Viewport corner seen at the bottom-left of the image.
    """

    origin: vec3
    u: vec3
    v: vec3
    w: vec3
    horizontal: vec3
    vertical: vec3
    lower_left: vec3


_frame = CameraFrame.field(shape=())


def setup_camera(camera: PinholeCamera, aspect_ratio: float) -> None:
    """Compute the camera frame for an image of the given aspect ratio.

    Must run before any kernel generates primary rays, and again whenever
    the camera or the image shape changes.

    Args:
        camera: Camera configuration.
        aspect_ratio: Image width divided by height.

    Raises:
        ValueError: If the camera is degenerate or aspect_ratio is not positive.
    """
    camera.validate()
    if aspect_ratio <= 0.0:
        raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")

    eye = np.asarray(camera.position, dtype=np.float64)
    backward = eye - np.asarray(camera.look_at, dtype=np.float64)
    backward /= np.linalg.norm(backward)
    right = np.cross(backward, np.asarray(camera.up, dtype=np.float64))
    right /= np.linalg.norm(right)
    up = np.cross(right, backward)

    # Viewport one unit in front of the eye
    half_height = math.tan(math.radians(camera.field_of_view) / 2.0)
    horizontal = 2.0 * half_height * aspect_ratio * right
    vertical = 2.0 * half_height * up
    lower_left = eye - backward - 0.5 * horizontal - 0.5 * vertical

    frame = {
        "origin": eye,
        "u": right,
        "v": up,
        "w": backward,
        "horizontal": horizontal,
        "vertical": vertical,
        "lower_left": lower_left,
    }
    for name, value in frame.items():
        getattr(_frame, name)[None] = value.tolist()

    logger.debug(
        "Camera at %s looking at %s (fov %.1f, aspect %.3f)",
        camera.position,
        camera.look_at,
        camera.field_of_view,
        aspect_ratio,
    )


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Primary ray through a point of the viewport.

    (u, v) = (0, 0) is the bottom-left corner of the image and (1, 1) the
    top-right one.
    """
    frame = _frame[None]
    target = frame.lower_left + u * frame.horizontal + v * frame.vertical
    return make_ray(frame.origin, target - frame.origin)


@ti.func
def get_pixel_ray(
    row: ti.i32, col: ti.i32, width: ti.i32, height: ti.i32, jitter: ti.i32
) -> Ray:
    """Generate a primary ray for a pixel.

    Args:
        row: Pixel row (0 = top).
        col: Pixel column (0 = left).
        width: Image width in pixels.
        height: Image height in pixels.
        jitter: 0 to aim at the pixel center, 1 to add a uniform random
            sub-pixel offset in [0, 1) on both axes.

    Returns:
        The primary ray for the pixel.
    """
    dx = 0.5
    dy = 0.5
    if jitter != 0:
        dx = ti.random(ti.f32)
        dy = ti.random(ti.f32)

    u = (ti.cast(col, ti.f32) + dx) / ti.cast(width, ti.f32)
    v = 1.0 - (ti.cast(row, ti.f32) + dy) / ti.cast(height, ti.f32)
    return get_ray(u, v)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Current camera frame as plain tuples, keyed like CameraFrame's members."""
    info = {}
    for name in ("origin", "u", "v", "w", "horizontal", "vertical", "lower_left"):
        vec = getattr(_frame, name)[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
