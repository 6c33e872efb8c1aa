"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera with look-at placement, vertical
        field of view and jittered multi-sample anti-aliasing

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image

Pixel rows are numbered from the top, so get_pixel_ray() flips v.
"""

from .pinhole import (
    CameraFrame,
    PinholeCamera,
    get_camera_info,
    get_pixel_ray,
    get_ray,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "CameraFrame",
    "setup_camera",
    "get_ray",
    "get_pixel_ray",
    "get_camera_info",
]
