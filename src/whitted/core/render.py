"""Parallel render loop.

The image is rendered in bands of rows. Each band is one kernel launch
whose outermost loop runs over the band's pixels, which Taichi's CPU
backend distributes over its worker pool. Every pixel writes only its own
slot of the framebuffer field and the scene fields are read-only while a
kernel runs, so no locking is needed.

Rendering in bands, rather than in a single launch, gives callers progress
updates between launches.

Example:
    >>> from whitted.core.settings import RenderSettings, init_taichi
    >>> init_taichi(seed=1)
    >>> from whitted.core.render import render
    >>> from whitted.scene.demo import create_demo_scene
    >>> image = render(create_demo_scene(), RenderSettings(width=200, height=200))
"""

import logging
import time
from collections.abc import Callable, Generator
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti
import taichi.math as tm

from whitted.camera.pinhole import setup_camera
from whitted.core.framebuffer import Framebuffer
from whitted.core.integrator import render_pixel_impl
from whitted.core.settings import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, RenderSettings

if TYPE_CHECKING:
    from whitted.scene.manager import SceneManager

logger = logging.getLogger(__name__)

vec3 = tm.vec3

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

# Indexed [row, col], row 0 at the top
_framebuffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    depth_budget: ti.i32,
    background: vec3,
):
    for row, col in ti.ndrange((row_start, row_end), width):
        _framebuffer[row, col] = render_pixel_impl(
            row, col, width, height, samples, depth_budget, background
        )


@ti.kernel
def _copy_framebuffer(out: ti.types.ndarray(), width: ti.i32, height: ti.i32):
    for row, col in ti.ndrange(height, width):
        for c in ti.static(range(3)):
            out[row, col, c] = _framebuffer[row, col][c]


class Renderer:
    """Renders a scene into a Framebuffer.

    The camera frame and sample count are fixed when the renderer is
    created, and the scene must not change while the renderer is in use.

    Attributes:
        scene: The scene to render.
        settings: Image size, depth budget and background color.
    """

    def __init__(self, scene: "SceneManager", settings: RenderSettings | None = None) -> None:
        """Prepare a render.

        Raises:
            RuntimeError: If the scene has no camera.
            ValueError: If the camera configuration is degenerate.
        """
        if scene.camera is None:
            raise RuntimeError("Cannot render a scene without a camera")
        self.scene = scene
        self.settings = settings if settings is not None else RenderSettings()
        setup_camera(scene.camera, self.settings.aspect_ratio)
        self._samples_per_pixel = scene.camera.samples_per_pixel

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height

    @property
    def samples_per_pixel(self) -> int:
        return self._samples_per_pixel

    def _render_band(self, row_start: int, row_end: int) -> None:
        _render_rows(
            row_start,
            row_end,
            self.width,
            self.height,
            self.samples_per_pixel,
            self.settings.max_depth,
            vec3(*self.settings.background_color),
        )

    def render_progressive(self) -> Generator[tuple[int, int], None, None]:
        """Render band by band, yielding progress after each band.

        Yields:
            Tuple of (rows_done, total_rows).

        Example:
            >>> for done, total in renderer.render_progressive():
            ...     print(f"{done}/{total} rows")
        """
        step = self.settings.rows_per_batch
        for row_start in range(0, self.height, step):
            row_end = min(row_start + step, self.height)
            self._render_band(row_start, row_end)
            yield (row_end, self.height)

    def render(self, callback: ProgressCallback | None = None) -> Framebuffer:
        """Render the whole image.

        Args:
            callback: Optional function called after each band with
                (rows_done, total_rows).

        Returns:
            The rendered image.
        """
        logger.info(
            "Rendering %dx%d, %d spp, depth %d, %d primitives",
            self.width,
            self.height,
            self.samples_per_pixel,
            self.settings.max_depth,
            self.scene.get_primitive_count(),
        )
        start = time.perf_counter()

        for done, total in self.render_progressive():
            if callback is not None:
                callback(done, total)

        ti.sync()
        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return self.get_framebuffer()

    def get_framebuffer(self) -> Framebuffer:
        """Copy the rendered pixels out of the device field."""
        pixels = np.zeros((self.height, self.width, 3), dtype=np.float32)
        _copy_framebuffer(pixels, self.width, self.height)
        return Framebuffer(self.width, self.height, pixels)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.samples_per_pixel}, max_depth={self.settings.max_depth})"
        )


def render(
    scene: "SceneManager",
    settings: RenderSettings | None = None,
    callback: ProgressCallback | None = None,
) -> Framebuffer:
    """Render a scene with the given settings.

    Args:
        scene: The scene, with a camera set.
        settings: Render settings. Defaults to RenderSettings().
        callback: Optional progress callback, see Renderer.render().

    Returns:
        The rendered image.

    Raises:
        RuntimeError: If the scene has no camera.
        ValueError: If the camera configuration is degenerate.
    """
    return Renderer(scene, settings).render(callback)
