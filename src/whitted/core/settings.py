"""Render configuration and Taichi runtime initialization.

RenderSettings carries everything the render loop needs that is not part of
the scene itself: output size, reflection depth budget and the background
color. The background is passed into the render kernel as an argument, so
two renders with different settings never share hidden state.

Example:
    >>> from whitted.core.settings import RenderSettings, init_taichi
    >>> init_taichi(seed=7)
    >>> settings = RenderSettings(width=320, height=240, max_depth=3)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import taichi as ti

logger = logging.getLogger(__name__)

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Largest reflection depth budget. The integrator unrolls one tracing level
# per unit of budget, so this is a compile-time bound.
MAX_REFLECTION_DEPTH = 5


@dataclass
class RenderSettings:
    """Configuration for a single render.

    Attributes:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).
        max_depth: Reflection depth budget for primary rays
            (0 to MAX_REFLECTION_DEPTH). 0 disables mirror bounces.
        background_color: RGB color returned for rays that hit nothing,
            each component in [0, 1].
        rows_per_batch: Number of image rows rendered per kernel launch.
            Smaller batches give more frequent progress callbacks.
    """

    width: int = 400
    height: int = 400
    max_depth: int = 3
    background_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    rows_per_batch: int = 64

    def __post_init__(self) -> None:
        if not 1 <= self.width <= MAX_IMAGE_WIDTH or not 1 <= self.height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.width}x{self.height}) must be between 1x1 and "
                f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
            )
        if not 0 <= self.max_depth <= MAX_REFLECTION_DEPTH:
            raise ValueError(
                f"max_depth = {self.max_depth} is outside [0, {MAX_REFLECTION_DEPTH}]"
            )
        if len(self.background_color) != 3:
            raise ValueError("background_color must have exactly 3 components")
        for i, component in enumerate(self.background_color):
            if component < 0.0 or component > 1.0:
                raise ValueError(
                    f"Background color component {i} = {component} is outside [0, 1]"
                )
        if self.rows_per_batch < 1:
            raise ValueError(f"rows_per_batch must be positive, got {self.rows_per_batch}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height


def init_taichi(seed: int = 0, num_threads: int | None = None, debug: bool = False) -> None:
    """Initialize the Taichi runtime on the CPU backend.

    Must be called before any module that declares Taichi fields is imported.
    The seed drives the per-thread random generators used for anti-aliasing
    jitter, so equal seeds give reproducible images.

    Args:
        seed: Random seed for ti.random().
        num_threads: Size of the CPU worker pool. None lets Taichi use all
            available cores.
        debug: Enable Taichi's debug mode (bounds checks, slower kernels).
    """
    kwargs = {"arch": ti.cpu, "random_seed": seed, "debug": debug}
    if num_threads is not None:
        kwargs["cpu_max_num_threads"] = num_threads
    ti.init(**kwargs)
    logger.debug("Taichi initialized on CPU (seed=%d, threads=%s)", seed, num_threads)
