"""Rendered image container.

A Framebuffer holds the float RGB result of a render as a NumPy array of
shape (height, width, 3), row-major with row 0 at the top of the image.
Colors stay in [0, 1] floats until an exporter converts them to bytes.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt


@dataclass
class Framebuffer:
    """A rendered image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        pixels: float32 array of shape (height, width, 3), values in [0, 1].
    """

    width: int
    height: int
    pixels: npt.NDArray[np.float32]

    def __post_init__(self) -> None:
        if self.pixels.shape != (self.height, self.width, 3):
            raise ValueError(
                f"Pixel array shape {self.pixels.shape} does not match "
                f"{self.height}x{self.width}x3"
            )

    @classmethod
    def blank(
        cls, width: int, height: int, color: tuple[float, float, float] = (0.0, 0.0, 0.0)
    ) -> Framebuffer:
        """Create a framebuffer filled with one color."""
        pixels = np.empty((height, width, 3), dtype=np.float32)
        pixels[:] = color
        return cls(width, height, pixels)

    def get_pixel(self, row: int, col: int) -> tuple[float, float, float]:
        """Color of the pixel at (row, col), row 0 being the top."""
        r, g, b = self.pixels[row, col]
        return (float(r), float(g), float(b))

    def to_uint8(self) -> npt.NDArray[np.uint8]:
        """Convert to 8-bit channels: round(c * 255), clipped to [0, 255]."""
        scaled = np.rint(np.clip(self.pixels, 0.0, 1.0) * 255.0)
        return scaled.astype(np.uint8)
