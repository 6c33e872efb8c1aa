"""Image export utilities for rendered images.

Supported formats:
    - PPM (plain-text P3, 8 bits per channel)
    - PNG (8-bit RGB via Pillow)

Rendered colors are floats in [0, 1]; they are converted to bytes here and
nowhere else, as round(c * 255) clipped to [0, 255].

Example:
    >>> from whitted.preview.export import save_image
    >>> save_image(framebuffer, "image.ppm")
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from whitted.core.framebuffer import Framebuffer
from whitted.preview.display import apply_gamma

logger = logging.getLogger(__name__)


def format_ppm(framebuffer: Framebuffer) -> str:
    """Encode a framebuffer as plain PPM text.

    The layout is the magic number P3, then "width height", then the
    maximum channel value 255, then one "r g b" line per pixel in row-major
    order starting at the top-left pixel.

    Args:
        framebuffer: The image to encode.

    Returns:
        The PPM file contents.
    """
    data = framebuffer.to_uint8().reshape(-1, 3)
    lines = ["P3", f"{framebuffer.width} {framebuffer.height}", "255"]
    lines.extend(f"{r} {g} {b}" for r, g, b in data.tolist())
    return "\n".join(lines) + "\n"


def save_ppm(framebuffer: Framebuffer, filepath: Path | str) -> None:
    """Save a framebuffer as a plain PPM (P3) file.

    Raises:
        OSError: If the file cannot be written.
    """
    Path(filepath).write_text(format_ppm(framebuffer), encoding="ascii")
    logger.info("Wrote %s (%dx%d PPM)", filepath, framebuffer.width, framebuffer.height)


def save_png(framebuffer: Framebuffer, filepath: Path | str, *, gamma: float = 1.0) -> None:
    """Save a framebuffer as an 8-bit PNG file.

    Args:
        framebuffer: The image to save.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value. The default 1.0 writes the rendered
            colors unchanged, matching save_ppm().
    """
    pixels = apply_gamma(framebuffer.pixels, gamma)
    image_uint8 = Framebuffer(framebuffer.width, framebuffer.height, pixels).to_uint8()

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)
    logger.info("Wrote %s (%dx%d PNG)", filepath, framebuffer.width, framebuffer.height)


def save_image(framebuffer: Framebuffer, filepath: Path | str) -> None:
    """Save a framebuffer, choosing the format from the file extension.

    Raises:
        ValueError: If the extension is neither .ppm nor .png.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        save_ppm(framebuffer, filepath)
    elif suffix == ".png":
        save_png(framebuffer, filepath)
    else:
        raise ValueError(f"Unsupported image format {suffix!r}, use .ppm or .png")


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
