"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display and gamma correction
    export: PPM and PNG image export

Example:
    >>> from whitted.preview import save_ppm, show_preview
    >>> save_ppm(framebuffer, "image.ppm")
    >>> show_preview(framebuffer)
"""

from whitted.preview.display import apply_gamma, show_preview
from whitted.preview.export import (
    compute_rmse,
    format_ppm,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "apply_gamma",
    # Export functions
    "format_ppm",
    "save_ppm",
    "save_png",
    "save_image",
    "compute_rmse",
]
