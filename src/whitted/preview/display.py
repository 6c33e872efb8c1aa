"""Quick-look display of a Framebuffer in a Matplotlib window.

Renders are stored linear and written to disk as-is. apply_gamma() exists
for previews and PNG export when a display-referred image is wanted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from whitted.core.framebuffer import Framebuffer


def apply_gamma(pixels: npt.NDArray[np.floating], gamma: float = 2.2) -> npt.NDArray[np.float32]:
    """Raise every channel to 1/gamma after clipping it to [0, 1].

    gamma == 1.0 hands the input back untouched.

    Raises:
        ValueError: If gamma is zero or negative.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return pixels
    encoded = np.clip(pixels, 0.0, 1.0) ** (1.0 / gamma)
    return encoded.astype(np.float32)


def show_preview(
    framebuffer: Framebuffer,
    *,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Open a Matplotlib figure showing the image.

    Args:
        framebuffer: The rendered image.
        gamma: Display gamma, 1.0 shows the stored colors.
        title: Figure title, defaults to the image size.
        figsize: Figure size in inches.
        block: Passed to plt.show().
    """
    # Deferred so headless renders never load a GUI backend
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=figsize)
    ax.imshow(np.clip(apply_gamma(framebuffer.pixels, gamma), 0.0, 1.0), interpolation="nearest")
    ax.set_axis_off()
    ax.set_title(title or f"{framebuffer.width}x{framebuffer.height}")
    fig.tight_layout()
    plt.show(block=block)
