"""Matplotlib-based preview of rendered frames.

Frames leave the core as gamma-encoded but unclamped RGB. This module
assembles them into RGBA arrays (alpha = 1) and clamps only at the point of
display, mirroring what a presentation surface would do.

Example:
    >>> from glintpath.core.renderer import FrameRenderer
    >>> from glintpath.preview.display import show_frame
    >>>
    >>> renderer = FrameRenderer(320, 240)
    >>> image = renderer.render(renderer.frame_params((0, 0, 4), (0, 0, 0)))
    >>> show_frame(image, title="frame 0")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def to_rgba(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float32]:
    """Append an opaque alpha channel to an RGB image.

    Args:
        image: Array of shape (H, W, 3). An (H, W, 4) array is accepted and
            its alpha channel is reset to 1.

    Returns:
        float32 array of shape (H, W, 4) with alpha = 1.

    Raises:
        ValueError: If the image does not have 3 or 4 channels.
    """
    image = np.asarray(image, dtype=np.float32)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")

    height, width = image.shape[:2]
    rgba = np.ones((height, width, 4), dtype=np.float32)
    rgba[..., :3] = image[..., :3]
    return rgba


def prepare_for_display(image: npt.NDArray[np.floating]) -> npt.NDArray[np.float32]:
    """Clamp a frame to [0, 1] for presentation."""
    return np.clip(to_rgba(image), 0.0, 1.0)


def show_frame(
    image: npt.NDArray[np.floating],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a rendered frame as a Matplotlib figure.

    Args:
        image: RGB or RGBA frame of shape (H, W, 3|4), top row first.
        title: Optional figure title.
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = prepare_for_display(image)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")
    if title is not None:
        ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
