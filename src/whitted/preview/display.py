"""Matplotlib preview of rendered images.

Rendered colors are already display values, so by default an image is only
clamped to [0, 1]. Reinhard tone mapping and gamma encoding are available
for scenes with very bright highlights.

Example:
    >>> image = render(camera, world)
    >>> show_preview(image, title="showcase")
"""

from __future__ import annotations

from typing import Literal

import numpy as np
import numpy.typing as npt

ToneMapMethod = Literal["none", "reinhard"]


def tone_map_reinhard(image: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Compress [0, inf) into [0, 1) with c / (1 + c)."""
    image = np.maximum(image, 0.0)
    return (image / (1.0 + image)).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Tone map, gamma encode and clamp an image to [0, 1].

    Args:
        image: Image array of shape (H, W, 3).
        tone_map: "none" or "reinhard".
        gamma: Gamma encoding exponent; 1.0 leaves values unchanged.

    Raises:
        ValueError: If the tone mapping method or gamma is invalid.
    """
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    result = np.asarray(image, dtype=np.float32).copy()
    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = np.clip(result, 0.0, 1.0)
    if gamma != 1.0:
        result = np.power(result, 1.0 / gamma)
    return result.astype(np.float32)


def show_preview(
    image: npt.NDArray[np.float32],
    *,
    title: str | None = None,
    tone_map: ToneMapMethod = "none",
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display an image in a Matplotlib window."""
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(image, tone_map=tone_map)
    height, width = display_image.shape[:2]

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)
