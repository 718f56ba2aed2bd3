"""Image export: plain-text PPM and Pillow-supported formats.

Colors are clamped to [0, 1] and scaled to 0-255 with rounding. PPM output
is the ASCII ``P3`` variant with one ``R G B`` triple per line, top row
first.

Example:
    >>> save_image(image, "render.ppm")   # P3 text
    >>> save_image(image, "render.png")   # via Pillow
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.whitted.preview.display import ToneMapMethod, process_image_for_display

MAX_COLOR_VALUE = 255


def _check_image(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float image to 8-bit: round(clamp(c, 0, 1) * 255).

    Raises:
        ValueError: If the array is not (H, W, 3).
    """
    image = np.asarray(image, dtype=np.float32)
    _check_image(image)
    processed = process_image_for_display(image, tone_map=tone_map, gamma=gamma)
    # Halves round away from zero
    return np.floor(processed * MAX_COLOR_VALUE + 0.5).astype(np.uint8)


def image_to_ppm(image: npt.NDArray[np.float32]) -> str:
    """Encode an image as P3 PPM text."""
    pixels = image_to_uint8(image)
    height, width = pixels.shape[:2]
    lines = ["P3", f"{width} {height}", str(MAX_COLOR_VALUE)]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def save_ppm(image: npt.NDArray[np.float32], filepath: str | Path) -> None:
    Path(filepath).write_text(image_to_ppm(image))


def save_png(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
) -> None:
    """Save an image with Pillow; the format follows the file suffix."""
    pixels = image_to_uint8(image, tone_map=tone_map, gamma=gamma)
    PILImage.fromarray(pixels).save(filepath)


def save_image(image: npt.NDArray[np.float32], filepath: str | Path) -> None:
    """Save as PPM for a ``.ppm`` suffix, otherwise through Pillow."""
    if Path(filepath).suffix.lower() == ".ppm":
        save_ppm(image, filepath)
    else:
        save_png(image, filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Root mean squared error between two images of the same shape."""
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes differ: {image_a.shape} vs {image_b.shape}")
    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
