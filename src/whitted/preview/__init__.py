"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview display
    export: PPM and PNG export

Example:
    >>> from src.whitted.preview import save_image, show_preview
    >>> save_image(image, "render.ppm")
    >>> show_preview(image)
"""

from src.whitted.preview.display import (
    ToneMapMethod,
    process_image_for_display,
    show_preview,
    tone_map_reinhard,
)
from src.whitted.preview.export import (
    compute_rmse,
    image_to_ppm,
    image_to_uint8,
    save_image,
    save_png,
    save_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "process_image_for_display",
    "tone_map_reinhard",
    "ToneMapMethod",
    # Export functions
    "save_image",
    "save_ppm",
    "save_png",
    "image_to_ppm",
    "image_to_uint8",
    "compute_rmse",
]
