"""Camera module: pinhole camera with a view transform.

The camera sits at the origin of its own space looking down -z, one unit
from the canvas. Pixel (0, 0) is the top-left corner.
"""

from .camera import Camera, get_camera_info, is_camera_ready, setup_camera

__all__ = [
    "Camera",
    "setup_camera",
    "is_camera_ready",
    "get_camera_info",
]
